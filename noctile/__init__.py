"""Transaction-level building blocks of a multiprocessor system-on-chip."""

__version__ = "0.1.0"