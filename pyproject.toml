[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "noctile"
version = "0.1.0"
description = "Transaction-level building blocks of a multiprocessor SoC: VCI interconnect, memory, interrupt controller, exclusive monitor and boot setup"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "emulation",
    "simulation",
    "system-on-chip",
    "interconnect",
    "vci",
    "interrupt-controller",
    "h264",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
    "Topic :: Scientific/Engineering :: Electronic Design Automation (EDA)",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["noctile"]

[tool.hatch.build.targets.sdist]
include = ["noctile", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
