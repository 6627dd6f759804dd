"""Tracking of exclusive (load-linked) memory reservations."""

from __future__ import annotations

import logging
from typing import List, Tuple

log = logging.getLogger(__name__)

MAX_ENTRIES = 100
_WORD_MASK = 0xFFFFFFFC


class ExclusiveMonitor:
    """Word-aligned reservations, each owned by the first CPU to mark it."""

    def __init__(self, ncpus: int) -> None:
        self.ncpus = ncpus
        self._entries: List[Tuple[int, int]] = []

    def _find(self, addr: int) -> int:
        addr &= _WORD_MASK
        return next(
            (index for index, (a, _) in enumerate(self._entries) if a == addr), -1
        )

    def mark(self, cpu: int, addr: int) -> None:
        """Reserve the word at ``addr`` for ``cpu`` unless already reserved."""
        if self._find(addr) >= 0:
            return
        if len(self._entries) >= MAX_ENTRIES:
            raise OverflowError(f"more than {MAX_ENTRIES} exclusive reservations")
        self._entries.append((addr & _WORD_MASK, cpu))
        if len(self._entries) > self.ncpus:
            log.warning(
                "number of elements in the exclusive list (%d) > cpus (%d) (list: %s)",
                len(self._entries),
                self.ncpus,
                " ".join(f"{a:x}" for a, _ in self._entries),
            )

    def test(self, cpu: int, addr: int) -> bool:
        """Return True if ``cpu`` does not hold the reservation at ``addr``."""
        index = self._find(addr)
        if index < 0:
            return True
        return self._entries[index][1] != cpu

    def clear(self, cpu: int, addr: int) -> bool:
        """Drop the reservation at ``addr``; False if there was none."""
        index = self._find(addr)
        if index < 0:
            log.warning(
                "cpu %d not in the exclusive list: %s",
                cpu,
                " ".join(f"({a:x}, {c})" for a, c in self._entries),
            )
            return False
        del self._entries[index]
        return True

    def entries(self) -> List[Tuple[int, int]]:
        """Return the reservations as (address, cpu) in the order made."""
        return list(self._entries)