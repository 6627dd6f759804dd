"""Byte-addressable memory that answers network requests."""

from __future__ import annotations

import logging
from typing import Tuple

from noctile.vci import WORD_BYTES

log = logging.getLogger(__name__)

# byte enable -> (lane index in units of the access width, access width)
_READ_ACCESS = {
    0x01: (0, 1), 0x02: (1, 1), 0x04: (2, 1), 0x08: (3, 1),
    0x10: (4, 1), 0x20: (5, 1), 0x40: (6, 1), 0x80: (7, 1),
    0x03: (0, 2), 0x0C: (1, 2), 0x30: (2, 2), 0xC0: (3, 2),
    0x0F: (0, 4), 0xF0: (1, 4),
}
_WRITE_ACCESS = {**_READ_ACCESS, 0xFF: (0, 8)}


def _word(data) -> bytearray:
    buf = bytearray(data)
    if len(buf) != WORD_BYTES:
        raise ValueError(f"data must hold {WORD_BYTES} bytes, got {len(buf)}")
    return buf


class MemoryDevice:
    """A zero-initialised memory of ``size`` bytes."""

    def __init__(self, name: str, size: int) -> None:
        if size < 0:
            raise ValueError("size must not be negative")
        self.name = name
        self.size = size
        self.mem = bytearray(size)

    def _fits(self, start: int, length: int) -> bool:
        return 0 <= start and start + length <= self.size

    def _bad(self, op: str, ofs: int, be: int, data) -> None:
        log.warning(
            "Bad %s:%s ofs=0x%X, be=0x%X, data=%s", self.name, op, ofs, be, bytes(data).hex()
        )

    def write(self, ofs: int, be: int, data) -> bool:
        """Store the enabled lanes of ``data`` at ``ofs``; False on a bad access."""
        data = _word(data)
        be &= 0xFF
        if ofs > self.size or be == 0:
            self._bad("write", ofs, be, data)
            return False
        access = _WRITE_ACCESS.get(be)
        if access is not None:
            lane, width = access
            pos = lane * width
            if not self._fits(ofs + pos, width):
                self._bad("write", ofs, be, data)
                return False
            self.mem[ofs + pos:ofs + pos + width] = data[pos:pos + width]
            return True
        start = (be & -be).bit_length() - 1
        rest = be >> start
        run = 0
        while rest & 1:
            run += 1
            rest >>= 1
        if not self._fits(ofs + start, run):
            self._bad("write", ofs, be, data)
            return False
        # Contiguous lanes are stored even when the enable pattern is invalid.
        self.mem[ofs + start:ofs + start + run] = data[start:start + run]
        if run not in (1, 2, 4, 8) or rest:
            self._bad("write", ofs, be, data)
            return False
        return True

    def read(self, ofs: int, be: int, data, plen: int = 1) -> Tuple[bytes, bool]:
        """Return the response word and an error flag.

        Lanes that are not read keep the contents of ``data``. A burst
        (``plen`` > 1) answers with the location of the burst in memory.
        """
        out = _word(data)
        be &= 0xFF
        if plen > 1:
            be_off = 4 if be == 0xF0 else 0
            location = (ofs + be_off) & 0xFFFFFFFF
            out[be_off:be_off + 4] = location.to_bytes(4, "little")
            return bytes(out), False
        access = _READ_ACCESS.get(be)
        if ofs >= self.size or access is None:
            self._bad("read", ofs, be, out)
            return bytes(out), True
        lane, width = access
        pos = lane * width
        if not self._fits(ofs + pos, width):
            self._bad("read", ofs, be, out)
            return bytes(out), True
        out[pos:pos + width] = self.mem[ofs + pos:ofs + pos + width]
        return bytes(out), False

    def handle(
        self, ofs: int, be: int, data, write: bool, plen: int = 1
    ) -> Tuple[bytes, bool]:
        """Serve one request; return the response word and error flag."""
        if write:
            self.write(ofs, be, data)
            return bytes(_word(data)), False
        return self.read(ofs, be, data, plen)