"""Request and response records exchanged over the on-chip network."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

WORD_BYTES = 8


class Command(IntEnum):
    """Operation carried by a request."""

    NOP = 0
    READ = 1
    WRITE = 2
    LOCKED_READ = 3
    STORE_COND = 0


def _zero_word() -> bytearray:
    return bytearray(WORD_BYTES)


def _word_buffer(value, field_name: str) -> bytearray:
    buf = bytearray(value)
    if len(buf) != WORD_BYTES:
        raise ValueError(
            f"{field_name} must hold {WORD_BYTES} bytes, got {len(buf)}"
        )
    return buf


@dataclass
class VciRequest:
    """A request travelling from a master to a slave."""

    address: int = 0
    be: int = 0
    cmd: int = Command.NOP
    contig: bool = False
    wdata: bytearray = field(default_factory=_zero_word)
    eop: bool = False
    cons: bool = False
    plen: int = 0
    wrap: bool = False
    cfixed: bool = False
    clen: bool = False
    srcid: int = 0
    trdid: int = 0
    pktid: int = 0
    initial_address: int = 0
    slave_id: int = 0

    def __post_init__(self) -> None:
        self.wdata = _word_buffer(self.wdata, "wdata")


@dataclass
class VciResponse:
    """A response travelling from a slave back to a master."""

    rdata: bytearray = field(default_factory=_zero_word)
    reop: bool = False
    rerror: bool = False
    rsrcid: int = 0
    rtrdid: int = 0
    rpktid: int = 0
    rbe: int = 0

    def __post_init__(self) -> None:
        self.rdata = _word_buffer(self.rdata, "rdata")