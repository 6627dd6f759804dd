"""Address-mapped interconnect routing requests from masters to slaves."""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from noctile.fifo import BoundedFifo
from noctile.vci import VciRequest, VciResponse

log = logging.getLogger(__name__)

MAP_FILES_DIR = "./maps"
MAX_MAP_ENTRIES = 50
QUEUE_DEPTH = 8

_SEPARATOR = "------------------------------------------------- "


class RoutingError(LookupError):
    """Raised when a request or response cannot be delivered."""


@dataclass(frozen=True)
class MapEntry:
    """One window of a master's address map."""

    begin_address: int
    end_address: int
    intern_offset: int
    slave_id: int


def describe_request(req: VciRequest) -> str:
    """Return a multi-line dump of the fields of a request."""
    lines = [
        "The fields of the request transactions are : ",
        _SEPARATOR,
        f"address is {req.address:x}",
        f"cmd is {int(req.cmd):x}",
        f"srcid is {req.srcid:x}",
        f"trdid is {req.trdid:x}",
        f"be is {req.be:x}",
        "wdata " + "".join(f"{b:x}\n" for b in req.wdata),
        _SEPARATOR,
    ]
    return "\n".join(lines) + "\n"


def describe_response(rsp: VciResponse) -> str:
    """Return a multi-line dump of the fields of a response."""
    lines = [
        "The fields of the response transactions are : ",
        _SEPARATOR,
        f"rerror is {int(bool(rsp.rerror))}",
        f"rsrcid is {rsp.rsrcid}",
        f"rtrdid is {rsp.rtrdid}",
        f"rbe is {rsp.rbe:x}",
        "rdata " + "".join(f"{b:x}\n" for b in rsp.rdata),
        _SEPARATOR,
    ]
    return "\n".join(lines) + "\n"


def _parse_prefixed_hex(token: str) -> int:
    if not token.startswith("0x"):
        raise ValueError(token)
    return int(token[2:], 16)


_CONVERTERS = (_parse_prefixed_hex, _parse_prefixed_hex, _parse_prefixed_hex, int)


def parse_map(text: str) -> List[MapEntry]:
    """Parse map lines of the form ``0xBEGIN 0xEND 0xOFFSET SLAVE``.

    Parsing stops at the first line whose first field does not parse; a
    line with only some valid fields raises ValueError.
    """
    entries: List[MapEntry] = []
    for number, line in enumerate(text.splitlines(), start=1):
        fields = line.split()
        if not fields:
            continue
        values = []
        for token, convert in zip(fields, _CONVERTERS):
            try:
                values.append(convert(token))
            except ValueError:
                break
        if not values:
            break
        if len(values) < len(_CONVERTERS):
            raise ValueError(f"invalid map file, line {number}")
        if len(entries) >= MAX_MAP_ENTRIES:
            raise ValueError(f"map holds more than {MAX_MAP_ENTRIES} entries")
        begin, end, offset, slave_id = values
        entries.append(MapEntry(begin, end, offset, slave_id))
    return entries


def load_map(path) -> List[MapEntry]:
    """Read and parse a map file."""
    with open(path, "rt", encoding="ascii") as handle:
        return parse_map(handle.read())


class InterconnectMaster:
    """Network port on which a master device issues requests."""

    def __init__(self, parent: "Interconnect", srcid: int, entries: Iterable[MapEntry]):
        self.parent = parent
        self.srcid = srcid
        self.name = f"NOC_master_{srcid:02d}"
        self.entries: Tuple[MapEntry, ...] = tuple(entries)
        self.requests: BoundedFifo[VciRequest] = BoundedFifo(QUEUE_DEPTH)
        self.responses: BoundedFifo[VciResponse] = BoundedFifo(QUEUE_DEPTH)

    def put(self, req: VciRequest) -> None:
        """Queue a request from the attached master."""
        self.requests.write(req)

    def get(self) -> VciResponse:
        """Take the oldest response for the attached master."""
        return self.responses.read()

    def add_response(self, rsp: VciResponse) -> None:
        """Queue a response coming back from a slave."""
        self.responses.write(rsp)

    def dispatch(self) -> Optional[VciRequest]:
        """Route the oldest queued request to its slave.

        Returns the request as delivered, or None when nothing is queued.
        """
        if self.requests.is_empty():
            return None
        req = self.requests.read()
        addr = req.address
        entry = next(
            (e for e in self.entries if e.begin_address <= addr < e.end_address),
            None,
        )
        if entry is None:
            raise RoutingError(
                f"master {self.srcid}: cannot map the address 0x{addr:x} to a slave"
            )
        slave = self.parent.slave(entry.slave_id)
        routed = dataclasses.replace(
            req,
            initial_address=req.address,
            slave_id=entry.slave_id,
            address=(addr - entry.begin_address + entry.intern_offset) & 0xFFFFFFFF,
        )
        slave.add_request(routed)
        return routed

    def linear_address(self, slave_id: int, offset: int) -> Optional[int]:
        """Return the address this master uses for ``offset`` in a slave."""
        for entry in self.entries:
            if entry.slave_id != slave_id:
                continue
            addr = entry.begin_address + offset - entry.intern_offset
            if entry.begin_address <= addr < entry.end_address:
                return addr
        return None

    def slave_for_address(self, addr: int) -> Optional[Tuple[int, int]]:
        """Return (slave id, offset inside the slave) for ``addr``."""
        for entry in self.entries:
            if entry.begin_address <= addr <= entry.end_address:
                return entry.slave_id, addr - entry.begin_address + entry.intern_offset
        log.error("0x%x bad address required in slave_for_address", addr)
        return None


class InterconnectSlave:
    """Network port through which a slave device receives requests."""

    def __init__(self, parent: "Interconnect", srcid: int):
        self.parent = parent
        self.srcid = srcid
        self.name = f"NOC_slave_{srcid:02d}"
        self.requests: BoundedFifo[VciRequest] = BoundedFifo(QUEUE_DEPTH)
        self.responses: BoundedFifo[VciResponse] = BoundedFifo(QUEUE_DEPTH)

    def add_request(self, req: VciRequest) -> None:
        """Queue a request routed to this slave."""
        self.requests.write(req)

    def get(self) -> VciRequest:
        """Take the oldest request for the attached slave."""
        return self.requests.read()

    def put(self, rsp: VciResponse) -> None:
        """Queue a response from the attached slave."""
        self.responses.write(rsp)

    def dispatch(self) -> Optional[VciResponse]:
        """Deliver the oldest queued response to its master, or return None."""
        if self.responses.is_empty():
            return None
        rsp = self.responses.read()
        self.parent.master(rsp.rsrcid).add_response(rsp)
        return rsp


class Interconnect:
    """A set of master and slave ports joined by address maps."""

    def __init__(self, maps: Sequence[Iterable[MapEntry]], nslaves: int):
        if nslaves < 0:
            raise ValueError("nslaves must not be negative")
        self.masters: List[InterconnectMaster] = [
            InterconnectMaster(self, index, entries) for index, entries in enumerate(maps)
        ]
        self.slaves: List[InterconnectSlave] = [
            InterconnectSlave(self, index) for index in range(nslaves)
        ]

    @classmethod
    def from_map_dir(cls, directory, nmasters: int, nslaves: int) -> "Interconnect":
        """Build an interconnect whose master ``i`` uses ``node{i}.map``."""
        maps = [
            load_map(os.path.join(directory, f"node{index}.map"))
            for index in range(nmasters)
        ]
        return cls(maps, nslaves)

    @property
    def nmasters(self) -> int:
        return len(self.masters)

    @property
    def nslaves(self) -> int:
        return len(self.slaves)

    def master(self, index: int) -> InterconnectMaster:
        """Return master port ``index``."""
        if not 0 <= index < len(self.masters):
            raise RoutingError(f"cannot find the master {index}")
        return self.masters[index]

    def slave(self, index: int) -> InterconnectSlave:
        """Return slave port ``index``."""
        if not 0 <= index < len(self.slaves):
            raise RoutingError(f"cannot find the slave {index}")
        return self.slaves[index]