"""Base behaviour for devices that issue requests on the network."""

from __future__ import annotations

import logging
from typing import List, NamedTuple, Tuple

from noctile.vci import WORD_BYTES, Command, VciRequest, VciResponse

log = logging.getLogger(__name__)

_OPERATION_MASK_BE = (0xDE, 0x01, 0x03, 0xDE, 0x0F, 0xDE, 0xDE, 0xDE, 0xFF)


def decode_byte_enable(be: int) -> Tuple[int, int]:
    """Return (first enabled byte lane, number of contiguous enabled lanes)."""
    be &= 0xFF
    if not be:
        return 0, 0
    offset = (be & -be).bit_length() - 1
    be >>= offset
    count = 0
    while be & 1:
        count += 1
        be >>= 1
    return offset, count


class _Received(NamedTuple):
    tid: int
    data: bytes
    error: bool
    write: bool


class MasterDevice:
    """A network master identified by ``node_id``.

    Subclasses override :meth:`on_response`; by default responses are
    collected in :attr:`responses`.
    """

    def __init__(self, node_id: int) -> None:
        self.node_id = node_id
        self.responses: List[_Received] = []

    def build_request(
        self, tid: int, addr: int, data, nbytes: int, write: bool
    ) -> VciRequest:
        """Build the request for an access of ``nbytes`` at ``addr``."""
        if nbytes < 0:
            raise ValueError("nbytes must not be negative")
        plen = ((nbytes + 3) >> 2) & 0xFF
        lanes = min(nbytes, 4)
        ofs = addr & 0x7
        req = VciRequest(
            address=addr & 0xFFFFFFF8,
            be=(_OPERATION_MASK_BE[lanes] << ofs) & 0xFF,
            cmd=Command.WRITE if write else Command.READ,
            trdid=tid,
            srcid=self.node_id,
            plen=plen,
            eop=True,
        )
        if write:
            payload = bytes(data[:lanes])
            if len(payload) < lanes:
                raise ValueError(f"need {lanes} bytes of data, got {len(payload)}")
            if ofs + lanes > WORD_BYTES:
                raise ValueError(
                    f"{lanes} bytes at 0x{addr:x} cross the {WORD_BYTES}-byte word"
                )
            req.wdata[ofs:ofs + lanes] = payload
        return req

    def handle_response(self, rsp: VciResponse) -> bool:
        """Deliver a response to :meth:`on_response`; False if it was dropped."""
        if rsp.rsrcid != self.node_id:
            log.error(
                "master %d received a response for %d", self.node_id, rsp.rsrcid
            )
            return False
        if not rsp.reop:
            log.error("master %d received a response without EOP set", self.node_id)
            return False
        if rsp.rerror:
            log.error("master %d received an error response: %r", self.node_id, rsp)
        ofs, _ = decode_byte_enable(rsp.rbe)
        self.on_response(rsp.rtrdid, bytes(rsp.rdata[ofs:]), bool(rsp.rerror), False)
        return True

    def on_response(self, tid: int, data: bytes, error: bool, write: bool) -> None:
        """Receive the payload of a completed transaction."""
        self.responses.append(_Received(tid, data, error, write))