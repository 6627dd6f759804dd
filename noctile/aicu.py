"""Interrupt controller that routes global and per-output local lines."""

from __future__ import annotations

from typing import List, Tuple

from noctile.vci import WORD_BYTES

# Global register word indexes.
AICU_CTRL = 0
AICU_HANDLER0 = 4
AICU_HANDLER31 = 35
AICU_LOCAL = 0x100 >> 2

# Local register word indexes, relative to one output's bank.
AICU_STAT = 0
AICU_MASK = 1
AICU_ADDR = 2
AICU_IRQ = 3
AICU_SPAN = 0x10 >> 2

MAX_INTERRUPTS = 32
CTRL_ENABLE = 0x1

_U32 = 0xFFFFFFFF


class AicuError(RuntimeError):
    """Raised for a bad configuration or a bad register access."""


def _word(data) -> bytearray:
    buf = bytearray(data)
    if len(buf) != WORD_BYTES:
        raise ValueError(f"data must hold {WORD_BYTES} bytes, got {len(buf)}")
    return buf


class Aicu:
    """An interrupt controller with ``nb_out`` outputs.

    Inputs are numbered as follows: local interrupt ``j`` of output ``i``
    is input ``nb_out * j + i``; global interrupt ``k`` is input
    ``nb_out * nb_local_in + k``. Within an output's status register,
    local interrupts take bits ``0 .. nb_local_in - 1`` and global ones
    follow them.
    """

    def __init__(self, nb_out: int, nb_global_in: int, nb_local_in: int) -> None:
        if nb_global_in + nb_local_in > MAX_INTERRUPTS:
            raise AicuError(
                f"Interruption number too high: limited to {MAX_INTERRUPTS} interrupts"
            )
        if nb_out < 0 or nb_global_in < 0 or nb_local_in < 0:
            raise AicuError("counts must not be negative")
        self.nb_out = nb_out
        self.nb_global_in = nb_global_in
        self.nb_local_in = nb_local_in
        self.nb_inputs = nb_global_in + nb_out * nb_local_in

        self.control = 0
        self.handlers: List[int] = []
        self.stat: List[int] = []
        self.mask: List[int] = []
        self.current_irq: List[int] = []
        self.outputs: List[bool] = [False] * nb_out

        self._levels: List[bool] = [False] * self.nb_inputs
        self._seen: List[bool] = [False] * self.nb_inputs
        self.reset_registers()

    @property
    def nb_irq(self) -> int:
        return self.nb_global_in + self.nb_local_in

    def reset_registers(self) -> None:
        """Clear handlers and every output's status, mask and current IRQ."""
        self.handlers = [0] * self.nb_irq
        self.stat = [0] * self.nb_out
        self.mask = [0] * self.nb_out
        self.current_irq = [0] * self.nb_out

    @staticmethod
    def _register(ofs: int, be: int) -> Tuple[int, int]:
        index = ofs >> 2
        if be & 0xF0:
            return index + 1, 4
        return index, 0

    def _is_handler(self, index: int) -> bool:
        return (
            AICU_HANDLER0 <= index <= AICU_HANDLER31
            and index - AICU_HANDLER0 < self.nb_irq
        )

    def _local(self, index: int) -> Tuple[int, int]:
        out, reg = divmod(index - AICU_LOCAL, AICU_SPAN)
        if out >= self.nb_out:
            raise AicuError(f"output {out} out of range")
        return out, reg

    def write(self, ofs: int, be: int, data) -> None:
        """Write the enabled 32-bit half of ``data`` to the register at ``ofs``."""
        word = _word(data)
        index, pos = self._register(ofs, be)
        value = int.from_bytes(word[pos:pos + 4], "little")

        if index < AICU_LOCAL:
            if index == AICU_CTRL:
                if (self.control ^ value) & CTRL_ENABLE:
                    self.reset_registers()
                self.control = value
            elif self._is_handler(index):
                self.handlers[index - AICU_HANDLER0] = value
            else:
                raise AicuError(
                    f"bad write ofs=0x{index:X}, be=0x{be:X} (global)"
                )
            return

        out, reg = self._local(index)
        if reg == AICU_STAT:
            self.stat[out] &= ~value & _U32
            self.update()
        elif reg == AICU_MASK:
            self.mask[out] = value
            self.update()
        else:
            raise AicuError(
                f"bad write ofs=0x{reg:x}, be=0x{be:x} data: 0x{value:x} (local) {out}"
            )

    def read(self, ofs: int, be: int, data) -> bytes:
        """Return ``data`` with the enabled half replaced by the register value."""
        word = _word(data)
        index, pos = self._register(ofs, be)

        if index < AICU_LOCAL:
            if index == AICU_CTRL:
                value = self.control
            elif self._is_handler(index):
                value = self.handlers[index - AICU_HANDLER0]
            else:
                raise AicuError(f"bad read ofs=0x{index:X}, be=0x{be:X}")
        else:
            out, reg = self._local(index)
            if reg == AICU_STAT:
                value = self.stat[out]
            elif reg == AICU_MASK:
                value = self.mask[out]
            elif reg == AICU_ADDR:
                irq = self.current_irq[out]
                if irq >= len(self.handlers):
                    raise AicuError("no handler registers")
                value = self.handlers[irq]
                # Reading the handler address acknowledges the interrupt.
                self.stat[out] &= ~(1 << irq) & _U32
                self.update()
            else:
                value = self.current_irq[out]

        word[pos:pos + 4] = (value & _U32).to_bytes(4, "little")
        return bytes(word)

    def handle(self, ofs: int, be: int, data, write: bool) -> Tuple[bytes, bool]:
        """Serve one request; return the response word and error flag."""
        if write:
            self.write(ofs, be, data)
            return bytes(_word(data)), False
        return self.read(ofs, be, data), False

    def set_input(self, index: int, level: bool) -> Tuple[bool, ...]:
        """Drive input ``index``; a change of level is processed at once."""
        if not 0 <= index < self.nb_inputs:
            raise IndexError(f"input {index} out of range")
        level = bool(level)
        if self._levels[index] == level:
            return tuple(self.outputs)
        self._levels[index] = level
        return self.update()

    def _input_for(self, out: int, irq: int) -> int:
        if irq < self.nb_local_in:
            return self.nb_out * irq + out
        return self.nb_out * self.nb_local_in + (irq - self.nb_local_in)

    def update(self) -> Tuple[bool, ...]:
        """Take input edges into account and recompute the outputs."""
        levels = list(self._levels)
        rising = [now and not before for now, before in zip(levels, self._seen)]
        falling = [before and not now for now, before in zip(levels, self._seen)]
        self._seen = levels

        if not self.control & CTRL_ENABLE:
            return tuple(self.outputs)

        for out in range(self.nb_out):
            for irq in range(self.nb_irq):
                line = self._input_for(out, irq)
                if rising[line]:
                    self.stat[out] |= 1 << irq
                elif falling[line]:
                    self.stat[out] &= ~(1 << irq) & _U32

            pending = self.stat[out] & self.mask[out]
            for irq in range(self.nb_irq):
                if pending & (1 << irq):
                    self.current_irq[out] = irq
                    break
            self.outputs[out] = pending != 0

        return tuple(self.outputs)