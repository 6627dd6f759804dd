"""Macroblock codes and sample helpers for the H.264 deblocking filter."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

NA = -1

# Prediction modes.
INTRA_4X4 = 0
INTRA_16X16 = 1
PRED_L0 = 2
PRED_L1 = 3
BI_PRED = 4
DIRECT = 5

# Macroblock types.
P_L0_16X16 = 0
P_L0_L0_16X8 = 1
P_L0_L0_8X16 = 2
P_8X8 = 3
P_8X8REF0 = 4
I_4X4 = 5
I_16X16_0_0_0 = 6
I_16X16_1_0_0 = 7
I_16X16_2_0_0 = 8
I_16X16_3_0_0 = 9
I_16X16_0_1_0 = 10
I_16X16_1_1_0 = 11
I_16X16_2_1_0 = 12
I_16X16_3_1_0 = 13
I_16X16_0_2_0 = 14
I_16X16_1_2_0 = 15
I_16X16_2_2_0 = 16
I_16X16_3_2_0 = 17
I_16X16_0_0_1 = 18
I_16X16_1_0_1 = 19
I_16X16_2_0_1 = 20
I_16X16_3_0_1 = 21
I_16X16_0_1_1 = 22
I_16X16_1_1_1 = 23
I_16X16_2_1_1 = 24
I_16X16_3_1_1 = 25
I_16X16_0_2_1 = 26
I_16X16_1_2_1 = 27
I_16X16_2_2_1 = 28
I_16X16_3_2_1 = 29
I_PCM = 30
P_SKIP = 0xFF

# Sub-macroblock types.
P_L0_8X8 = 0
P_L0_8X4 = 1
P_L0_4X8 = 2
P_L0_4X4 = 3
B_DIRECT_8X8 = 4

N_SLICE_THREADS = 4
REG_STATUS_BIT_ALLSLICES = N_SLICE_THREADS
REG_STATUS_BIT_SRAM = N_SLICE_THREADS + 1

MB_WIDTH = 16

_SAMPLES = 4


def is_intra(mode: int) -> bool:
    """Return True for intra-coded macroblock types."""
    return I_4X4 <= mode <= I_PCM


def custom_clip(value: int, low: int, high: int) -> int:
    """Clamp ``value`` into ``[low, high]``."""
    if value < low:
        return low
    if value > high:
        return high
    return value


def clip(value: int) -> int:
    """Clamp ``value`` to the range of an 8-bit sample."""
    return custom_clip(value, 0, 255)


def _samples() -> List[int]:
    return [0] * _SAMPLES


def _check(name: str, values) -> List[int]:
    out = list(values)
    if len(out) != _SAMPLES:
        raise ValueError(f"{name} must hold {_SAMPLES} samples, got {len(out)}")
    for value in out:
        if not 0 <= value <= 255:
            raise ValueError(f"{name} sample {value} out of range 0..255")
    return out


@dataclass
class QpPair:
    """Four samples on each side of an edge: ``p`` before it, ``q`` after it.

    ``p[0]`` and ``q[0]`` are the samples next to the edge.
    """

    p: List[int] = field(default_factory=_samples)
    q: List[int] = field(default_factory=_samples)

    def __post_init__(self) -> None:
        self.p = _check("p", self.p)
        self.q = _check("q", self.q)

    def copy(self) -> "QpPair":
        """Return an independent copy."""
        return QpPair(list(self.p), list(self.q))