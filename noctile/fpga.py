"""Register and memory layout of the deblocking filter accelerator."""

from __future__ import annotations

FPGA_CHAR_SIZE = 0x40000
MB_BLOCK_SIZE = 0x00200
FRAME_OFFSET = 0x40000
SLICE_OFFSET = 0x10

# Layout of one macroblock record.
LUMA_OFFSET = 0x0  # 0x00000 .. 0x000FF
CHROMA_OFFSET = 0x00100  # 0x00100 .. 0x0017F
MVX_OFFSET = 0x00180  # 0x00180 .. 0x0019F
MVY_OFFSET = 0x001A0  # 0x001A0 .. 0x001BF
COEFF_OFFSET = 0x001C0  # 0x001C0 .. 0x001CF
QUANT_OFFSET = 0x001D0  # 0x001D0 .. 0x001D1
MODE_OFFSET = 0x001D2

REG_GLO_VER = 0x34000
REG_GLO_REV = 0x34001
REG_GLO_DBG = 0x34002
REG_GLO_STA = 0x34003
REG_GLO_CTRL = 0x34004

REG_FRA_STA = 0x38000
REG_FRA_CTRL = 0x38004
REG_FRA_SRAM = 0x38008

REG_SLI_OFFSET = 0x38010
REG_SLI_LGTOFF = 0x38011
REG_SLI_LENGTH = 0x38012
REG_SLI_CTRL = 0x38013
REG_SLI_QPC = 0x38014
REG_SLI_QPL = 0x38015
REG_SLI_BETA = 0x38016
REG_SLI_ALPHA = 0x38017
REG_SLI_FILLOW = 0x38018
REG_SLI_FILLHI = 0x38019
REG_SLI_EMPLOW = 0x3801A
REG_SLI_EMPHI = 0x3801B
REG_SLI_CLEAR = 0x3801C

REG_NSLICES = 0x39000  # read only
REG_INT_ACK = 0x39004
REG_INT_STATUS = 0x39008  # read only
# Bits 0..N-1: per-slice interrupt; bit N: all slices done;
# bit N+1: frame copied to SRAM; bit 7: interrupt raised.
REG_INT_ENABLE = 0x3900C
REG_SRAM_ADDRESS = 0x39010
REG_INC_ADDRESS = 0x39014
REG_NSLICES_INTR = 0x39018


def slice_register(slice_id: int, register: int) -> int:
    """Return the address of a per-slice register for ``slice_id``."""
    if slice_id < 0:
        raise ValueError("slice_id must not be negative")
    return SLICE_OFFSET * slice_id + register


def macroblock_base(mb_pos: int) -> int:
    """Return the address where macroblock ``mb_pos`` starts."""
    if mb_pos < 0:
        raise ValueError("mb_pos must not be negative")
    return MB_BLOCK_SIZE * mb_pos