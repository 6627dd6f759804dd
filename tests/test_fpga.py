import pytest

from noctile import fpga
from noctile.fpga import macroblock_base, slice_register


def test_slice_zero_uses_base_register():
    assert slice_register(0, fpga.REG_SLI_FILLOW) == fpga.REG_SLI_FILLOW


def test_slices_are_spaced_by_slice_offset():
    for reg in (fpga.REG_SLI_OFFSET, fpga.REG_SLI_CLEAR):
        assert slice_register(2, reg) - slice_register(1, reg) == fpga.SLICE_OFFSET


def test_slice_register_pinned():
    assert slice_register(1, fpga.REG_SLI_OFFSET) == 0x38020


def test_slice_registers_do_not_overlap_next_slice():
    last_of_first = slice_register(0, fpga.REG_SLI_CLEAR)
    first_of_second = slice_register(1, fpga.REG_SLI_OFFSET)
    assert last_of_first < first_of_second


def test_macroblock_base():
    assert macroblock_base(0) == 0
    assert macroblock_base(1) == 0x200


def test_macroblock_fields_fit_in_block():
    start = macroblock_base(5)
    assert start + fpga.MODE_OFFSET < macroblock_base(6)


def test_negative_indices_rejected():
    with pytest.raises(ValueError):
        slice_register(-1, fpga.REG_SLI_OFFSET)
    with pytest.raises(ValueError):
        macroblock_base(-1)