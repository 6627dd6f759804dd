import struct

import pytest

from noctile.boot import (
    ATAG_CMDLINE,
    ATAG_CORE,
    ATAG_INITRD2,
    BOARD_ID,
    DEFAULT_RAMSIZE,
    INITRD_LOAD_ADDR,
    KERNEL_ARGS_ADDR,
    KERNEL_LOAD_ADDR,
    CmdlineError,
    ImageTooLargeError,
    InitConfig,
    bootloader_words,
    check_init,
    kernel_args,
    load_dnaos,
    load_image,
    load_kernel,
    parse_cmdline,
    smpboot_words,
)
from noctile.memory import MemoryDevice


def _words(data):
    return list(struct.unpack(f"<{len(data) // 4}I", data))


def test_defaults():
    config = parse_cmdline(["prog"])
    assert config == InitConfig()
    assert config.cpu_family == "arm"
    assert config.ramsize == 128 * 1024 * 1024
    assert config.no_cpus == 1


def test_options_parsed():
    config = parse_cmdline(
        ["prog", "-ncpu", "4", "--ram", "64", "-kernel", "vmlinux",
         "-append", "console=ttyS0", "-M", "arm", "-cpu", "arm11mpcore",
         "-blockdev", "disk.img", "-gdb_port", "1234", "-uninitfb"]
    )
    assert config.no_cpus == 4
    assert config.ramsize == 64 * 1024 * 1024
    assert config.kernel_filename == "vmlinux"
    assert config.kernel_cmdline == "console=ttyS0"
    assert config.cpu_model == "arm11mpcore"
    assert config.block_device == "disk.img"
    assert config.gdb_port == 1234
    assert config.fb_uninit is True


def test_initrd_also_sets_gdb_port():
    config = parse_cmdline(["prog", "-gdb_port", "7", "-initrd", "rootfs"])
    assert config.initrd_filename == "rootfs"
    assert config.gdb_port == 0


def test_invalid_option():
    with pytest.raises(CmdlineError, match="invalid option"):
        parse_cmdline(["prog", "-bogus"])


def test_missing_argument():
    with pytest.raises(CmdlineError, match="requires an argument"):
        parse_cmdline(["prog", "-kernel"])


def test_check_init_without_kernel():
    problems = check_init(InitConfig())
    assert problems == ["Please specify kernel name with -kernel"]


def test_check_init_files(tmp_path):
    kernel = tmp_path / "kernel"
    kernel.write_bytes(b"k")
    assert check_init(InitConfig(kernel_filename=str(kernel))) == []
    problems = check_init(
        InitConfig(kernel_filename=str(kernel),
                   initrd_filename=str(tmp_path / "missing"))
    )
    assert len(problems) == 1
    assert "cannot stat initrd file" in problems[0]
    problems = check_init(InitConfig(kernel_filename=str(tmp_path / "nope")))
    assert "cannot stat kernel file" in problems[0]


def test_load_image_round_trip(tmp_path):
    image = tmp_path / "img"
    payload = bytes(range(40))
    image.write_bytes(payload)
    memory = MemoryDevice("ram", 256)
    assert load_image(memory, str(image), 16) == len(payload)
    assert bytes(memory.mem[16:16 + len(payload)]) == payload
    assert not any(memory.mem[:16])


def test_load_image_absent(tmp_path):
    memory = MemoryDevice("ram", 64)
    assert load_image(memory, None, 0) is None
    assert load_image(memory, str(tmp_path / "none"), 0) is None


def test_load_image_too_large(tmp_path):
    image = tmp_path / "img"
    image.write_bytes(bytes(60))
    memory = MemoryDevice("ram", 64)
    with pytest.raises(ImageTooLargeError):
        load_image(memory, str(image), 8)


def test_bootloader_words():
    words = bootloader_words()
    assert len(words) == 13
    assert words[-2:] == [KERNEL_ARGS_ADDR, KERNEL_LOAD_ADDR]
    assert words[7] == 0xE3A01000 | (BOARD_ID & 0xFF)
    assert words[8] == 0xE3811C00 | ((BOARD_ID >> 8) & 0xFF)
    assert smpboot_words()[0] == 0xE3A00482
    assert smpboot_words()[-1] == 0xE12FFF11


def test_kernel_args_minimal():
    words = _words(kernel_args(4096, 0, None, 0))
    assert words[:2] == [5, ATAG_CORE]
    assert words[7] == 4096
    assert words[-2:] == [0, 0]
    assert ATAG_INITRD2 not in words


def test_kernel_args_initrd_and_cmdline():
    data = kernel_args(4096, 300, "root=/dev/ram", 0)
    words = _words(data)
    assert words[9:13] == [4, ATAG_INITRD2, INITRD_LOAD_ADDR, 300]
    assert words[14] == ATAG_CMDLINE
    text_words = words[13] - 2
    text = data[15 * 4:15 * 4 + text_words * 4]
    assert text.rstrip(b"\0") == b"root=/dev/ram"
    assert words[-2:] == [0, 0]
    assert len(words) == 15 + text_words + 2


def test_load_kernel(tmp_path):
    ramsize = 16 * 1024 * 1024
    kernel = tmp_path / "kernel"
    kernel.write_bytes(b"KERNEL")
    initrd = tmp_path / "initrd"
    initrd.write_bytes(b"INITRD!")
    memory = MemoryDevice("ram", ramsize + 0x1000)
    config = InitConfig(kernel_filename=str(kernel), initrd_filename=str(initrd),
                        kernel_cmdline="quiet", ramsize=ramsize)
    load_kernel(memory, config)
    assert bytes(memory.mem[KERNEL_LOAD_ADDR:KERNEL_LOAD_ADDR + 6]) == b"KERNEL"
    assert bytes(memory.mem[INITRD_LOAD_ADDR:INITRD_LOAD_ADDR + 7]) == b"INITRD!"
    assert _words(bytes(memory.mem[:52])) == bootloader_words()
    assert _words(bytes(memory.mem[ramsize:ramsize + 28])) == smpboot_words()
    args = kernel_args(ramsize, 7, "quiet", 0)
    assert bytes(memory.mem[KERNEL_ARGS_ADDR:KERNEL_ARGS_ADDR + len(args)]) == args


def test_load_dnaos(tmp_path):
    kernel = tmp_path / "kernel"
    kernel.write_bytes(b"DNA")
    memory = MemoryDevice("ram", 64)
    load_dnaos(memory, InitConfig(kernel_filename=str(kernel)))
    assert bytes(memory.mem[:3]) == b"DNA"
    assert DEFAULT_RAMSIZE == InitConfig().ramsize