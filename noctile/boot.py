"""Command line parsing, checks and image loading for the platform."""

from __future__ import annotations

import logging
import os
import re
import struct
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

log = logging.getLogger(__name__)

SYSTEM_CLOCK_FV = 1000000000

BOARD_ID = 2339
KERNEL_ARGS_ADDR = 0x100
KERNEL_LOAD_ADDR = 0x00010000
INITRD_LOAD_ADDR = 0x00800000

DEFAULT_RAMSIZE = 128 * 1024 * 1024

ATAG_CORE = 0x54410001
ATAG_MEM = 0x54410002
ATAG_INITRD2 = 0x54420005
ATAG_CMDLINE = 0x54410009

_MIB = 1024 * 1024


class CmdlineError(ValueError):
    """Raised for an unknown option or an option missing its argument."""


class ImageTooLargeError(ValueError):
    """Raised when an image does not fit in memory at the requested offset."""


@dataclass
class InitConfig:
    """Settings gathered from the command line."""

    cpu_family: Optional[str] = "arm"
    cpu_model: Optional[str] = None
    kernel_filename: Optional[str] = None
    initrd_filename: Optional[str] = None
    kernel_cmdline: Optional[str] = None
    no_cpus: int = 1
    ramsize: int = DEFAULT_RAMSIZE
    sramsize: int = 0
    gdb_port: int = 0
    fb_uninit: bool = False
    block_device: Optional[str] = None


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def _set_initrd(config: InitConfig, arg: str) -> None:
    # The initrd option also updates the gdb port with the same argument.
    config.initrd_filename = arg
    config.gdb_port = _atoi(arg)


def _set_fb_uninit(config: InitConfig, arg: Optional[str]) -> None:
    config.fb_uninit = True


_Handler = Callable[[InitConfig, Optional[str]], None]

_OPTIONS: Dict[str, Tuple[bool, _Handler]] = {
    "ncpu": (True, lambda c, a: setattr(c, "no_cpus", _atoi(a))),
    "M": (True, lambda c, a: setattr(c, "cpu_family", a)),
    "cpu": (True, lambda c, a: setattr(c, "cpu_model", a)),
    "ram": (True, lambda c, a: setattr(c, "ramsize", _atoi(a) * _MIB)),
    "sram": (True, lambda c, a: setattr(c, "sramsize", _atoi(a) * _MIB)),
    "kernel": (True, lambda c, a: setattr(c, "kernel_filename", a)),
    "initrd": (True, _set_initrd),
    "gdb_port": (True, lambda c, a: setattr(c, "gdb_port", _atoi(a))),
    "append": (True, lambda c, a: setattr(c, "kernel_cmdline", a)),
    "uninitfb": (False, _set_fb_uninit),
    "blockdev": (True, lambda c, a: setattr(c, "block_device", a)),
}


def parse_cmdline(argv: Sequence[str]) -> InitConfig:
    """Build an InitConfig from ``argv`` (``argv[0]`` is the program name).

    ``--foo`` is treated the same as ``-foo``.
    """
    prog = argv[0] if argv else ""
    config = InitConfig()
    args = iter(argv[1:])
    for raw in args:
        option = raw[1:] if raw[1:2] == "-" else raw
        spec = _OPTIONS.get(option[1:])
        if spec is None:
            raise CmdlineError(f"{prog}: invalid option -- '{option}'")
        has_arg, handler = spec
        value = None
        if has_arg:
            value = next(args, None)
            if value is None:
                raise CmdlineError(f"{prog}: option '{option}' requires an argument")
        handler(config, value)
    return config


def check_init(config: InitConfig) -> List[str]:
    """Return the problems that prevent starting; empty when all is well."""
    problems: List[str] = []
    if not config.kernel_filename:
        problems.append("Please specify kernel name with -kernel")
    else:
        try:
            os.stat(config.kernel_filename)
        except OSError as exc:
            problems.append(
                f"cannot stat kernel file '{config.kernel_filename}': "
                f"{os.strerror(exc.errno) if exc.errno else exc}"
            )
    if config.initrd_filename:
        try:
            os.stat(config.initrd_filename)
        except OSError as exc:
            problems.append(
                f"cannot stat initrd file '{config.initrd_filename}': "
                f"{os.strerror(exc.errno) if exc.errno else exc}"
            )
    return problems


def _store(memory, offset: int, payload: bytes) -> None:
    if offset < 0 or offset + len(payload) > memory.size:
        raise ImageTooLargeError(
            f"{len(payload)} bytes at 0x{offset:x} exceed memory of {memory.size} bytes"
        )
    memory.mem[offset:offset + len(payload)] = payload


def load_image(memory, path: Optional[str], offset: int) -> Optional[int]:
    """Copy the file at ``path`` into ``memory`` at ``offset``.

    Returns the image size, or None when there is no file to load.
    """
    if path is None:
        return None
    try:
        with open(path, "rb") as handle:
            image = handle.read()
    except OSError:
        return None
    if len(image) + offset > memory.size:
        raise ImageTooLargeError(
            f"RAM size < {path} size + {offset:x}"
        )
    _store(memory, offset, image)
    return len(image)


def bootloader_words() -> List[int]:
    """Return the primary boot stub as 32-bit instruction words."""
    return [
        0xEE101FB0,  # mrc 15, 0, r1, cr0, cr0, {5}
        0xE211100F,  # ands r1, r1, #15
        0x159F3004,  # ldrne r3, [pc, #4]
        0x0A000001,  # beq pc + 4
        0xE12FFF13,  # bx r3
        0x85000000,  # second cpus boot address
        0xE3A00000,  # mov r0, #0
        0xE3A01000 | (BOARD_ID & 0xFF),  # mov r1, #board_id low
        0xE3811C00 | ((BOARD_ID >> 8) & 0xFF),  # orr r1, r1, #board_id high
        0xE59F2000,  # ldr r2, [pc, #0]
        0xE59FF000,  # ldr pc, [pc, #0]
        KERNEL_ARGS_ADDR,
        KERNEL_LOAD_ADDR,
    ]


def smpboot_words() -> List[int]:
    """Return the secondary CPU entry stub: wait until a start address is set."""
    return [
        0xE3A00482,  # mov r0, #0x82000000
        0xE3800084,  # orr r0, #0x84
        0xE320F003,  # wfi
        0xE5901000,  # ldr r1, [r0]
        0xE3110003,  # tst r1, #3
        0x1AFFFFFB,  # bne <wfi>
        0xE12FFF11,  # bx r1
    ]


def _pack_words(words: Sequence[int]) -> bytes:
    return b"".join(struct.pack("<I", word & 0xFFFFFFFF) for word in words)


def kernel_args(
    ram_size: int,
    initrd_size: int,
    kernel_cmdline: Optional[str],
    loader_start: int,
) -> bytes:
    """Return the tagged list handed to the kernel, as little-endian words."""
    out = bytearray(
        _pack_words([5, ATAG_CORE, 1, 0x1000, 0, 4, ATAG_MEM, ram_size, loader_start])
    )
    if initrd_size:
        out += _pack_words(
            [4, ATAG_INITRD2, loader_start + INITRD_LOAD_ADDR, initrd_size]
        )
    if kernel_cmdline:
        text = kernel_cmdline.encode("latin-1") + b"\0"
        words = ((len(text) - 1) >> 2) + 1
        out += _pack_words([words + 2, ATAG_CMDLINE])
        out += text.ljust(words * 4, b"\0")
    out += _pack_words([0, 0])
    return bytes(out)


def load_kernel(memory, config: InitConfig) -> None:
    """Load a kernel, its boot stubs, an optional initrd and the kernel tags."""
    load_image(memory, config.kernel_filename, KERNEL_LOAD_ADDR)
    _store(memory, 0, _pack_words(bootloader_words()))
    _store(memory, config.ramsize, _pack_words(smpboot_words()))
    initrd_size = load_image(memory, config.initrd_filename, INITRD_LOAD_ADDR) or 0
    _store(
        memory,
        KERNEL_ARGS_ADDR,
        kernel_args(config.ramsize, initrd_size, config.kernel_cmdline, 0),
    )


def load_dnaos(memory, config: InitConfig) -> None:
    """Load the kernel image at the start of memory."""
    load_image(memory, config.kernel_filename, 0)