# noctile

Building blocks for transaction-level models of a small multiprocessor
system-on-chip: the on-chip network, devices that answer on it, an
interrupt controller, the exclusive-access monitor shared by the CPUs, and
the boot-time setup of the platform. Everything is plain Python with no
dependencies outside the standard library.

## Modules

- `noctile.vci`: the transactions. `VciRequest` and `VciResponse` are
  dataclasses whose data fields (`wdata`, `rdata`) are 8-byte `bytearray`s;
  `Command` holds the command codes (`NOP`, `READ`, `WRITE`, `LOCKED_READ`).
- `noctile.fifo`: `BoundedFifo`, a queue of fixed capacity with `write`,
  `read`, `reset`, `is_empty`, `is_full` and `len()`. Writing to a full queue
  raises `FifoFullError`; reading an empty one raises `FifoEmptyError`.
- `noctile.interconnect`: the network. An `Interconnect` has one
  `InterconnectMaster` port per address map and a number of
  `InterconnectSlave` ports. `InterconnectMaster.dispatch` routes the oldest
  queued request to its slave, rewriting the address into the slave's own
  offset; `InterconnectSlave.dispatch` returns the oldest response to the
  master named by its `rsrcid`. `linear_address` and `slave_for_address`
  translate between a master's addresses and slave offsets.
  `describe_request` and `describe_response` produce text dumps.
- `noctile.master`: `MasterDevice`, the base for bus masters.
  `build_request` turns an access of 1 to 8 bytes into a request with the
  right byte enables; `handle_response` checks a response and passes the
  data to `on_response`, which by default collects it in `responses`.
  `decode_byte_enable` returns the first lane and the number of lanes of a
  byte-enable mask.
- `noctile.memory`: `MemoryDevice`, a zero-filled RAM of a given size.
  `write` stores the lanes selected by the byte enable, `read` returns the
  response word and an error flag, and `handle` serves one request either
  way.
- `noctile.aicu`: `Aicu`, an interrupt controller with global inputs and
  per-output local inputs, a control register, handler registers and, for
  each output, status, mask, handler-address and current-IRQ registers.
  `set_input` drives an input line and `update` recomputes `outputs`.
  Bad configurations and register accesses raise `AicuError`.
- `noctile.exclusive`: `ExclusiveMonitor`, the list of word-aligned
  exclusive reservations with `mark`, `test`, `clear` and `entries`.
- `noctile.boot`: `parse_cmdline` builds an `InitConfig` from an argument
  list, `check_init` lists the problems that prevent starting, `load_image`
  copies a file into a memory, and `bootloader_words`, `smpboot_words`,
  `kernel_args`, `load_kernel` and `load_dnaos` prepare memory for an ARM
  kernel. Errors are `CmdlineError` and `ImageTooLargeError`.
- `noctile.fpga`: register addresses and macroblock layout of a deblocking
  filter accelerator, with `slice_register` and `macroblock_base`.
- `noctile.h264`: macroblock type codes and sample helpers for H.264
  deblocking: `is_intra`, `custom_clip`, `clip` and the `QpPair` of samples
  on both sides of an edge.

## Command line options

`parse_cmdline` takes the program name first, then options written with one
or two dashes:

| option | argument | sets |
| --- | --- | --- |
| `-ncpu` | count | `no_cpus` |
| `-M` | family | `cpu_family` (default `arm`) |
| `-cpu` | model | `cpu_model` |
| `-ram` | MiB | `ramsize` (default 128 MiB) |
| `-sram` | MiB | `sramsize` |
| `-kernel` | file | `kernel_filename` |
| `-initrd` | file | `initrd_filename`, and `gdb_port` from the same argument |
| `-gdb_port` | port | `gdb_port` |
| `-append` | text | `kernel_cmdline` |
| `-uninitfb` | none | `fb_uninit` |
| `-blockdev` | file | `block_device` |

## Address maps

Each master routes addresses through its own map. A map file holds one line
per region:

```
0x00000000 0x08000000 0x00000000 0
0xC0000000 0xC0001000 0x00000000 1
```

The columns are the first address, the end address (excluded), the offset
inside the slave, and the slave index. `parse_map` reads such text,
`load_map` reads a file, and `Interconnect.from_map_dir` reads
`node0.map`, `node1.map`, ... from a directory, one per master.

## Example

```python
from noctile.interconnect import Interconnect, parse_map
from noctile.master import MasterDevice
from noctile.memory import MemoryDevice
from noctile.vci import VciResponse

ram = MemoryDevice("ram", 0x1000)
ram.mem[0x100:0x104] = b"\x11\x22\x33\x44"

noc = Interconnect([parse_map("0x00000000 0x00001000 0x00000000 0\n")], nslaves=1)
cpu = MasterDevice(node_id=0)

port = noc.master(0)
port.put(cpu.build_request(tid=1, addr=0x100, data=None, nbytes=4, write=False))
port.dispatch()

req = noc.slave(0).get()
word, error = ram.handle(req.address, req.be, req.wdata, write=False)
noc.slave(0).put(VciResponse(rdata=word, reop=True, rerror=error,
                             rsrcid=req.srcid, rtrdid=req.trdid, rbe=req.be))
noc.slave(0).dispatch()

cpu.handle_response(port.get())
assert cpu.responses[0].data[:4] == b"\x11\x22\x33\x44"
```

## What the package does not do

- There is no simulation kernel or clock: queues move only when
  `dispatch` is called, and nothing models time or delays.
- No processor is emulated and there is no command that builds and runs a
  whole platform; the pieces are meant to be put together by the caller.
- The deblocking filter is described only by its register layout
  (`noctile.fpga`) and sample helpers (`noctile.h264`); the filtering
  device itself is not included. Nor are frame buffer, block, serial or
  timer devices.

## Tests

The test suite uses pytest; install the package with its `test` extra to
get it.