# lc3sim

An assembler and a step-by-step simulator for the LC-3, the small 16-bit
computer used to teach computer organisation. The simulator carries each
instruction through the six phases of the instruction cycle one at a time:
fetch, decode, evaluate address, fetch operands, execute and store. You can
watch the registers and memory change at every step.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command line

```
lc3sim program.asm
```

The command works in three stages:

1. It assembles the source file into a binary memory image. The image is
   written to `MEMORY.bin` unless you give `--image`.
2. It loads the image at `0x3000` and sets the PC to `0x3000`.
3. It runs the program phase by phase until the program reaches `HALT` or the
   step limit.

When it stops, it prints the registers and the memory cell most recently
written by a store.

Options:

- `--image PATH`: where to write the memory image.
- `--max-steps N`: stop after this many phases (default 100000).
- `--trace`: print the phase name, the registers and the watched memory cell
  after every phase.

Exit status:

- 0 when the program reached `HALT`.
- 1 when the file does not end in `.asm` or cannot be assembled.
- 2 when the step limit was reached first.

## Assembly syntax

- A label ends with a comma. It may stand on a line of its own or share its
  line with an instruction: `LOOP, ADD R1, R1, #-1`.
- `ORG 3000` sets the address, in hexadecimal, for what follows. The default
  is `0x3000`.
- `END` stops assembly.
- Lines starting with `;` are comments, and a `;` ends an instruction.
- `ADD` and `AND` immediates are written with a prefix character, as in `#5`,
  and must lie in -16..15.
- Data directives:
  - `HEX 1F` gives a 16-bit hexadecimal word.
  - `DEC -3` gives a 16-bit decimal word.
  - `BYTE 41` gives one byte, read as hexadecimal, in the low half of a word.

Supported instructions are `ADD`, `AND`, `NOT`, `BR` (with any of `n`, `z`,
`p`), `JMP`, `JSR`, `JSRR`, `RET`, `LD`, `LDI`, `LDR`, `LEA`, `ST`, `STI`,
`STR` and `HALT`.

Invalid lines are reported as `UserWarning`s and skipped. They do not stop
assembly of the rest of the file. The image holds one word per source line,
counted from `0x3000`.

## Using it from Python

Assemble a file into an image:

```python
from lc3sim.assembler import assemble_file

assemble_file("program.asm", "MEMORY.bin")  # returns the number of words written
```

`assemble_file` raises `lc3sim.assembler.AssemblyError` when the source
cannot be read, is empty, or the image cannot be written. The passes are
available on their own as well: `read_source`, `first_pass`,
`second_pass`, `assemble_instruction`, `validate_instruction`,
`split_without_comments` and `to_binary`.

Drive the simulator yourself:

```python
from lc3sim.cli import Simulator

sim = Simulator()
sim.load("program.asm", "MEMORY.bin")
phase = sim.step()              # advance one phase, returns a Phase
print(sim.format_registers())
sim.run(1000)                   # run until HALT or the step limit
print(sim.format_memory(0x3000))
print(sim.halted, hex(sim.watched_address))
```

`step` raises `RuntimeError` if nothing has been loaded. Once the machine has
halted, `step` returns `Phase.HALTED`.

The lower-level pieces are available too:

- `lc3sim.memory.Memory`: 16-bit cells. Out-of-range reads give 0 and
  out-of-range writes are ignored.
- `lc3sim.registers.Registers`: R0–R7, PC, IR, CC, MAR and MDR, with
  `set_condition` and the `negative`, `zero` and `positive` flags.
- `lc3sim.cpu.Cpu`: one method per phase, plus `is_halt`.
- `write_image` and `load_image` in `lc3sim.binfile`, for the big-endian
  16-bit image format.

## What it does not do

- There is no graphical memory or register view. Output is text only.
- Of the trap instructions, only `HALT` is recognised, and it simply stops
  the machine. There are no input or output traps.
- `RTI` is not executed.
- The image is always loaded at `0x3000`, whatever `ORG` sets.