"""Command-line front end: assemble a source file and step the machine through it."""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Sequence
from enum import Enum

from lc3sim.assembler import DEFAULT_IMAGE, START_ADDRESS, AssemblyError, assemble_file
from lc3sim.binfile import load_image
from lc3sim.cpu import Cpu
from lc3sim.memory import Memory
from lc3sim.registers import Registers

DEFAULT_MAX_STEPS = 100_000
HALT_MESSAGE = "The program has reached the HALT instruction and is done."


class Phase(Enum):
    """The phases of the instruction cycle, plus the halted state."""

    FETCH = "Fetch"
    DECODE = "Decode"
    EVALUATE_ADDRESS = "Evaluate Address"
    FETCH_OPERANDS = "Fetch Operands"
    EXECUTE = "Execute"
    STORE = "Store"
    HALTED = "Halted"


_CYCLE = (
    Phase.FETCH,
    Phase.DECODE,
    Phase.EVALUATE_ADDRESS,
    Phase.FETCH_OPERANDS,
    Phase.EXECUTE,
    Phase.STORE,
)


class Simulator:
    """A machine that runs a loaded program one cycle phase per step.

    ``watched_address`` is the memory cell most recently written by a store,
    or the load address right after a program is loaded.
    """

    def __init__(self) -> None:
        self.memory = Memory()
        self.registers = Registers()
        self.cpu = Cpu(self.memory, self.registers)
        self.loaded = False
        self.halted = False
        self.watched_address = START_ADDRESS
        self._next = Phase.FETCH

    def load(
        self,
        source_path: str | os.PathLike[str],
        image_path: str | os.PathLike[str] = DEFAULT_IMAGE,
    ) -> int:
        """Assemble ``source_path`` into ``image_path`` and load it at the start address.

        Returns the number of words loaded.
        """
        assemble_file(source_path, image_path)
        count = load_image(image_path, self.memory, START_ADDRESS)
        self.registers.pc = START_ADDRESS
        self.watched_address = START_ADDRESS
        self.cpu.last_written = None
        self.halted = False
        self._next = Phase.FETCH
        self.loaded = True
        return count

    def step(self) -> Phase:
        """Carry out the next phase and return it, or ``Phase.HALTED`` once halted."""
        if not self.loaded:
            raise RuntimeError("No file selected. Please load a file before running.")
        if self.halted:
            return Phase.HALTED

        cpu = self.cpu
        phase = self._next
        if phase is Phase.FETCH:
            cpu.fetch()
            if cpu.is_halt():
                self.halted = True
                return Phase.HALTED
        elif phase is Phase.DECODE:
            cpu.decode()
        elif phase is Phase.EVALUATE_ADDRESS:
            cpu.evaluate_address()
        elif phase is Phase.FETCH_OPERANDS:
            cpu.fetch_operands()
        elif phase is Phase.EXECUTE:
            cpu.execute()
        elif phase is Phase.STORE:
            cpu.store()
            if cpu.last_written is not None:
                self.watched_address = cpu.last_written
                cpu.last_written = None

        self._next = _CYCLE[(_CYCLE.index(phase) + 1) % len(_CYCLE)]
        return phase

    def run(self, max_steps: int = DEFAULT_MAX_STEPS) -> int:
        """Step until the program halts or ``max_steps`` steps have been taken.

        Returns the number of steps taken, the halting step included.
        """
        if max_steps < 0:
            raise ValueError(f"max_steps must not be negative: {max_steps}")
        taken = 0
        while taken < max_steps and not self.halted:
            self.step()
            taken += 1
        return taken

    def format_registers(self) -> str:
        """Return one ``NAME = 0xVALUE`` line per register."""
        regs = self.registers
        values = [(f"R{index}", value) for index, value in enumerate(regs.general)]
        values += [
            ("MAR", regs.mar),
            ("MDR", regs.mdr),
            ("N", int(regs.negative)),
            ("PC", regs.pc),
            ("P", int(regs.positive)),
            ("Z", int(regs.zero)),
            ("IR", regs.ir),
        ]
        return "\n".join(f"{name} = 0x{value:X}" for name, value in values)

    def format_memory(self, address: int) -> str:
        """Return the address and value of one memory cell as hex words."""
        if not 0 <= address < len(self.memory):
            raise IndexError(f"address out of range: {address:#x}")
        return f"0X{address:04X}  0X{self.memory.read(address):04X}"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lc3sim", description="Assemble a program and run it on the simulator."
    )
    parser.add_argument("source", help="assembly file (.asm)")
    parser.add_argument(
        "--image", default=DEFAULT_IMAGE, help="where to write the memory image"
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=DEFAULT_MAX_STEPS,
        help="stop after this many phases",
    )
    parser.add_argument(
        "--trace", action="store_true", help="print the registers after every phase"
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    if not args.source.lower().endswith(".asm"):
        print("Please select a file with an .asm extension.", file=sys.stderr)
        return 1

    simulator = Simulator()
    try:
        simulator.load(args.source, args.image)
    except AssemblyError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    steps = 0
    while steps < args.max_steps and not simulator.halted:
        phase = simulator.step()
        steps += 1
        if args.trace and phase is not Phase.HALTED:
            print(f"[{phase.value}]")
            print(simulator.format_registers())
            print(simulator.format_memory(simulator.watched_address))

    print(simulator.format_registers())
    print(simulator.format_memory(simulator.watched_address))
    if simulator.halted:
        print(HALT_MESSAGE)
        return 0
    print(f"Stopped after {steps} steps without reaching HALT.", file=sys.stderr)
    return 2


if __name__ == "__main__":
    sys.exit(main())