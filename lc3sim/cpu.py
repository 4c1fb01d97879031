"""Instruction cycle of the machine, split into its six phases."""

from __future__ import annotations

from enum import IntEnum

from lc3sim.memory import Memory
from lc3sim.registers import Registers

WORD_MASK = 0xFFFF
HALT_WORD = 0xF025
RETURN_REGISTER = 7


class Opcode(IntEnum):
    BR = 0x0
    ADD = 0x1
    LD = 0x2
    ST = 0x3
    JSR = 0x4
    AND = 0x5
    LDR = 0x6
    STR = 0x7
    RTI = 0x8
    NOT = 0x9
    LDI = 0xA
    STI = 0xB
    JMP = 0xC
    RESERVED = 0xD
    LEA = 0xE
    TRAP = 0xF


def _sign_extend(value: int, bits: int) -> int:
    """Return the low ``bits`` of ``value`` read as a two's-complement number."""
    value &= (1 << bits) - 1
    if value & (1 << (bits - 1)):
        value -= 1 << bits
    return value


class Cpu:
    """Runs instructions one phase at a time against a memory and registers.

    The phases are fetch, decode, evaluate_address, fetch_operands, execute
    and store, called in that order.  Fields decoded from one instruction stay
    until a later instruction overwrites them.  ``last_written`` holds the
    address of the most recent store to memory, or ``None``.
    """

    def __init__(self, memory: Memory, registers: Registers) -> None:
        self.memory = memory
        self.registers = registers
        self.opcode = 0
        self.nzp = 0
        self.dr = 0
        self.sr1 = 0
        self.sr2 = 0
        self.sr = 0
        self.base_r = 0
        self.immediate = False
        self.imm5 = 0
        self.offset9 = 0
        self.offset6 = 0
        self.offset11 = 0
        self.pc_relative = False
        self.address = 0
        self.operand1 = 0
        self.operand2 = 0
        self.alu = 0
        self.value = 0
        self.last_written: int | None = None

    def fetch(self) -> None:
        regs = self.registers
        pc = regs.pc
        regs.mar = pc
        regs.mdr = self.memory.read(pc)
        regs.pc = pc + 1
        regs.ir = regs.mdr

    def decode(self) -> None:
        ir = self.registers.ir
        op = (ir >> 12) & 0xF
        self.opcode = op

        if op == Opcode.BR:
            self.nzp = (ir >> 9) & 0x7
            self.offset9 = _sign_extend(ir, 9)
        elif op in (Opcode.ADD, Opcode.AND):
            self.dr = (ir >> 9) & 0x7
            self.sr1 = (ir >> 6) & 0x7
            self.immediate = bool((ir >> 5) & 0x1)
            if self.immediate:
                self.imm5 = _sign_extend(ir, 5)
            else:
                self.sr2 = ir & 0x7
        elif op == Opcode.NOT:
            self.dr = (ir >> 9) & 0x7
            self.sr = (ir >> 6) & 0x7
        elif op in (Opcode.LD, Opcode.LDI, Opcode.LEA, Opcode.ST, Opcode.STI):
            self.dr = (ir >> 9) & 0x7
            self.offset9 = _sign_extend(ir, 9)
        elif op in (Opcode.LDR, Opcode.STR):
            self.dr = (ir >> 9) & 0x7
            self.base_r = (ir >> 6) & 0x7
            self.offset6 = _sign_extend(ir, 6)
        elif op == Opcode.JSR:
            self.pc_relative = bool((ir >> 11) & 0x1)
            if self.pc_relative:
                self.offset11 = _sign_extend(ir, 11)
            else:
                self.base_r = (ir >> 6) & 0x7
        elif op == Opcode.JMP:
            if not self._is_return(ir):
                self.base_r = (ir >> 6) & 0x7

    def evaluate_address(self) -> None:
        regs = self.registers
        op = self.opcode

        if op in (Opcode.BR, Opcode.ST, Opcode.STI, Opcode.LEA):
            self.address = (regs.pc + self.offset9) & WORD_MASK
        elif op == Opcode.LD:
            self.address = (regs.pc + self.offset9) & WORD_MASK
            regs.mar = self.address
        elif op == Opcode.JSR:
            if self.pc_relative:
                self.address = (regs.pc + self.offset11) & WORD_MASK
            else:
                self.address = regs.read(self.base_r)
        elif op == Opcode.LDR:
            self.address = (regs.read(self.base_r) + self.offset6) & WORD_MASK
            regs.mar = self.address
        elif op == Opcode.STR:
            self.address = (regs.read(self.base_r) + self.offset6) & WORD_MASK
        elif op == Opcode.LDI:
            regs.mar = (regs.pc + self.offset9) & WORD_MASK
            self.address = self.memory.read(regs.mar)
            regs.mar = self.address
        elif op == Opcode.JMP:
            if self._is_return(regs.ir):
                self.address = regs.read(RETURN_REGISTER)
            else:
                self.address = regs.read(self.base_r)

    def fetch_operands(self) -> None:
        regs = self.registers
        op = self.opcode

        if op in (Opcode.ADD, Opcode.AND):
            self.operand1 = regs.read(self.sr1)
            self.operand2 = regs.read(self.sr2)
        elif op in (Opcode.LD, Opcode.LDR, Opcode.LDI):
            regs.mdr = self.memory.read(regs.mar)
        elif op in (Opcode.ST, Opcode.STR, Opcode.STI):
            self.value = regs.read(self.dr)
        elif op == Opcode.NOT:
            self.operand1 = regs.read(self.sr)

    def execute(self) -> None:
        op = (self.registers.ir >> 12) & 0xF
        if op == Opcode.ADD:
            addend = self.imm5 if self.immediate else self.operand2
            self.alu = (self.operand1 + addend) & WORD_MASK
        elif op == Opcode.AND:
            mask = self.imm5 if self.immediate else self.operand2
            self.alu = self.operand1 & mask & WORD_MASK
        elif op == Opcode.NOT:
            self.alu = ~self.operand1 & WORD_MASK

    def store(self) -> None:
        regs = self.registers
        op = self.opcode

        if op == Opcode.BR:
            if self.nzp & regs.cc & 0x7:
                regs.pc = self.address
        elif op in (Opcode.ADD, Opcode.AND, Opcode.NOT):
            self._set_result(self.alu)
        elif op in (Opcode.LD, Opcode.LDR, Opcode.LDI):
            self._set_result(regs.mdr)
        elif op in (Opcode.ST, Opcode.STR):
            regs.mar = self.address
            regs.mdr = self.value
            self.memory.write(regs.mar, regs.mdr)
            self.last_written = regs.mar
        elif op == Opcode.STI:
            regs.mar = self.address
            regs.mdr = self.value
            target = self.memory.read(regs.mar)
            self.memory.write(target, regs.mdr)
            self.last_written = target
        elif op == Opcode.JSR:
            regs.write(RETURN_REGISTER, regs.pc)
            regs.pc = self.address
        elif op == Opcode.JMP:
            regs.pc = self.address
        elif op == Opcode.LEA:
            regs.write(self.dr, self.address)

    def is_halt(self) -> bool:
        """True when the word just fetched is the HALT trap."""
        return self.registers.mdr == HALT_WORD

    def _set_result(self, value: int) -> None:
        self.registers.write(self.dr, value)
        self.registers.set_condition(self.registers.read(self.dr))

    @staticmethod
    def _is_return(ir: int) -> bool:
        return ((ir >> 6) & 0x7) == RETURN_REGISTER