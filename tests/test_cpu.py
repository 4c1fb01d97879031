import pytest

from lc3sim.cpu import HALT_WORD, Cpu
from lc3sim.memory import Memory
from lc3sim.registers import CC_NEGATIVE, CC_POSITIVE, CC_ZERO, Registers

START = 0x3000


def make_cpu(*words):
    memory = Memory()
    for offset, word in enumerate(words):
        memory.write(START + offset, word)
    regs = Registers()
    regs.pc = START
    return Cpu(memory, regs)


def cycle(cpu):
    cpu.fetch()
    cpu.decode()
    cpu.evaluate_address()
    cpu.fetch_operands()
    cpu.execute()
    cpu.store()


def test_fetch_loads_instruction_and_advances_pc():
    cpu = make_cpu(0x1265)
    cpu.fetch()
    regs = cpu.registers
    assert regs.mar == START
    assert regs.mdr == 0x1265
    assert regs.ir == 0x1265
    assert regs.pc == START + 1


def test_is_halt_after_fetching_halt():
    cpu = make_cpu(HALT_WORD)
    cpu.fetch()
    assert cpu.is_halt()


def test_is_halt_false_for_other_instruction():
    cpu = make_cpu(0x1265)
    cpu.fetch()
    assert not cpu.is_halt()


def test_add_immediate():
    cpu = make_cpu(0x1265)  # ADD R1, R1, #5
    cycle(cpu)
    assert cpu.registers.read(1) == 5
    assert cpu.registers.cc == CC_POSITIVE


def test_add_negative_immediate_wraps():
    cpu = make_cpu(0x14BF)  # ADD R2, R2, #-1
    cycle(cpu)
    assert cpu.registers.read(2) == 0xFFFF
    assert cpu.registers.cc == CC_NEGATIVE


def test_add_registers():
    cpu = make_cpu(0x1401)  # ADD R2, R0, R1
    cpu.registers.write(0, 3)
    cpu.registers.write(1, 4)
    cycle(cpu)
    assert cpu.registers.read(2) == 3 + 4


def test_and_with_zero_clears_and_sets_zero():
    cpu = make_cpu(0x5020)  # AND R0, R0, #0
    cpu.registers.write(0, 0x1234)
    cycle(cpu)
    assert cpu.registers.read(0) == 0
    assert cpu.registers.cc == CC_ZERO


def test_not():
    cpu = make_cpu(0x923F)  # NOT R1, R0
    cycle(cpu)
    assert cpu.registers.read(1) == 0xFFFF
    assert cpu.registers.negative


def test_ld():
    cpu = make_cpu(0x2001, 0, 0x1234)  # LD R0, #1
    cycle(cpu)
    assert cpu.registers.read(0) == 0x1234
    assert cpu.registers.positive


def test_ldi():
    cpu = make_cpu(0xA001, 0, 0x5000)  # LDI R0, #1
    cpu.memory.write(0x5000, 0x77)
    cycle(cpu)
    assert cpu.registers.read(0) == 0x77
    assert cpu.registers.mar == 0x5000


def test_ldr():
    cpu = make_cpu(0x6042)  # LDR R0, R1, #2
    cpu.registers.write(1, 0x4000)
    cpu.memory.write(0x4002, 7)
    cycle(cpu)
    assert cpu.registers.read(0) == 7


def test_st():
    cpu = make_cpu(0x3602)  # ST R3, #2
    cpu.registers.write(3, 0x42)
    cycle(cpu)
    target = START + 1 + 2
    assert cpu.memory.read(target) == 0x42
    assert cpu.last_written == target


def test_str_negative_offset():
    cpu = make_cpu(0x707F)  # STR R0, R1, #-1
    cpu.registers.write(0, 9)
    cpu.registers.write(1, 0x4000)
    cycle(cpu)
    assert cpu.memory.read(0x4000 - 1) == 9
    assert cpu.last_written == 0x4000 - 1


def test_sti():
    cpu = make_cpu(0xB001, 0, 0x5000)  # STI R0, #1
    cpu.registers.write(0, 0x55)
    cycle(cpu)
    assert cpu.memory.read(0x5000) == 0x55
    assert cpu.last_written == 0x5000


def test_lea():
    cpu = make_cpu(0xE005)  # LEA R0, #5
    cycle(cpu)
    assert cpu.registers.read(0) == START + 1 + 5


def test_branch_taken():
    cpu = make_cpu(0x0403)  # BRz #3
    cpu.registers.set_condition(0)
    cycle(cpu)
    assert cpu.registers.pc == START + 1 + 3


def test_branch_not_taken():
    cpu = make_cpu(0x0803)  # BRn #3
    cpu.registers.set_condition(1)
    cycle(cpu)
    assert cpu.registers.pc == START + 1


def test_jsr():
    cpu = make_cpu(0x4804)  # JSR #4
    cycle(cpu)
    assert cpu.registers.read(7) == START + 1
    assert cpu.registers.pc == START + 1 + 4


def test_jsrr():
    cpu = make_cpu(0x40C0)  # JSRR R3
    cpu.registers.write(3, 0x6000)
    cycle(cpu)
    assert cpu.registers.pc == 0x6000
    assert cpu.registers.read(7) == START + 1


def test_jmp():
    cpu = make_cpu(0xC080)  # JMP R2
    cpu.registers.write(2, 0x4000)
    cycle(cpu)
    assert cpu.registers.pc == 0x4000


def test_ret():
    cpu = make_cpu(0xC1C0)  # RET
    cpu.registers.write(7, 0x3100)
    cycle(cpu)
    assert cpu.registers.pc == 0x3100


def test_unsupported_trap_changes_only_fetch_state():
    cpu = make_cpu(0xF020)
    cpu.registers.write(0, 11)
    cycle(cpu)
    assert cpu.registers.general == (11, 0, 0, 0, 0, 0, 0, 0)
    assert cpu.registers.pc == START + 1
    assert cpu.last_written is None


@pytest.mark.parametrize("count", [1, 3])
def test_sequence_of_adds(count):
    cpu = make_cpu(*([0x1265] * count))  # ADD R1, R1, #5
    for _ in range(count):
        cycle(cpu)
    assert cpu.registers.read(1) == 5 * count
    assert cpu.registers.pc == START + count