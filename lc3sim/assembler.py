"""Two-pass assembler that turns source text into 16-bit machine words."""

from __future__ import annotations

import os
import re
import warnings
from collections.abc import Mapping, Sequence
from pathlib import Path

from lc3sim.binfile import write_image
from lc3sim.cpu import HALT_WORD
from lc3sim.memory import Memory

START_ADDRESS = 0x3000
WORD_MASK = 0xFFFF
DEFAULT_IMAGE = "MEMORY.bin"

_RET_BITS = "1100000111000000"
_PC_RELATIVE_OPCODES = {
    "LD": "0010",
    "LDI": "1010",
    "LEA": "1110",
    "ST": "0011",
    "STI": "1011",
}
_BASE_OFFSET_OPCODES = {"LDR": "0110", "STR": "0111"}

_DECIMAL = re.compile(r"\s*(?P<sign>[+-]?)(?P<digits>[0-9]+)\s*")
_HEXADECIMAL = re.compile(r"\s*(?P<sign>[+-]?)(?:0[xX])?(?P<digits>[0-9a-fA-F]+)\s*")
_BINARY_WORD = re.compile(r"[01]+")


class AssemblyError(Exception):
    """Raised when a source file cannot be assembled at all."""


def _warn(message: str) -> None:
    warnings.warn(message, UserWarning, stacklevel=3)


def _parse_int(text: str, base: int = 10, *, unsigned: bool = False) -> int | None:
    """Parse a 32-bit integer the way the assembler's number fields expect.

    Returns ``None`` when the text is not a number in range.
    """
    pattern = _HEXADECIMAL if base == 16 else _DECIMAL
    match = pattern.fullmatch(text)
    if match is None:
        return None
    sign = match.group("sign")
    if unsigned and sign == "-":
        return None
    value = int(match.group("digits"), base)
    if sign == "-":
        value = -value
    low, high = (0, 0xFFFFFFFF) if unsigned else (-(2**31), 2**31 - 1)
    return value if low <= value <= high else None


def _parse_binary_word(text: str) -> int | None:
    if not _BINARY_WORD.fullmatch(text):
        return None
    value = int(text, 2)
    if value > 0xFFFFFFFF:
        return None
    return value & WORD_MASK


def _register_number(token: str) -> int:
    value = _parse_int(token[1:])
    return 0 if value is None else value


def _is_register(token: str) -> bool:
    return len(token) >= 2 and token[0] == "R" and token[1] in "01234567"


def to_binary(value: int, bits: int) -> str:
    """Return ``value`` as a two's-complement bit string ``bits`` wide.

    Only the low 16 bits carry information; wider fields are padded with the
    sign.
    """
    if bits < 0:
        raise ValueError(f"bit width must not be negative: {bits}")
    negative = value < 0
    if negative:
        value += 1 << bits
    digits = format(value & WORD_MASK, "016b")
    if bits <= 16:
        return digits[len(digits) - bits:] if bits else ""
    return digits.rjust(bits, "1" if negative else "0")


def read_source(path: str | os.PathLike[str]) -> list[str]:
    """Return the lines of the source file at ``path``, each stripped."""
    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise AssemblyError(f"cannot open file for reading: {path}: {exc}") from exc
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line.strip() for line in lines]


def _is_skipped(line: str) -> bool:
    return not line or line.startswith(";")


def first_pass(lines: Sequence[str]) -> dict[str, int]:
    """Map every label to the address of the word it marks."""
    labels: dict[str, int] = {}
    address = START_ADDRESS
    for line in lines:
        if _is_skipped(line):
            continue
        tokens = line.split()
        if not tokens:
            continue
        head = tokens[0]
        if head == "ORG":
            text = tokens[1] if len(tokens) > 1 else ""
            new_address = _parse_int(text, 16)
            if new_address is None:
                _warn(f"Error converting address: {text}")
            else:
                address = new_address & WORD_MASK
            continue
        if head.endswith(","):
            labels[head[:-1]] = address
            if len(tokens) > 1:
                address = (address + 1) & WORD_MASK
        elif head == "END":
            break
        else:
            address = (address + 1) & WORD_MASK
    return labels


def assemble_instruction(
    instruction: str, labels: Mapping[str, int], current_address: int
) -> str:
    """Return the bit string for one instruction, or "" if it yields none.

    A pseudo-op listing several bytes gives one 16-bit line per byte.
    """
    tokens = [token.replace(",", "").strip() for token in instruction.split()]
    if not tokens:
        return ""
    opcode = tokens[0]

    def register(position: int) -> str:
        return to_binary(_register_number(tokens[position]), 3)

    def pc_offset(position: int, bits: int) -> str:
        return to_binary(labels.get(tokens[position], 0) - current_address - 1, bits)

    def immediate(position: int, bits: int) -> str:
        return to_binary(_parse_int(tokens[position][1:]) or 0, bits)

    try:
        if opcode in ("ADD", "AND"):
            prefix = "0001" if opcode == "ADD" else "0101"
            head = prefix + register(1) + register(2)
            if tokens[3].startswith("R"):
                return head + "000" + register(3)
            return head + "1" + immediate(3, 5)
        if opcode.startswith("BR"):
            flags = "".join("1" if flag in opcode else "0" for flag in "nzp")
            return "0000" + flags + pc_offset(1, 9)
        if opcode == "JMP":
            return "1100000" + register(1) + "000000"
        if opcode == "JSR":
            return "01001" + pc_offset(1, 11)
        if opcode == "JSRR":
            return "0100000" + register(1) + "000000"
        if opcode in _PC_RELATIVE_OPCODES:
            return _PC_RELATIVE_OPCODES[opcode] + register(1) + pc_offset(2, 9)
        if opcode in _BASE_OFFSET_OPCODES:
            return (
                _BASE_OFFSET_OPCODES[opcode]
                + register(1)
                + register(2)
                + immediate(3, 6)
            )
        if opcode == "NOT":
            return "1001" + register(1) + register(2) + "111111"
        if opcode == "RET":
            return _RET_BITS
        if opcode == "HALT":
            return to_binary(HALT_WORD, 16)
        if opcode == "BYTE":
            words = []
            for token in tokens[1:]:
                value = _parse_int(token, 16)
                if value is None:
                    _warn(f"Invalid .BYTE value: {token}")
                    continue
                words.append(to_binary(value & 0xFF, 8).rjust(16, "0"))
            return "\n".join(words)
        if opcode == "DEC":
            value = _parse_int(tokens[1])
            if value is None:
                _warn(f"Invalid .DEC value: {tokens[1]}")
                return ""
            return to_binary(value, 16)
        if opcode == "HEX":
            value = _parse_int(tokens[1], 16, unsigned=True)
            if value is None:
                _warn(f"Invalid .HEX value: {tokens[1]}")
                return ""
            return to_binary(value & WORD_MASK, 16)
    except IndexError as exc:
        raise AssemblyError(f"missing operand in: {instruction}") from exc
    return ""


def split_without_comments(line: str, separator: str) -> list[str]:
    """Split ``line`` on ``separator``, dropping everything from ';' on."""
    code = line.partition(";")[0]
    return [part.strip() for part in code.split(separator) if part]


def validate_instruction(tokens: Sequence[str], labels: Mapping[str, int]) -> bool:
    """Check an instruction's operand count, registers, ranges and labels."""
    if not tokens:
        return False
    opcode = tokens[0].strip()
    count = len(tokens)

    if opcode in ("ADD", "AND"):
        if count != 4 or not (_is_register(tokens[1]) and _is_register(tokens[2])):
            return False
        if tokens[3].startswith("R"):
            return _is_register(tokens[3])
        value = _parse_int(tokens[3][1:])
        return value is not None and -16 <= value <= 15
    if opcode.startswith("BR") or opcode == "JSR":
        return count == 2 and tokens[1] in labels
    if opcode in ("JMP", "JSRR"):
        return count == 2 and _is_register(tokens[1])
    if opcode in _PC_RELATIVE_OPCODES:
        return count == 3 and _is_register(tokens[1]) and tokens[2] in labels
    if opcode in _BASE_OFFSET_OPCODES:
        if count != 4 or not (_is_register(tokens[1]) and _is_register(tokens[2])):
            return False
        value = _parse_int(tokens[3])
        return value is not None and -32 <= value <= 31
    if opcode == "NOT":
        return count == 3 and _is_register(tokens[1]) and _is_register(tokens[2])
    if opcode in ("RET", "HALT", "END"):
        return count == 1
    if opcode in ("WORD", "BYTE"):
        return count == 2 and _parse_int(tokens[1], unsigned=True) is not None
    if opcode == "DEC":
        return count == 2 and _parse_int(tokens[1]) is not None
    if opcode == "HEX":
        return count == 2 and _parse_int(tokens[1], 16, unsigned=True) is not None
    return False


def second_pass(
    lines: Sequence[str], labels: Mapping[str, int], memory: Memory
) -> None:
    """Assemble every valid instruction into ``memory``; warn about the rest."""
    address = START_ADDRESS
    for line in lines:
        if _is_skipped(line):
            continue
        tokens = line.split()
        if not tokens:
            continue
        if len(tokens) > 1 and tokens[0] == "ORG":
            new_address = _parse_int(tokens[1], 16)
            if new_address is None:
                _warn(f"Error converting address: {tokens[1]}")
            else:
                address = new_address & WORD_MASK
            continue
        if tokens[0] == "END":
            break
        if tokens[0].endswith(","):
            if len(tokens) == 1:
                continue
            instruction = line[line.index(",") + 1:].strip()
        else:
            instruction = line

        if not validate_instruction(split_without_comments(instruction, " "), labels):
            _warn(f"Skipping invalid instruction: {line}")
            continue
        word = _parse_binary_word(assemble_instruction(instruction, labels, address))
        if word is None:
            _warn("Failed to convert binary instruction to machine code")
            continue
        memory.write(address, word)
        address = (address + 1) & WORD_MASK


def assemble_file(
    source_path: str | os.PathLike[str],
    image_path: str | os.PathLike[str] = DEFAULT_IMAGE,
) -> int:
    """Assemble ``source_path`` and write the image to ``image_path``.

    The image holds one word per source line, from the start address on.
    Returns the number of words written.
    """
    lines = read_source(source_path)
    if not lines:
        raise AssemblyError(f"nothing to assemble in {source_path}")
    labels = first_pass(lines)
    memory = Memory()
    second_pass(lines, labels, memory)
    end = (START_ADDRESS + len(lines) - 1) & WORD_MASK
    try:
        return write_image(image_path, memory, START_ADDRESS, end)
    except OSError as exc:
        raise AssemblyError(f"cannot open file for writing: {image_path}: {exc}") from exc