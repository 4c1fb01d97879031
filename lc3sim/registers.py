"""Register file: general-purpose registers plus PC, IR, CC, MAR and MDR."""

from __future__ import annotations

WORD_MASK = 0xFFFF
REGISTER_COUNT = 8

CC_NEGATIVE = 0x4
CC_ZERO = 0x2
CC_POSITIVE = 0x1


class Registers:
    """The machine's registers, each holding a 16-bit word.

    ``pc``, ``ir``, ``cc``, ``mar`` and ``mdr`` are plain attributes that keep
    only the low 16 bits of what is assigned.  R0-R7 are reached through
    :meth:`read` and :meth:`write`.
    """

    _WORD_ATTRIBUTES = frozenset({"pc", "ir", "cc", "mar", "mdr"})

    def __init__(self) -> None:
        self.pc = 0
        self.ir = 0
        self.cc = 0
        self.mar = 0
        self.mdr = 0
        self._general = [0] * REGISTER_COUNT

    def __setattr__(self, name: str, value: object) -> None:
        if name in self._WORD_ATTRIBUTES:
            value = int(value) & WORD_MASK  # type: ignore[arg-type]
        super().__setattr__(name, value)

    def read(self, index: int) -> int:
        """Return R``index``; an index outside 0-7 reads as 0."""
        if 0 <= index < REGISTER_COUNT:
            return self._general[index]
        return 0

    def write(self, index: int, value: int) -> None:
        """Set R``index``; an index outside 0-7 is ignored."""
        if 0 <= index < REGISTER_COUNT:
            self._general[index] = value & WORD_MASK

    @property
    def general(self) -> tuple[int, ...]:
        """R0-R7 as a tuple."""
        return tuple(self._general)

    def set_condition(self, value: int) -> None:
        """Set the condition codes from a result word."""
        value &= WORD_MASK
        if value == 0:
            self.cc = CC_ZERO
        elif value & 0x8000:
            self.cc = CC_NEGATIVE
        else:
            self.cc = CC_POSITIVE

    @property
    def negative(self) -> bool:
        return bool(self.cc & CC_NEGATIVE)

    @property
    def zero(self) -> bool:
        return bool(self.cc & CC_ZERO)

    @property
    def positive(self) -> bool:
        return bool(self.cc & CC_POSITIVE)