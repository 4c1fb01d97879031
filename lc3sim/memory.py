"""Word-addressed main memory for the simulated machine."""

from __future__ import annotations

MEMORY_SIZE = 0xFFFF
WORD_MASK = 0xFFFF


class Memory:
    """A fixed number of 16-bit cells, all zero at start.

    Reads outside the memory return 0 and writes outside it are ignored.
    """

    def __init__(self, size: int = MEMORY_SIZE) -> None:
        if size < 0:
            raise ValueError(f"memory size must not be negative: {size}")
        self._cells = [0] * size

    def read(self, address: int) -> int:
        """Return the word at ``address``, or 0 if the address is out of range."""
        if 0 <= address < len(self._cells):
            return self._cells[address]
        return 0

    def write(self, address: int, value: int) -> None:
        """Store the low 16 bits of ``value`` at ``address`` if it is in range."""
        if 0 <= address < len(self._cells):
            self._cells[address] = value & WORD_MASK

    def __len__(self) -> int:
        return len(self._cells)