"""Reading and writing memory images as big-endian 16-bit words."""

from __future__ import annotations

import os
import struct
from pathlib import Path

from lc3sim.memory import Memory

_WORD = struct.Struct(">H")
_ADDRESS_MASK = 0xFFFF


def write_image(
    path: str | os.PathLike[str], memory: Memory, start: int, end: int
) -> int:
    """Write the words at ``start``..``end`` (inclusive) to ``path``.

    Returns the number of words written.  An ``end`` before ``start`` gives
    an empty file.
    """
    words = [memory.read(address & _ADDRESS_MASK) for address in range(start, end + 1)]
    Path(path).write_bytes(b"".join(_WORD.pack(word) for word in words))
    return len(words)


def load_image(path: str | os.PathLike[str], memory: Memory, start: int) -> int:
    """Load the words of the image at ``path`` into memory from ``start`` on.

    A trailing odd byte is ignored.  Returns the number of words loaded.
    """
    data = Path(path).read_bytes()
    usable = len(data) - len(data) % _WORD.size
    count = 0
    for offset, (word,) in enumerate(_WORD.iter_unpack(data[:usable])):
        memory.write((start + offset) & _ADDRESS_MASK, word)
        count += 1
    return count