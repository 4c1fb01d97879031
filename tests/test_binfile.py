import pytest

from lc3sim.binfile import load_image, write_image
from lc3sim.memory import Memory


def test_write_image_is_big_endian(tmp_path):
    memory = Memory()
    memory.write(0x3000, 0x1234)
    memory.write(0x3001, 0xF025)
    path = tmp_path / "MEMORY.bin"
    count = write_image(path, memory, 0x3000, 0x3001)
    assert count == 2
    assert path.read_bytes() == b"\x12\x34\xf0\x25"


def test_round_trip(tmp_path):
    source = Memory()
    words = [0x1265, 0x5020, 0xF025, 0x0000, 0xFFFF]
    for offset, word in enumerate(words):
        source.write(0x3000 + offset, word)
    path = tmp_path / "image.bin"
    write_image(path, source, 0x3000, 0x3000 + len(words) - 1)

    target = Memory()
    assert load_image(path, target, 0x3000) == len(words)
    assert [target.read(0x3000 + i) for i in range(len(words))] == words


def test_load_at_other_start(tmp_path):
    path = tmp_path / "image.bin"
    path.write_bytes(b"\xab\xcd")
    memory = Memory()
    load_image(path, memory, 0x4000)
    assert memory.read(0x4000) == 0xABCD
    assert memory.read(0x3000) == 0


def test_end_before_start_writes_empty_file(tmp_path):
    path = tmp_path / "image.bin"
    assert write_image(path, Memory(), 0x3001, 0x3000) == 0
    assert path.read_bytes() == b""


def test_trailing_odd_byte_ignored(tmp_path):
    path = tmp_path / "image.bin"
    path.write_bytes(b"\x00\x01\x02")
    memory = Memory()
    assert load_image(path, memory, 0x3000) == 1
    assert memory.read(0x3000) == 1
    assert memory.read(0x3001) == 0


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_image(tmp_path / "absent.bin", Memory(), 0x3000)