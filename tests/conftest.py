import random

import pytest

from chip8 import Chip8CPU, Mode


def _assemble(words):
    out = bytearray()
    for w in words:
        out += bytes([(w >> 8) & 0xFF, w & 0xFF])
    return bytes(out)


@pytest.fixture
def asm():
    """Big-endian bytes for a list of 16-bit instruction words."""
    return _assemble


@pytest.fixture
def make_cpu():
    def _make(words=(), mode=Mode.CHIP8, data=b"", seed=1234):
        cpu = Chip8CPU(mode, rng=random.Random(seed))
        cpu.load_program(_assemble(words) + data)
        return cpu
    return _make
