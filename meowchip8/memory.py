"""Flat 4KB memory with bounds checking."""

from typing import Iterable

from .constants import FONT_ADDRESS, FONTSET, MEMORY_SIZE, PROGRAM_START
from .errors import MemoryFault


class Memory:
    """4096 bytes of byte-addressable RAM.

    Layout:
        0x000-0x1FF  Interpreter area (font set lives at 0x050)
        0x200-0xFFF  Program ROM and work RAM

    Programs may read anywhere but only write at or above 0x200. The
    interpreter itself fills the reserved area through load().
    """

    def __init__(self):
        self._mem = bytearray(MEMORY_SIZE)
        self.load_fontset()

    def __len__(self) -> int:
        return MEMORY_SIZE

    def __getitem__(self, addr):
        return self._mem[addr]

    def load_fontset(self):
        """Load built-in font sprites to memory"""
        self.load(FONT_ADDRESS, FONTSET)

    def clear(self):
        self._mem[:] = bytes(MEMORY_SIZE)
        self.load_fontset()

    def load(self, addr: int, data: bytes):
        """Copy raw data into memory, ignoring the write protection."""
        self.check_range(addr, len(data))
        self._mem[addr:addr + len(data)] = data

    def check_range(self, addr: int, length: int, writable: bool = False):
        """Raise MemoryFault unless [addr, addr+length) is accessible."""
        if addr < 0 or addr >= MEMORY_SIZE:
            raise MemoryFault(addr)
        end = addr + length - 1
        if length > 0 and end >= MEMORY_SIZE:
            raise MemoryFault(end)
        if writable and length > 0 and addr < PROGRAM_START:
            raise MemoryFault(addr, "is in the reserved interpreter area")

    def read(self, addr: int) -> int:
        self.check_range(addr, 1)
        return self._mem[addr]

    def read_word(self, addr: int) -> int:
        """Read a big-endian 16-bit word"""
        self.check_range(addr, 2)
        return (self._mem[addr] << 8) | self._mem[addr + 1]

    def read_block(self, addr: int, length: int) -> bytes:
        self.check_range(addr, length)
        return bytes(self._mem[addr:addr + length])

    def write(self, addr: int, value: int):
        self.check_range(addr, 1, writable=True)
        self._mem[addr] = value & 0xFF

    def write_block(self, addr: int, values: Iterable[int]):
        data = bytes(v & 0xFF for v in values)
        self.check_range(addr, len(data), writable=True)
        self._mem[addr:addr + len(data)] = data

    def dump(self) -> bytes:
        return bytes(self._mem)
