"""Memory model for the CHIP-8 virtual machine."""

from typing import Iterable
from .errors import MemoryAccessError, ProgramTooLarge

RAM_SIZE = 4096
PROGRAM_START = 0x200

FONT_GLYPH_SIZE = 5
FONTSET = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])


class Memory:
    """Byte-addressable RAM with the hex font preloaded at address 0."""

    def __init__(self, size: int = RAM_SIZE):
        self.size = size
        self._data = bytearray(size)
        self._data[:len(FONTSET)] = FONTSET

    def _check_bounds(self, addr: int, length: int = 1) -> None:
        """Check if [addr, addr + length) is within valid range."""
        if addr < 0 or addr + length > self.size:
            raise MemoryAccessError(f"Memory address out of range: {addr:#05x}")

    def read(self, addr: int) -> int:
        """Read byte from memory address."""
        self._check_bounds(addr)
        return self._data[addr]

    def write(self, addr: int, value: int) -> None:
        """Write byte to memory address, truncated to 8 bits."""
        self._check_bounds(addr)
        self._data[addr] = value & 0xFF

    def read_word(self, addr: int) -> int:
        """Read big-endian 16-bit word at addr, addr + 1."""
        self._check_bounds(addr, 2)
        return (self._data[addr] << 8) | self._data[addr + 1]

    def read_block(self, addr: int, length: int) -> bytes:
        self._check_bounds(addr, length)
        return bytes(self._data[addr:addr + length])

    def write_block(self, addr: int, values: Iterable[int]) -> None:
        data = bytes(v & 0xFF for v in values)
        self._check_bounds(addr, len(data))
        self._data[addr:addr + len(data)] = data

    def load(self, program: bytes, offset: int = PROGRAM_START) -> None:
        """Copy a program image into memory starting at offset."""
        capacity = self.size - offset
        if len(program) > capacity:
            raise ProgramTooLarge(
                f"Program is {len(program)} bytes, only {capacity} bytes available",
                addr=offset,
            )
        self._data[offset:offset + len(program)] = program

    def snapshot(self) -> bytes:
        """Return a copy of the entire memory."""
        return bytes(self._data)
