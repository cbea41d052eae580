"""CHIP-8 Virtual Machine Core Package."""

from .machine import Chip8
from .runner import run_program, RunOptions, RunResult
from .errors import (
    Chip8Error,
    Chip8RuntimeError,
    InvalidInstruction,
    StackOverflow,
    StackUnderflow,
    MemoryAccessError,
    InvalidKey,
)

__all__ = [
    "Chip8",
    "run_program",
    "RunOptions",
    "RunResult",
    "Chip8Error",
    "Chip8RuntimeError",
    "InvalidInstruction",
    "StackOverflow",
    "StackUnderflow",
    "MemoryAccessError",
    "InvalidKey",
]
