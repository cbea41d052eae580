"""Custom exceptions for the CHIP-8 virtual machine."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ErrorInfo:
    """Structured error information for API responses."""
    type: str
    message: str
    step: int
    addr: int
    opcode: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "message": self.message,
            "step": self.step,
            "addr": self.addr,
            "opcode": None if self.opcode is None else f"{self.opcode:04X}",
        }


class Chip8Error(Exception):
    """Base exception for all CHIP-8 errors."""

    def __init__(
        self,
        message: str,
        step: int = 0,
        addr: int = 0,
        opcode: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.step = step
        self.addr = addr
        self.opcode = opcode

    def to_error_info(self) -> ErrorInfo:
        return ErrorInfo(
            type=self.__class__.__name__,
            message=self.message,
            step=self.step,
            addr=self.addr,
            opcode=self.opcode,
        )


class Chip8RuntimeError(Chip8Error):
    """Error during program execution."""
    pass


class InvalidInstruction(Chip8RuntimeError):
    """Opcode pattern with no defined semantics."""
    pass


class StackOverflow(Chip8RuntimeError):
    """CALL executed with a full stack."""
    pass


class StackUnderflow(Chip8RuntimeError):
    """RET executed with an empty stack."""
    pass


class MemoryAccessError(Chip8RuntimeError):
    """Memory address out of bounds."""
    pass


class ProgramTooLarge(MemoryAccessError):
    """Program image does not fit between the load offset and end of RAM."""
    pass


class InvalidKey(Chip8RuntimeError):
    """Key index outside the 16-key keypad."""
    pass


class StepLimitExceeded(Chip8RuntimeError):
    """Maximum step count exceeded."""
    pass
