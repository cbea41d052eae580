"""CPU state model for the CHIP-8 virtual machine."""

from .errors import StackOverflow, StackUnderflow
from .memory import PROGRAM_START

NUM_REGS = 16
STACK_SIZE = 16
FLAG_REG = 0xF


class CPU:
    """Registers, call stack and timers."""

    def __init__(self, start_address: int = PROGRAM_START):
        self.v: list[int] = [0] * NUM_REGS
        self.i: int = 0
        self.pc: int = start_address
        self.sp: int = 0
        self.stack: list[int] = [0] * STACK_SIZE
        self.delay_timer: int = 0
        self.sound_timer: int = 0

    def set_v(self, reg: int, value: int) -> None:
        """Set register with 8-bit wraparound."""
        self.v[reg] = value & 0xFF

    def set_flag(self, value: bool) -> None:
        self.v[FLAG_REG] = 1 if value else 0

    def set_i(self, value: int) -> None:
        """Set index register with 16-bit wraparound."""
        self.i = value & 0xFFFF

    def push(self, addr: int) -> None:
        """Push a return address."""
        if self.sp >= STACK_SIZE:
            raise StackOverflow(f"Stack overflow: depth {STACK_SIZE} exceeded")
        self.stack[self.sp] = addr
        self.sp += 1

    def pop(self) -> int:
        """Pop the most recent return address."""
        if self.sp == 0:
            raise StackUnderflow("Return with empty stack")
        self.sp -= 1
        return self.stack[self.sp]

    def tick_timers(self) -> None:
        """Decrement both timers once, saturating at zero."""
        if self.delay_timer > 0:
            self.delay_timer -= 1
        if self.sound_timer > 0:
            self.sound_timer -= 1

    def get_state(self) -> dict:
        """Get current register state as dictionary."""
        return {
            "v": list(self.v),
            "i": self.i,
            "pc": self.pc,
            "sp": self.sp,
            "stack": self.stack[:self.sp],
            "delay_timer": self.delay_timer,
            "sound_timer": self.sound_timer,
        }

    def reset(self, start_address: int = PROGRAM_START) -> None:
        """Reset CPU to initial state."""
        self.v = [0] * NUM_REGS
        self.i = 0
        self.pc = start_address
        self.sp = 0
        self.stack = [0] * STACK_SIZE
        self.delay_timer = 0
        self.sound_timer = 0
