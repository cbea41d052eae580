"""The CHIP-8 machine: state aggregate plus the fetch-decode-execute cycle."""

import logging
import random
from typing import Optional
from .cpu import CPU
from .display import Display
from .keypad import Keypad
from .memory import Memory, PROGRAM_START
from .instructions import Devices, Instruction, decode, execute_instruction
from .errors import Chip8Error

log = logging.getLogger(__name__)


class Chip8:
    """One independent virtual machine.

    The driver calls ``step()`` many times per frame, ``tick_timers()`` once
    per frame, and reads ``get_display()`` for presentation.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        legacy_skip_not_equal: bool = False,
    ):
        self._rng = rng if rng is not None else random.Random()
        self._legacy_skip_not_equal = legacy_skip_not_equal
        self.reset()

    def reset(self) -> None:
        """Discard all state and return to the power-on state."""
        self.cpu = CPU(start_address=PROGRAM_START)
        self.memory = Memory()
        self.io = Devices(
            display=Display(),
            keypad=Keypad(),
            rng=self._rng,
            legacy_skip_not_equal=self._legacy_skip_not_equal,
        )
        self.steps = 0
        self.last_instruction: Optional[Instruction] = None
        log.debug("Machine reset, PC=%#05x", self.cpu.pc)

    @property
    def display(self) -> Display:
        return self.io.display

    @property
    def keypad(self) -> Keypad:
        return self.io.keypad

    @property
    def sound_active(self) -> bool:
        """True while the sound timer is running and a tone should play."""
        return self.cpu.sound_timer > 0

    def load(self, program: bytes) -> None:
        """Copy a program image into memory at the program offset."""
        self.memory.load(program, PROGRAM_START)
        log.info("Loaded %d byte program at %#05x", len(program), PROGRAM_START)

    def fetch(self) -> int:
        """Read the big-endian word at PC and advance PC by 2."""
        word = self.memory.read_word(self.cpu.pc)
        self.cpu.pc += 2
        return word

    def step(self) -> Instruction:
        """Run one instruction cycle and return the decoded instruction."""
        addr = self.cpu.pc
        word: Optional[int] = None
        try:
            word = self.fetch()
            instr = decode(word)
            log.debug("pc=%#05x opcode=%04X", addr, word)
            new_pc = execute_instruction(instr, self.cpu, self.memory, self.io)
            if new_pc is not None:
                self.cpu.pc = new_pc
        except Chip8Error as e:
            # Attach context to error
            e.step = self.steps + 1
            e.addr = addr
            if word is not None:
                e.opcode = word
            raise
        self.steps += 1
        self.last_instruction = instr
        return instr

    def tick_timers(self) -> None:
        """Decrement delay and sound timers once; call at the frame cadence."""
        self.cpu.tick_timers()

    def keypress(self, key: int, pressed: bool) -> None:
        self.io.keypad.set(key, pressed)

    def get_display(self) -> tuple[bool, ...]:
        """Row-major 64x32 framebuffer copy."""
        return self.io.display.pixels()

    def get_state(self) -> dict:
        state = self.cpu.get_state()
        state["steps"] = self.steps
        state["keys"] = self.io.keypad.pressed_keys()
        return state
