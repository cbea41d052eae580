"""Headless program runner with tracing for the CHIP-8 virtual machine."""

import logging
import random
from dataclasses import dataclass, field
from typing import Optional
from .machine import Chip8
from .errors import (
    Chip8Error,
    StepLimitExceeded,
    ErrorInfo,
)

log = logging.getLogger(__name__)


@dataclass
class RunOptions:
    """Options for program execution."""
    frames: int = 60
    ticks_per_frame: int = 10
    max_steps: int = 100000
    keys: list[int] = field(default_factory=list)
    seed: Optional[int] = None
    legacy_skip_not_equal: bool = False
    trace: bool = True
    trace_limit: int = 1000
    trace_include_registers: bool = False


@dataclass
class TraceRow:
    """Single row of execution trace."""
    step: int
    frame: int
    addr: int
    opcode: int
    pc: int
    i: int
    v: Optional[list[int]] = None

    def to_dict(self, include_registers: bool) -> dict:
        result = {
            "step": self.step,
            "frame": self.frame,
            "addr": self.addr,
            "opcode": f"{self.opcode:04X}",
            "pc": self.pc,
            "i": self.i,
        }
        if include_registers:
            result["v"] = self.v
        return result


@dataclass
class RunResult:
    """Result of program execution."""
    status: str  # "ok" | "error"
    frames_executed: int
    steps_executed: int
    final_state: dict
    display: list[str]
    sound_active: bool
    trace: list[dict]
    error: Optional[ErrorInfo] = None

    def to_dict(self) -> dict:
        result = {
            "status": self.status,
            "frames_executed": self.frames_executed,
            "steps_executed": self.steps_executed,
            "final_state": self.final_state,
            "display": self.display,
            "sound_active": self.sound_active,
            "trace": self.trace,
        }
        if self.error:
            result["error"] = self.error.to_dict()
        return result


def run_program(
    program: bytes,
    options: Optional[RunOptions] = None,
) -> RunResult:
    """Run a CHIP-8 program image for a fixed number of frames.

    Each frame executes ``ticks_per_frame`` instructions followed by one
    timer tick, the same cadence an interactive front end would use.

    Args:
        program: Program image, loaded at 0x200
        options: Execution options

    Returns:
        RunResult with execution status, final state, display and trace
    """
    if options is None:
        options = RunOptions()

    rng = random.Random(options.seed)
    machine = Chip8(rng=rng, legacy_skip_not_equal=options.legacy_skip_not_equal)

    trace_rows: list[dict] = []
    error_info: Optional[ErrorInfo] = None
    frames_executed = 0

    log.info("Running %d byte program for %d frames", len(program), options.frames)

    try:
        machine.load(program)
        for key in options.keys:
            machine.keypress(key, True)

        while frames_executed < options.frames:
            for _ in range(options.ticks_per_frame):
                if machine.steps >= options.max_steps:
                    raise StepLimitExceeded(
                        f"Step limit exceeded: {options.max_steps}",
                        step=machine.steps,
                        addr=machine.cpu.pc,
                    )

                instr_addr = machine.cpu.pc
                instr = machine.step()

                # Record trace
                if options.trace and len(trace_rows) < options.trace_limit:
                    row = TraceRow(
                        step=machine.steps,
                        frame=frames_executed,
                        addr=instr_addr,
                        opcode=instr.word,
                        pc=machine.cpu.pc,
                        i=machine.cpu.i,
                        v=list(machine.cpu.v) if options.trace_include_registers else None,
                    )
                    trace_rows.append(row.to_dict(options.trace_include_registers))

            machine.tick_timers()
            frames_executed += 1

    except Chip8Error as e:
        error_info = e.to_error_info()
        log.warning("Run stopped: %s: %s", error_info.type, error_info.message)

    log.info("Run finished after %d frames, %d steps", frames_executed, machine.steps)

    return RunResult(
        status="ok" if error_info is None else "error",
        frames_executed=frames_executed,
        steps_executed=machine.steps,
        final_state=machine.get_state(),
        display=machine.display.render_text(),
        sound_active=machine.sound_active,
        trace=trace_rows,
        error=error_info,
    )
