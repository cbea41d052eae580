"""Tests for the headless runner."""

from chip8 import run_program, RunOptions

HALT = bytes([0x12, 0x00])


def program(*ops: int) -> bytes:
    return b"".join(op.to_bytes(2, "big") for op in ops)


class TestRunner:
    """Frame loop, tracing and error reporting."""

    def test_default_options(self):
        result = run_program(HALT)
        assert result.status == "ok"
        assert result.frames_executed == 60
        assert result.steps_executed == 600
        assert result.error is None

    def test_frames_and_ticks(self):
        result = run_program(HALT, options=RunOptions(frames=3, ticks_per_frame=7))
        assert result.frames_executed == 3
        assert result.steps_executed == 21

    def test_zero_frames(self):
        result = run_program(program(0x6001), options=RunOptions(frames=0))
        assert result.status == "ok"
        assert result.steps_executed == 0
        assert result.final_state["v"][0] == 0

    def test_timer_ticks_once_per_frame(self):
        code = program(0x6010, 0xF015, 0x1204)
        result = run_program(code, options=RunOptions(frames=4, ticks_per_frame=10))
        assert result.final_state["delay_timer"] == 0x10 - 4

    def test_sound_active_reported(self):
        code = program(0x6010, 0xF018, 0x1204)
        result = run_program(code, options=RunOptions(frames=1))
        assert result.sound_active is True

    def test_trace_rows(self):
        code = program(0x6A42, 0xA123, 0x1204)
        result = run_program(code, options=RunOptions(frames=1, ticks_per_frame=2))
        assert result.trace == [
            {"step": 1, "frame": 0, "addr": 0x200, "opcode": "6A42", "pc": 0x202, "i": 0},
            {"step": 2, "frame": 0, "addr": 0x202, "opcode": "A123", "pc": 0x204, "i": 0x123},
        ]

    def test_trace_include_registers(self):
        code = program(0x6A42)
        opts = RunOptions(frames=1, ticks_per_frame=1, trace_include_registers=True)
        result = run_program(code, options=opts)
        assert result.trace[0]["v"][0xA] == 0x42

    def test_trace_limit(self):
        result = run_program(HALT, options=RunOptions(frames=5, trace_limit=12))
        assert len(result.trace) == 12

    def test_trace_disabled(self):
        result = run_program(HALT, options=RunOptions(trace=False))
        assert result.trace == []

    def test_invalid_instruction_reported(self):
        code = program(0x6001, 0xFFFF)
        result = run_program(code)
        assert result.status == "error"
        assert result.error.type == "InvalidInstruction"
        assert result.error.step == 2
        assert result.error.addr == 0x202
        assert result.error.opcode == 0xFFFF
        assert result.steps_executed == 1
        assert result.final_state["v"][0] == 1

    def test_stack_underflow_reported(self):
        result = run_program(program(0x00EE))
        assert result.status == "error"
        assert result.error.type == "StackUnderflow"

    def test_stack_overflow_reported(self):
        result = run_program(program(0x2200))
        assert result.status == "error"
        assert result.error.type == "StackOverflow"
        assert result.final_state["sp"] == 16

    def test_program_too_large_reported(self):
        result = run_program(bytes(4096))
        assert result.status == "error"
        assert result.error.type == "ProgramTooLarge"
        assert result.steps_executed == 0

    def test_invalid_key_reported(self):
        result = run_program(HALT, options=RunOptions(keys=[16]))
        assert result.status == "error"
        assert result.error.type == "InvalidKey"

    def test_step_limit(self):
        result = run_program(HALT, options=RunOptions(frames=10, max_steps=25))
        assert result.status == "error"
        assert result.error.type == "StepLimitExceeded"
        assert result.steps_executed == 25
        assert result.frames_executed == 2

    def test_display_in_result(self):
        code = program(0xA000, 0xD005, 0x1204)
        result = run_program(code, options=RunOptions(frames=1))
        assert len(result.display) == 32
        assert result.display[0].startswith("####.")

    def test_to_dict(self):
        result = run_program(program(0xF000))
        data = result.to_dict()
        assert data["status"] == "error"
        assert data["error"]["type"] == "InvalidInstruction"
        assert data["error"]["opcode"] == "F000"
        assert "display" in data

    def test_seed_makes_random_reproducible(self):
        code = program(0xC0FF, 0xC1FF, 0x1204)
        opts = RunOptions(frames=1, seed=99)
        first = run_program(code, options=opts)
        second = run_program(code, options=RunOptions(frames=1, seed=99))
        assert first.final_state["v"][:2] == second.final_state["v"][:2]

    def test_legacy_skip_not_equal(self):
        code = program(0x4000, 0x6101, 0x1206, 0x1206)
        fixed = run_program(code, options=RunOptions(frames=1))
        legacy = run_program(code, options=RunOptions(frames=1, legacy_skip_not_equal=True))
        assert fixed.final_state["v"][1] == 1
        assert legacy.final_state["v"][1] == 0
