"""Instruction decode and execution for the CHIP-8 virtual machine."""

import random
from dataclasses import dataclass, field
from typing import Callable, Optional
from .cpu import CPU
from .display import Display
from .keypad import Keypad
from .memory import Memory, FONT_GLYPH_SIZE
from .errors import InvalidInstruction, InvalidKey


@dataclass(frozen=True)
class Instruction:
    """A 16-bit instruction word split into its nibble fields."""
    word: int
    op: int
    x: int
    y: int
    n: int

    @property
    def nn(self) -> int:
        return self.word & 0x00FF

    @property
    def nnn(self) -> int:
        return self.word & 0x0FFF

    @property
    def pattern(self) -> str:
        """Dispatch key, e.g. "8XY4" or "FX33"."""
        op = self.op
        if op == 0x0:
            return f"{self.word:04X}"
        if op in (0x1, 0x2, 0xA, 0xB):
            return f"{op:X}NNN"
        if op in (0x3, 0x4, 0x6, 0x7, 0xC):
            return f"{op:X}XNN"
        if op == 0xD:
            return "DXYN"
        if op in (0xE, 0xF):
            return f"{op:X}X{self.nn:02X}"
        return f"{op:X}XY{self.n:X}"

    def __str__(self) -> str:
        return f"{self.word:04X}"


def decode(word: int) -> Instruction:
    """Split an instruction word into op, x, y, n (most significant first)."""
    return Instruction(
        word=word,
        op=(word & 0xF000) >> 12,
        x=(word & 0x0F00) >> 8,
        y=(word & 0x00F0) >> 4,
        n=word & 0x000F,
    )


@dataclass
class Devices:
    """Everything an instruction touches besides CPU and memory."""
    display: Display = field(default_factory=Display)
    keypad: Keypad = field(default_factory=Keypad)
    rng: random.Random = field(default_factory=random.Random)
    legacy_skip_not_equal: bool = False

    def random_byte(self) -> int:
        return self.rng.getrandbits(8)


def _key_index(cpu: CPU, reg: int) -> int:
    key = cpu.v[reg]
    if key > 0xF:
        raise InvalidKey(f"V{reg:X} holds {key:#04x}, not a key index")
    return key


# Instruction executor type; returns the new PC, or None to keep the fetched one
InstructionExecutor = Callable[[Instruction, CPU, Memory, Devices], Optional[int]]


def execute_nop(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """0000: no operation"""
    return None


def execute_cls(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """00E0: clear display"""
    io.display.clear()
    return None


def execute_ret(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """00EE: PC := pop()"""
    return cpu.pop()


def execute_jp(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """1NNN: PC := NNN"""
    return instr.nnn


def execute_call(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """2NNN: push(PC), PC := NNN"""
    cpu.push(cpu.pc)
    return instr.nnn


def execute_se_byte(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """3XNN: skip if VX == NN"""
    if cpu.v[instr.x] == instr.nn:
        return cpu.pc + 2
    return None


def execute_sne_byte(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """4XNN: skip if VX != NN"""
    if io.legacy_skip_not_equal:
        # Legacy: skips on equality, same as 3XNN.
        skip = cpu.v[instr.x] == instr.nn
    else:
        skip = cpu.v[instr.x] != instr.nn
    if skip:
        return cpu.pc + 2
    return None


def execute_se_reg(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """5XY0: skip if VX == VY"""
    if cpu.v[instr.x] == cpu.v[instr.y]:
        return cpu.pc + 2
    return None


def execute_ld_byte(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """6XNN: VX := NN"""
    cpu.set_v(instr.x, instr.nn)
    return None


def execute_add_byte(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """7XNN: VX := VX + NN, VF untouched"""
    cpu.set_v(instr.x, cpu.v[instr.x] + instr.nn)
    return None


def execute_ld_reg(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """8XY0: VX := VY"""
    cpu.set_v(instr.x, cpu.v[instr.y])
    return None


def execute_or(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """8XY1: VX := VX OR VY"""
    cpu.set_v(instr.x, cpu.v[instr.x] | cpu.v[instr.y])
    return None


def execute_and(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """8XY2: VX := VX AND VY"""
    cpu.set_v(instr.x, cpu.v[instr.x] & cpu.v[instr.y])
    return None


def execute_xor(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """8XY3: VX := VX XOR VY"""
    cpu.set_v(instr.x, cpu.v[instr.x] ^ cpu.v[instr.y])
    return None


# The ALU ops below compute the result from the operands first, then write
# VX and finally VF, so VF wins when X is F.

def execute_add_reg(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """8XY4: VX := VX + VY, VF := carry"""
    total = cpu.v[instr.x] + cpu.v[instr.y]
    cpu.set_v(instr.x, total)
    cpu.set_flag(total > 0xFF)
    return None


def execute_sub(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """8XY5: VX := VX - VY, VF := not borrow"""
    vx, vy = cpu.v[instr.x], cpu.v[instr.y]
    cpu.set_v(instr.x, vx - vy)
    cpu.set_flag(vx >= vy)
    return None


def execute_shr(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """8XY6: VX := VX >> 1, VF := shifted-out bit"""
    vx = cpu.v[instr.x]
    cpu.set_v(instr.x, vx >> 1)
    cpu.set_flag(bool(vx & 0x01))
    return None


def execute_subn(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """8XY7: VX := VY - VX, VF := not borrow"""
    vx, vy = cpu.v[instr.x], cpu.v[instr.y]
    cpu.set_v(instr.x, vy - vx)
    cpu.set_flag(vy >= vx)
    return None


def execute_shl(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """8XYE: VX := VX << 1, VF := shifted-out bit"""
    vx = cpu.v[instr.x]
    cpu.set_v(instr.x, vx << 1)
    cpu.set_flag(bool(vx & 0x80))
    return None


def execute_sne_reg(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """9XY0: skip if VX != VY"""
    if cpu.v[instr.x] != cpu.v[instr.y]:
        return cpu.pc + 2
    return None


def execute_ld_i(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """ANNN: I := NNN"""
    cpu.set_i(instr.nnn)
    return None


def execute_jp_v0(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """BNNN: PC := V0 + NNN"""
    return cpu.v[0] + instr.nnn


def execute_rnd(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """CXNN: VX := random byte AND NN"""
    cpu.set_v(instr.x, io.random_byte() & instr.nn)
    return None


def execute_drw(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """DXYN: XOR N sprite rows from MEM[I] at (VX, VY), VF := collision"""
    sprite = mem.read_block(cpu.i, instr.n)
    collision = io.display.draw_sprite(cpu.v[instr.x], cpu.v[instr.y], sprite)
    cpu.set_flag(collision)
    return None


def execute_skp(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """EX9E: skip if key VX is pressed"""
    if io.keypad.is_pressed(_key_index(cpu, instr.x)):
        return cpu.pc + 2
    return None


def execute_sknp(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """EXA1: skip if key VX is released"""
    if not io.keypad.is_pressed(_key_index(cpu, instr.x)):
        return cpu.pc + 2
    return None


def execute_ld_vx_dt(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """FX07: VX := DT"""
    cpu.set_v(instr.x, cpu.delay_timer)
    return None


def execute_ld_key(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """FX0A: wait for a key press, VX := key

    Rewinds PC so the same instruction is fetched again until a key is down.
    """
    key = io.keypad.first_pressed()
    if key is None:
        return cpu.pc - 2
    cpu.set_v(instr.x, key)
    return None


def execute_ld_dt(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """FX15: DT := VX"""
    cpu.delay_timer = cpu.v[instr.x]
    return None


def execute_ld_st(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """FX18: ST := VX"""
    cpu.sound_timer = cpu.v[instr.x]
    return None


def execute_add_i(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """FX1E: I := I + VX"""
    cpu.set_i(cpu.i + cpu.v[instr.x])
    return None


def execute_ld_font(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """FX29: I := address of font glyph VX"""
    cpu.set_i(cpu.v[instr.x] * FONT_GLYPH_SIZE)
    return None


def execute_bcd(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """FX33: MEM[I..I+2] := decimal digits of VX"""
    vx = cpu.v[instr.x]
    mem.write_block(cpu.i, (vx // 100, vx // 10 % 10, vx % 10))
    return None


def execute_store_regs(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """FX55: MEM[I..I+X] := V0..VX"""
    mem.write_block(cpu.i, cpu.v[:instr.x + 1])
    return None


def execute_load_regs(instr: Instruction, cpu: CPU, mem: Memory, io: Devices) -> Optional[int]:
    """FX65: V0..VX := MEM[I..I+X]"""
    for reg, value in enumerate(mem.read_block(cpu.i, instr.x + 1)):
        cpu.set_v(reg, value)
    return None


# Instruction dispatch table, keyed by Instruction.pattern
INSTRUCTION_EXECUTORS: dict[str, InstructionExecutor] = {
    "0000": execute_nop,
    "00E0": execute_cls,
    "00EE": execute_ret,
    "1NNN": execute_jp,
    "2NNN": execute_call,
    "3XNN": execute_se_byte,
    "4XNN": execute_sne_byte,
    "5XY0": execute_se_reg,
    "6XNN": execute_ld_byte,
    "7XNN": execute_add_byte,
    "8XY0": execute_ld_reg,
    "8XY1": execute_or,
    "8XY2": execute_and,
    "8XY3": execute_xor,
    "8XY4": execute_add_reg,
    "8XY5": execute_sub,
    "8XY6": execute_shr,
    "8XY7": execute_subn,
    "8XYE": execute_shl,
    "9XY0": execute_sne_reg,
    "ANNN": execute_ld_i,
    "BNNN": execute_jp_v0,
    "CXNN": execute_rnd,
    "DXYN": execute_drw,
    "EX9E": execute_skp,
    "EXA1": execute_sknp,
    "FX07": execute_ld_vx_dt,
    "FX0A": execute_ld_key,
    "FX15": execute_ld_dt,
    "FX18": execute_ld_st,
    "FX1E": execute_add_i,
    "FX29": execute_ld_font,
    "FX33": execute_bcd,
    "FX55": execute_store_regs,
    "FX65": execute_load_regs,
}


def execute_instruction(
    instr: Instruction,
    cpu: CPU,
    mem: Memory,
    io: Devices,
) -> Optional[int]:
    """Execute a single decoded instruction.

    Returns:
        New PC value if the instruction jumps, skips or rewinds, None otherwise
    """
    executor = INSTRUCTION_EXECUTORS.get(instr.pattern)
    if executor is None:
        raise InvalidInstruction(f"Unimplemented opcode: {instr.word:04X}", opcode=instr.word)
    return executor(instr, cpu, mem, io)
