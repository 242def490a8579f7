"""Fetch-decode-execute loop.

step() runs exactly one instruction. Each handler gets the machine, the
decoded instruction and the address it was fetched from, and returns the
next PC, or None to fall through to the following instruction. Handlers
check everything that can fault before they write anything, so a faulting
instruction leaves the machine exactly as it found it.
"""

import logging
from enum import Enum
from typing import Callable, Dict, Optional, Type

from .constants import FLAG, FONT_ADDRESS, FONT_GLYPH_SIZE, OPCODE_SIZE
from .errors import MachineFault, MachineHalted
from .machine import Machine, RunState
from .opcodes import (
    AddImm, AddIndex, AddReg, And, Call, ClearScreen, Draw, Instruction, Jump,
    JumpOffset, LoadDelay, LoadFont, LoadImm, LoadIndex, LoadRegisters, Move,
    Or, Random, Return, SetDelay, SetSound, ShiftLeft, ShiftRight, SkipEqImm,
    SkipEqReg, SkipKeyPressed, SkipKeyReleased, SkipNeImm, SkipNeReg, StoreBCD,
    StoreRegisters, SubReg, SubReverse, WaitKey, Xor, decode,
)

logger = logging.getLogger(__name__)


class StepOutcome(Enum):
    ADVANCED = "advanced"
    REDRAW = "redraw"
    AWAITING_KEY = "awaiting_key"


Handler = Callable[[Machine, Instruction, int], Optional[int]]


def _skip_if(cond: bool, pc: int) -> Optional[int]:
    return pc + 2 * OPCODE_SIZE if cond else None


# ─── Control flow ───

def _clear_screen(m: Machine, op: ClearScreen, pc: int):
    m.display.clear()


def _return(m: Machine, op: Return, pc: int):
    return m.stack.pop()


def _jump(m: Machine, op: Jump, pc: int):
    return op.nnn


def _call(m: Machine, op: Call, pc: int):
    m.stack.push(pc + OPCODE_SIZE)
    return op.nnn


def _jump_offset(m: Machine, op: JumpOffset, pc: int):
    V = m.registers.V
    offset = V[op.x] if m.quirks.jump_uses_vx else V[0]
    return op.nnn + offset


# ─── Conditional skips ───

def _skip_eq_imm(m: Machine, op: SkipEqImm, pc: int):
    return _skip_if(m.registers.V[op.x] == op.nn, pc)


def _skip_ne_imm(m: Machine, op: SkipNeImm, pc: int):
    return _skip_if(m.registers.V[op.x] != op.nn, pc)


def _skip_eq_reg(m: Machine, op: SkipEqReg, pc: int):
    V = m.registers.V
    return _skip_if(V[op.x] == V[op.y], pc)


def _skip_ne_reg(m: Machine, op: SkipNeReg, pc: int):
    V = m.registers.V
    return _skip_if(V[op.x] != V[op.y], pc)


def _skip_key_pressed(m: Machine, op: SkipKeyPressed, pc: int):
    return _skip_if(m.keypad.is_pressed(m.registers.V[op.x]), pc)


def _skip_key_released(m: Machine, op: SkipKeyReleased, pc: int):
    return _skip_if(not m.keypad.is_pressed(m.registers.V[op.x]), pc)


# ─── Loads and stores ───

def _load_imm(m: Machine, op: LoadImm, pc: int):
    m.registers.V[op.x] = op.nn


def _load_index(m: Machine, op: LoadIndex, pc: int):
    m.registers.I = op.nnn


def _load_delay(m: Machine, op: LoadDelay, pc: int):
    m.registers.V[op.x] = m.timers.delay


def _set_delay(m: Machine, op: SetDelay, pc: int):
    m.timers.delay = m.registers.V[op.x]


def _set_sound(m: Machine, op: SetSound, pc: int):
    m.timers.sound = m.registers.V[op.x]


def _add_index(m: Machine, op: AddIndex, pc: int):
    # VF is not affected
    m.registers.I = (m.registers.I + m.registers.V[op.x]) & 0xFFFF


def _load_font(m: Machine, op: LoadFont, pc: int):
    m.registers.I = FONT_ADDRESS + (m.registers.V[op.x] & 0xF) * FONT_GLYPH_SIZE


def _store_bcd(m: Machine, op: StoreBCD, pc: int):
    value = m.registers.V[op.x]
    m.memory.write_block(m.registers.I, (value // 100, (value // 10) % 10, value % 10))


def _store_registers(m: Machine, op: StoreRegisters, pc: int):
    regs = m.registers
    regs_to_store = regs.V[:op.x + 1]
    m.memory.write_block(regs.I, regs_to_store)
    if m.quirks.load_store_increments_i:
        regs.I = (regs.I + op.x + 1) & 0xFFFF


def _load_registers(m: Machine, op: LoadRegisters, pc: int):
    regs = m.registers
    values = m.memory.read_block(regs.I, op.x + 1)
    regs.V[:op.x + 1] = list(values)
    if m.quirks.load_store_increments_i:
        regs.I = (regs.I + op.x + 1) & 0xFFFF


def _wait_key(m: Machine, op: WaitKey, pc: int):
    # PC stays put until a key arrives; step() finishes the instruction
    m.state = RunState.AWAITING_KEY
    m.key_register = op.x
    m.keypad.begin_wait()
    return pc


# ─── Arithmetic / logic ───

def _add_imm(m: Machine, op: AddImm, pc: int):
    # Carry flag is not changed
    m.registers.V[op.x] = (m.registers.V[op.x] + op.nn) & 0xFF


def _move(m: Machine, op: Move, pc: int):
    V = m.registers.V
    V[op.x] = V[op.y]


def _logic(m: Machine, x: int, value: int):
    V = m.registers.V
    V[x] = value
    if m.quirks.logic_resets_vf:
        V[FLAG] = 0


def _or(m: Machine, op: Or, pc: int):
    V = m.registers.V
    _logic(m, op.x, V[op.x] | V[op.y])


def _and(m: Machine, op: And, pc: int):
    V = m.registers.V
    _logic(m, op.x, V[op.x] & V[op.y])


def _xor(m: Machine, op: Xor, pc: int):
    V = m.registers.V
    _logic(m, op.x, V[op.x] ^ V[op.y])


# The flag is always written after the result so that it wins when X is F.

def _add_reg(m: Machine, op: AddReg, pc: int):
    V = m.registers.V
    result = V[op.x] + V[op.y]
    V[op.x] = result & 0xFF
    V[FLAG] = 1 if result > 0xFF else 0


def _sub_reg(m: Machine, op: SubReg, pc: int):
    V = m.registers.V
    no_borrow = V[op.x] >= V[op.y]
    V[op.x] = (V[op.x] - V[op.y]) & 0xFF
    V[FLAG] = 1 if no_borrow else 0


def _sub_reverse(m: Machine, op: SubReverse, pc: int):
    V = m.registers.V
    no_borrow = V[op.y] >= V[op.x]
    V[op.x] = (V[op.y] - V[op.x]) & 0xFF
    V[FLAG] = 1 if no_borrow else 0


def _shift_source(m: Machine, op) -> int:
    V = m.registers.V
    return V[op.y] if m.quirks.shift_uses_vy else V[op.x]


def _shift_right(m: Machine, op: ShiftRight, pc: int):
    V = m.registers.V
    src = _shift_source(m, op)
    V[op.x] = src >> 1
    V[FLAG] = src & 0x1


def _shift_left(m: Machine, op: ShiftLeft, pc: int):
    V = m.registers.V
    src = _shift_source(m, op)
    V[op.x] = (src << 1) & 0xFF
    V[FLAG] = (src >> 7) & 0x1


def _random(m: Machine, op: Random, pc: int):
    m.registers.V[op.x] = m.rng.next_byte() & op.nn


def _draw(m: Machine, op: Draw, pc: int):
    V = m.registers.V
    rows = m.memory.read_block(m.registers.I, op.n)
    collision = m.display.draw_sprite(V[op.x], V[op.y], rows, clip=m.quirks.clip_sprites)
    V[FLAG] = 1 if collision else 0


HANDLERS: Dict[Type[Instruction], Handler] = {
    ClearScreen: _clear_screen,
    Return: _return,
    Jump: _jump,
    Call: _call,
    JumpOffset: _jump_offset,
    SkipEqImm: _skip_eq_imm,
    SkipNeImm: _skip_ne_imm,
    SkipEqReg: _skip_eq_reg,
    SkipNeReg: _skip_ne_reg,
    SkipKeyPressed: _skip_key_pressed,
    SkipKeyReleased: _skip_key_released,
    LoadImm: _load_imm,
    LoadIndex: _load_index,
    LoadDelay: _load_delay,
    SetDelay: _set_delay,
    SetSound: _set_sound,
    AddIndex: _add_index,
    LoadFont: _load_font,
    StoreBCD: _store_bcd,
    StoreRegisters: _store_registers,
    LoadRegisters: _load_registers,
    WaitKey: _wait_key,
    AddImm: _add_imm,
    Move: _move,
    Or: _or,
    And: _and,
    Xor: _xor,
    AddReg: _add_reg,
    SubReg: _sub_reg,
    SubReverse: _sub_reverse,
    ShiftRight: _shift_right,
    ShiftLeft: _shift_left,
    Random: _random,
    Draw: _draw,
}

OUTCOMES = {
    ClearScreen: StepOutcome.REDRAW,
    Draw: StepOutcome.REDRAW,
    WaitKey: StepOutcome.AWAITING_KEY,
}


def _resume_after_key(m: Machine) -> StepOutcome:
    key = m.keypad.take_pressed()
    if key is None:
        return StepOutcome.AWAITING_KEY

    m.registers.V[m.key_register] = key
    m.registers.PC += OPCODE_SIZE
    m.state = RunState.RUNNING
    logger.debug("Key %X delivered to V%X", key, m.key_register)
    return StepOutcome.ADVANCED


def step(machine: Machine) -> StepOutcome:
    """Execute one instruction.

    Raises:
        MachineHalted: the machine faulted earlier and was not reset
        InvalidOpcode, MemoryFault, StackOverflow, StackUnderflow: the
            instruction at PC faulted; the machine is now halted
    """
    if machine.state is RunState.FAULTED:
        raise MachineHalted(machine.fault)

    if machine.state is RunState.AWAITING_KEY:
        return _resume_after_key(machine)

    pc = machine.registers.PC
    try:
        opcode = machine.memory.read_word(pc)
        instruction = decode(opcode)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("$%03X  %04X  %s", pc, opcode, instruction)
        next_pc = HANDLERS[type(instruction)](machine, instruction, pc)
    except MachineFault as fault:
        fault.pc = pc
        machine.halt(fault)
        logger.error("Machine halted: %s", fault)
        raise

    machine.registers.PC = pc + OPCODE_SIZE if next_pc is None else next_pc
    machine.cycles += 1
    return OUTCOMES.get(type(instruction), StepOutcome.ADVANCED)
