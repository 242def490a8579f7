"""The CHIP-8 machine: every piece of state the interpreter touches."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .constants import MAX_PROGRAM_SIZE, PROGRAM_START
from .display import DisplayBuffer
from .errors import MachineFault, ProgramTooLarge
from .keypad import Keypad
from .memory import Memory
from .registers import CallStack, RegisterFile
from .rng import ByteSource, RandomByteSource
from .timers import Timers

logger = logging.getLogger(__name__)


@dataclass
class Quirks:
    """Points where historical interpreters disagree.

    The defaults give the behaviour most modern ROMs expect:

    shift_uses_vy
        8XY6/8XYE shift VY into VX (COSMAC VIP) instead of shifting VX in place.
    logic_resets_vf
        8XY1/8XY2/8XY3 clear VF (COSMAC VIP) instead of leaving it alone.
    jump_uses_vx
        BNNN jumps to NNN + VX (CHIP-48) instead of NNN + V0.
    load_store_increments_i
        FX55/FX65 leave I pointing past the last register (COSMAC VIP).
    clip_sprites
        Sprites are cut off at the screen edge instead of wrapping around.
    """
    shift_uses_vy: bool = False
    logic_resets_vf: bool = False
    jump_uses_vx: bool = False
    load_store_increments_i: bool = False
    clip_sprites: bool = False


class RunState(Enum):
    RUNNING = "running"
    AWAITING_KEY = "awaiting_key"
    FAULTED = "faulted"


@dataclass
class Machine:
    """CHIP-8 machine state container"""
    memory: Memory = field(default_factory=Memory)
    registers: RegisterFile = field(default_factory=RegisterFile)
    stack: CallStack = field(default_factory=CallStack)
    timers: Timers = field(default_factory=Timers)
    display: DisplayBuffer = field(default_factory=DisplayBuffer)
    keypad: Keypad = field(default_factory=Keypad)
    rng: ByteSource = field(default_factory=RandomByteSource)
    quirks: Quirks = field(default_factory=Quirks)

    state: RunState = RunState.RUNNING
    key_register: int = 0           # Destination of a pending FX0A
    fault: Optional[MachineFault] = None

    program: bytes = b""
    cycles: int = 0                 # Instructions executed since load

    @property
    def program_length(self) -> int:
        return len(self.program)

    @property
    def sound_active(self) -> bool:
        return self.timers.sound_active

    @property
    def halted(self) -> bool:
        return self.state is RunState.FAULTED

    @property
    def awaiting_key(self) -> bool:
        return self.state is RunState.AWAITING_KEY

    def load(self, rom: bytes):
        """Load ROM data into memory, resetting everything else"""
        load(self, rom)

    def reset(self):
        """Reload the last program from scratch"""
        load(self, self.program)

    def press_key(self, key: int):
        self.keypad.press(key)

    def release_key(self, key: int):
        self.keypad.release(key)

    def tick_timers(self):
        tick_timers(self)

    def halt(self, fault: MachineFault):
        self.state = RunState.FAULTED
        self.fault = fault


def load(machine: Machine, rom: bytes):
    """Reset the machine and copy rom to 0x200.

    Raises ProgramTooLarge, leaving the machine untouched, if the ROM does not
    fit in memory.
    """
    rom = bytes(rom)
    if len(rom) > MAX_PROGRAM_SIZE:
        raise ProgramTooLarge(len(rom), MAX_PROGRAM_SIZE)

    machine.memory.clear()
    machine.memory.load(PROGRAM_START, rom)
    machine.registers.reset()
    machine.stack.clear()
    machine.timers.reset()
    machine.display.clear()
    machine.keypad.reset()
    machine.state = RunState.RUNNING
    machine.key_register = 0
    machine.fault = None
    machine.program = rom
    machine.cycles = 0
    logger.info("Loaded %d byte program at $%03X", len(rom), PROGRAM_START)


def tick_timers(machine: Machine):
    """Decrement delay and sound timers once; call at 60Hz"""
    machine.timers.tick()
