"""🐱 Meow CHIP-8 - a CHIP-8 interpreter.

The core is a plain Machine plus step()/tick_timers()/load(); the pygame
frontend and the threaded drivers in runner.py are optional hosts around it.
"""

from .errors import (
    Chip8Error, InvalidOpcode, MachineFault, MachineHalted, MemoryFault,
    ProgramTooLarge, StackOverflow, StackUnderflow,
)
from .interpreter import StepOutcome, step
from .machine import Machine, Quirks, RunState, load, tick_timers
from .opcodes import decode, disassemble
from .rng import RandomByteSource, ScriptedByteSource
from .runner import Emulator

__version__ = "0.1.0"

__all__ = [
    "Chip8Error", "InvalidOpcode", "MachineFault", "MachineHalted", "MemoryFault",
    "ProgramTooLarge", "StackOverflow", "StackUnderflow",
    "StepOutcome", "step",
    "Machine", "Quirks", "RunState", "load", "tick_timers",
    "decode", "disassemble",
    "RandomByteSource", "ScriptedByteSource",
    "Emulator",
]
