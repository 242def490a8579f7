"""Text dumps of machine state for the debug overlay and headless runs."""

from typing import List

from .constants import MEMORY_SIZE, OPCODE_SIZE
from .machine import Machine
from .opcodes import disassemble

WORDS_PER_ROW = 8


def register_lines(m: Machine) -> List[str]:
    """CPU state, four short lines plus the instruction at PC"""
    regs = m.registers
    lines = [
        f"PC: ${regs.PC:03X}  I: ${regs.I:03X}",
        f"SP: {m.stack.depth}  DT: {m.timers.delay:02X}  ST: {m.timers.sound:02X}",
        "V0-V7: " + " ".join(f"{v:02X}" for v in regs.V[:8]),
        "V8-VF: " + " ".join(f"{v:02X}" for v in regs.V[8:]),
    ]

    # Current instruction
    if regs.PC < MEMORY_SIZE - 1:
        opcode = (m.memory[regs.PC] << 8) | m.memory[regs.PC + 1]
        lines.append(f"OP: ${opcode:04X} {disassemble(opcode, m.quirks)}")

    return lines


def format_memory(data: bytes) -> str:
    """Hex dump as 16-bit words; runs of all-zero rows collapse into one line"""
    row_size = WORDS_PER_ROW * OPCODE_SIZE
    lines = []
    zero_run_start = None

    for start in range(0, len(data), row_size):
        chunk = data[start:start + row_size]
        end = start + len(chunk) - 1
        if not any(chunk):
            if zero_run_start is None:
                zero_run_start = start
            continue
        if zero_run_start is not None:
            lines.append(f"${zero_run_start:04X} - ${start - 1:04X} : ...")
            zero_run_start = None

        words = " ".join(
            f"{(chunk[i] << 8) | (chunk[i + 1] if i + 1 < len(chunk) else 0):04X}"
            for i in range(0, len(chunk), OPCODE_SIZE)
        )
        lines.append(f"${start:04X} - ${end:04X} : {words}")

    if zero_run_start is not None:
        lines.append(f"${zero_run_start:04X} - ${len(data) - 1:04X} : ...")

    return "\n".join(lines)


def format_machine(m: Machine, include_memory: bool = True) -> str:
    parts = [
        f"State: {m.state.value}  Cycles: {m.cycles}  Program: {m.program_length} bytes",
    ]
    if m.fault is not None:
        parts.append(f"Fault: {m.fault}")
    parts.extend(register_lines(m))
    parts.append("Stack: " + (" ".join(f"${a:03X}" for a in m.stack) or "(empty)"))
    parts.append("Display:")
    parts.append(str(m.display))
    if include_memory:
        parts.append("Memory:")
        parts.append(format_memory(m.memory.dump()))
    return "\n".join(parts)
