"""Shared builders for machine tests."""

from meowchip8 import Machine, Quirks, ScriptedByteSource, step


def rom(*words: int) -> bytes:
    """Assemble big-endian opcode words into a ROM image."""
    return b"".join(w.to_bytes(2, "big") for w in words)


def machine_with(*words: int, quirks: Quirks = None, rng=None) -> Machine:
    """Machine with the given opcodes loaded at 0x200."""
    m = Machine(quirks=quirks or Quirks(), rng=rng or ScriptedByteSource([0xAB]))
    m.load(rom(*words))
    return m


def run(m: Machine, count: int):
    """Step count times, returning the last outcome."""
    outcome = None
    for _ in range(count):
        outcome = step(m)
    return outcome
