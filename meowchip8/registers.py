"""Register file and call stack."""

from typing import Iterator, List

from .constants import NUM_REGISTERS, PROGRAM_START, STACK_SIZE
from .errors import StackOverflow, StackUnderflow


class RegisterFile:
    """V0-VF, the index register I and the program counter"""

    def __init__(self):
        self.V: List[int] = [0] * NUM_REGISTERS
        self.I = 0
        self.PC = PROGRAM_START

    def reset(self):
        self.V = [0] * NUM_REGISTERS
        self.I = 0
        self.PC = PROGRAM_START

    def __repr__(self):
        regs = " ".join(f"{v:02X}" for v in self.V)
        return f"RegisterFile(PC=${self.PC:03X}, I=${self.I:03X}, V=[{regs}])"


class CallStack:
    """Return addresses for CALL/RET, at most 16 deep"""

    def __init__(self, capacity: int = STACK_SIZE):
        self.capacity = capacity
        self._entries: List[int] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[int]:
        return iter(self._entries)

    @property
    def depth(self) -> int:
        return len(self._entries)

    @property
    def full(self) -> bool:
        return len(self._entries) >= self.capacity

    def push(self, addr: int):
        if self.full:
            raise StackOverflow()
        self._entries.append(addr)

    def pop(self) -> int:
        if not self._entries:
            raise StackUnderflow()
        return self._entries.pop()

    def peek(self) -> int:
        if not self._entries:
            raise StackUnderflow()
        return self._entries[-1]

    def clear(self):
        self._entries.clear()
