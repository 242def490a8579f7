"""Faults raised by the machine.

Every fault raised while stepping is fatal: the machine records it and refuses
to step again until it is reset or a new ROM is loaded.
"""

from typing import Optional


class Chip8Error(Exception):
    """Base class for all emulator errors"""


class ProgramTooLarge(Chip8Error):
    """ROM does not fit between the load point and the end of memory"""

    def __init__(self, size: int, limit: int):
        super().__init__(f"ROM is {size} bytes, at most {limit} bytes fit in memory")
        self.size = size
        self.limit = limit


class MachineFault(Chip8Error):
    """A fatal fault raised while executing an instruction.

    The interpreter fills in pc (the address of the faulting instruction)
    before handing the fault to the caller.
    """

    def __init__(self, message: str, pc: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.pc = pc

    def __str__(self):
        if self.pc is None:
            return self.message
        return f"{self.message} at PC=${self.pc:03X}"


class InvalidOpcode(MachineFault):
    def __init__(self, opcode: int, pc: Optional[int] = None):
        super().__init__(f"Unsupported opcode ${opcode:04X}", pc)
        self.opcode = opcode


class MemoryFault(MachineFault):
    def __init__(self, address: int, reason: str = "is out of bounds", pc: Optional[int] = None):
        super().__init__(f"Memory access ${address:X} {reason}", pc)
        self.address = address


class StackOverflow(MachineFault):
    def __init__(self, pc: Optional[int] = None):
        super().__init__("Call stack is full", pc)


class StackUnderflow(MachineFault):
    def __init__(self, pc: Optional[int] = None):
        super().__init__("Return with an empty call stack", pc)


class MachineHalted(Chip8Error):
    """Raised when stepping a machine that already faulted"""

    def __init__(self, fault: Optional[MachineFault]):
        super().__init__(f"Machine halted after fault: {fault}")
        self.fault = fault
