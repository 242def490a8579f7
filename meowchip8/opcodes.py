"""CHIP-8 instruction decoding.

Every 16-bit word decodes to exactly one instruction class below, or raises
InvalidOpcode. Field names follow the usual opcode notation:

    NNN  12-bit address          NN  8-bit constant
    N    4-bit constant          X/Y 4-bit register index
"""

from dataclasses import dataclass

from .errors import InvalidOpcode


class Instruction:
    """Base class of all decoded instructions"""

    mnemonic = "???"

    def __str__(self):
        return self.mnemonic

    def describe(self, quirks=None) -> str:
        """Mnemonic as executed under the given Quirks"""
        return str(self)


# ─── Control flow ───

@dataclass(frozen=True)
class ClearScreen(Instruction):
    """00E0: CLS"""
    mnemonic = "CLS"


@dataclass(frozen=True)
class Return(Instruction):
    """00EE: RET"""
    mnemonic = "RET"


@dataclass(frozen=True)
class Jump(Instruction):
    """1NNN: JP addr"""
    nnn: int

    def __str__(self):
        return f"JP ${self.nnn:03X}"


@dataclass(frozen=True)
class Call(Instruction):
    """2NNN: CALL addr"""
    nnn: int

    def __str__(self):
        return f"CALL ${self.nnn:03X}"


@dataclass(frozen=True)
class JumpOffset(Instruction):
    """BNNN: JP V0, addr"""
    x: int
    nnn: int

    def __str__(self):
        return f"JP V0, ${self.nnn:03X}"

    def describe(self, quirks=None) -> str:
        if quirks is not None and quirks.jump_uses_vx:
            return f"JP V{self.x:X}, ${self.nnn:03X}"
        return str(self)


# ─── Conditional skips ───

@dataclass(frozen=True)
class SkipEqImm(Instruction):
    """3XNN: SE Vx, byte"""
    x: int
    nn: int

    def __str__(self):
        return f"SE V{self.x:X}, ${self.nn:02X}"


@dataclass(frozen=True)
class SkipNeImm(Instruction):
    """4XNN: SNE Vx, byte"""
    x: int
    nn: int

    def __str__(self):
        return f"SNE V{self.x:X}, ${self.nn:02X}"


@dataclass(frozen=True)
class SkipEqReg(Instruction):
    """5XY0: SE Vx, Vy"""
    x: int
    y: int

    def __str__(self):
        return f"SE V{self.x:X}, V{self.y:X}"


@dataclass(frozen=True)
class SkipNeReg(Instruction):
    """9XY0: SNE Vx, Vy"""
    x: int
    y: int

    def __str__(self):
        return f"SNE V{self.x:X}, V{self.y:X}"


@dataclass(frozen=True)
class SkipKeyPressed(Instruction):
    """EX9E: SKP Vx"""
    x: int

    def __str__(self):
        return f"SKP V{self.x:X}"


@dataclass(frozen=True)
class SkipKeyReleased(Instruction):
    """EXA1: SKNP Vx"""
    x: int

    def __str__(self):
        return f"SKNP V{self.x:X}"


# ─── Loads ───

@dataclass(frozen=True)
class LoadImm(Instruction):
    """6XNN: LD Vx, byte"""
    x: int
    nn: int

    def __str__(self):
        return f"LD V{self.x:X}, ${self.nn:02X}"


@dataclass(frozen=True)
class LoadIndex(Instruction):
    """ANNN: LD I, addr"""
    nnn: int

    def __str__(self):
        return f"LD I, ${self.nnn:03X}"


@dataclass(frozen=True)
class LoadDelay(Instruction):
    """FX07: LD Vx, DT"""
    x: int

    def __str__(self):
        return f"LD V{self.x:X}, DT"


@dataclass(frozen=True)
class WaitKey(Instruction):
    """FX0A: LD Vx, K"""
    x: int

    def __str__(self):
        return f"LD V{self.x:X}, K"


@dataclass(frozen=True)
class SetDelay(Instruction):
    """FX15: LD DT, Vx"""
    x: int

    def __str__(self):
        return f"LD DT, V{self.x:X}"


@dataclass(frozen=True)
class SetSound(Instruction):
    """FX18: LD ST, Vx"""
    x: int

    def __str__(self):
        return f"LD ST, V{self.x:X}"


@dataclass(frozen=True)
class AddIndex(Instruction):
    """FX1E: ADD I, Vx"""
    x: int

    def __str__(self):
        return f"ADD I, V{self.x:X}"


@dataclass(frozen=True)
class LoadFont(Instruction):
    """FX29: LD F, Vx"""
    x: int

    def __str__(self):
        return f"LD F, V{self.x:X}"


@dataclass(frozen=True)
class StoreBCD(Instruction):
    """FX33: LD B, Vx"""
    x: int

    def __str__(self):
        return f"LD B, V{self.x:X}"


@dataclass(frozen=True)
class StoreRegisters(Instruction):
    """FX55: LD [I], Vx"""
    x: int

    def __str__(self):
        return f"LD [I], V{self.x:X}"


@dataclass(frozen=True)
class LoadRegisters(Instruction):
    """FX65: LD Vx, [I]"""
    x: int

    def __str__(self):
        return f"LD V{self.x:X}, [I]"


# ─── Arithmetic / logic ───

@dataclass(frozen=True)
class AddImm(Instruction):
    """7XNN: ADD Vx, byte"""
    x: int
    nn: int

    def __str__(self):
        return f"ADD V{self.x:X}, ${self.nn:02X}"


@dataclass(frozen=True)
class RegisterOp(Instruction):
    """8XY?: two-register ALU operation"""
    x: int
    y: int

    def __str__(self):
        return f"{self.mnemonic} V{self.x:X}, V{self.y:X}"


@dataclass(frozen=True)
class Move(RegisterOp):
    """8XY0: LD Vx, Vy"""
    mnemonic = "LD"


@dataclass(frozen=True)
class Or(RegisterOp):
    """8XY1: OR Vx, Vy"""
    mnemonic = "OR"


@dataclass(frozen=True)
class And(RegisterOp):
    """8XY2: AND Vx, Vy"""
    mnemonic = "AND"


@dataclass(frozen=True)
class Xor(RegisterOp):
    """8XY3: XOR Vx, Vy"""
    mnemonic = "XOR"


@dataclass(frozen=True)
class AddReg(RegisterOp):
    """8XY4: ADD Vx, Vy"""
    mnemonic = "ADD"


@dataclass(frozen=True)
class SubReg(RegisterOp):
    """8XY5: SUB Vx, Vy"""
    mnemonic = "SUB"


@dataclass(frozen=True)
class ShiftRight(RegisterOp):
    """8XY6: SHR Vx {, Vy}"""
    mnemonic = "SHR"


@dataclass(frozen=True)
class SubReverse(RegisterOp):
    """8XY7: SUBN Vx, Vy"""
    mnemonic = "SUBN"


@dataclass(frozen=True)
class ShiftLeft(RegisterOp):
    """8XYE: SHL Vx {, Vy}"""
    mnemonic = "SHL"


@dataclass(frozen=True)
class Random(Instruction):
    """CXNN: RND Vx, byte"""
    x: int
    nn: int

    def __str__(self):
        return f"RND V{self.x:X}, ${self.nn:02X}"


@dataclass(frozen=True)
class Draw(Instruction):
    """DXYN: DRW Vx, Vy, nibble"""
    x: int
    y: int
    n: int

    def __str__(self):
        return f"DRW V{self.x:X}, V{self.y:X}, {self.n}"


REGISTER_OPS = {
    0x0: Move,
    0x1: Or,
    0x2: And,
    0x3: Xor,
    0x4: AddReg,
    0x5: SubReg,
    0x6: ShiftRight,
    0x7: SubReverse,
    0xE: ShiftLeft,
}

KEY_OPS = {
    0x9E: SkipKeyPressed,
    0xA1: SkipKeyReleased,
}

MISC_OPS = {
    0x07: LoadDelay,
    0x0A: WaitKey,
    0x15: SetDelay,
    0x18: SetSound,
    0x1E: AddIndex,
    0x29: LoadFont,
    0x33: StoreBCD,
    0x55: StoreRegisters,
    0x65: LoadRegisters,
}

# Every concrete instruction class; the interpreter must handle all of them.
INSTRUCTIONS = (
    ClearScreen, Return, Jump, Call, JumpOffset,
    SkipEqImm, SkipNeImm, SkipEqReg, SkipNeReg, SkipKeyPressed, SkipKeyReleased,
    LoadImm, LoadIndex, AddImm, Random, Draw,
) + tuple(REGISTER_OPS.values()) + tuple(MISC_OPS.values())


def decode(opcode: int) -> Instruction:
    """Decode a 16-bit opcode, raising InvalidOpcode if nothing matches"""
    # Extract common opcode parts
    nnn = opcode & 0x0FFF        # 12-bit address
    nn = opcode & 0x00FF         # 8-bit constant
    n = opcode & 0x000F          # 4-bit constant
    x = (opcode >> 8) & 0x0F     # 4-bit register index
    y = (opcode >> 4) & 0x0F     # 4-bit register index

    op = (opcode >> 12) & 0xF    # First nibble

    if op == 0x0:
        # 0NNN machine code calls are not supported
        if opcode == 0x00E0:
            return ClearScreen()
        if opcode == 0x00EE:
            return Return()
    elif op == 0x1:
        return Jump(nnn)
    elif op == 0x2:
        return Call(nnn)
    elif op == 0x3:
        return SkipEqImm(x, nn)
    elif op == 0x4:
        return SkipNeImm(x, nn)
    elif op == 0x5:
        if n == 0:
            return SkipEqReg(x, y)
    elif op == 0x6:
        return LoadImm(x, nn)
    elif op == 0x7:
        return AddImm(x, nn)
    elif op == 0x8:
        if n in REGISTER_OPS:
            return REGISTER_OPS[n](x, y)
    elif op == 0x9:
        if n == 0:
            return SkipNeReg(x, y)
    elif op == 0xA:
        return LoadIndex(nnn)
    elif op == 0xB:
        return JumpOffset(x, nnn)
    elif op == 0xC:
        return Random(x, nn)
    elif op == 0xD:
        return Draw(x, y, n)
    elif op == 0xE:
        if nn in KEY_OPS:
            return KEY_OPS[nn](x)
    elif op == 0xF:
        if nn in MISC_OPS:
            return MISC_OPS[nn](x)

    raise InvalidOpcode(opcode)


def disassemble(opcode: int, quirks=None) -> str:
    """Disassemble opcode to human-readable string"""
    try:
        return decode(opcode).describe(quirks)
    except InvalidOpcode:
        return f"??? ${opcode:04X}"
