"""CHIP-8 instruction decoding."""

import enum

from chex import dataclass


class InstructionFamily(enum.IntEnum):
    """Instruction family selected by the first nibble."""
    SYSTEM = 0x0
    JUMP = 0x1
    CALL = 0x2
    SKIP_EQ_IMM = 0x3
    SKIP_NE_IMM = 0x4
    SKIP_EQ_REG = 0x5
    SET_IMM = 0x6
    ADD_IMM = 0x7
    ALU = 0x8
    SKIP_NE_REG = 0x9
    SET_INDEX = 0xA
    JUMP_OFFSET = 0xB
    RANDOM = 0xC
    DRAW = 0xD
    KEY = 0xE
    MISC = 0xF


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    return DecodedInstruction(
        raw=instruction,
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )


_ALU_MNEMONICS = {
    0x0: "LD", 0x1: "OR", 0x2: "AND", 0x3: "XOR", 0x4: "ADD",
    0x5: "SUB", 0x6: "SHR", 0x7: "SUBN", 0xE: "SHL",
}

_MISC_FORMATS = {
    0x07: "LD V{x:X}, DT",
    0x0A: "LD V{x:X}, K",
    0x15: "LD DT, V{x:X}",
    0x18: "LD ST, V{x:X}",
    0x1E: "ADD I, V{x:X}",
    0x29: "LD F, V{x:X}",
    0x33: "LD B, V{x:X}",
    0x55: "LD [I], V{x:X}",
    0x65: "LD V{x:X}, [I]",
}


def describe(instruction: int, jump_uses_vx: bool = False) -> str:
    """Render a host-side mnemonic for an instruction word.

    Unknown encodings come back as ``??? 0xNNNN``. With ``jump_uses_vx`` the
    B family renders as ``JP VX, 0xXNN``.
    """
    instruction = int(instruction) & 0xFFFF
    d = decode(instruction)
    family = InstructionFamily(d.opcode)
    unknown = f"??? 0x{instruction:04X}"

    if family == InstructionFamily.SYSTEM:
        return {0x00E0: "CLS", 0x00EE: "RET"}.get(instruction, unknown)
    if family == InstructionFamily.JUMP:
        return f"JP 0x{d.nnn:03X}"
    if family == InstructionFamily.CALL:
        return f"CALL 0x{d.nnn:03X}"
    if family == InstructionFamily.SKIP_EQ_IMM:
        return f"SE V{d.x:X}, 0x{d.nn:02X}"
    if family == InstructionFamily.SKIP_NE_IMM:
        return f"SNE V{d.x:X}, 0x{d.nn:02X}"
    if family in (InstructionFamily.SKIP_EQ_REG, InstructionFamily.SKIP_NE_REG):
        if d.n != 0:
            return unknown
        name = "SE" if family == InstructionFamily.SKIP_EQ_REG else "SNE"
        return f"{name} V{d.x:X}, V{d.y:X}"
    if family == InstructionFamily.SET_IMM:
        return f"LD V{d.x:X}, 0x{d.nn:02X}"
    if family == InstructionFamily.ADD_IMM:
        return f"ADD V{d.x:X}, 0x{d.nn:02X}"
    if family == InstructionFamily.ALU:
        if d.n not in _ALU_MNEMONICS:
            return unknown
        return f"{_ALU_MNEMONICS[d.n]} V{d.x:X}, V{d.y:X}"
    if family == InstructionFamily.SET_INDEX:
        return f"LD I, 0x{d.nnn:03X}"
    if family == InstructionFamily.JUMP_OFFSET:
        register = d.x if jump_uses_vx else 0
        return f"JP V{register:X}, 0x{d.nnn:03X}"
    if family == InstructionFamily.RANDOM:
        return f"RND V{d.x:X}, 0x{d.nn:02X}"
    if family == InstructionFamily.DRAW:
        return f"DRW V{d.x:X}, V{d.y:X}, {d.n}"
    if family == InstructionFamily.KEY:
        return {0x9E: f"SKP V{d.x:X}", 0xA1: f"SKNP V{d.x:X}"}.get(d.nn, unknown)
    if d.nn not in _MISC_FORMATS:
        return unknown
    return _MISC_FORMATS[d.nn].format(x=d.x)
