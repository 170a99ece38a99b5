"""
Pippin Machine — Instruction Word Codec

One instruction is an opcode byte plus a signed word argument:

    bit  7 6 5 4 3 | 2 1 | 0
         group     | mode| parity

    opcode = group*8 + mode*2 + parity

The parity bit is chosen so the whole byte has an even number of set
bits. A byte with odd parity is a corrupted word and must never be
executed — check_parity() runs before every dispatch.

Addressing modes (the 2-bit field):
  DIRECT     00  operand is data[arg]
  IMMEDIATE  01  operand is arg itself         ('#' in source)
  INDIRECT   10  operand is data[data[arg]]    ('@' in source)
  ABSOLUTE   11  jump family only: pc = data[arg] ('&' in source)

Which modes an operation accepts is decided by the engine, not here.
"""

from dataclasses import dataclass
from enum import IntEnum
from types import MappingProxyType
from typing import Mapping, Tuple, Union

from ..errors import InvalidOperationGroup, ParityError
from . import alu


# ──────────────────────────────────────────────
# Operation groups
# ──────────────────────────────────────────────

class OperationGroup(IntEnum):
    NOP = 0
    NOT = 1
    HALT = 2
    LOD = 3
    STO = 4
    ADD = 5
    SUB = 6
    MUL = 7
    DIV = 8
    AND = 9
    JUMP = 10
    JMPZ = 11
    CMPL = 12
    CMPZ = 13


class AddressingMode(IntEnum):
    DIRECT = 0
    IMMEDIATE = 1
    INDIRECT = 2
    ABSOLUTE = 3

    @property
    def bits(self) -> str:
        """Two-digit binary form used in diagnostics, e.g. '10'."""
        return format(self.value, "02b")


# Source-text prefix for each mode (DIRECT has none)
MODE_PREFIX = MappingProxyType({
    AddressingMode.DIRECT: "",
    AddressingMode.IMMEDIATE: "#",
    AddressingMode.INDIRECT: "@",
    AddressingMode.ABSOLUTE: "&",
})

# mnemonic -> group number, group number -> mnemonic
OPCODES: Mapping[str, int] = MappingProxyType({g.name: g.value for g in OperationGroup})
MNEMONICS: Mapping[int, str] = MappingProxyType({g.value: g.name for g in OperationGroup})

NO_ARGUMENT_MNEMONICS = frozenset({"NOP", "NOT", "HALT"})

GroupLike = Union[OperationGroup, int, str]


def takes_argument(mnemonic: str) -> bool:
    return mnemonic.upper() not in NO_ARGUMENT_MNEMONICS


def _to_group(group: GroupLike) -> OperationGroup:
    if isinstance(group, str):
        try:
            return OperationGroup[group.upper()]
        except KeyError:
            raise InvalidOperationGroup(group) from None
    try:
        return OperationGroup(group)
    except ValueError:
        raise InvalidOperationGroup(group) from None


def parity_bit(value: int) -> int:
    """Bit that makes value's set-bit count even."""
    return alu.popcount8(value) & 1


# ──────────────────────────────────────────────
# Instruction value type
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class Instruction:
    """One machine word. Build with Instruction.encode() unless you are
    deliberately constructing a raw (possibly corrupt) opcode."""
    opcode: int
    arg: int = 0

    def __post_init__(self):
        if not 0 <= self.opcode <= 0xFF:
            raise ValueError(f"opcode must be an unsigned byte, got {self.opcode}")
        if not alu.fits_word(self.arg):
            raise ValueError(f"arg {self.arg} does not fit a {alu.WORD_BITS}-bit word")

    @classmethod
    def encode(cls, group: GroupLike, flags: int = 0, arg: int = 0) -> "Instruction":
        """Compose opcode = group*8 + flags*2 + parity."""
        grp = _to_group(group)
        flags = int(flags)
        if not 0 <= flags <= 3:
            raise ValueError(f"addressing flags must be 0..3, got {flags}")
        body = grp.value * 8 + flags * 2
        return cls(body + parity_bit(body), arg)

    # --- field access ---

    @property
    def group_number(self) -> int:
        return self.opcode // 8

    @property
    def flags(self) -> int:
        return (self.opcode & 6) // 2

    @property
    def parity(self) -> int:
        return self.opcode & 1

    @property
    def group(self) -> OperationGroup:
        return _to_group(self.group_number)

    @property
    def mode(self) -> AddressingMode:
        return AddressingMode(self.flags)

    def __str__(self) -> str:
        return f"Instruction [{self.opcode:b}, {self.arg:x}]"


# ──────────────────────────────────────────────
# Codec functions
# ──────────────────────────────────────────────

def encode(group: GroupLike, flags: int = 0, arg: int = 0) -> Instruction:
    return Instruction.encode(group, flags, arg)


def decode_mnemonic_and_flags(instr: Instruction) -> Tuple[str, int]:
    """Inverse lookup: (mnemonic, addressing flags)."""
    return instr.group.name, instr.flags


def check_parity(instr: Instruction):
    """Raise ParityError when the opcode byte has an odd set-bit count."""
    if alu.popcount8(instr.opcode) % 2 == 1:
        raise ParityError(
            f"This instruction is corrupted (opcode {instr.opcode:08b})",
            opcode=instr.opcode)


def format_text(instr: Instruction) -> str:
    """Assembly form, e.g. 'LOD  #1A'."""
    mnem = MNEMONICS.get(instr.group_number, "???")
    prefix = MODE_PREFIX[instr.mode]
    return f"{mnem}  {prefix}{instr.arg:x}".upper()


def format_bits(instr: Instruction) -> str:
    """Binary opcode and hex argument, e.g. '00011011  1A'.

    Negative arguments show their 32-bit two's complement pattern.
    """
    return f"{instr.opcode:08b}  {alu.to_unsigned(instr.arg):X}"
