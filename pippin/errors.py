"""
Pippin Machine — Runtime Error Taxonomy

Every fault the execution core can raise derives from MachineError, so a
host can catch the whole family in one place and still tell the kinds
apart for display.
"""

from typing import Optional


class MachineError(Exception):
    """Base class for faults raised by the instruction codec, memory or engine."""


class ParityError(MachineError):
    """Opcode byte has an odd number of set bits — the word is corrupted."""

    def __init__(self, message: str = "This instruction is corrupted", opcode: Optional[int] = None):
        self.opcode = opcode
        super().__init__(message)


class IllegalInstructionError(MachineError):
    """Operation group does not accept the given addressing flags."""

    def __init__(self, message: str, flags: int = 0):
        self.flags = flags
        super().__init__(message)

    @property
    def flag_bits(self) -> str:
        return format(self.flags, "02b")


class InvalidOperationGroup(MachineError, ValueError):
    """Operation group is not one of the 14 defined mnemonics."""

    def __init__(self, group):
        self.group = group
        super().__init__(f"Unknown operation group: {group!r}")


class DivideByZeroError(MachineError):
    """DIV with a zero divisor. Raised before the accumulator is touched."""

    def __init__(self, message: str = "Cannot divide by zero"):
        super().__init__(message)


class CodeAccessError(MachineError):
    """Code index outside [0, CODE_SIZE) or a slot that was never written."""

    def __init__(self, message: str, index: int):
        self.index = index
        super().__init__(message)


class DataAccessError(MachineError, IndexError):
    """Data address outside [0, DATA_SIZE)."""

    def __init__(self, message: str, address: int):
        self.address = address
        super().__init__(message)
