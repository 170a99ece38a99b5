from .regs import Registers
from .instruction import (
    AddressingMode, Instruction, OperationGroup, MNEMONICS, OPCODES,
    check_parity, decode_mnemonic_and_flags, encode, format_bits, format_text,
)
