"""
Pippin Accumulator Machine
==========================
Emulator for the Pippin teaching machine: one accumulator, a program
counter, 256 code slots and 512 data words.

    ┌──────────────┐    ┌─────────────────┐    ┌──────────────────┐
    │ .pasm source │───>│ SyntaxValidator │───>│ (code generator) │
    └──────────────┘    └─────────────────┘    └────────┬─────────┘
                                                        │ Instructions
                                               ┌────────▼─────────┐
                                               │ ExecutionEngine  │
                                               │  Registers       │
                                               │  Memory          │
                                               └──────────────────┘

    - cpu/instruction.py: opcode byte codec, parity, text/bit formatting
    - cpu/regs.py:        accumulator + program counter
    - cpu/alu.py:         32-bit word arithmetic
    - mem/memory.py:      code and data address spaces
    - emu.py:             fetch / parity / decode / dispatch loop
    - asm/validator.py:   source grammar checker
"""

__version__ = "0.1.0"

from .errors import (
    MachineError, ParityError, IllegalInstructionError, InvalidOperationGroup,
    DivideByZeroError, CodeAccessError, DataAccessError,
)
from .cpu.instruction import (
    AddressingMode, Instruction, OperationGroup,
    check_parity, decode_mnemonic_and_flags, encode, format_bits, format_text,
)
from .cpu.regs import Registers
from .mem.memory import Memory
from .emu import ExecutionEngine, StopReason, LEGAL_MODES
from .asm.validator import SyntaxValidator, ValidationResult, Diagnostic, SourceSyntaxError
