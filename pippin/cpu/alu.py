"""
Pippin Machine — Machine-Word Arithmetic

The accumulator, program counter and instruction argument are signed
32-bit words. Python ints are unbounded, so every result that lands in a
register goes through to_word() to get the same wraparound the hardware
word has.

Division truncates toward zero (not Python's floor division), so
-7 / 2 == -3 on this machine.

Logical results are collapsed to 0 / 1: the machine has no boolean
type, any non-zero word counts as true.
"""

from ..config import WORD_BITS, WORD_MIN, WORD_MAX

_WORD_MASK = (1 << WORD_BITS) - 1
_SIGN_BIT = 1 << (WORD_BITS - 1)


def to_word(value: int) -> int:
    """Wrap an unbounded int into the signed 32-bit word range."""
    value &= _WORD_MASK
    if value & _SIGN_BIT:
        return value - (1 << WORD_BITS)
    return value


def to_unsigned(value: int) -> int:
    """Two's complement bit pattern of a word, as a non-negative int."""
    return value & _WORD_MASK


def fits_word(value: int) -> bool:
    return WORD_MIN <= value <= WORD_MAX


# ══════════════════════════════════════════════
# Accumulator operations — return the new word
# ══════════════════════════════════════════════

def add(a: int, b: int) -> int:
    return to_word(a + b)


def sub(a: int, b: int) -> int:
    return to_word(a - b)


def mul(a: int, b: int) -> int:
    return to_word(a * b)


def div(a: int, b: int) -> int:
    """Truncating division. Caller must have rejected b == 0.

    MIN_WORD / -1 overflows and wraps back to MIN_WORD, same as the
    hardware word.
    """
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    return to_word(q)


def logical_not(a: int) -> int:
    return 1 if a == 0 else 0


def logical_and(a: int, b: int) -> int:
    return 1 if a != 0 and b != 0 else 0


def is_negative(a: int) -> int:
    return 1 if a < 0 else 0


def is_zero(a: int) -> int:
    return 1 if a == 0 else 0


def popcount8(byte: int) -> int:
    """Number of set bits in the low 8 bits."""
    return bin(byte & 0xFF).count("1")
