"""
Pippin Machine — CPU Register Set

Register model:
  ACC — signed word accumulator, the only general-purpose register
  PC  — signed word program counter, index of the next code slot

PC is allowed to leave [0, CODE_SIZE) after a jump; the fault is raised
by the next fetch, not here.
"""

from .alu import to_word


class Registers:
    """Pippin CPU register set. Owned by exactly one ExecutionEngine."""

    __slots__ = ('_accumulator', '_program_counter')

    def __init__(self):
        self._accumulator: int = 0
        self._program_counter: int = 0

    @property
    def accumulator(self) -> int:
        return self._accumulator

    @accumulator.setter
    def accumulator(self, value: int):
        self._accumulator = to_word(value)

    @property
    def program_counter(self) -> int:
        return self._program_counter

    @program_counter.setter
    def program_counter(self, value: int):
        self._program_counter = to_word(value)

    def advance(self, count: int = 1):
        """Move PC forward by count slots."""
        self.program_counter = self._program_counter + count

    # --- Display ---

    def display(self) -> str:
        """Format register state for trace output."""
        return f"PC={self._program_counter:02X} ACC={self._accumulator} (0x{self._accumulator & 0xFFFFFFFF:08X})"

    def reset(self):
        """Reset CPU to power-on state."""
        self._accumulator = 0
        self._program_counter = 0
