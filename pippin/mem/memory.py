"""
Pippin Machine — Dual Address Space Memory

Two independent spaces:
  code  0..255   Instruction slots, None until written
  data  0..511   signed words, 0 until written

Code access outside its range, or a read of a slot that was never
written, raises CodeAccessError. Data is pre-sized, so any in-range
address reads as 0 until written; out-of-range addresses raise
DataAccessError (a negative address must never wrap around Python-style).

Change tracking for observers:
  program_size        highest code index ever written
  changed_data_index  address of the most recent data write, -1 if none
  watchpoints         callbacks fired on every write to a data address
"""

from typing import Callable, Dict, Iterable, List, Optional

from ..config import CODE_SIZE, DATA_SIZE, NO_CHANGE
from ..cpu.alu import to_word
from ..cpu.instruction import Instruction
from ..errors import CodeAccessError, DataAccessError

WatchCallback = Callable[[int, int, int], None]


class Memory:
    """Fixed-capacity code and data arrays with bounds-checked access."""

    def __init__(self):
        self._code: List[Optional[Instruction]] = [None] * CODE_SIZE
        self._data: List[int] = [0] * DATA_SIZE
        self._program_size = 0
        self._changed_data_index = NO_CHANGE

        # Watchpoints: addr → [callback(addr, old_val, new_val)]
        self._watchpoints: Dict[int, List[WatchCallback]] = {}

    # --- Bounds ---

    @staticmethod
    def _check_code_index(index: int):
        if not 0 <= index < CODE_SIZE:
            raise CodeAccessError(f"Illegal access to code at index {index}", index)

    @staticmethod
    def _check_data_address(address: int):
        if not 0 <= address < DATA_SIZE:
            raise DataAccessError(f"Illegal access to data at address {address}", address)

    # --- Code space ---

    def read_code(self, index: int) -> Instruction:
        self._check_code_index(index)
        instr = self._code[index]
        if instr is None:
            raise CodeAccessError(f"No instruction at code index {index}", index)
        return instr

    def write_code(self, index: int, instr: Instruction):
        self._check_code_index(index)
        self._code[index] = instr
        self._program_size = max(self._program_size, index)

    def read_code_range(self, lo: int, hi: int) -> List[Optional[Instruction]]:
        """Copy of code slots [lo, hi); unset slots are None."""
        return self._copy_range(self._code, lo, hi, None)

    def clear_code(self):
        for i in range(CODE_SIZE):
            self._code[i] = None
        self._program_size = 0

    @property
    def program_size(self) -> int:
        return self._program_size

    @program_size.setter
    def program_size(self, value: int):
        self._program_size = value

    # --- Data space ---

    def read_data(self, address: int) -> int:
        self._check_data_address(address)
        return self._data[address]

    def write_data(self, address: int, value: int):
        """Store a word and record the address for observers.

        Watchpoint callbacks fire with (addr, old, new) before the store.
        """
        self._check_data_address(address)
        value = to_word(value)
        old = self._data[address]

        if address in self._watchpoints:
            for cb in self._watchpoints[address]:
                cb(address, old, value)

        self._data[address] = value
        self._changed_data_index = address

    def read_data_range(self, lo: int, hi: int) -> List[int]:
        """Copy of data words [lo, hi). Positions past the end read as 0."""
        return self._copy_range(self._data, lo, hi, 0)

    def clear_data(self):
        """Zero every word and forget the last change. Watchpoints stay attached."""
        for i in range(DATA_SIZE):
            self._data[i] = 0
        self._changed_data_index = NO_CHANGE

    @property
    def changed_data_index(self) -> int:
        return self._changed_data_index

    def load_data(self, pairs: Iterable):
        """Bulk-write (address, value) pairs, e.g. a DATA section."""
        for address, value in pairs:
            self.write_data(address, value)

    @staticmethod
    def _copy_range(src: list, lo: int, hi: int, fill):
        if not 0 <= lo <= len(src):
            raise IndexError(f"range start {lo} outside 0..{len(src)}")
        if hi < lo:
            raise ValueError(f"range end {hi} before start {lo}")
        out = src[lo:hi]
        out.extend([fill] * (hi - lo - len(out)))
        return out

    # --- Watchpoints ---

    def add_watchpoint(self, address: int, callback: WatchCallback):
        """Call callback(addr, old_val, new_val) on every write to address."""
        self._check_data_address(address)
        self._watchpoints.setdefault(address, []).append(callback)

    def remove_watchpoint(self, address: int, callback: Optional[WatchCallback] = None):
        """Remove a watchpoint. If callback is None, removes all on that addr."""
        if address in self._watchpoints:
            if callback is None:
                del self._watchpoints[address]
            else:
                self._watchpoints[address] = [
                    cb for cb in self._watchpoints[address] if cb != callback
                ]

    # --- Snapshots (diff data state between steps) ---

    def snapshot_data(self) -> tuple:
        return tuple(self._data)

    @staticmethod
    def diff_snapshots(snap_a: tuple, snap_b: tuple) -> Dict[int, tuple]:
        """Compare two data snapshots, return {addr: (old, new)} for changes."""
        changes = {}
        for i in range(min(len(snap_a), len(snap_b))):
            if snap_a[i] != snap_b[i]:
                changes[i] = (snap_a[i], snap_b[i])
        return changes

    # --- Dump ---

    def dump_data(self, start: int = 0, length: int = 64, per_row: int = 8) -> str:
        """Text table of data words for debugging."""
        words = self.read_data_range(start, min(start + length, DATA_SIZE))
        lines = []
        for offset in range(0, len(words), per_row):
            row = ' '.join(f'{w:>8X}' for w in words[offset:offset + per_row])
            lines.append(f'{start + offset:03X}  {row}')
        return '\n'.join(lines)
