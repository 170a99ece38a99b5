"""
Pippin Machine — Execution Engine

Integrates:
  - CPU registers (cpu/regs.py)
  - Instruction codec (cpu/instruction.py)
  - Word arithmetic (cpu/alu.py)
  - Code/data memory (mem/memory.py)

Execution model, one instruction per step():
  1. Fetch instruction at PC        → CodeAccessError
  2. Check opcode parity            → ParityError
  3. Decode group + addressing mode → InvalidOperationGroup
  4. Check mode against LEGAL_MODES → IllegalInstructionError
  5. Run the group's handler        → DivideByZeroError, DataAccessError

Any fault halts the machine (callback included) and is re-raised to the
caller. The addressing mode is checked before any handler runs and
handlers raise before their first write, so an aborted step leaves
registers and memory as they were.

Termination reasons from run():
  - HALT:     HALT instruction executed
  - ERROR:    a MachineError was raised; see engine.fault
  - TIMEOUT:  step budget exhausted
"""

import logging
from enum import Enum
from types import MappingProxyType
from typing import Callable, Dict, FrozenSet, Iterable, Mapping, Optional, Union

from . import config
from .cpu import alu
from .cpu.instruction import AddressingMode, Instruction, OperationGroup, check_parity, format_text
from .cpu.regs import Registers
from .errors import DivideByZeroError, IllegalInstructionError, MachineError
from .mem.memory import Memory

log = logging.getLogger(__name__)

DIRECT = AddressingMode.DIRECT
IMMEDIATE = AddressingMode.IMMEDIATE
INDIRECT = AddressingMode.INDIRECT
ABSOLUTE = AddressingMode.ABSOLUTE

HaltCallback = Callable[[], None]


# Addressing modes each group accepts. Anything else is an illegal instruction.
LEGAL_MODES: Mapping[OperationGroup, FrozenSet[AddressingMode]] = MappingProxyType({
    OperationGroup.NOP:  frozenset({DIRECT}),
    OperationGroup.NOT:  frozenset({DIRECT}),
    OperationGroup.HALT: frozenset({DIRECT}),
    OperationGroup.LOD:  frozenset({DIRECT, IMMEDIATE, INDIRECT}),
    OperationGroup.STO:  frozenset({DIRECT, INDIRECT}),
    OperationGroup.ADD:  frozenset({DIRECT, IMMEDIATE, INDIRECT}),
    OperationGroup.SUB:  frozenset({DIRECT, IMMEDIATE, INDIRECT}),
    OperationGroup.MUL:  frozenset({DIRECT, IMMEDIATE, INDIRECT}),
    OperationGroup.DIV:  frozenset({DIRECT, IMMEDIATE, INDIRECT}),
    OperationGroup.AND:  frozenset({DIRECT, IMMEDIATE}),
    OperationGroup.JUMP: frozenset({DIRECT, IMMEDIATE, INDIRECT, ABSOLUTE}),
    OperationGroup.JMPZ: frozenset({DIRECT, IMMEDIATE, INDIRECT, ABSOLUTE}),
    OperationGroup.CMPL: frozenset({DIRECT}),
    OperationGroup.CMPZ: frozenset({DIRECT}),
})


def is_legal(group: OperationGroup, mode: AddressingMode) -> bool:
    return mode in LEGAL_MODES[group]


class StopReason(Enum):
    HALT = 'HALT'
    ERROR = 'ERROR'
    TIMEOUT = 'TIMEOUT'


class ExecutionEngine:
    """Pippin accumulator machine.

    Usage:
        engine = ExecutionEngine(halt_callback=on_halt)
        engine.load([Instruction.encode('LOD', 1, 0x12),
                     Instruction.encode('HALT')])
        reason = engine.run()
        print(engine.regs.accumulator)   # 18

    Not reentrant: hosts that step from a timer must serialize calls.
    """

    def __init__(self, halt_callback: Optional[HaltCallback] = None):
        self.regs = Registers()
        self.mem = Memory()
        self._halt_callback = halt_callback
        self._halted = False
        self.fault: Optional[MachineError] = None
        self.steps = 0

        self._dispatch = self._build_dispatch()

    # ══════════════════════════════════════════════
    # State
    # ══════════════════════════════════════════════

    @property
    def halted(self) -> bool:
        return self._halted

    def clear(self):
        """Reset memory and registers to power-on state. Idempotent.

        Data watchpoints are host attachments, not machine state, and stay
        registered across clear() and load().
        """
        self.mem.clear_code()
        self.mem.clear_data()
        self.regs.reset()
        self._halted = False
        self.fault = None
        self.steps = 0

    def load(self, program: Iterable[Instruction],
             data: Union[Mapping[int, int], Iterable, None] = None):
        """Clear, then place program at code index 0 and apply data initializers."""
        self.clear()
        count = 0
        for count, instr in enumerate(program, start=1):
            self.mem.write_code(count - 1, instr)
        if data is not None:
            pairs = data.items() if isinstance(data, Mapping) else data
            self.mem.load_data(pairs)
        log.debug("Loaded program: %d instructions", count)

    # --- Host accessors ---

    def get_data(self, address: int) -> int:
        return self.mem.read_data(address)

    def set_data(self, address: int, value: int):
        self.mem.write_data(address, value)

    def get_code(self, index: int) -> Instruction:
        return self.mem.read_code(index)

    def set_code(self, index: int, instr: Instruction):
        self.mem.write_code(index, instr)

    @property
    def program_size(self) -> int:
        return self.mem.program_size

    @property
    def changed_data_index(self) -> int:
        return self.mem.changed_data_index

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self) -> Optional[StopReason]:
        """Execute one instruction.

        Returns StopReason.HALT if the machine is (now) halted, else None.
        Raises the MachineError that aborted the step, after halting.
        """
        if self._halted:
            return StopReason.HALT

        pc = self.regs.program_counter
        try:
            instr = self.mem.read_code(pc)
            check_parity(instr)
            group = instr.group
            mode = instr.mode
            if not is_legal(group, mode):
                raise IllegalInstructionError(
                    f"Illegal flags for this instruction: ({mode.bits})", flags=int(mode))
            if log.isEnabledFor(logging.DEBUG):
                log.debug("%02X: %-12s %s", pc, format_text(instr), self.regs.display())
            self._dispatch[group](instr, mode)
        except MachineError as e:
            log.warning("Fault at pc=%d: %s: %s", pc, type(e).__name__, e)
            self.fault = e
            self._halt()
            raise

        self.steps += 1
        if self._halted:
            return StopReason.HALT
        return None

    def run(self, max_steps: Optional[int] = None) -> StopReason:
        """Step until HALT, a fault or max_steps instructions.

        Faults are not re-raised here; inspect engine.fault.
        """
        if max_steps is None:
            max_steps = config.DEFAULT_MAX_STEPS

        for _ in range(max_steps):
            try:
                reason = self.step()
            except MachineError:
                return StopReason.ERROR
            if reason is not None:
                return reason

        log.info("Step budget of %d exhausted at pc=%d", max_steps, self.regs.program_counter)
        return StopReason.TIMEOUT

    def _halt(self):
        if self._halted:
            return
        self._halted = True
        log.info("Machine halted at pc=%d", self.regs.program_counter)
        if self._halt_callback is not None:
            self._halt_callback()

    # ══════════════════════════════════════════════
    # Operand resolution
    # ══════════════════════════════════════════════

    def _operand(self, instr: Instruction, mode: AddressingMode) -> int:
        """Effective operand value for load/arithmetic instructions.

        DIRECT: data[arg], IMMEDIATE: arg, INDIRECT: data[data[arg]].
        """
        if mode == IMMEDIATE:
            return instr.arg
        if mode == DIRECT:
            return self.mem.read_data(instr.arg)
        return self.mem.read_data(self.mem.read_data(instr.arg))

    def _jump_target(self, instr: Instruction, mode: AddressingMode) -> int:
        """New PC for JUMP/JMPZ.

        DIRECT: pc + arg, IMMEDIATE: arg,
        INDIRECT: pc + data[arg], ABSOLUTE: data[arg].
        """
        pc = self.regs.program_counter
        if mode == DIRECT:
            return pc + instr.arg
        if mode == IMMEDIATE:
            return instr.arg
        if mode == INDIRECT:
            return pc + self.mem.read_data(instr.arg)
        return self.mem.read_data(instr.arg)

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════
    # Handler signature: handler(instr, mode)

    def _build_dispatch(self) -> Dict[OperationGroup, Callable]:
        """Build group → handler dispatch table."""
        table = {
            OperationGroup.NOP:  self._op_nop,
            OperationGroup.NOT:  self._op_not,
            OperationGroup.HALT: self._op_halt,
            OperationGroup.LOD:  self._op_lod,
            OperationGroup.STO:  self._op_sto,
            OperationGroup.ADD:  self._op_add,
            OperationGroup.SUB:  self._op_sub,
            OperationGroup.MUL:  self._op_mul,
            OperationGroup.DIV:  self._op_div,
            OperationGroup.AND:  self._op_and,
            OperationGroup.JUMP: self._op_jump,
            OperationGroup.JMPZ: self._op_jmpz,
            OperationGroup.CMPL: self._op_cmpl,
            OperationGroup.CMPZ: self._op_cmpz,
        }
        missing = set(OperationGroup) - set(table)
        assert not missing, f"no handler for {sorted(g.name for g in missing)}"
        return table

    # ── Control ──

    def _op_nop(self, instr, mode):
        self.regs.advance()

    def _op_halt(self, instr, mode):
        self._halt()

    # ── Load/Store ──

    def _op_lod(self, instr, mode):
        self.regs.accumulator = self._operand(instr, mode)
        self.regs.advance()

    def _op_sto(self, instr, mode):
        if mode == DIRECT:
            address = instr.arg
        else:
            address = self.mem.read_data(instr.arg)
        self.mem.write_data(address, self.regs.accumulator)
        self.regs.advance()

    # ── Arithmetic ──

    def _arith(self, instr, mode, fn):
        self.regs.accumulator = fn(self.regs.accumulator, self._operand(instr, mode))
        self.regs.advance()

    def _op_add(self, instr, mode):
        self._arith(instr, mode, alu.add)

    def _op_sub(self, instr, mode):
        self._arith(instr, mode, alu.sub)

    def _op_mul(self, instr, mode):
        self._arith(instr, mode, alu.mul)

    def _op_div(self, instr, mode):
        divisor = self._operand(instr, mode)
        if divisor == 0:
            raise DivideByZeroError()
        self.regs.accumulator = alu.div(self.regs.accumulator, divisor)
        self.regs.advance()

    # ── Logic / Compare ──

    def _op_not(self, instr, mode):
        self.regs.accumulator = alu.logical_not(self.regs.accumulator)
        self.regs.advance()

    def _op_and(self, instr, mode):
        self.regs.accumulator = alu.logical_and(self.regs.accumulator, self._operand(instr, mode))
        self.regs.advance()

    def _op_cmpl(self, instr, mode):
        self.regs.accumulator = alu.is_negative(self.mem.read_data(instr.arg))
        self.regs.advance()

    def _op_cmpz(self, instr, mode):
        self.regs.accumulator = alu.is_zero(self.mem.read_data(instr.arg))
        self.regs.advance()

    # ── Jumps ──

    def _op_jump(self, instr, mode):
        self.regs.program_counter = self._jump_target(instr, mode)

    def _op_jmpz(self, instr, mode):
        if self.regs.accumulator == 0:
            self.regs.program_counter = self._jump_target(instr, mode)
        else:
            self.regs.advance()
