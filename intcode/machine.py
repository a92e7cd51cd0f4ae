"""
Intcode — Machine

The machine owns one program's memory and its instruction pointer.

Execution model:
  1. Fetch opcode at ip
  2. Decode → ADD, MUL or HALT (anything else is ILLEGAL)
  3. Resolve operands through one level of indirection
  4. Write the result, advance ip by STRIDE
  5. Stop on HALT, on an error, or when the step budget runs out

Each call to step() returns one of:
  Continue(snapshot)   instruction executed, machine still running
  Halted(memory)       HALT reached; memory[0] is the answer
  Errored(reason, msg) execution cannot continue

Termination reasons:
  HALT:     opcode 99
  ILLEGAL:  opcode outside {1, 2, 99}
  ADDRESS:  an operand or the ip points outside memory
  TIMEOUT:  run(max_steps=...) budget used up

A step that ends in an error commits nothing. Once terminal, step() keeps
returning the same outcome object and never touches memory again.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from . import config
from .memory import Memory, AddressError
from .opcodes import decode_opcode, IllegalOpcode

logger = logging.getLogger(__name__)


UNKNOWN_OPCODE = "Unknown Opcode"
ADDRESS_OUT_OF_RANGE = "Address Out Of Range"
EXCEEDED_STEP_BUDGET = "Exceeded Step Budget"


class StopReason(Enum):
    HALT = 'HALT'
    ILLEGAL = 'ILLEGAL'
    ADDRESS = 'ADDRESS'
    TIMEOUT = 'TIMEOUT'


class MachineState(Enum):
    RUNNING = 'RUNNING'
    HALTED = 'HALTED'
    ERRORED = 'ERRORED'


# ══════════════════════════════════════════════
# Step outcomes
# ══════════════════════════════════════════════

@dataclass(frozen=True)
class Snapshot:
    """Memory contents and instruction pointer after a successful step."""
    memory: Tuple[int, ...]
    ip: int


@dataclass(frozen=True)
class Continue:
    snapshot: Snapshot


@dataclass(frozen=True)
class Halted:
    memory: Tuple[int, ...]

    @property
    def answer(self) -> int:
        return self.memory[config.ANSWER_ADDR]


@dataclass(frozen=True)
class Errored:
    reason: StopReason
    message: str
    ip: int


Outcome = Union[Continue, Halted, Errored]


class MachineError(Exception):
    """An Errored outcome raised across an API boundary.

    str(err) is the outcome's message, e.g. "Unknown Opcode".
    """
    def __init__(self, outcome: Errored):
        self.outcome = outcome
        self.reason = outcome.reason
        self.ip = outcome.ip
        super().__init__(outcome.message)


@dataclass
class RunResult:
    outcome: Union[Halted, Errored]
    snapshots: List[Snapshot] = field(default_factory=list)
    steps: int = 0

    @property
    def halted(self) -> bool:
        return isinstance(self.outcome, Halted)

    @property
    def answer(self) -> Optional[int]:
        """memory[0] after HALT, None if the run errored."""
        if isinstance(self.outcome, Halted):
            return self.outcome.answer
        return None


# ══════════════════════════════════════════════
# Machine
# ══════════════════════════════════════════════

class IntcodeMachine:
    """Intcode interpreter for ADD / MUL / HALT.

    Usage:
        m = IntcodeMachine(program, noun=12, verb=2)
        result = m.run()
        if result.halted:
            print(result.answer)
        else:
            print(result.outcome.message)
    """

    def __init__(self, program: Sequence[int], noun: Optional[int] = None,
                 verb: Optional[int] = None, trace: bool = False):
        self.mem = Memory(program)
        self.ip = 0
        self.steps = 0
        self._outcome: Optional[Union[Halted, Errored]] = None

        self._trace = trace
        self._trace_output: List[str] = []

        self._dispatch = self._build_dispatch()

        if noun is not None or verb is not None:
            self.apply_overrides(noun, verb)

    # ══════════════════════════════════════════════
    # Setup
    # ══════════════════════════════════════════════

    def apply_overrides(self, noun: Optional[int] = None, verb: Optional[int] = None):
        """Overwrite the noun/verb cells before execution starts.

        A program too short to hold the override cells ends the machine
        with an ADDRESS outcome before the first step.
        """
        if self.steps or self._outcome is not None:
            raise RuntimeError("Overrides must be applied before the first step")
        writes = [(addr, value) for addr, value in
                  ((config.NOUN_ADDR, noun), (config.VERB_ADDR, verb)) if value is not None]
        try:
            # Both cells must exist before either is written.
            for addr, _ in writes:
                self.mem.read(addr)
        except AddressError as e:
            logger.debug(f"Overrides: {e}")
            self._terminate(Errored(StopReason.ADDRESS, ADDRESS_OUT_OF_RANGE, 0))
            return
        for addr, value in writes:
            self.mem.write(addr, value)

    @property
    def state(self) -> MachineState:
        if self._outcome is None:
            return MachineState.RUNNING
        if isinstance(self._outcome, Halted):
            return MachineState.HALTED
        return MachineState.ERRORED

    @property
    def outcome(self) -> Optional[Union[Halted, Errored]]:
        """Terminal outcome, or None while still running."""
        return self._outcome

    @property
    def trace_output(self) -> List[str]:
        return self._trace_output

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self) -> Outcome:
        """Execute one instruction and return its outcome."""
        if self._outcome is not None:
            return self._outcome

        ip = self.ip
        try:
            mnem, _ = decode_opcode(self.mem, ip)
        except IllegalOpcode as e:
            logger.debug(str(e))
            return self._terminate(Errored(StopReason.ILLEGAL, UNKNOWN_OPCODE, ip))
        except AddressError as e:
            logger.debug(f"Fetch at {ip}: {e}")
            return self._terminate(Errored(StopReason.ADDRESS, ADDRESS_OUT_OF_RANGE, ip))

        if mnem == 'HALT':
            return self._terminate(Halted(self.mem.snapshot()))

        # Resolve everything before the write so a bad address leaves
        # memory untouched.
        try:
            src_a = self.mem.read(ip + 1)
            src_b = self.mem.read(ip + 2)
            dest = self.mem.read(ip + 3)
            a = self.mem.read_indirect(ip + 1)
            b = self.mem.read_indirect(ip + 2)
            result = self._dispatch[mnem](a, b)
            self.mem.write(dest, result)
        except AddressError as e:
            logger.debug(f"{mnem} at {ip}: {e}")
            return self._terminate(Errored(StopReason.ADDRESS, ADDRESS_OUT_OF_RANGE, ip))

        line = f"{ip:04d}: {mnem:4s} [{src_a}]={a} [{src_b}]={b} -> [{dest}]={result}"
        logger.debug(line)
        if self._trace:
            self._trace_output.append(line)

        self.ip += config.STRIDE
        self.steps += 1
        return Continue(Snapshot(self.mem.snapshot(), self.ip))

    def run(self, max_steps: Optional[int] = None, history: bool = False) -> RunResult:
        """Step until HALT or an error.

        Args:
            max_steps: Maximum ADD/MUL instructions this call may execute
                before stopping with TIMEOUT. None means no limit, in which
                case a program that never halts never returns.
            history: Collect a Snapshot for every executed instruction.

        Returns:
            RunResult with the terminal outcome
        """
        snapshots: List[Snapshot] = []
        executed = 0

        while True:
            if (max_steps is not None and executed >= max_steps
                    and self._outcome is None and self._would_execute()):
                outcome = self._terminate(
                    Errored(StopReason.TIMEOUT, EXCEEDED_STEP_BUDGET, self.ip))
                break

            outcome = self.step()
            if not isinstance(outcome, Continue):
                break
            executed += 1
            if history:
                snapshots.append(outcome.snapshot)

        return RunResult(outcome, snapshots, self.steps)

    def iter_states(self) -> Iterator[Snapshot]:
        """Lazily yield a Snapshot per executed instruction.

        The generator stops at the first terminal outcome; read it from
        self.outcome afterwards.
        """
        while True:
            outcome = self.step()
            if not isinstance(outcome, Continue):
                return
            yield outcome.snapshot

    def _would_execute(self) -> bool:
        """True if the next step would run an ADD or MUL."""
        try:
            return self.mem.read(self.ip) in (config.OP_ADD, config.OP_MUL)
        except AddressError:
            return False

    def _terminate(self, outcome: Union[Halted, Errored]) -> Union[Halted, Errored]:
        self._outcome = outcome
        if isinstance(outcome, Halted):
            logger.debug(f"HALT at {self.ip} after {self.steps} steps, answer={outcome.answer}")
        else:
            logger.debug(f"{outcome.reason.value} at {outcome.ip}: {outcome.message}")
        return outcome

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════

    def _build_dispatch(self) -> dict:
        return {
            'ADD': self._op_add,
            'MUL': self._op_mul,
        }

    @staticmethod
    def _op_add(a: int, b: int) -> int:
        return a + b

    @staticmethod
    def _op_mul(a: int, b: int) -> int:
        return a * b


def execute(program: Sequence[int], noun: Optional[int] = None,
            verb: Optional[int] = None, max_steps: Optional[int] = None) -> int:
    """Run a private copy of program with overrides and return memory[0].

    Raises MachineError if the run does not halt cleanly.
    """
    result = IntcodeMachine(program, noun=noun, verb=verb).run(max_steps=max_steps)
    if isinstance(result.outcome, Errored):
        raise MachineError(result.outcome)
    return result.answer
