"""
Intcode Interpreter and Parameter Solver
========================================
A small interpreter for the Intcode instruction encoding (ADD, MUL, HALT)
plus a solver that recovers the two override parameters producing a given
output.

Architecture:
    ┌───────────┐    ┌───────────┐    ┌───────────────┐    ┌──────────────┐
    │ text line │───>│  loader   │───>│    machine    │<───│    solver    │
    │ "1,0,0,…" │    │ list[int] │    │ step() / run()│    │ 3 runs + 1   │
    └───────────┘    └───────────┘    └───────────────┘    └──────────────┘

    - config.py:   memory layout, opcode numbers, puzzle defaults
    - memory.py:   bounds-checked flat memory, snapshots, dumps
    - opcodes.py:  opcode table, decoder, disassembler
    - machine.py:  state machine with Continue / Halted / Errored outcomes
    - solver.py:   affine-model inversion and output-surface sampling
    - loader.py:   comma-separated text to program
"""

__version__ = "0.1.0"

from .loader import ProgramFormatError, load_program, parse_program
from .memory import AddressError, Memory
from .opcodes import IllegalOpcode, decode_opcode, disassemble
from .machine import (
    IntcodeMachine, MachineError, MachineState, StopReason, RunResult,
    Snapshot, Continue, Halted, Errored, execute,
)
from .solver import AffineModelError, ParameterSolver, Solution, solve, sample_surface

__all__ = [
    'AddressError', 'AffineModelError', 'Continue', 'Errored', 'Halted',
    'IllegalOpcode', 'IntcodeMachine', 'MachineError', 'MachineState',
    'Memory', 'ParameterSolver', 'ProgramFormatError', 'RunResult',
    'Snapshot', 'Solution', 'StopReason', 'decode_opcode', 'disassemble',
    'execute', 'load_program', 'parse_program', 'run_program',
    'sample_surface', 'solve',
]


def run_program(program, noun=None, verb=None, max_steps=None) -> int:
    """Run a program with optional overrides and return memory[0].

    Raises MachineError if the program does not halt cleanly.
    """
    return execute(program, noun, verb, max_steps=max_steps)
