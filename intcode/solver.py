"""
Intcode — Parameter Solver

Finds the (noun, verb) pair that makes a program leave a target value in
memory[0], without searching the whole parameter grid.

For the supported programs the output surface is a plane:

    output = base + grad_x * noun + grad_y * verb

Three calibration runs at (0, 0), (1, 0) and (0, 1) give base and both
gradients. The target is then inverted in closed form with truncating
integer division, and one more run confirms the answer.

This is a property of the puzzle programs, not of Intcode in general.
A program that breaks the plane assumption fails the verification run and
raises AffineModelError, or terminates the process if the caller asked for
fatal=True. sample_surface() prints the raw grid for a quick visual check.
"""

import logging
import sys
from typing import List, NamedTuple, Optional, Sequence, Tuple

from .machine import execute, MachineError

logger = logging.getLogger(__name__)


class AffineModelError(Exception):
    """The program's output is not affine in its two override parameters."""
    def __init__(self, message: str, target: int = None, got: int = None):
        self.target = target
        self.got = got
        super().__init__(message)


class Solution(NamedTuple):
    noun: int
    verb: int
    base: int
    grad_x: int
    grad_y: int

    @property
    def code(self) -> int:
        """Puzzle answer format: 100 * noun + verb."""
        return 100 * self.noun + self.verb


def _trunc_div(a: int, b: int) -> int:
    """Integer division rounding toward zero (Python's // floors)."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


class ParameterSolver:
    """Closed-form noun/verb inversion for one program.

    bounds is informational: it travels with the solver so callers can
    check a solution against the puzzle's range, but the algorithm never
    restricts itself to it.
    """

    def __init__(self, program: Sequence[int], bounds: Optional[Tuple[int, int]] = None,
                 max_steps: Optional[int] = None):
        self.program = list(program)
        self.bounds = bounds
        self.max_steps = max_steps

    def _run(self, noun: int, verb: int) -> int:
        return execute(self.program, noun, verb, max_steps=self.max_steps)

    def calibrate(self) -> Tuple[int, int, int]:
        """Return (base, grad_x, grad_y). MachineError propagates unchanged."""
        base = self._run(0, 0)
        grad_x = self._run(1, 0) - base
        grad_y = self._run(0, 1) - base
        logger.info(f"Calibration: base={base} grad_x={grad_x} grad_y={grad_y}")
        return base, grad_x, grad_y

    def solve(self, target: int, fatal: bool = False) -> Solution:
        """Find (noun, verb) such that running the program yields target.

        Args:
            target: Required value of memory[0] after HALT.
            fatal: Treat a broken affine assumption as unrecoverable and
                exit the process instead of raising AffineModelError.

        Raises:
            MachineError: a calibration or verification run errored.
            AffineModelError: the verification run missed the target.
        """
        base, grad_x, grad_y = self.calibrate()

        diff = target - base
        noun = _trunc_div(diff, grad_x) if grad_x else 0
        rest = diff - noun * grad_x
        verb = _trunc_div(rest, grad_y) if grad_y else 0
        logger.debug(f"diff={diff} -> noun={noun} verb={verb}")

        if noun < 0 or verb < 0:
            return self._violation(
                f"No non-negative parameters reach {target} (noun={noun}, verb={verb})",
                target, None, fatal)

        got = self._run(noun, verb)
        if got != target:
            return self._violation(
                f"Affine model violated: noun={noun} verb={verb} gives {got}, expected {target}",
                target, got, fatal)

        return Solution(noun, verb, base, grad_x, grad_y)

    def in_bounds(self, solution: Solution) -> bool:
        if self.bounds is None:
            return True
        low, high = self.bounds
        return low <= solution.noun <= high and low <= solution.verb <= high

    @staticmethod
    def _violation(message: str, target: int, got: Optional[int], fatal: bool):
        if fatal:
            logger.critical(message)
            sys.exit(2)
        raise AffineModelError(message, target, got)


def solve(program: Sequence[int], target: int, bounds: Optional[Tuple[int, int]] = None,
          fatal: bool = False, max_steps: Optional[int] = None) -> Solution:
    """Convenience wrapper around ParameterSolver(program).solve(target)."""
    return ParameterSolver(program, bounds=bounds, max_steps=max_steps).solve(target, fatal=fatal)


def sample_surface(program: Sequence[int], width: int, height: int,
                   max_steps: Optional[int] = None) -> List[List[int]]:
    """Sample the output for noun in range(width), verb in range(height).

    Returns rows indexed [verb][noun]. Runs that error count as 0.
    """
    grid = []
    for verb in range(height):
        row = []
        for noun in range(width):
            try:
                row.append(execute(program, noun, verb, max_steps=max_steps))
            except MachineError as e:
                logger.debug(f"noun={noun} verb={verb}: {e}")
                row.append(0)
        grid.append(row)
    return grid
