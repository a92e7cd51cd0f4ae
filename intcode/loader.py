"""
Intcode — Program Loading

A program is a single line of comma-separated non-negative integers:

    1,9,10,3,2,3,11,0,99,30,40,50

Only the first line of a file is read. Every bad token is collected so a
broken input reports all of its problems at once.
"""

from pathlib import Path
from typing import List, Union


class ProgramFormatError(ValueError):
    """Raised when program text cannot be parsed. .errors lists each problem."""
    def __init__(self, errors: List[str], source: str = ""):
        self.errors = errors
        self.source = source
        prefix = f"{source}: " if source else ""
        super().__init__(prefix + "; ".join(errors))


def parse_program(text: str, source: str = "") -> List[int]:
    """Parse comma-separated text into a list of cells."""
    text = text.strip()
    if not text:
        raise ProgramFormatError(["empty program"], source)

    program = []
    errors = []
    for pos, token in enumerate(text.split(',')):
        token = token.strip()
        try:
            value = int(token)
        except ValueError:
            errors.append(f"cell {pos}: invalid integer {token!r}")
            continue
        if value < 0:
            errors.append(f"cell {pos}: negative value {value}")
            continue
        program.append(value)

    if errors:
        raise ProgramFormatError(errors, source)
    return program


def load_program(path: Union[str, Path]) -> List[int]:
    """Read and parse the first line of a program file."""
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        line = f.readline()
    if not line.strip():
        raise ProgramFormatError(["file needs at least one line"], str(path))
    return parse_program(line, source=str(path))
