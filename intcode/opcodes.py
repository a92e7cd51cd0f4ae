"""
Intcode — Opcode Table and Disassembler

Maps opcode values to (mnemonic, width). Width is the number of cells the
instruction occupies in a listing; the machine itself always advances the
instruction pointer by config.STRIDE after ADD and MUL, and never moves it
after HALT.

  ADD   1  a b c    memory[c] = memory[a] + memory[b]
  MUL   2  a b c    memory[c] = memory[a] * memory[b]
  HALT  99          stop; memory[0] holds the answer

Operands a, b and c are addresses (position mode). There is no immediate
mode.
"""

from typing import List, Sequence, Tuple

from . import config


# ──────────────────────────────────────────────
# Opcode table
# ──────────────────────────────────────────────
# Format: opcode -> (mnemonic, width)

OPCODES = {
    config.OP_ADD:  ('ADD',  4),
    config.OP_MUL:  ('MUL',  4),
    config.OP_HALT: ('HALT', 1),
}


class IllegalOpcode(Exception):
    """Raised when an undefined opcode is encountered."""
    def __init__(self, opcode: int, ip: int):
        self.opcode = opcode
        self.ip = ip
        super().__init__(f"Unknown opcode {opcode} at {ip}")


def decode_opcode(memory, ip: int) -> Tuple[str, int]:
    """Fetch and decode the opcode at ip.

    Returns: (mnemonic, width)

    Raises IllegalOpcode for values outside the table. An ip past the end
    of memory surfaces as AddressError from the memory read.
    """
    opcode = memory.read(ip)
    if opcode in OPCODES:
        return OPCODES[opcode]
    raise IllegalOpcode(opcode, ip)


# ──────────────────────────────────────────────
# Disassembler
# ──────────────────────────────────────────────

def disassemble(program: Sequence[int], base: int = 0) -> List[str]:
    """Disassemble a program into a listing.

    Lines look like '0004  1,9,10,3      ADD   [9] [10] -> [3]'. Values that
    do not decode, and instructions truncated by the end of memory, are
    emitted one cell at a time as DATA. Decoding continues after HALT since
    the cells that follow are usually data still worth seeing.
    """
    lines = []
    i = 0
    while i < len(program):
        addr = base + i
        value = program[i]

        if value not in OPCODES:
            lines.append(f"{addr:04d}  {str(value):14s} DATA  {value}")
            i += 1
            continue

        mnem, width = OPCODES[value]
        if i + width > len(program):
            lines.append(f"{addr:04d}  {str(value):14s} DATA  {value}  ; truncated {mnem}")
            i += 1
            continue

        raw = ','.join(str(v) for v in program[i:i + width])
        if mnem == 'HALT':
            lines.append(f"{addr:04d}  {raw:14s} HALT")
        else:
            a, b, c = program[i + 1:i + 4]
            lines.append(f"{addr:04d}  {raw:14s} {mnem:5s} [{a}] [{b}] -> [{c}]")
        i += width

    return lines
