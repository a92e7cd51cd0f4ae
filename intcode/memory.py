"""
Intcode — Flat Program Memory

Memory is a fixed-length list of non-negative integers. Code and data share
the same address space; every address is an absolute offset.

Unlike a hardware address bus there is no wrap-around: an address outside
[0, len) raises AddressError, which the machine turns into an ADDRESS
outcome instead of letting an IndexError escape mid-instruction.
"""

from typing import Dict, Iterable, Tuple


class AddressError(IndexError):
    """Raised on a read or write outside the program's memory."""
    def __init__(self, addr: int, size: int):
        self.addr = addr
        self.size = size
        super().__init__(f"Address {addr} out of range (memory size {size})")


class Memory:
    """Bounds-checked integer memory owned by a single machine.

    The constructor copies its input, so the caller's program list is never
    mutated by execution.
    """

    def __init__(self, cells: Iterable[int]):
        self._mem = list(cells)
        for addr, value in enumerate(self._mem):
            if value < 0:
                raise ValueError(f"Negative value {value} at address {addr}")

    def __len__(self) -> int:
        return len(self._mem)

    def __getitem__(self, addr: int) -> int:
        return self.read(addr)

    def __iter__(self):
        return iter(self._mem)

    # --- Core read/write ---

    def read(self, addr: int) -> int:
        if not 0 <= addr < len(self._mem):
            raise AddressError(addr, len(self._mem))
        return self._mem[addr]

    def write(self, addr: int, value: int):
        """Write a cell. Negative values are rejected outright."""
        if not 0 <= addr < len(self._mem):
            raise AddressError(addr, len(self._mem))
        if value < 0:
            raise ValueError(f"Negative value {value} for address {addr}")
        self._mem[addr] = value

    def read_indirect(self, ptr_addr: int) -> int:
        """Read memory[memory[ptr_addr]]."""
        return self.read(self.read(ptr_addr))

    # --- Snapshots ---

    def snapshot(self) -> Tuple[int, ...]:
        """Capture the current contents as an immutable tuple."""
        return tuple(self._mem)

    @staticmethod
    def diff_snapshots(snap_a, snap_b) -> Dict[int, tuple]:
        """Compare two snapshots, return {addr: (old, new)} for changed cells."""
        changes = {}
        for i in range(min(len(snap_a), len(snap_b))):
            if snap_a[i] != snap_b[i]:
                changes[i] = (snap_a[i], snap_b[i])
        return changes

    # --- Dump ---

    def dump(self, start: int = 0, length: int = None, width: int = 4) -> str:
        """Produce a text dump, one row of `width` cells per line.

        The default width matches the instruction stride so each row lines
        up with one instruction of a well-formed program.
        """
        end = len(self._mem) if length is None else min(len(self._mem), start + length)
        lines = []
        for row in range(start, end, width):
            cells = ' '.join(f'{v:>8d}' for v in self._mem[row:min(row + width, end)])
            lines.append(f'{row:04d}  {cells}')
        return '\n'.join(lines)
