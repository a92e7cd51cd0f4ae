#!/usr/bin/env python3
"""
intcodekit — Intcode Toolkit
============================

One CLI for everything:
    intcodekit run      — Run a program with noun/verb overrides, print memory[0]
    intcodekit solve    — Find the noun/verb pair that produces a target output
    intcodekit trace    — Run step by step, print every instruction and a memory dump
    intcodekit disasm   — Disassemble a program
    intcodekit surface  — Print the output grid over a noun/verb range

Usage:
    python intcodekit.py <command> [options]
    python intcodekit.py <command> --help

Examples:
    python intcodekit.py run input.txt                      # noun=12 verb=2
    python intcodekit.py run input.txt --raw                # no overrides
    python intcodekit.py solve input.txt --target 19690720
    python intcodekit.py trace input.txt --noun 12 --verb 2
    python intcodekit.py disasm input.txt
    python intcodekit.py surface input.txt --width 10 --height 10

Exit codes:
    0  success
    1  bad input or the program errored (unknown opcode, bad address, step budget)
    2  the affine model does not hold for this program
"""

import argparse
import logging
import sys

from intcode import __version__, config
from intcode.loader import load_program, ProgramFormatError
from intcode.machine import IntcodeMachine, MachineError, Errored, execute
from intcode.memory import AddressError, Memory
from intcode.opcodes import disassemble
from intcode.solver import ParameterSolver, AffineModelError, sample_surface

logger = logging.getLogger("intcodekit")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="intcodekit",
        description="Intcode toolkit — run, trace, disassemble, solve for noun/verb",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""commands:
  run        Run a program and print memory[0]
  solve      Find the noun/verb pair producing a target output
  trace      Step through a program instruction by instruction
  disasm     Disassemble a program listing
  surface    Print the output grid over a noun/verb range
""",
    )
    parser.add_argument("--version", action="version", version=f"intcodekit {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")
    parser.add_argument("--max-steps", type=int, default=config.DEFAULT_MAX_STEPS,
                        help=f"Instruction budget per run, 0 = unlimited "
                             f"(default: {config.DEFAULT_MAX_STEPS})")
    sub = parser.add_subparsers(dest="command", metavar="command")

    # ── run ──────────────────────────────────────────────────────────────
    p_run = sub.add_parser("run", help="Run a program and print memory[0]")
    p_run.add_argument("input", help="Program file (comma-separated integers)")
    p_run.add_argument("--noun", type=int, default=config.DEFAULT_NOUN,
                       help=f"Value for memory[{config.NOUN_ADDR}] (default: {config.DEFAULT_NOUN})")
    p_run.add_argument("--verb", type=int, default=config.DEFAULT_VERB,
                       help=f"Value for memory[{config.VERB_ADDR}] (default: {config.DEFAULT_VERB})")
    p_run.add_argument("--raw", action="store_true",
                       help="Run the program as loaded, without overrides")

    # ── solve ────────────────────────────────────────────────────────────
    p_solve = sub.add_parser("solve", help="Find noun/verb for a target output")
    p_solve.add_argument("input", help="Program file")
    p_solve.add_argument("--target", type=int, default=config.DEFAULT_TARGET,
                         help=f"Required memory[0] (default: {config.DEFAULT_TARGET})")
    p_solve.add_argument("--low", type=int, default=config.PARAM_LOW,
                         help=f"Lowest expected noun/verb (default: {config.PARAM_LOW})")
    p_solve.add_argument("--high", type=int, default=config.PARAM_HIGH,
                         help=f"Highest expected noun/verb (default: {config.PARAM_HIGH})")
    p_solve.add_argument("--fatal", action="store_true",
                         help="Abort the process on an affine-model violation")

    # ── trace ────────────────────────────────────────────────────────────
    p_trace = sub.add_parser("trace", help="Step through a program")
    p_trace.add_argument("input", help="Program file")
    p_trace.add_argument("--noun", type=int, default=None, help="Override memory[1]")
    p_trace.add_argument("--verb", type=int, default=None, help="Override memory[2]")
    p_trace.add_argument("--no-dump", action="store_true",
                         help="Skip the final memory dump")

    # ── disasm ───────────────────────────────────────────────────────────
    p_dis = sub.add_parser("disasm", help="Disassemble a program")
    p_dis.add_argument("input", help="Program file")

    # ── surface ──────────────────────────────────────────────────────────
    p_surf = sub.add_parser("surface", help="Print the output grid")
    p_surf.add_argument("input", help="Program file")
    p_surf.add_argument("--width", type=int, default=config.SURFACE_WIDTH,
                        help=f"Number of noun values (default: {config.SURFACE_WIDTH})")
    p_surf.add_argument("--height", type=int, default=config.SURFACE_HEIGHT,
                        help=f"Number of verb values (default: {config.SURFACE_HEIGHT})")

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    if not args.command:
        parser.print_help()
        return 1

    if args.max_steps < 0:
        parser.error("--max-steps must be >= 0")
    args.max_steps = args.max_steps or None

    handler = COMMANDS[args.command]
    try:
        return handler(args)
    except (OSError, ProgramFormatError) as e:
        print(f"Input error: {e}", file=sys.stderr)
        return 1
    except MachineError as e:
        print(f"Machine error at {e.ip}: {e}", file=sys.stderr)
        return 1
    except (AddressError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except AffineModelError as e:
        print(f"Solver error: {e}", file=sys.stderr)
        return 2


# ═════════════════════════════════════════════════════════════════════════════
# COMMAND IMPLEMENTATIONS
# ═════════════════════════════════════════════════════════════════════════════

# ── run ──────────────────────────────────────────────────────────────────
def cmd_run(args) -> int:
    program = load_program(args.input)
    if args.raw:
        answer = execute(program, max_steps=args.max_steps)
    else:
        answer = execute(program, args.noun, args.verb, max_steps=args.max_steps)
    print(answer)
    return 0


# ── solve ────────────────────────────────────────────────────────────────
def cmd_solve(args) -> int:
    program = load_program(args.input)
    solver = ParameterSolver(program, bounds=(args.low, args.high), max_steps=args.max_steps)
    solution = solver.solve(args.target, fatal=args.fatal)
    if not solver.in_bounds(solution):
        logger.warning(
            f"Solution noun={solution.noun} verb={solution.verb} is outside "
            f"[{args.low}, {args.high}]")
    print(f"noun={solution.noun} verb={solution.verb} code={solution.code}")
    return 0


# ── trace ────────────────────────────────────────────────────────────────
def cmd_trace(args) -> int:
    program = load_program(args.input)
    machine = IntcodeMachine(program, noun=args.noun, verb=args.verb, trace=True)
    before = machine.mem.snapshot()
    result = machine.run(max_steps=args.max_steps, history=True)

    for line, snap in zip(machine.trace_output, result.snapshots):
        changes = Memory.diff_snapshots(before, snap.memory)
        delta = ", ".join(f"[{addr}] {old}->{new}" for addr, (old, new) in changes.items())
        print(f"{line}    ; {delta or 'no change'}")
        before = snap.memory

    outcome = result.outcome
    if isinstance(outcome, Errored):
        print(f"{outcome.reason.value} at {outcome.ip}: {outcome.message} "
              f"({result.steps} steps)")
    else:
        print(f"HALT at {machine.ip}: answer={result.answer} ({result.steps} steps)")

    if not args.no_dump:
        print()
        print(machine.mem.dump())
    return 1 if isinstance(outcome, Errored) else 0


# ── disasm ───────────────────────────────────────────────────────────────
def cmd_disasm(args) -> int:
    program = load_program(args.input)
    print("\n".join(disassemble(program)))
    return 0


# ── surface ──────────────────────────────────────────────────────────────
def cmd_surface(args) -> int:
    program = load_program(args.input)
    grid = sample_surface(program, args.width, args.height, max_steps=args.max_steps)

    cell = max([len(str(v)) for row in grid for v in row] + [len(str(args.width - 1)), 4])
    header = "verb\\noun " + " ".join(f"{n:>{cell}d}" for n in range(args.width))
    print(header)
    for verb, row in enumerate(grid):
        print(f"{verb:>9d} " + " ".join(f"{v:>{cell}d}" for v in row))
    return 0


COMMANDS = {
    "run": cmd_run,
    "solve": cmd_solve,
    "trace": cmd_trace,
    "disasm": cmd_disasm,
    "surface": cmd_surface,
}


if __name__ == "__main__":
    sys.exit(main())
