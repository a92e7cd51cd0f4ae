"""
Intcode — Machine Layout and Puzzle Defaults
============================================

Constants shared by the machine, the solver and the CLI. Change them here,
not at the call sites.
"""

# =============================================================================
#  MEMORY LAYOUT
# =============================================================================
ANSWER_ADDR = 0       # program's designated result cell, read after HALT
NOUN_ADDR = 1         # first override parameter
VERB_ADDR = 2         # second override parameter

STRIDE = 4            # every executed instruction is opcode + 3 operands


# =============================================================================
#  OPCODES
# =============================================================================
OP_ADD = 1
OP_MUL = 2
OP_HALT = 99


# =============================================================================
#  PUZZLE DEFAULTS
# =============================================================================
DEFAULT_NOUN = 12     # "1202 program alarm" state
DEFAULT_VERB = 2
DEFAULT_TARGET = 19690720

# Valid override range for the stock puzzle inputs. The solver never
# enforces these; only the CLI checks a solution against them.
PARAM_LOW = 0
PARAM_HIGH = 99


# =============================================================================
#  EXECUTION LIMITS
# =============================================================================
# Step budget the CLI applies unless told otherwise (--max-steps 0 disables).
# Library calls default to unbounded.
DEFAULT_MAX_STEPS = 1_000_000


# =============================================================================
#  OUTPUT SURFACE
# =============================================================================
SURFACE_WIDTH = 10
SURFACE_HEIGHT = 10
