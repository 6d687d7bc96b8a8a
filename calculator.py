"""Keypad calculator evaluation core.

The core is an accumulator: a binary operator press stores the current
value and the operator as a pending operation, and "=" applies it to the
next value.  State is an immutable ``CalculatorState``; the module-level
functions are pure transitions returning a new state plus an output, and
``Calculator`` is a thin holder for a long-lived session.

Decision branches are annotated with their branch-IDs (see
contract.py ``BranchSpec``) so white-box tests can trace coverage.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Symbols
# ---------------------------------------------------------------------------

NEGATE = "+/-"
CLEAR = "AC"
PERCENT = "%"
EQUALS = "="

ADD = "+"
SUB = "-"
MUL = "×"
DIV = "÷"

UNARY_SYMBOLS = (NEGATE, CLEAR, PERCENT)
BINARY_OPERATORS = (ADD, SUB, MUL, DIV)
FUNCTION_SYMBOLS = UNARY_SYMBOLS + (EQUALS,) + BINARY_OPERATORS


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class CalculatorDefect(AssertionError):
    """A condition that correct code never reaches.  Not recoverable."""


class UnmatchedOperatorError(CalculatorDefect):
    def __init__(self, operator: str) -> None:
        self.operator = operator
        super().__init__(
            f"pending operator {operator!r} has no matching case"
        )


class UnparseableDisplayError(CalculatorDefect):
    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"cannot convert display text {text!r} to a number")


class CalculatorError(Exception):
    """Recoverable user-input error raised outside the core."""


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PendingOperation:
    left_operand: float
    operator: str


@dataclass(frozen=True)
class CalculatorState:
    number: float | None = None
    pending: PendingOperation | None = None

    @property
    def awaiting_operand(self) -> bool:
        return self.pending is not None


IDLE = CalculatorState()


# ---------------------------------------------------------------------------
# Pure transitions
# ---------------------------------------------------------------------------

def divide(a: float, b: float) -> float:
    """IEEE-754 division: ``x / 0`` is a signed infinity, ``0 / 0`` is nan."""
    if b != 0:
        return a / b
    if a == 0 or math.isnan(a):
        return math.nan
    return math.copysign(math.inf, a) * math.copysign(1.0, b)


def submit_value(state: CalculatorState, current: float) -> CalculatorState:
    return replace(state, number=current)


def evaluate_binary(state: CalculatorState, right: float) -> float | None:
    """Apply the pending operation to *right*.

    Branches: BIN-NO-PENDING, BIN-ADD, BIN-SUB, BIN-MUL, BIN-DIV,
              BIN-DIV-ZERO, BIN-UNMATCHED
    """
    if state.pending is None:                                     # BIN-NO-PENDING
        return None

    left, operator = state.pending.left_operand, state.pending.operator

    if operator == ADD:                                           # BIN-ADD
        return left + right
    if operator == SUB:                                           # BIN-SUB
        return left - right
    if operator == MUL:                                           # BIN-MUL
        return left * right
    if operator == DIV:                                           # BIN-DIV, BIN-DIV-ZERO
        return divide(left, right)

    raise UnmatchedOperatorError(operator)                        # BIN-UNMATCHED


def apply(
    state: CalculatorState,
    symbol: str,
    current: float | None = None,
) -> tuple[CalculatorState, float | None]:
    """Dispatch a function-key *symbol* against the current value.

    *current* defaults to the last submitted number.  Returns the next
    state and the value to display, or ``None`` when nothing changes on
    screen.

    Branches: APPLY-NO-NUMBER, SYM-NEGATE, SYM-CLEAR, SYM-PERCENT,
              SYM-EQUALS, SYM-DEFER
    """
    if current is None:
        current = state.number
    if current is None:                                           # APPLY-NO-NUMBER
        return state, None

    if symbol == NEGATE:                                          # SYM-NEGATE
        return state, current * -1
    if symbol == CLEAR:                                           # SYM-CLEAR
        # pending is kept
        return state, 0.0
    if symbol == PERCENT:                                         # SYM-PERCENT
        return state, current * 0.01
    if symbol == EQUALS:                                          # SYM-EQUALS
        result = evaluate_binary(state, current)
        logger.debug("evaluated %r with %r -> %r", state.pending, current, result)
        return state, result

    # Any other symbol is deferred as a binary operator.         # SYM-DEFER
    if symbol not in BINARY_OPERATORS:
        logger.debug("deferring unrecognised symbol %r", symbol)
    return replace(state, pending=PendingOperation(current, symbol)), None


# ---------------------------------------------------------------------------
# Session holder
# ---------------------------------------------------------------------------

class Calculator:
    """Mutable wrapper around ``CalculatorState`` for one session."""

    def __init__(self, state: CalculatorState = IDLE) -> None:
        self.state = state

    @property
    def pending(self) -> PendingOperation | None:
        return self.state.pending

    def submit_value(self, current: float) -> None:
        self.state = submit_value(self.state, current)

    def apply(self, symbol: str, current: float | None = None) -> float | None:
        self.state, result = apply(self.state, symbol, current)
        return result

    def evaluate_binary(self, right: float) -> float | None:
        return evaluate_binary(self.state, right)
