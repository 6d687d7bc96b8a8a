"""Executable contract for the keypad calculator core.

Each operation is described as a collection of:
- postconditions: what the displayed result must satisfy
- error conditions: which stored operators must cause a defect on "="
- algebraic properties: relationships that must hold across calls

The contract is machine-readable.  Validation tools iterate over it to
drive conformance tests and search for counterexamples.

Layers
------
OperationSpec       per-operation contract (post/error/properties)
BranchSpec          every decision point white-box tests must cover
Transition          the Idle / AwaitingOperand state machine
CalculatorContract  the full contract
build_contract()    constructs a CalculatorContract
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

from calculator import (
    ADD,
    BINARY_OPERATORS,
    CLEAR,
    DIV,
    EQUALS,
    MUL,
    NEGATE,
    PERCENT,
    SUB,
    UNARY_SYMBOLS,
    Calculator,
    CalculatorState,
    UnmatchedOperatorError,
)


# ---------------------------------------------------------------------------
# Value domain
# ---------------------------------------------------------------------------

SAMPLE_VALUES: tuple[float, ...] = (
    0.0, -0.0, 1.0, -1.0, 0.5, -2.5, 3.0, 7.0, 100.0, -0.01,
    1e-300, 1e300, -1e300, math.inf, -math.inf, math.nan,
)

# Symbols that are not on the keypad but still reach the default branch.
STRAY_SYMBOLS: tuple[str, ...] = ("^", "*", "/", "plus", "")


def float_equal(a: float | None, b: float | None) -> bool:
    """``==`` on floats, except that nan equals nan."""
    if a is None or b is None:
        return a is b
    if math.isnan(a) and math.isnan(b):
        return True
    return a == b


# ---------------------------------------------------------------------------
# Drivers used inside the contract predicates
# ---------------------------------------------------------------------------

CalculatorFactory = Callable[[], Calculator]


def run_unary(make: CalculatorFactory, symbol: str, x: float) -> float | None:
    calc = make()
    calc.submit_value(x)
    return calc.apply(symbol, x)


def run_binary(
    make: CalculatorFactory, a: float, operator: str, b: float
) -> float | None:
    """Key sequence ``a <operator> b =``."""
    calc = make()
    calc.submit_value(a)
    calc.apply(operator, a)
    calc.submit_value(b)
    return calc.apply(EQUALS, b)


def expected_quotient(a: float, b: float) -> Callable[[float], bool]:
    """Predicate for an IEEE-754 quotient, written independently of the core."""
    if b != 0:
        return lambda r: float_equal(r, a / b)
    if a == 0 or math.isnan(a):
        return math.isnan
    negative = (a < 0) != (math.copysign(1.0, b) < 0)
    return lambda r: math.isinf(r) and (r < 0) == negative


# ---------------------------------------------------------------------------
# Contract building blocks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Postcondition:
    name: str
    description: str
    check: Callable[..., bool]


@dataclass(frozen=True)
class ErrorCondition:
    name: str
    description: str
    trigger: Callable[[str], bool]
    exception: type


@dataclass(frozen=True)
class AlgebraicProperty:
    name: str
    description: str
    arity: int          # how many free input values the check needs
    check: Callable[..., bool]


@dataclass(frozen=True)
class OperationSpec:
    name: str
    symbol: str
    arity: int          # 1: (x, result); 2: (a, b, result)
    postconditions: list[Postcondition]
    error_conditions: list[ErrorCondition]
    properties: list[AlgebraicProperty]

    def run(self, make: CalculatorFactory, *values: float) -> float | None:
        if self.arity == 1:
            return run_unary(make, self.symbol, *values)
        a, b = values
        return run_binary(make, a, self.symbol, b)


@dataclass(frozen=True)
class BranchSpec:
    """A decision point in the implementation that must be exercised."""

    id: str
    description: str
    condition: str      # human-readable boolean expression
    operation: str      # which function this belongs to


IDLE = "Idle"
AWAITING_OPERAND = "AwaitingOperand"


@dataclass(frozen=True)
class Transition:
    source: str
    symbol_class: str   # unary | equals | binary
    target: str


def state_name(state: CalculatorState) -> str:
    return AWAITING_OPERAND if state.awaiting_operand else IDLE


def classify(symbol: str) -> str:
    if symbol in UNARY_SYMBOLS:
        return "unary"
    if symbol == EQUALS:
        return "equals"
    return "binary"


@dataclass(frozen=True)
class CalculatorContract:
    """Complete contract for the evaluation core."""

    operations: dict[str, OperationSpec]
    branches: list[BranchSpec]
    transitions: list[Transition]

    @property
    def all_properties(self) -> list[tuple[str, AlgebraicProperty]]:
        out: list[tuple[str, AlgebraicProperty]] = []
        for name, op in self.operations.items():
            for prop in op.properties:
                out.append((name, prop))
        return out

    @property
    def all_postconditions(self) -> list[tuple[str, Postcondition]]:
        out: list[tuple[str, Postcondition]] = []
        for name, op in self.operations.items():
            for post in op.postconditions:
                out.append((name, post))
        return out

    @property
    def all_error_conditions(self) -> list[tuple[str, ErrorCondition]]:
        out: list[tuple[str, ErrorCondition]] = []
        for name, op in self.operations.items():
            for ec in op.error_conditions:
                out.append((name, ec))
        return out

    def next_state(self, source: str, symbol: str) -> str:
        kind = classify(symbol)
        for t in self.transitions:
            if t.source == source and t.symbol_class == kind:
                return t.target
        raise KeyError((source, kind))


# ---------------------------------------------------------------------------
# Contract builder
# ---------------------------------------------------------------------------

def _pending_kept(symbol: str) -> Callable[..., bool]:
    """Property: *symbol* leaves a stored ``a +`` untouched."""

    def check(make: CalculatorFactory, a: float, b: float) -> bool:
        calc = make()
        calc.submit_value(a)
        calc.apply(ADD, a)
        before = calc.pending
        calc.submit_value(b)
        calc.apply(symbol, b)
        return calc.pending == before or (
            calc.pending is not None
            and before is not None
            and calc.pending.operator == before.operator
            and float_equal(calc.pending.left_operand, before.left_operand)
        )

    return check


def _pending_reused(make: CalculatorFactory, a: float, b: float) -> bool:
    """A second "=" reapplies the stale pending operation."""
    calc = make()
    calc.submit_value(a)
    calc.apply(ADD, a)
    calc.submit_value(b)
    first = calc.apply(EQUALS, b)
    calc.submit_value(first)
    second = calc.apply(EQUALS, first)
    return float_equal(second, a + first)


def build_contract() -> CalculatorContract:
    """Construct the full contract for the evaluation core."""

    # --------------------------------------------------------------- negate
    negate_spec = OperationSpec(
        name="negate",
        symbol=NEGATE,
        arity=1,
        postconditions=[
            Postcondition(
                "result_correct",
                "Result equals x * -1",
                lambda x, result: float_equal(result, x * -1),
            ),
        ],
        error_conditions=[],
        properties=[
            AlgebraicProperty(
                "involution", "negate(negate(x)) == x", 1,
                lambda make, x: float_equal(
                    run_unary(make, NEGATE, run_unary(make, NEGATE, x)), x
                ),
            ),
            AlgebraicProperty(
                "pending_kept", "+/- leaves the pending operation alone", 2,
                _pending_kept(NEGATE),
            ),
        ],
    )

    # ---------------------------------------------------------------- clear
    clear_spec = OperationSpec(
        name="clear",
        symbol=CLEAR,
        arity=1,
        postconditions=[
            Postcondition(
                "result_zero",
                "Result is 0 for every x",
                lambda x, result: result == 0,
            ),
        ],
        error_conditions=[],
        properties=[
            AlgebraicProperty(
                "pending_kept", "AC leaves the pending operation alone", 2,
                _pending_kept(CLEAR),
            ),
        ],
    )

    # -------------------------------------------------------------- percent
    percent_spec = OperationSpec(
        name="percent",
        symbol=PERCENT,
        arity=1,
        postconditions=[
            Postcondition(
                "result_correct",
                "Result equals x * 0.01",
                lambda x, result: float_equal(result, x * 0.01),
            ),
        ],
        error_conditions=[],
        properties=[
            AlgebraicProperty(
                "sign_not_flipped", "percent never flips the sign of x", 1,
                lambda make, x: not (
                    (x > 0 and run_unary(make, PERCENT, x) < 0)
                    or (x < 0 and run_unary(make, PERCENT, x) > 0)
                ),
            ),
            AlgebraicProperty(
                "pending_kept", "% leaves the pending operation alone", 2,
                _pending_kept(PERCENT),
            ),
        ],
    )

    # ------------------------------------------------------------------ add
    add_spec = OperationSpec(
        name="add",
        symbol=ADD,
        arity=2,
        postconditions=[
            Postcondition(
                "result_correct",
                "a + b = yields a + b",
                lambda a, b, result: float_equal(result, a + b),
            ),
        ],
        error_conditions=[],
        properties=[
            AlgebraicProperty(
                "commutativity", "a + b == b + a", 2,
                lambda make, a, b: float_equal(
                    run_binary(make, a, ADD, b), run_binary(make, b, ADD, a)
                ),
            ),
            AlgebraicProperty(
                "identity", "a + 0 == a", 1,
                lambda make, a: float_equal(run_binary(make, a, ADD, 0.0), a),
            ),
            AlgebraicProperty(
                "stale_pending_reused", "a + b = = yields a + (a + b)", 2,
                _pending_reused,
            ),
        ],
    )

    # ------------------------------------------------------------------ sub
    sub_spec = OperationSpec(
        name="sub",
        symbol=SUB,
        arity=2,
        postconditions=[
            Postcondition(
                "result_correct",
                "a - b = yields a - b",
                lambda a, b, result: float_equal(result, a - b),
            ),
        ],
        error_conditions=[],
        properties=[
            AlgebraicProperty(
                "identity", "a - 0 == a", 1,
                lambda make, a: float_equal(run_binary(make, a, SUB, 0.0), a),
            ),
            AlgebraicProperty(
                "self_inverse", "a - a == 0 for finite a", 1,
                lambda make, a: (
                    not math.isfinite(a) or run_binary(make, a, SUB, a) == 0
                ),
            ),
        ],
    )

    # ------------------------------------------------------------------ mul
    mul_spec = OperationSpec(
        name="mul",
        symbol=MUL,
        arity=2,
        postconditions=[
            Postcondition(
                "result_correct",
                "a × b = yields a * b",
                lambda a, b, result: float_equal(result, a * b),
            ),
        ],
        error_conditions=[],
        properties=[
            AlgebraicProperty(
                "commutativity", "a × b == b × a", 2,
                lambda make, a, b: float_equal(
                    run_binary(make, a, MUL, b), run_binary(make, b, MUL, a)
                ),
            ),
            AlgebraicProperty(
                "identity", "a × 1 == a", 1,
                lambda make, a: float_equal(run_binary(make, a, MUL, 1.0), a),
            ),
        ],
    )

    # ------------------------------------------------------------------ div
    div_spec = OperationSpec(
        name="div",
        symbol=DIV,
        arity=2,
        postconditions=[
            Postcondition(
                "result_correct",
                "a ÷ b = yields the IEEE-754 quotient, never an exception",
                lambda a, b, result: expected_quotient(a, b)(result),
            ),
        ],
        error_conditions=[],
        properties=[
            AlgebraicProperty(
                "identity", "a ÷ 1 == a", 1,
                lambda make, a: float_equal(run_binary(make, a, DIV, 1.0), a),
            ),
            AlgebraicProperty(
                "zero_divisor_not_finite", "a ÷ 0 is inf or nan", 1,
                lambda make, a: not math.isfinite(run_binary(make, a, DIV, 0.0)),
            ),
        ],
    )

    # ----------------------------------------------- equals_without_pending
    equals_without_pending_spec = OperationSpec(
        name="equals_without_pending",
        symbol=EQUALS,
        arity=1,
        postconditions=[
            Postcondition(
                "nothing_without_pending",
                "= with no stored operator returns nothing",
                lambda x, result: result is None,
            ),
        ],
        error_conditions=[
            ErrorCondition(
                "unmatched_operator",
                "= after a stray symbol was deferred is a defect",
                lambda operator: operator not in BINARY_OPERATORS,
                UnmatchedOperatorError,
            ),
        ],
        properties=[
            AlgebraicProperty(
                "repeatable_without_pending", "= = with no operator stays None", 1,
                lambda make, x: (
                    run_unary(make, EQUALS, x) is None
                    and make().apply(EQUALS, x) is None
                ),
            ),
        ],
    )

    # -------------------------------------------------------------- branches
    branches = [
        # apply()
        BranchSpec(
            "APPLY-NO-NUMBER",
            "No value was ever submitted, nothing happens",
            "current is None and state.number is None",
            "apply",
        ),
        BranchSpec(
            "SYM-NEGATE",
            "Sign flipped",
            "symbol == '+/-'",
            "apply",
        ),
        BranchSpec(
            "SYM-CLEAR",
            "Display reset to 0, pending kept",
            "symbol == 'AC'",
            "apply",
        ),
        BranchSpec(
            "SYM-PERCENT",
            "Value scaled by 0.01",
            "symbol == '%'",
            "apply",
        ),
        BranchSpec(
            "SYM-EQUALS",
            "Pending operation evaluated",
            "symbol == '='",
            "apply",
        ),
        BranchSpec(
            "SYM-DEFER",
            "Value and symbol stored as the pending operation",
            "symbol not in ('+/-', 'AC', '%', '=')",
            "apply",
        ),
        # evaluate_binary()
        BranchSpec(
            "BIN-NO-PENDING",
            "= pressed with no stored operator",
            "state.pending is None",
            "evaluate_binary",
        ),
        BranchSpec("BIN-ADD", "Addition", "operator == '+'", "evaluate_binary"),
        BranchSpec("BIN-SUB", "Subtraction", "operator == '-'", "evaluate_binary"),
        BranchSpec("BIN-MUL", "Multiplication", "operator == '×'", "evaluate_binary"),
        BranchSpec(
            "BIN-DIV",
            "Division with non-zero divisor",
            "operator == '÷' and right != 0",
            "evaluate_binary",
        ),
        BranchSpec(
            "BIN-DIV-ZERO",
            "Division by zero yields inf or nan",
            "operator == '÷' and right == 0",
            "evaluate_binary",
        ),
        BranchSpec(
            "BIN-UNMATCHED",
            "UnmatchedOperatorError raised",
            "operator not in ('+', '-', '×', '÷')",
            "evaluate_binary",
        ),
    ]

    transitions = [
        Transition(IDLE, "unary", IDLE),
        Transition(IDLE, "equals", IDLE),
        Transition(IDLE, "binary", AWAITING_OPERAND),
        Transition(AWAITING_OPERAND, "unary", AWAITING_OPERAND),
        Transition(AWAITING_OPERAND, "equals", AWAITING_OPERAND),
        Transition(AWAITING_OPERAND, "binary", AWAITING_OPERAND),
    ]

    return CalculatorContract(
        operations={
            "negate": negate_spec,
            "clear": clear_spec,
            "percent": percent_spec,
            "add": add_spec,
            "sub": sub_spec,
            "mul": mul_spec,
            "div": div_spec,
            "equals_without_pending": equals_without_pending_spec,
        },
        branches=branches,
        transitions=transitions,
    )
