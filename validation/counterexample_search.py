"""Counterexample search: discovers gaps in implementation or tests.

This module runs independently of the test suite.  It sweeps a fixed
grid of awkward floats (signed zeros, tiny and huge magnitudes,
infinities, nan) and searches for:

1. Postcondition violations: inputs where the displayed result doesn't
   match the contract.
2. Error condition violations: stored operators that should make "="
   fail as a defect but don't (or fail the wrong way).
3. Property violations: relationships that fail for some input.
4. Transition violations: symbols that move the core to the wrong
   Idle / AwaitingOperand state.

Run directly::

    python -m validation.counterexample_search
"""
from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Sequence

from calculator import (
    BINARY_OPERATORS,
    EQUALS,
    FUNCTION_SYMBOLS,
    IDLE,
    Calculator,
    PendingOperation,
    CalculatorState,
    apply,
)
from contract import (
    SAMPLE_VALUES,
    STRAY_SYMBOLS,
    CalculatorContract,
    CalculatorFactory,
    build_contract,
    state_name,
)


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass
class Counterexample:
    category: str
    operation: str
    inputs: tuple
    expected: str
    actual: str
    description: str


@dataclass
class SearchReport:
    counterexamples: list[Counterexample] = field(default_factory=list)
    checks_run: int = 0

    @property
    def passed(self) -> bool:
        return len(self.counterexamples) == 0

    def summary(self) -> str:
        lines = [
            "Counterexample Search Report",
            "=" * 40,
            f"Total checks: {self.checks_run}",
            f"Counterexamples found: {len(self.counterexamples)}",
        ]
        if self.counterexamples:
            lines.append("")
            for i, cx in enumerate(self.counterexamples, 1):
                lines.append(f"  [{i}] {cx.category} / {cx.operation}")
                lines.append(f"      Inputs:   {cx.inputs}")
                lines.append(f"      Expected: {cx.expected}")
                lines.append(f"      Actual:   {cx.actual}")
                lines.append(f"      {cx.description}")
        else:
            lines.append("\nNo counterexamples found, all checks passed.")
        return "\n".join(lines)


def _input_tuples(arity: int, values: Sequence[float]):
    if arity == 1:
        return [(a,) for a in values]
    return [(a, b) for a in values for b in values]


# ---------------------------------------------------------------------------
# Search functions
# ---------------------------------------------------------------------------

def search_postcondition_violations(
    make: CalculatorFactory,
    contract: CalculatorContract,
    values: Sequence[float] = SAMPLE_VALUES,
) -> tuple[list[Counterexample], int]:
    """Verify postconditions for every input on the grid."""
    cxs: list[Counterexample] = []
    checks = 0

    for op_name, op_spec in contract.operations.items():
        for inputs in _input_tuples(op_spec.arity, values):
            checks += 1
            try:
                result = op_spec.run(make, *inputs)
            except Exception as e:
                cxs.append(Counterexample(
                    category="unexpected_error",
                    operation=op_name,
                    inputs=inputs,
                    expected="no error",
                    actual=f"{type(e).__name__}: {e}",
                    description="Operation raised an unexpected exception",
                ))
                continue

            for post in op_spec.postconditions:
                if not post.check(*inputs, result):
                    cxs.append(Counterexample(
                        category="postcondition_violation",
                        operation=op_name,
                        inputs=inputs,
                        expected=post.description,
                        actual=f"result={result}",
                        description=f"Postcondition '{post.name}' violated",
                    ))

    return cxs, checks


def search_error_condition_violations(
    make: CalculatorFactory,
    contract: CalculatorContract,
    values: Sequence[float] = SAMPLE_VALUES,
) -> tuple[list[Counterexample], int]:
    """Verify every error condition raises exactly when it should."""
    cxs: list[Counterexample] = []
    checks = 0
    operators = BINARY_OPERATORS + STRAY_SYMBOLS

    for op_name, ec in contract.all_error_conditions:
        for operator in operators:
            for a in values:
                checks += 1
                calc = make()
                calc.submit_value(a)
                calc.apply(operator, a)
                try:
                    result = calc.apply(EQUALS, a)
                except ec.exception:
                    if not ec.trigger(operator):
                        cxs.append(Counterexample(
                            category="unexpected_error",
                            operation=op_name,
                            inputs=(a, operator),
                            expected="no error",
                            actual=ec.exception.__name__,
                            description=f"'{ec.name}' raised for a valid operator",
                        ))
                    continue
                except Exception as e:
                    cxs.append(Counterexample(
                        category="wrong_error",
                        operation=op_name,
                        inputs=(a, operator),
                        expected=ec.exception.__name__,
                        actual=f"{type(e).__name__}: {e}",
                        description=f"Wrong exception type for '{ec.name}'",
                    ))
                    continue

                if ec.trigger(operator):
                    cxs.append(Counterexample(
                        category="missing_error",
                        operation=op_name,
                        inputs=(a, operator),
                        expected=ec.exception.__name__,
                        actual=f"result={result}",
                        description=(
                            f"Error condition '{ec.name}' should have "
                            f"triggered but didn't"
                        ),
                    ))

    return cxs, checks


def search_property_violations(
    make: CalculatorFactory,
    contract: CalculatorContract,
    values: Sequence[float] = SAMPLE_VALUES,
) -> tuple[list[Counterexample], int]:
    """Check every algebraic property on the grid."""
    cxs: list[Counterexample] = []
    checks = 0

    for op_name, prop in contract.all_properties:
        for inputs in _input_tuples(prop.arity, values):
            checks += 1
            if not prop.check(make, *inputs):
                cxs.append(Counterexample(
                    category="property_violation",
                    operation=op_name,
                    inputs=inputs,
                    expected=prop.description,
                    actual="property does not hold",
                    description=f"Property '{prop.name}' violated",
                ))

    return cxs, checks


def search_transition_violations(
    contract: CalculatorContract,
    values: Sequence[float] = SAMPLE_VALUES[:4],
) -> tuple[list[Counterexample], int]:
    """Drive the pure ``apply`` from both states with every symbol."""
    cxs: list[Counterexample] = []
    checks = 0
    starts = (IDLE, CalculatorState(pending=PendingOperation(2.0, BINARY_OPERATORS[0])))

    for start in starts:
        for symbol in FUNCTION_SYMBOLS + STRAY_SYMBOLS:
            for x in values:
                checks += 1
                source = state_name(start)
                after, _ = apply(start, symbol, x)
                expected = contract.next_state(source, symbol)
                if state_name(after) != expected:
                    cxs.append(Counterexample(
                        category="transition_violation",
                        operation=symbol,
                        inputs=(source, x),
                        expected=expected,
                        actual=state_name(after),
                        description="Wrong target state",
                    ))

    return cxs, checks


# ---------------------------------------------------------------------------
# Top-level runner
# ---------------------------------------------------------------------------

def run_search(
    make: CalculatorFactory = Calculator,
    values: Sequence[float] = SAMPLE_VALUES,
) -> SearchReport:
    """Run the complete counterexample search."""
    contract = build_contract()
    report = SearchReport()

    for search_fn in (
        search_postcondition_violations,
        search_error_condition_violations,
        search_property_violations,
    ):
        cxs, checks = search_fn(make, contract, values)
        report.counterexamples.extend(cxs)
        report.checks_run += checks

    cxs, checks = search_transition_violations(contract)
    report.counterexamples.extend(cxs)
    report.checks_run += checks

    return report


def main() -> None:
    report = run_search()
    print(report.summary())
    if not report.passed:
        sys.exit(1)


if __name__ == "__main__":
    main()
