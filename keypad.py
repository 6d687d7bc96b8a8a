"""Display adapter between keystrokes and the evaluation core.

Numeric keys build up the display text; function keys submit the
displayed value to the core and render whatever it returns.
"""
from __future__ import annotations

import logging

from calculator import (
    FUNCTION_SYMBOLS,
    Calculator,
    CalculatorError,
    UnparseableDisplayError,
)

logger = logging.getLogger(__name__)

DIGITS = frozenset("0123456789")
DECIMAL_POINT = "."

# Physical keyboard names mapped onto keypad labels.
KEY_ALIASES = {
    "*": "×",
    "x": "×",
    "/": "÷",
    "±": "+/-",
    ",": ".",
    "c": "AC",
    "C": "AC",
    "Escape": "AC",
    "Return": "=",
    "Enter": "=",
}


class UnknownKeyError(CalculatorError):
    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Unknown key: {key!r}")


def format_number(value: float) -> str:
    return str(float(value))


def parse_display(text: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise UnparseableDisplayError(text) from None


def normalize_key(key: str) -> str:
    """Map a raw key name onto its keypad label, rejecting unknown keys."""
    key = KEY_ALIASES.get(key, key)
    if key in DIGITS or key == DECIMAL_POINT or key in FUNCTION_SYMBOLS:
        return key
    raise UnknownKeyError(key)


class Keypad:
    """Headless keypad: display text plus the calculator it drives."""

    def __init__(self, calculator: Calculator | None = None) -> None:
        self.calculator = calculator if calculator is not None else Calculator()
        self.display = "0"
        self.finished_typing = True

    @property
    def display_value(self) -> float:
        return parse_display(self.display)

    @display_value.setter
    def display_value(self, value: float) -> None:
        self.display = format_number(value)

    # -- key handlers ------------------------------------------------------

    def press_number(self, key: str) -> None:
        if self.finished_typing:
            # A bare "." would not parse, so a fresh entry starts at "0."
            self.display = "0." if key == DECIMAL_POINT else key
            self.finished_typing = False
            return

        if key == DECIMAL_POINT and DECIMAL_POINT in self.display:
            return
        self.display += key

    def press_function(self, symbol: str) -> None:
        self.finished_typing = True
        self.calculator.submit_value(self.display_value)
        result = self.calculator.apply(symbol)
        if result is not None:
            self.display_value = result

    def press(self, key: str) -> str:
        """Handle one raw key and return the resulting display text."""
        try:
            key = normalize_key(key)
        except UnknownKeyError:
            logger.info("rejected key %r", key)
            raise

        if key in DIGITS or key == DECIMAL_POINT:
            self.press_number(key)
        else:
            self.press_function(key)
        return self.display

    def press_all(self, keys: list[str]) -> str:
        """Press *keys* in order.  Unknown keys reject the whole batch."""
        labels = []
        for key in keys:
            try:
                labels.append(normalize_key(key))
            except UnknownKeyError:
                logger.info("rejected key %r", key)
                raise
        for label in labels:
            self.press(label)
        return self.display
