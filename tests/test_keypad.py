"""Tests for the display adapter."""

from __future__ import annotations

import ast
import logging
from pathlib import Path

import pytest

from calculator import PendingOperation, UnparseableDisplayError
from keypad import (
    Keypad,
    UnknownKeyError,
    format_number,
    normalize_key,
    parse_display,
)


class TestNumberEntry:

    def test_starts_at_zero(self, keypad):
        assert keypad.display == "0"
        assert keypad.finished_typing

    def test_first_digit_replaces_display(self, keypad):
        assert keypad.press("7") == "7"

    def test_digits_concatenate(self, keypad):
        assert keypad.press_all(["1", "2", "3"]) == "123"

    def test_decimal_entry(self, keypad):
        assert keypad.press_all(["3", ".", "1", "4"]) == "3.14"

    def test_second_decimal_point_ignored(self, keypad):
        assert keypad.press_all(["3", ".", "1", ".", "4"]) == "3.14"

    def test_trailing_decimal_then_decimal_ignored(self, keypad):
        assert keypad.press_all(["5", ".", "."]) == "5."
        assert keypad.display_value == 5.0

    def test_leading_decimal_point(self, keypad):
        assert keypad.press_all([".", "5"]) == "0.5"

    def test_entry_after_operator_starts_fresh(self, keypad):
        keypad.press_all(["1", "2", "+"])
        assert keypad.press("3") == "3"


class TestFunctionKeys:

    def test_addition_scenario(self, keypad):
        assert keypad.press_all(["5", "+", "3", "="]) == "8.0"

    def test_division_by_zero_scenario(self, keypad):
        assert keypad.press_all(["9", "÷", "0", "="]) == "inf"

    def test_zero_by_zero(self, keypad):
        assert keypad.press_all(["0", "÷", "0", "="]) == "nan"

    def test_clear_scenario(self, keypad):
        keypad.press_all(["4", "2"])
        assert keypad.press("AC") == "0.0"

    def test_negate(self, keypad):
        assert keypad.press_all(["1", "2", "+/-"]) == "-12.0"

    def test_percent(self, keypad):
        assert keypad.press_all(["5", "0", "%"]) == "0.5"

    def test_operator_leaves_display(self, keypad):
        assert keypad.press_all(["6", "×"]) == "6"

    def test_equals_without_operator_leaves_display(self, keypad):
        assert keypad.press_all(["6", "="]) == "6"

    def test_operator_stores_pending(self, keypad):
        keypad.press_all(["6", "-"])
        assert keypad.calculator.pending == PendingOperation(6.0, "-")

    def test_repeated_equals_reuses_stale_operation(self, keypad):
        assert keypad.press_all(["5", "+", "3", "=", "="]) == "13.0"

    def test_clear_does_not_forget_operator(self, keypad):
        keypad.press_all(["2", "×", "3", "=", "AC", "4", "="])
        assert keypad.display == "8.0"

    def test_no_chained_precedence(self, keypad):
        """2 + 3 × 4 = : the "×" overwrites the pending "+"."""
        assert keypad.press_all(["2", "+", "3", "×", "4", "="]) == "12.0"

    def test_infinity_display_is_parseable(self, keypad):
        keypad.press_all(["9", "÷", "0", "="])
        assert keypad.press("+/-") == "-inf"

    def test_digit_after_result_starts_fresh(self, keypad):
        keypad.press_all(["5", "+", "3", "="])
        assert keypad.press("2") == "2"


class TestKeys:

    @pytest.mark.parametrize("raw, label", [
        ("*", "×"),
        ("x", "×"),
        ("/", "÷"),
        ("±", "+/-"),
        (",", "."),
        ("Escape", "AC"),
        ("c", "AC"),
        ("Return", "="),
        ("Enter", "="),
        ("7", "7"),
        ("÷", "÷"),
    ])
    def test_normalize_key(self, raw, label):
        assert normalize_key(raw) == label

    def test_keyboard_aliases_drive_core(self, keypad):
        assert keypad.press_all(["8", "/", "2", "Return"]) == "4.0"

    @pytest.mark.parametrize("raw", ["^", "sqrt", "a", "ac", "=="])
    def test_unknown_key_rejected(self, keypad, raw):
        with pytest.raises(UnknownKeyError) as excinfo:
            keypad.press(raw)
        assert excinfo.value.key == raw

    def test_unknown_key_logged(self, keypad, caplog):
        with caplog.at_level(logging.INFO, logger="keypad"):
            with pytest.raises(UnknownKeyError):
                keypad.press("^")
        assert "rejected key" in caplog.text

    def test_batch_with_unknown_key_changes_nothing(self, keypad):
        with pytest.raises(UnknownKeyError):
            keypad.press_all(["5", "+", "^"])
        assert keypad.display == "0"
        assert keypad.calculator.pending is None


class TestDisplayConversion:

    @pytest.mark.parametrize("value, text", [
        (8.0, "8.0"),
        (0.5, "0.5"),
        (-12.0, "-12.0"),
        (1e16, "1e+16"),
        (float("inf"), "inf"),
        (0, "0.0"),
    ])
    def test_format_number(self, value, text):
        assert format_number(value) == text

    @pytest.mark.parametrize("text, value", [
        ("0", 0.0),
        ("3.", 3.0),
        ("0.25", 0.25),
        ("-inf", float("-inf")),
    ])
    def test_parse_display(self, text, value):
        assert parse_display(text) == value

    @pytest.mark.parametrize("text", [".", "", "5..", "abc"])
    def test_unparseable_display_is_a_defect(self, text):
        with pytest.raises(UnparseableDisplayError):
            parse_display(text)

    def test_corrupted_display_fails_fast(self):
        keypad = Keypad()
        keypad.display = "1.2.3"
        with pytest.raises(AssertionError):
            keypad.press("+")


class TestSelfContained:
    """Core and adapter import nothing that reaches outside the process."""

    ALLOWED = {"__future__", "logging", "math", "dataclasses", "calculator"}

    @pytest.mark.parametrize("filename", ["calculator.py", "keypad.py"])
    def test_imports_stay_in_process(self, filename):
        source = Path(__file__).resolve().parent.parent / filename
        tree = ast.parse(source.read_text(encoding="utf-8"))
        imported = set()
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                imported.update(alias.name.split(".")[0] for alias in node.names)
            elif isinstance(node, ast.ImportFrom):
                imported.add(node.module.split(".")[0])
        assert imported <= self.ALLOWED, imported - self.ALLOWED
