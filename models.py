"""Session models for the keypad calculator service.

A Session wraps one headless keypad (display text plus evaluation core).
This module defines the API-facing data models only; key handling lives
in keypad.py.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from keypad import Keypad, format_number


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class KeyPresses(BaseModel):
    """Payload for pressing keys on a session, in order."""

    keys: list[str] = Field(..., min_length=1, max_length=256)

    @field_validator("keys")
    @classmethod
    def keys_not_empty(cls, keys: list[str]) -> list[str]:
        for k in keys:
            if not k:
                raise ValueError("Keys must be non-empty strings")
        return keys


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

class PendingView(BaseModel):
    """The stored left operand (rendered as display text) and operator."""

    left_operand: str
    operator: str


class SessionView(BaseModel):
    """Session state as returned by the API."""

    id: str
    display: str
    pending: PendingView | None = None
    created_at: datetime
    updated_at: datetime


# ---------------------------------------------------------------------------
# Session: the stored record
# ---------------------------------------------------------------------------

class Session:
    """A keypad plus bookkeeping.  Not a pydantic model: it is mutable."""

    def __init__(self, session_id: str | None = None) -> None:
        self.id = session_id or _new_id()
        self.keypad = Keypad()
        self.created_at = _utcnow()
        self.updated_at = self.created_at

    def press(self, keys: list[str]) -> None:
        self.keypad.press_all(keys)
        self.updated_at = _utcnow()

    def view(self) -> SessionView:
        pending = self.keypad.calculator.pending
        return SessionView(
            id=self.id,
            display=self.keypad.display,
            pending=(
                PendingView(
                    left_operand=format_number(pending.left_operand),
                    operator=pending.operator,
                )
                if pending is not None
                else None
            ),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
