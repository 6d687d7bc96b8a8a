"""Shared fixtures for keypad calculator tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app import create_app
from calculator import Calculator
from keypad import Keypad
from store import SessionStore


@pytest.fixture
def calc() -> Calculator:
    return Calculator()


@pytest.fixture
def keypad() -> Keypad:
    return Keypad()


@pytest.fixture
def store() -> SessionStore:
    return SessionStore(max_sessions=5)


@pytest.fixture
def client(store) -> TestClient:
    app = create_app(store=store, setup_logging=False)
    return TestClient(app)
