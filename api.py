"""FastAPI REST endpoints for keypad sessions.

Routes
------
POST   /sessions              Create a new session
GET    /sessions              List sessions
GET    /sessions/{id}         Retrieve a single session
POST   /sessions/{id}/keys    Press keys on a session
DELETE /sessions/{id}         Delete a session
GET    /health                Liveness and session count
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

import config
from keypad import UnknownKeyError
from models import KeyPresses, SessionView
from store import SessionLimitError, SessionNotFoundError, SessionStore

router = APIRouter(prefix="/sessions", tags=["sessions"])
health_router = APIRouter(tags=["health"])

# The store instance is injected by the app factory (see app.py).
_store: SessionStore | None = None


def set_store(store: SessionStore) -> None:
    """Inject the store instance. Called once at app startup."""
    global _store
    _store = store


def get_store() -> SessionStore:
    assert _store is not None, "Store not initialized"
    return _store


# ---------------------------------------------------------------------------
# Response helpers
# ---------------------------------------------------------------------------

class SessionListResponse(BaseModel):
    items: list[SessionView]
    total: int


class HealthResponse(BaseModel):
    status: str
    sessions: int


def _not_found(session_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Session not found: {session_id}")


def _unknown_key(e: UnknownKeyError) -> HTTPException:
    return HTTPException(status_code=422, detail=str(e))


def _limit_reached(e: SessionLimitError) -> HTTPException:
    return HTTPException(status_code=429, detail=str(e))


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("", response_model=SessionView, status_code=201)
def create_session() -> SessionView:
    """Create a new session."""
    store = get_store()
    try:
        return store.create().view()
    except SessionLimitError as e:
        raise _limit_reached(e) from e


@router.get("", response_model=SessionListResponse)
def list_sessions(
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    limit: int = Query(
        default=config.DEFAULT_PAGE_LIMIT,
        ge=1,
        le=config.MAX_PAGE_LIMIT,
        description="Pagination limit",
    ),
) -> SessionListResponse:
    """List sessions, newest first."""
    store = get_store()
    items = [s.view() for s in store.list(offset=offset, limit=limit)]
    return SessionListResponse(items=items, total=store.count())


@router.get("/{session_id}", response_model=SessionView)
def get_session(session_id: str) -> SessionView:
    """Retrieve a single session by id."""
    store = get_store()
    try:
        return store.get(session_id).view()
    except SessionNotFoundError:
        raise _not_found(session_id)


@router.post("/{session_id}/keys", response_model=SessionView)
def press_keys(session_id: str, payload: KeyPresses) -> SessionView:
    """Press keys on a session in order and return the new state."""
    store = get_store()
    try:
        return store.press(session_id, payload.keys).view()
    except SessionNotFoundError:
        raise _not_found(session_id)
    except UnknownKeyError as e:
        raise _unknown_key(e) from e


@router.delete("/{session_id}", response_model=SessionView)
def delete_session(session_id: str) -> SessionView:
    """Delete a session and return its last state."""
    store = get_store()
    try:
        return store.delete(session_id).view()
    except SessionNotFoundError:
        raise _not_found(session_id)


@health_router.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", sessions=get_store().count())
