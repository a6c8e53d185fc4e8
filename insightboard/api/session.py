"""
Endpoints exposing the current analysis session.
"""
from fastapi import APIRouter, Request
from insightboard.core.schemas import SessionSnapshot

router = APIRouter()


@router.get("/session", response_model=SessionSnapshot)
async def get_session_state(request: Request):
    """Current state (idle, processing, ready or failed) with its result or error."""
    return request.app.state.session.snapshot()


@router.post("/session/reset", response_model=SessionSnapshot)
async def reset_session(request: Request):
    """Discard the current result and go back to idle."""
    session = request.app.state.session
    session.reset()
    return session.snapshot()
