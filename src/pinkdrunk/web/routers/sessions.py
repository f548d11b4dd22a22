"""Drinking session routes."""

from fastapi import APIRouter, Body, Request

from ...models.session import EndReason
from ...services.sessions import SessionService
from ...validation import CareEventPayload, DrinkPayload, EndPayload, ReportPayload

router = APIRouter(prefix="/users/{user_id}/sessions", tags=["sessions"])


def get_sessions(request: Request) -> SessionService:
    """Get the session service from app state."""
    return request.app.state.sessions


@router.post("/start")
async def start_session(request: Request, user_id: str):
    """Start a session, or return the one already running."""
    view = await get_sessions(request).start_session(user_id)
    return view.to_dict()


@router.get("/current")
async def current_session(request: Request, user_id: str):
    """Active session with its prediction."""
    view = await get_sessions(request).current(user_id)
    if view is None:
        return {"session": None}
    return view.to_dict()


@router.get("/history")
async def session_history(request: Request, user_id: str, limit: int = 10):
    """Ended sessions, newest first."""
    summaries = await get_sessions(request).history(user_id, limit=limit)
    return {"sessions": [s.to_dict() for s in summaries]}


@router.post("/{session_id}/drinks")
async def log_drink(request: Request, user_id: str, session_id: int, payload: DrinkPayload):
    """Log a drink."""
    view = await get_sessions(request).log_drink(user_id, session_id, payload)
    return view.to_dict()


@router.patch("/{session_id}/drinks/{drink_id}")
async def edit_drink(
    request: Request,
    user_id: str,
    session_id: int,
    drink_id: int,
    payload: DrinkPayload,
):
    """Edit a logged drink."""
    view = await get_sessions(request).edit_drink(user_id, session_id, drink_id, payload)
    return view.to_dict()


@router.post("/{session_id}/care-events")
async def add_care_event(
    request: Request, user_id: str, session_id: int, payload: CareEventPayload
):
    """Log water, a snack or a meal."""
    view = await get_sessions(request).add_care_event(user_id, session_id, payload)
    return view.to_dict()


@router.post("/{session_id}/report")
async def report_level(
    request: Request, user_id: str, session_id: int, payload: ReportPayload
):
    """Report how drunk you feel; calibrates thresholds."""
    view = await get_sessions(request).report_level(user_id, session_id, payload.level)
    return view.to_dict()


@router.post("/{session_id}/end")
async def end_session(
    request: Request,
    user_id: str,
    session_id: int,
    payload: EndPayload | None = Body(default=None),
):
    """End a session."""
    reason = payload.reason if payload else EndReason.USER_END
    await get_sessions(request).end_session(user_id, session_id, reason)
    return {"success": True}
