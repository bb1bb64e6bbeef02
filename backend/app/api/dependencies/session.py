"""Session helpers: session id, anti-forgery checks and flash messages."""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request

from app.core.config import get_settings
from app.core.security import SESSION_ID_KEY, new_session_id, validate_csrf_token

logger = logging.getLogger(__name__)

CSRF_HEADER = "X-CSRF-TOKEN"
FLASH_KEY = "_flash"
HTTP_419_CSRF_MISMATCH = 419
MUTATING_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


def ensure_session_id(request: Request) -> str:
    """Return the session id, starting a session if the client has none."""
    session_id = request.session.get(SESSION_ID_KEY)
    if not session_id:
        session_id = new_session_id()
        request.session[SESSION_ID_KEY] = session_id
    return session_id


def require_csrf(request: Request) -> None:
    """Dependency to require the anti-forgery header on state-changing requests."""
    if request.method not in MUTATING_METHODS:
        return

    settings = get_settings()
    if not settings.csrf_enabled:
        return

    session_id = request.session.get(SESSION_ID_KEY)
    csrf_header = request.headers.get(CSRF_HEADER)
    if not session_id or not validate_csrf_token(
        session_id, csrf_header, max_age_hours=settings.csrf_token_max_age_hours
    ):
        logger.warning(f"Rejected {request.method} {request.url.path}: CSRF token mismatch")
        raise HTTPException(status_code=HTTP_419_CSRF_MISMATCH, detail="CSRF token mismatch.")


def flash(request: Request, key: str, message: str) -> None:
    """Store a one-shot message for the next rendered page."""
    messages = dict(request.session.get(FLASH_KEY) or {})
    messages[key] = message
    request.session[FLASH_KEY] = messages


def pop_flash(request: Request) -> dict[str, str]:
    return request.session.pop(FLASH_KEY, None) or {}
