"""Session-bound anti-forgery tokens."""

from __future__ import annotations

import hashlib
import hmac
import secrets
import time

from app.core.config import get_settings

SESSION_ID_KEY = "session_id"


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


def generate_csrf_token(session_id: str, timestamp: int | None = None) -> str:
    """Generate CSRF token bound to session and time.

    Args:
        session_id: Session identifier to bind token to
        timestamp: Optional timestamp (defaults to current hour)

    Returns:
        HMAC-based CSRF token prefixed with its hour bucket
    """
    if timestamp is None:
        timestamp = int(time.time() // 3600)

    secret_key = get_settings().secret_key.encode()
    message = f"{session_id}:{timestamp}"
    csrf_token = hmac.new(secret_key, message.encode(), hashlib.sha256).hexdigest()

    return f"{timestamp}:{csrf_token}"


def validate_csrf_token(session_id: str, csrf_token: str | None, max_age_hours: int = 12) -> bool:
    """Validate CSRF token for session.

    Args:
        session_id: Session identifier
        csrf_token: CSRF token to validate
        max_age_hours: Maximum age of token in hours

    Returns:
        True if valid, False otherwise
    """
    if not csrf_token:
        return False

    try:
        parts = csrf_token.split(":", 1)
        if len(parts) != 2:
            return False

        token_timestamp, token_value = parts
        timestamp = int(token_timestamp)

        current_hour = int(time.time() // 3600)
        if current_hour - timestamp > max_age_hours:
            return False

        expected_token = generate_csrf_token(session_id, timestamp)
        expected_value = expected_token.split(":", 1)[1]

        return hmac.compare_digest(expected_value, token_value)

    except (ValueError, IndexError):
        return False
