"""Redirect targets for form-style acknowledgements."""

from __future__ import annotations

from urllib.parse import urlsplit

from fastapi import Request


def back_url(request: Request, fallback: str) -> str:
    """Same-site path of the Referer header, or ``fallback``.

    Only the path and query are kept so a forged Referer cannot redirect
    off-site.
    """
    referer = request.headers.get("Referer")
    if not referer:
        return fallback

    parts = urlsplit(referer)
    if parts.netloc and parts.netloc != request.url.netloc:
        return fallback
    if not parts.path.startswith("/") or parts.path.startswith("//"):
        return fallback
    return f"{parts.path}?{parts.query}" if parts.query else parts.path
