"""Page payloads handed to the client for hydration."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response
from fastapi.templating import Jinja2Templates

from app.api.dependencies.session import ensure_session_id, pop_flash
from app.core.config import get_settings
from app.core.security import generate_csrf_token

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


def wants_json(request: Request) -> bool:
    """True for client-side navigations and API consumers."""
    if request.headers.get("X-Inertia", "").lower() == "true":
        return True
    accept = request.headers.get("Accept", "")
    return "application/json" in accept and "text/html" not in accept


def shared_props(request: Request) -> dict[str, Any]:
    """Props every page receives: the anti-forgery token and pending flash messages."""
    session_id = ensure_session_id(request)
    return {
        "csrf_token": generate_csrf_token(session_id),
        "flash": pop_flash(request),
    }


def render_page(request: Request, component: str, props: dict[str, Any], title: str) -> Response:
    """Render ``component`` as a JSON page object or as the HTML shell embedding it."""
    page = {
        "component": component,
        "props": {**shared_props(request), **jsonable_encoder(props)},
        "url": request.url.path,
    }
    logger.debug(f"Rendering {component} for {request.url.path}")

    if wants_json(request):
        return JSONResponse(page, headers={"Vary": "Accept", "X-Inertia": "true"})

    return templates.TemplateResponse(
        request,
        "app.html",
        {
            "app_name": get_settings().app_name,
            "title": title,
            "csrf_token": page["props"]["csrf_token"],
            "page_json": json.dumps(page),
        },
        headers={"Vary": "Accept"},
    )
