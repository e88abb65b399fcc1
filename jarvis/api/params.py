"""Request parameter helpers.

Bookmarklets send query strings, extensions send forms or JSON, so the
link and key routes read their parameters from all three.
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import Request

_TRUE_VALUES = frozenset({"yes", "true", "1", "on", "y"})

API_KEY_PARAM = "api-key"


async def read_params(request: Request) -> dict[str, Any]:
    """Merge query parameters with a JSON or form body.

    Body values win over query values with the same name. A body that
    cannot be parsed is ignored.
    """
    params: dict[str, Any] = dict(request.query_params)

    # Some clients send a JSON body even on GET
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            body = None
        if isinstance(body, dict):
            params.update(body)
    elif content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        params.update({k: v for k, v in form.items() if isinstance(v, str)})

    return params


def get_str(params: dict[str, Any], name: str) -> str | None:
    """Get a non-empty string parameter."""
    value = params.get(name)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def parse_flag(value: Any) -> bool:
    """Parse a client boolean flag ("yes", "true", "1", true, ...)."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUE_VALUES
