"""Link endpoints: send and flush.

Missing data on these routes answers 401 rather than 422: the key is
part of the required data.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from jarvis.api.dependencies import BatchFlusherDep, DispatchEngineDep
from jarvis.api.params import API_KEY_PARAM, get_str, parse_flag, read_params
from jarvis.errors import MissingCredentialsError, ValidationError
from jarvis.services.dispatch import DispatchEngine

router = APIRouter()


async def send_link(params: dict[str, Any], engine: DispatchEngine) -> JSONResponse:
    """Shared body of the send routes."""
    try:
        await engine.submit(
            get_str(params, API_KEY_PARAM),
            get_str(params, "link"),
            title=get_str(params, "title"),
            preview=parse_flag(params.get("preview")),
            queued=parse_flag(params.get("queued")),
        )
    except ValidationError as e:
        raise MissingCredentialsError(e.message) from e
    return JSONResponse(["Link processed"])


@router.api_route("/api/send", methods=["GET", "POST"])
async def send(request: Request, engine: DispatchEngineDep) -> JSONResponse:
    """Send a link now, or queue it with queued=yes."""
    return await send_link(await read_params(request), engine)


@router.post("/api/flush")
async def flush(request: Request, flusher: BatchFlusherDep) -> JSONResponse:
    """Hand off every queued link of a key, oldest first."""
    params = await read_params(request)
    try:
        flushed = await flusher.flush(get_str(params, API_KEY_PARAM))
    except ValidationError as e:
        raise MissingCredentialsError(e.message) from e
    return JSONResponse({"flushed": flushed})
