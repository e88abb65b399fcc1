"""API key endpoints: register, update email, confirm."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from jarvis.api.dependencies import KeyLifecycleDep, RegistrationServiceDep
from jarvis.api.params import API_KEY_PARAM, get_str, read_params

router = APIRouter()


@router.post("/api/register")
async def register(request: Request, registration: RegistrationServiceDep) -> JSONResponse:
    """Register an email for a client source.

    Returns the key projection {email, source, uuid, status}. Keys from
    untrusted sources come back as needs_confirmation.
    """
    params = await read_params(request)
    api_key = await registration.register(
        get_str(params, "email"),
        get_str(params, "source"),
        identifier=get_str(params, API_KEY_PARAM),
    )
    return JSONResponse(api_key.public_view())


@router.post("/api/update")
async def update_email(request: Request, lifecycle: KeyLifecycleDep) -> JSONResponse:
    """Move a key to a new email. The key must be confirmed again."""
    params = await read_params(request)
    api_key = await lifecycle.update_email(
        get_str(params, API_KEY_PARAM),
        get_str(params, "email"),
    )
    return JSONResponse(api_key.public_view())


@router.get("/confirm/{confirmation_code}")
async def confirm(confirmation_code: str, lifecycle: KeyLifecycleDep) -> JSONResponse:
    await lifecycle.confirm(confirmation_code)
    return JSONResponse(["Key confirmed"])
