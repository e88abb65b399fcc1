"""Chrome extension endpoints.

Same contracts as the /api routes; the source defaults to chrome.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from jarvis.api.dependencies import DispatchEngineDep, KeyLifecycleDep, RegistrationServiceDep
from jarvis.api.params import API_KEY_PARAM, get_str, read_params
from jarvis.api.routes.links import send_link
from jarvis.errors import MissingCredentialsError, ValidationError
from jarvis.models.api_key import ClientSource

router = APIRouter(prefix="/chrome")


@router.post("/register")
async def register(request: Request, registration: RegistrationServiceDep) -> JSONResponse:
    params = await read_params(request)
    api_key = await registration.register(
        get_str(params, "email"),
        get_str(params, "source"),
        identifier=get_str(params, API_KEY_PARAM),
        default_source=ClientSource.CHROME,
    )
    return JSONResponse(api_key.public_view())


@router.post("/send")
async def send(request: Request, engine: DispatchEngineDep) -> JSONResponse:
    return await send_link(await read_params(request), engine)


@router.post("/ping")
async def ping(request: Request, lifecycle: KeyLifecycleDep) -> JSONResponse:
    """Check that the extension's key is usable."""
    params = await read_params(request)
    try:
        api_key = await lifecycle.ping(get_str(params, API_KEY_PARAM))
    except ValidationError as e:
        raise MissingCredentialsError(e.message) from e
    return JSONResponse(api_key.public_view())
