"""Jarvis FastAPI application entry point."""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from jarvis import __version__
from jarvis.config import get_settings
from jarvis.db import close_db, init_db
from jarvis.delivery.lifecycle import init_delivery_pool, shutdown_delivery_pool
from jarvis.errors import JarvisError
from jarvis.services.http import http_client_manager

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("jarvis.startup", version=__version__)
    await init_db()
    await http_client_manager.startup()
    await init_delivery_pool()

    yield

    logger.info("jarvis.shutdown")

    # Drain deliveries before the HTTP client and DB go away
    await shutdown_delivery_pool()
    await http_client_manager.shutdown()
    await close_db()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title="Jarvis",
        description="API key registration and link dispatch",
        version=__version__,
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        """Add request ID to all requests."""
        request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-Id"] = request_id
        return response

    @app.exception_handler(JarvisError)
    async def jarvis_error_handler(request: Request, exc: JarvisError):
        """Render errors as a fixed one-element message list."""
        logger.info(
            "request.error",
            code=exc.code,
            status_code=exc.status_code,
            path=request.url.path,
            request_id=getattr(request.state, "request_id", None),
            **exc.details,
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "version": __version__}

    from jarvis.api import router as api_router

    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "jarvis.main:app",
        host=settings.server.host,
        port=settings.server.port,
    )
