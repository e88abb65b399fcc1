"""HTTP API router."""

from fastapi import APIRouter

from jarvis.api.routes.admin import router as admin_router
from jarvis.api.routes.chrome import router as chrome_router
from jarvis.api.routes.keys import router as keys_router
from jarvis.api.routes.links import router as links_router

router = APIRouter()

router.include_router(keys_router, tags=["keys"])
router.include_router(links_router, tags=["links"])
router.include_router(chrome_router, tags=["chrome"])
router.include_router(admin_router, tags=["admin"])
