"""API v1: always-on routes plus the prefix feature modules mount under."""

from fastapi import APIRouter

from .meta import router as meta_router

API_V1_PREFIX = "/api/v1"

router = APIRouter(prefix=API_V1_PREFIX, tags=["api_v1"])
router.include_router(meta_router)

api_v1_router = router
