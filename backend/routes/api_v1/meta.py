"""GET /api/v1/meta/* — version and composition metadata."""

from __future__ import annotations

from fastapi import APIRouter, Request

from version import get_version

router = APIRouter(prefix="/meta", tags=["meta"])


@router.get("/version", summary="Application version")
def meta_version() -> dict:
    return {"version": get_version()}


@router.get("/modules", summary="Feature modules registered at startup")
def meta_modules(request: Request) -> dict:
    """Registered feature modules and the entity modules discovered for them."""
    app_module = request.app.state.app_module
    return {
        "registered": list(app_module.registered),
        "entity_modules": list(app_module.entity_modules),
        "synchronize": app_module.settings.database.synchronize,
    }
