"""/api/v1/logs — activity log entries."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field

from core.dependencies import get_log_service
from services.log_service import LogService
from services.user_service import UserNotFoundError

router = APIRouter(prefix="/logs", tags=["logs"])


class LogCreateBody(BaseModel):
    """Body for POST /logs. user_id, when given, must name an existing user."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"user_id": 1, "action": "login", "detail": "web"}}
    )

    action: str = Field(..., min_length=1, max_length=64)
    user_id: Optional[int] = None
    detail: Optional[str] = None


class LogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[int]
    action: str
    detail: Optional[str]
    created_at_utc: datetime


@router.post("", status_code=status.HTTP_201_CREATED, response_model=LogOut, summary="Record log entry")
async def create_log(body: LogCreateBody, service: LogService = Depends(get_log_service)):
    try:
        return await service.record(body.action, user_id=body.user_id, detail=body.detail)
    except UserNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.get("", response_model=List[LogOut], summary="List log entries, newest first")
async def list_logs(
    user_id: Optional[int] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: LogService = Depends(get_log_service),
):
    return await service.list_logs(user_id=user_id, limit=limit, offset=offset)
