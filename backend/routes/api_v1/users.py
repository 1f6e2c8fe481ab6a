"""/api/v1/users — user accounts CRUD."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, ConfigDict, Field

from core.dependencies import get_user_service
from services.user_service import DuplicateUserError, UserNotFoundError, UserService

router = APIRouter(prefix="/users", tags=["users"])


class UserCreateBody(BaseModel):
    """Body for POST /users."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "jdoe",
                "email": "jdoe@example.com",
                "full_name": "Jane Doe",
            }
        }
    )

    username: str = Field(..., min_length=1, max_length=64)
    email: str = Field(..., min_length=3, max_length=255)
    full_name: Optional[str] = Field(default=None, max_length=255)
    is_active: bool = True


class UserUpdateBody(BaseModel):
    """Body for PATCH /users/{user_id}. Only fields present are changed."""

    username: Optional[str] = Field(default=None, min_length=1, max_length=64)
    email: Optional[str] = Field(default=None, min_length=3, max_length=255)
    full_name: Optional[str] = Field(default=None, max_length=255)
    is_active: Optional[bool] = None


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    full_name: Optional[str]
    is_active: bool
    created_at_utc: datetime


@router.post("", status_code=status.HTTP_201_CREATED, response_model=UserOut, summary="Create user")
async def create_user(
    body: UserCreateBody,
    service: UserService = Depends(get_user_service),
):
    try:
        return await service.create_user(
            body.username,
            body.email,
            full_name=body.full_name,
            is_active=body.is_active,
        )
    except DuplicateUserError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e


@router.get("", response_model=List[UserOut], summary="List users")
async def list_users(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: UserService = Depends(get_user_service),
):
    return await service.list_users(limit=limit, offset=offset)


@router.get("/{user_id}", response_model=UserOut, summary="Get user")
async def get_user(user_id: int, service: UserService = Depends(get_user_service)):
    try:
        return await service.get_user(user_id)
    except UserNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


@router.patch("/{user_id}", response_model=UserOut, summary="Update user")
async def update_user(
    user_id: int,
    body: UserUpdateBody,
    service: UserService = Depends(get_user_service),
):
    changes = body.model_dump(exclude_unset=True)
    # username, email and is_active are not nullable
    for name in ("username", "email", "is_active"):
        if name in changes and changes[name] is None:
            raise HTTPException(status_code=422, detail=f"{name} must not be null")
    try:
        return await service.update_user(user_id, **changes)
    except UserNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except DuplicateUserError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete user")
async def delete_user(user_id: int, service: UserService = Depends(get_user_service)):
    try:
        await service.delete_user(user_id)
    except UserNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
