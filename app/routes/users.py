"""
TechNotes Backend — Users Route Handlers
==========================================

What:  GET/POST /users, PATCH/DELETE /users/{id}, and the body-id forms
       PATCH/DELETE /users.
How:   Parses the body, delegates to UserService, returns the status code.
       Errors raised by the service are turned into responses by the
       handlers registered in main.py.

Status codes:
    GET    /users       200 array | 404 empty
    POST   /users       201       | 400 bad input, 409 duplicate
    PATCH  /users/{id}  200       | 400 bad input or unknown id, 409 duplicate
    DELETE /users/{id}  200       | 400 bad input or user owns notes, 404 unknown id
"""

from typing import List, Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.user import (
    CreateUserRequest,
    DeleteUserRequest,
    ErrorResponse,
    MessageResponse,
    UpdateUserRequest,
    UserResponse,
)
from app.services.user_service import user_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "",
    response_model=List[UserResponse],
    responses={
        200: {"description": "Every user, without passwords"},
        404: {"description": "No users exist", "model": ErrorResponse},
    },
    summary="List all users",
)
async def list_users(db: AsyncSession = Depends(get_db_session)) -> List[UserResponse]:
    return await user_service.list_users(db)


@router.post(
    "",
    status_code=201,
    response_model=MessageResponse,
    responses={
        201: {"description": "User created", "model": MessageResponse},
        400: {"description": "Missing or empty field", "model": ErrorResponse},
        409: {"description": "Username already exists", "model": ErrorResponse},
    },
    summary="Create a user",
)
async def create_user(
    payload: CreateUserRequest,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await user_service.create_user(
        db,
        username=payload.username,
        password=payload.password,
        roles=payload.roles,
    )


@router.patch(
    "/{user_id}",
    response_model=MessageResponse,
    responses={
        200: {"description": "User updated", "model": MessageResponse},
        400: {"description": "Missing field or unknown user", "model": ErrorResponse},
        409: {"description": "Username already exists", "model": ErrorResponse},
    },
    summary="Update a user",
)
async def update_user(
    user_id: str,
    payload: UpdateUserRequest,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await _update(db, user_id, payload)


@router.patch(
    "",
    response_model=MessageResponse,
    responses={
        200: {"description": "User updated", "model": MessageResponse},
        400: {"description": "Missing field or unknown user", "model": ErrorResponse},
        409: {"description": "Username already exists", "model": ErrorResponse},
    },
    summary="Update a user identified by the body's id",
)
async def update_user_by_body(
    payload: UpdateUserRequest,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await _update(db, payload.id, payload)


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    responses={
        200: {"description": "User deleted", "model": MessageResponse},
        400: {"description": "User owns notes", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Delete a user",
)
async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await user_service.delete_user(db, user_id)


@router.delete(
    "",
    response_model=MessageResponse,
    responses={
        200: {"description": "User deleted", "model": MessageResponse},
        400: {"description": "Missing id or user owns notes", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Delete a user identified by the body's id",
)
async def delete_user_by_body(
    payload: Optional[DeleteUserRequest] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await user_service.delete_user(db, payload.id if payload else None)


async def _update(
    db: AsyncSession,
    user_id: Optional[str],
    payload: UpdateUserRequest,
) -> MessageResponse:
    return await user_service.update_user(
        db,
        user_id=user_id,
        username=payload.username,
        roles=payload.roles,
        active=payload.active,
        password=payload.password,
    )
