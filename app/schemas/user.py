"""
TechNotes Backend — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract for the user endpoints.
How:   FastAPI uses these models to parse request bodies, serialize responses,
       and generate the OpenAPI documentation.

Request models only check JSON types (strict: "1" is not a bool, 5 is not a
string). Presence rules live in UserService so the same rules apply whether
the service is called over HTTP or directly.
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, Field, StrictBool, StrictStr


# ══════════════════════════════════════════════════════════════════════════
# Request models: what clients send
# ══════════════════════════════════════════════════════════════════════════


class CreateUserRequest(BaseModel):
    """Body of POST /users."""
    username: Optional[StrictStr] = Field(default=None, description="Unique login name")
    password: Optional[StrictStr] = Field(default=None, description="Plaintext password, hashed before storage")
    roles: Optional[List[StrictStr]] = Field(default=None, description="At least one role identifier")


class UpdateUserRequest(BaseModel):
    """
    Body of PATCH /users/{id} and PATCH /users.

    `id` is read from the body only on PATCH /users; the path form ignores it.
    `password` may be omitted to keep the current one.
    """
    id: Optional[StrictStr] = Field(default=None, description="User ID (body form only)")
    username: Optional[StrictStr] = Field(default=None)
    password: Optional[StrictStr] = Field(default=None, description="New password; omit to keep the current one")
    roles: Optional[List[StrictStr]] = Field(default=None)
    active: Optional[StrictBool] = Field(default=None)


class DeleteUserRequest(BaseModel):
    """Body of DELETE /users."""
    id: Optional[StrictStr] = Field(default=None, description="User ID")


# ══════════════════════════════════════════════════════════════════════════
# Response models: what the API returns
# ══════════════════════════════════════════════════════════════════════════


class UserResponse(BaseModel):
    """
    What:  Public representation of a user.
    Who:   Returned as array items by GET /users.

    The password digest has no field here, so it can never be serialized.
    """
    id: uuid.UUID = Field(serialization_alias="_id", description="Unique user identifier")
    username: str
    roles: List[str]
    active: bool

    model_config = {"from_attributes": True}


class MessageResponse(BaseModel):
    """Success body of create, update and delete."""
    message: str = Field(description="Human-readable outcome")


class ErrorResponse(BaseModel):
    """
    Error body for every failed request.

    Example:
        {"message": "Username already exists"}
    """
    message: str = Field(description="Human-readable error description")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer checks."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
