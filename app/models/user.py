"""
TechNotes Backend — User SQLAlchemy Model
===========================================

What:  ORM model representing the `users` table.
How:   Inherits from the shared DeclarativeBase; Alembic reads this for migrations.
Who:   Used by UserService for CRUD operations.

Table Design:
    - id: UUID primary key, assigned on insert
    - username: unique index; the index is the final word on duplicates,
      the service-level lookup only produces the friendly early answer
    - password: bcrypt digest, never the plaintext
    - roles: JSON array of role identifiers (at least one, enforced by the service)
    - active: explicit default True in the model and the migration
"""

import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import JSON, Boolean, DateTime, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    Represents an account that can own notes.

    Lifecycle:
        1. Created by POST /users (id and digest assigned then)
        2. Updated by PATCH /users/{id} (every field except id)
        3. Hard-deleted by DELETE /users/{id}, only while it owns no notes
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique identifier",
    )

    username: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Login name, unique across all users",
    )

    # Excluded from every response schema
    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt digest of the password",
    )

    roles: Mapped[List[str]] = mapped_column(
        JSON(none_as_null=True),
        nullable=False,
        comment="Role identifiers, e.g. Employee, Manager, Admin",
    )

    active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
        comment="Whether the account is enabled",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return (
            f"<User(id={self.id}, username='{self.username}', "
            f"roles={self.roles}, active={self.active})>"
        )
