"""
TechNotes Backend — Note SQLAlchemy Model
===========================================

What:  ORM model representing the `notes` table.
Who:   Read by UserService to refuse deleting a user who still owns notes.

Table Design:
    - user_id: foreign key to users.id with ON DELETE RESTRICT, so the store
      refuses an orphaning delete even if the service check is bypassed
    - title / text: the ticket content
    - completed: whether the work described by the note is done
    - Index on user_id: the delete guard looks notes up by owner
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy import text as sql_text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """A ticket assigned to a user."""

    __tablename__ = "notes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="Owner of the note",
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    text: Mapped[str] = mapped_column(Text, nullable=False, default="")

    completed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=sql_text("false"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, user_id={self.user_id}, completed={self.completed})>"
