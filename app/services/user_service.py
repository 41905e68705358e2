"""
TechNotes Backend — User Service (Business Logic)
===================================================

What:  List, create, update and delete user records.
How:   Direct async SQLAlchemy queries against the request's session; bcrypt
       hashing through password_service.
Who:   Called by the /users route handlers.

Rules enforced here:
    - username, password and at least one role are required on create
    - username, roles and a boolean `active` are required on update;
      password is optional there and only rehashed when given
    - usernames are unique: checked with a lookup first, then backed by the
      unique index (an IntegrityError at flush becomes the same 409)
    - a user who owns notes cannot be deleted

Error Handling Strategy:
    Domain outcomes are raised as ValidationError / NotFoundError /
    ConflictError. Any other SQLAlchemy failure is wrapped in DatabaseError
    (500). Nothing is retried.
"""

import logging
import uuid
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    TechNotesError,
    ValidationError,
)
from app.models.note import Note
from app.models.user import User
from app.schemas.user import MessageResponse, UserResponse
from app.services.password_service import hash_password

logger = logging.getLogger(__name__)

FIELDS_REQUIRED = "All fields are required"
ID_REQUIRED = "User ID is required"
USER_NOT_FOUND = "User not found"
USERNAME_TAKEN = "Username already exists"
HAS_NOTES = "User has notes, cannot delete"

ROLE_CONTAINERS = (list, tuple, set, frozenset)


def _is_filled(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def _normalize_roles(roles: Any) -> Optional[List[str]]:
    """Return roles de-duplicated in first-seen order, or None if unusable."""
    if not isinstance(roles, ROLE_CONTAINERS) or not roles:
        return None
    if not all(_is_filled(role) for role in roles):
        return None
    return list(dict.fromkeys(roles))


def _coerce_id(raw: Any) -> Optional[uuid.UUID]:
    """Parse a user id; a malformed id cannot match any record, so it maps to None."""
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        return None


class UserService:
    """
    Stateless service; each method receives the request's session.

    Responsibilities:
        - list_users(): every user without the password digest
        - create_user(): validated, duplicate-checked insert
        - update_user(): validated, duplicate-checked overwrite
        - delete_user(): hard delete guarded by note ownership
    """

    async def list_users(self, db: AsyncSession) -> List[UserResponse]:
        """
        Return every user, oldest first.

        An empty collection is reported as NotFoundError (404) rather than
        an empty array.
        """
        try:
            result = await db.execute(
                select(User.id, User.username, User.roles, User.active)
                .order_by(User.created_at, User.username)
            )
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error listing users: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve users. Please try again.",
                context={"error_type": type(e).__name__},
            )

        if not rows:
            raise NotFoundError(message="No users found", resource="user")

        return [
            UserResponse(id=row.id, username=row.username, roles=row.roles, active=row.active)
            for row in rows
        ]

    async def create_user(
        self,
        db: AsyncSession,
        username: Any,
        password: Any,
        roles: Any,
    ) -> MessageResponse:
        """
        Create a user.

        Raises:
            ValidationError: A field is missing or empty (nothing is read or written)
            ConflictError: The username is taken
            DatabaseError: The insert failed for any other reason
        """
        clean_roles = _normalize_roles(roles)
        if not _is_filled(username) or not _is_filled(password) or clean_roles is None:
            raise ValidationError(message=FIELDS_REQUIRED)

        try:
            if await self._find_by_username(db, username) is not None:
                logger.info("Rejected create: username %r already exists", username)
                raise ConflictError(message=USERNAME_TAKEN, context={"username": username})

            user = User(
                username=username,
                password=await hash_password(password),
                roles=clean_roles,
                active=True,
            )
            db.add(user)
            await db.flush()

        except TechNotesError:
            raise
        except IntegrityError:
            # Lost the race against a concurrent create with the same username
            logger.info("Rejected create: username %r taken at insert", username)
            raise ConflictError(message=USERNAME_TAKEN, context={"username": username})
        except SQLAlchemyError as e:
            logger.error("Database error creating user %r: %s", username, str(e), exc_info=True)
            raise DatabaseError(
                message="User creation failed",
                context={"error_type": type(e).__name__},
            )

        logger.info("User created: %s (%s)", user.username, user.id)
        return MessageResponse(message=f"User {username} created")

    async def update_user(
        self,
        db: AsyncSession,
        user_id: Any,
        username: Any,
        roles: Any,
        active: Any,
        password: Any = None,
    ) -> MessageResponse:
        """
        Overwrite a user's username, roles and active flag, and its password
        when one is given.

        An id that matches no user is reported as ValidationError (400), not
        NotFoundError.

        Raises:
            ValidationError: Missing/malformed field, or unknown id
            ConflictError: Another user holds the username
            DatabaseError: The update failed for any other reason
        """
        if not user_id:
            raise ValidationError(message=FIELDS_REQUIRED, field="id")

        clean_roles = _normalize_roles(roles)
        if (
            not _is_filled(username)
            or clean_roles is None
            or not isinstance(active, bool)
            or (password is not None and not _is_filled(password))
        ):
            raise ValidationError(message=FIELDS_REQUIRED)

        try:
            user = await self._get(db, user_id)
            if user is None:
                raise ValidationError(
                    message=USER_NOT_FOUND,
                    context={"resource": "user", "resource_id": str(user_id)},
                )

            duplicate = await db.execute(
                select(User.id).where(User.username == username, User.id != user.id)
            )
            if duplicate.scalars().first() is not None:
                logger.info("Rejected update of %s: username %r already exists", user.id, username)
                raise ConflictError(message=USERNAME_TAKEN, context={"username": username})

            user.username = username
            user.roles = clean_roles
            user.active = active
            if password is not None:
                user.password = await hash_password(password)

            await db.flush()

        except TechNotesError:
            raise
        except IntegrityError:
            logger.info("Rejected update of %s: username %r taken at write", user_id, username)
            raise ConflictError(message=USERNAME_TAKEN, context={"username": username})
        except SQLAlchemyError as e:
            logger.error("Database error updating user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="User update failed",
                context={"error_type": type(e).__name__},
            )

        logger.info("User updated: %s (%s)", user.username, user.id)
        return MessageResponse(message=f"User {user.username} updated")

    async def delete_user(self, db: AsyncSession, user_id: Any) -> MessageResponse:
        """
        Permanently delete a user who owns no notes.

        The note check runs before the existence check, so a dangling
        note reference still blocks the delete.

        Raises:
            ValidationError: Missing id, or the user owns notes
            NotFoundError: No user has this id
            DatabaseError: The delete failed for any other reason
        """
        if not user_id:
            raise ValidationError(message=ID_REQUIRED, field="id")

        parsed_id = _coerce_id(user_id)

        try:
            if parsed_id is not None and await self._has_notes(db, parsed_id):
                logger.info("Rejected delete of %s: user owns notes", parsed_id)
                raise ValidationError(message=HAS_NOTES, context={"resource_id": str(parsed_id)})

            user = await self._get(db, user_id)
            if user is None:
                raise NotFoundError(message=USER_NOT_FOUND, resource="user", resource_id=str(user_id))

            deleted_id, deleted_username = user.id, user.username
            await db.delete(user)
            await db.flush()

        except TechNotesError:
            raise
        except IntegrityError:
            # A note was attached between the check and the delete
            logger.info("Rejected delete of %s: foreign key violation", user_id)
            raise ValidationError(message=HAS_NOTES, context={"resource_id": str(user_id)})
        except SQLAlchemyError as e:
            logger.error("Database error deleting user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="User deletion failed",
                context={"error_type": type(e).__name__},
            )

        logger.info("User deleted: %s (%s)", deleted_username, deleted_id)
        return MessageResponse(message=f"Username {deleted_username} with ID {deleted_id} deleted")

    # ── Lookups ───────────────────────────────────────────────────────────

    async def _get(self, db: AsyncSession, user_id: Any) -> Optional[User]:
        parsed_id = _coerce_id(user_id)
        if parsed_id is None:
            return None
        return await db.get(User, parsed_id)

    async def _find_by_username(self, db: AsyncSession, username: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.username == username))
        return result.scalars().first()

    async def _has_notes(self, db: AsyncSession, user_id: uuid.UUID) -> bool:
        result = await db.execute(
            select(Note.id).where(Note.user_id == user_id).limit(1)
        )
        return result.scalars().first() is not None


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
