"""
TechNotes Backend — User Service Unit Tests
=============================================

What:  Tests for UserService business rules (list, create, update, delete).
How:   Most tests run against an in-memory SQLite session; store-failure
       paths use a mock session.

What we test:
    ✅ Required fields and strict types, rejected before touching the store
    ✅ Duplicate usernames, including the race caught by the unique index
    ✅ Password hashing on create and optional rehash on update
    ✅ Unknown id on update is a 400, on delete a 404
    ✅ Users who own notes cannot be deleted
    ✅ Unexpected store errors become DatabaseError
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from app.exceptions import ConflictError, DatabaseError, NotFoundError, ValidationError
from app.models.user import User
from app.services.password_service import verify_password
from app.services.user_service import UserService


class TestListUsers:
    """Tests for list_users."""

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_empty_collection_is_not_found(self, db_session):
        with pytest.raises(NotFoundError, match="No users found"):
            await self.service.list_users(db_session)

    @pytest.mark.asyncio
    async def test_lists_users_without_password(self, db_session, make_user):
        await make_user("alice", roles=["Employee"])
        await make_user("bob", roles=["Manager", "Admin"], active=False)

        users = await self.service.list_users(db_session)

        by_name = {user.username: user for user in users}
        assert set(by_name) == {"alice", "bob"}
        assert by_name["bob"].roles == ["Manager", "Admin"]
        assert by_name["bob"].active is False
        for user in users:
            assert "password" not in user.model_dump()

    @pytest.mark.asyncio
    async def test_store_failure_becomes_database_error(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("gone"))

        with pytest.raises(DatabaseError):
            await self.service.list_users(mock_db_session)

    @pytest.mark.asyncio
    async def test_maps_rows_to_responses(self, mock_db_session):
        user_id = uuid4()
        result = SimpleNamespace(
            all=lambda: [SimpleNamespace(id=user_id, username="alice", roles=["Employee"], active=True)]
        )
        mock_db_session.execute = AsyncMock(return_value=result)

        users = await self.service.list_users(mock_db_session)

        assert len(users) == 1
        assert users[0].id == user_id
        assert users[0].model_dump(by_alias=True)["_id"] == user_id


class TestCreateUser:
    """Tests for create_user."""

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_creates_user_with_hashed_password(self, db_session):
        result = await self.service.create_user(
            db_session, username="alice", password="pw1", roles=["Employee"]
        )

        assert result.message == "User alice created"
        user = (await db_session.execute(select(User))).scalars().one()
        assert user.username == "alice"
        assert user.roles == ["Employee"]
        assert user.active is True
        assert user.password != "pw1"
        assert verify_password("pw1", user.password)

    @pytest.mark.asyncio
    async def test_duplicate_roles_collapse_in_order(self, db_session):
        await self.service.create_user(
            db_session, username="alice", password="pw1", roles=["Manager", "Employee", "Manager"]
        )

        user = (await db_session.execute(select(User))).scalars().one()
        assert user.roles == ["Manager", "Employee"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "username, password, roles",
        [
            ("", "pw1", ["Employee"]),
            (None, "pw1", ["Employee"]),
            ("alice", "", ["Employee"]),
            ("alice", None, ["Employee"]),
            ("alice", "pw1", []),
            ("alice", "pw1", None),
            ("alice", "pw1", "Employee"),
            ("alice", "pw1", ["Employee", ""]),
        ],
    )
    async def test_invalid_input_never_touches_store(self, mock_db_session, username, password, roles):
        with pytest.raises(ValidationError, match="All fields are required"):
            await self.service.create_user(
                mock_db_session, username=username, password=password, roles=roles
            )

        mock_db_session.execute.assert_not_awaited()
        mock_db_session.add.assert_not_called()
        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_username_conflicts(self, db_session, make_user):
        await make_user("alice")

        with pytest.raises(ConflictError, match="Username already exists"):
            await self.service.create_user(
                db_session, username="alice", password="other", roles=["Admin"]
            )

    @pytest.mark.asyncio
    async def test_unique_index_catches_race(self, db_session, make_user, session_factory):
        """Two creates that both pass the lookup still produce one record."""
        await make_user("alice")

        with patch.object(self.service, "_find_by_username", AsyncMock(return_value=None)):
            with pytest.raises(ConflictError, match="Username already exists"):
                await self.service.create_user(
                    db_session, username="alice", password="pw2", roles=["Employee"]
                )
        await db_session.rollback()

        async with session_factory() as session:
            users = (await session.execute(select(User).where(User.username == "alice"))).scalars().all()
        assert len(users) == 1

    @pytest.mark.asyncio
    async def test_write_failure_becomes_database_error(self, mock_db_session):
        lookup = SimpleNamespace(scalars=lambda: SimpleNamespace(first=lambda: None))
        mock_db_session.execute = AsyncMock(return_value=lookup)
        mock_db_session.flush.side_effect = OperationalError("INSERT", {}, Exception("disk full"))

        with pytest.raises(DatabaseError, match="User creation failed"):
            await self.service.create_user(
                mock_db_session, username="alice", password="pw1", roles=["Employee"]
            )


class TestUpdateUser:
    """Tests for update_user."""

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_updates_all_fields(self, db_session, make_user):
        user = await make_user("alice", password="pw1")

        result = await self.service.update_user(
            db_session,
            user_id=str(user.id),
            username="alice2",
            roles=["Manager"],
            active=False,
            password="pw2",
        )

        assert result.message == "User alice2 updated"
        updated = await db_session.get(User, user.id)
        assert updated.username == "alice2"
        assert updated.roles == ["Manager"]
        assert updated.active is False
        assert verify_password("pw2", updated.password)

    @pytest.mark.asyncio
    async def test_omitted_password_keeps_digest(self, db_session, make_user):
        user = await make_user("alice", password="pw1")

        await self.service.update_user(
            db_session, user_id=user.id, username="alice", roles=["Employee"], active=True
        )

        updated = await db_session.get(User, user.id)
        assert updated.password == user.password
        assert verify_password("pw1", updated.password)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "fields",
        [
            {"username": "", "roles": ["Employee"], "active": True},
            {"username": None, "roles": ["Employee"], "active": True},
            {"username": "alice", "roles": [], "active": True},
            {"username": "alice", "roles": ["Employee"], "active": None},
            {"username": "alice", "roles": ["Employee"], "active": "true"},
            {"username": "alice", "roles": ["Employee"], "active": 1},
            {"username": "alice", "roles": ["Employee"], "active": True, "password": ""},
        ],
    )
    async def test_invalid_input_rejected(self, mock_db_session, fields):
        with pytest.raises(ValidationError, match="All fields are required"):
            await self.service.update_user(mock_db_session, user_id=str(uuid4()), **fields)

        mock_db_session.execute.assert_not_awaited()
        mock_db_session.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_id_rejected(self, mock_db_session):
        with pytest.raises(ValidationError, match="All fields are required"):
            await self.service.update_user(
                mock_db_session, user_id=None, username="alice", roles=["Employee"], active=True
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id", [lambda: str(uuid4()), lambda: "not-a-uuid"])
    async def test_unknown_id_is_bad_request(self, db_session, make_user, user_id):
        existing = await make_user("alice")

        with pytest.raises(ValidationError, match="User not found"):
            await self.service.update_user(
                db_session, user_id=user_id(), username="mallory", roles=["Admin"], active=False
            )

        unchanged = await db_session.get(User, existing.id)
        assert unchanged.username == "alice"
        assert unchanged.roles == ["Employee"]

    @pytest.mark.asyncio
    async def test_other_users_name_conflicts(self, db_session, make_user):
        await make_user("alice")
        bob = await make_user("bob")

        with pytest.raises(ConflictError, match="Username already exists"):
            await self.service.update_user(
                db_session, user_id=bob.id, username="alice", roles=["Employee"], active=True
            )

    @pytest.mark.asyncio
    async def test_own_name_is_not_a_conflict(self, db_session, make_user):
        alice = await make_user("alice")

        result = await self.service.update_user(
            db_session, user_id=alice.id, username="alice", roles=["Admin"], active=True
        )

        assert result.message == "User alice updated"

    @pytest.mark.asyncio
    async def test_same_payload_twice_converges(self, db_session, make_user):
        alice = await make_user("alice")
        payload = dict(user_id=alice.id, username="alicia", roles=["Manager"], active=False, password="pw9")

        await self.service.update_user(db_session, **payload)
        first = await db_session.get(User, alice.id)
        first_state = (first.username, list(first.roles), first.active)

        await self.service.update_user(db_session, **payload)
        second = await db_session.get(User, alice.id)

        assert (second.username, list(second.roles), second.active) == first_state
        assert verify_password("pw9", second.password)


class TestDeleteUser:
    """Tests for delete_user."""

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_deletes_user_without_notes(self, db_session, make_user, fetch_user):
        bob = await make_user("bob")

        result = await self.service.delete_user(db_session, str(bob.id))
        await db_session.commit()

        assert result.message == f"Username bob with ID {bob.id} deleted"
        assert await fetch_user(bob.id) is None

    @pytest.mark.asyncio
    async def test_user_with_notes_is_kept(self, db_session, make_user, make_note, fetch_user):
        alice = await make_user("alice")
        await make_note(alice.id)

        with pytest.raises(ValidationError, match="User has notes, cannot delete"):
            await self.service.delete_user(db_session, str(alice.id))

        assert await fetch_user(alice.id) is not None

    @pytest.mark.asyncio
    async def test_foreign_key_catches_note_added_after_check(
        self, db_session, make_user, make_note, fetch_user
    ):
        alice = await make_user("alice")
        await make_note(alice.id)

        with patch.object(self.service, "_has_notes", AsyncMock(return_value=False)):
            with pytest.raises(ValidationError, match="User has notes, cannot delete"):
                await self.service.delete_user(db_session, str(alice.id))
        await db_session.rollback()

        assert await fetch_user(alice.id) is not None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id", [None, ""])
    async def test_missing_id_rejected(self, mock_db_session, user_id):
        with pytest.raises(ValidationError, match="User ID is required"):
            await self.service.delete_user(mock_db_session, user_id)

        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id", [lambda: str(uuid4()), lambda: "not-a-uuid"])
    async def test_unknown_id_is_not_found(self, db_session, user_id):
        with pytest.raises(NotFoundError, match="User not found"):
            await self.service.delete_user(db_session, user_id())

    @pytest.mark.asyncio
    async def test_second_delete_is_not_found(self, db_session, make_user):
        bob = await make_user("bob")

        await self.service.delete_user(db_session, str(bob.id))
        with pytest.raises(NotFoundError):
            await self.service.delete_user(db_session, str(bob.id))
