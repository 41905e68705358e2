"""Tests for bcrypt password hashing."""

import bcrypt
import pytest

from app.config import settings
from app.services.password_service import get_password_hash, hash_password, verify_password


class TestPasswordHashing:
    """Digests are salted, verifiable and never the plaintext."""

    def test_hash_is_not_plaintext(self) -> None:
        digest = get_password_hash("pw1")
        assert digest != "pw1"
        assert digest.startswith("$2b$")

    def test_hash_uses_configured_cost(self) -> None:
        digest = get_password_hash("pw1")
        assert digest.split("$")[2] == f"{settings.bcrypt_rounds:02d}"

    def test_same_password_gets_different_salts(self) -> None:
        assert get_password_hash("pw1") != get_password_hash("pw1")

    def test_verify_round_trip(self) -> None:
        digest = get_password_hash("correct horse")
        assert verify_password("correct horse", digest) is True
        assert verify_password("wrong horse", digest) is False

    def test_long_password_not_truncated(self) -> None:
        base = "x" * 80
        digest = get_password_hash(base + "a")
        assert verify_password(base + "a", digest) is True
        assert verify_password(base + "b", digest) is False

    def test_malformed_digest_does_not_verify(self) -> None:
        assert verify_password("pw1", "not-a-bcrypt-hash") is False

    def test_plain_bcrypt_digest_is_not_accepted(self) -> None:
        """Stored digests are of the pre-hashed password, not the raw one."""
        raw = bcrypt.hashpw(b"pw1", bcrypt.gensalt(rounds=4)).decode("utf-8")
        assert verify_password("pw1", raw) is False

    @pytest.mark.asyncio
    async def test_async_wrapper(self) -> None:
        digest = await hash_password("pw1")
        assert verify_password("pw1", digest) is True
