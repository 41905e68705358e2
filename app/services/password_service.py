"""Password hashing (bcrypt with SHA-256 pre-hash).

bcrypt only looks at the first 72 bytes of its input and recent releases reject
longer inputs outright. Pre-hashing with SHA-256 gives a fixed-length input so
long passwords are neither truncated nor refused.
"""

import asyncio
import base64
import hashlib

import bcrypt

from app.config import settings


def _prehash(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def get_password_hash(password: str) -> str:
    """Return the bcrypt digest of password using the configured cost factor."""
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(_prehash(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return True if plain_password matches hashed_password."""
    try:
        return bool(
            bcrypt.checkpw(_prehash(plain_password), hashed_password.encode("utf-8"))
        )
    except (ValueError, TypeError):
        return False


async def hash_password(password: str) -> str:
    """Hash in a worker thread so other requests keep running meanwhile."""
    return await asyncio.to_thread(get_password_hash, password)
