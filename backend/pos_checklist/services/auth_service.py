"""
Identity lookup, provisioning and login.

Passwords are stored only as bcrypt hashes. A login for an unknown username
still performs a bcrypt comparison against a throwaway hash, so an unknown
user and a wrong password cost the same and produce the same result.
"""

from dataclasses import dataclass
from typing import Optional

import bcrypt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pos_checklist.auth import TokenCodec
from pos_checklist.logging_config import logger
from pos_checklist.models.user import User

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6

_DUMMY_HASH = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt()).decode()


@dataclass
class LoginResult:
    user: User
    token: str


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


async def get_user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def create_user(db: AsyncSession, username: str, password: str) -> User:
    """
    Provision a new identity. Usernames are trimmed and must be unique and at
    least 3 characters; passwords at least 6.
    """
    username = (username or "").strip()
    if len(username) < MIN_USERNAME_LENGTH:
        raise ValueError(f"Username must be at least {MIN_USERNAME_LENGTH} characters")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if await get_user_by_username(db, username) is not None:
        raise ValueError(f"Username '{username}' is already taken")

    user = User(username=username, password_hash=hash_password(password))
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Created user %s", username)
    return user


async def authenticate_user(db: AsyncSession, username: str, password: str) -> Optional[User]:
    """Return the user if the credentials match, else None."""
    user = await get_user_by_username(db, username)
    if user is None:
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


async def login(db: AsyncSession, codec: TokenCodec, username: str, password: str) -> Optional[LoginResult]:
    user = await authenticate_user(db, username, password)
    if user is None:
        logger.warning("Login failed for username=%r", username)
        return None
    logger.info("Login succeeded for username=%r", username)
    return LoginResult(user=user, token=codec.issue(user.id, user.username))
