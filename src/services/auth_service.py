"""
Authentication service.

Handles registration, login and JWT access-token management.  Uses bcrypt
for password hashing and PyJWT for token generation/verification.

Routes treat the user id returned by ``decode_access_token`` as an
already-verified identity; nothing downstream re-checks it.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import Settings
from src.infrastructure.models import UserModel
from src.infrastructure.repositories import UserRepository


class AuthenticationError(Exception):
    """Bad credentials or an unusable token."""


class UserExistsError(Exception):
    """Username or email already registered."""


# ── Password hashing ──────────────────────────────────────────────────


def hash_password(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    pw_bytes = password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=12)).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.checkpw(pw_bytes, hashed_password.encode("utf-8"))


# ── Tokens ────────────────────────────────────────────────────────────


def create_access_token(user_id: int, settings: Settings) -> tuple[str, datetime]:
    """Return ``(token, expires_at)`` for *user_id*."""
    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": str(user_id),
        "type": "access",
        "iat": now,
        "exp": expires_at,
        "jti": str(uuid.uuid4()),
    }
    token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return token, expires_at


def decode_access_token(token: str, settings: Settings) -> int:
    """Verify *token* and return the user id it was issued for."""
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationError("Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthenticationError("Invalid token") from exc

    if payload.get("type") != "access":
        raise AuthenticationError("Invalid token type")
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise AuthenticationError("Invalid token subject") from exc


# ── Account operations ────────────────────────────────────────────────


async def register(
    db: AsyncSession, *, username: str, email: str, password: str
) -> UserModel:
    """Create an account.  Raises ``UserExistsError`` on a duplicate."""
    repo = UserRepository(db)
    username = username.strip()
    email = email.strip().lower()

    if await repo.get_by_username(username) or await repo.get_by_email(email):
        raise UserExistsError("User already exists")

    try:
        return await repo.create(
            username=username, email=email, password_hash=hash_password(password)
        )
    except IntegrityError as exc:
        # Lost a race with a concurrent registration; caller rolls back
        raise UserExistsError("User already exists") from exc


async def login(
    db: AsyncSession, *, email: str, password: str, settings: Settings
) -> tuple[UserModel, str, datetime]:
    """Check credentials and issue an access token."""
    user = await UserRepository(db).get_by_email(email.strip().lower())
    # Same message for unknown email and wrong password
    if user is None or not verify_password(password, user.password_hash):
        raise AuthenticationError("Invalid credentials")

    token, expires_at = create_access_token(user.id, settings)
    return user, token, expires_at
