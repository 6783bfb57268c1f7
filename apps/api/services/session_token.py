"""Session token helpers: issue, resolve and revoke bearer tokens."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import uuid

from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from config import settings
from errors import UnauthorizedError
from models.user_session import UserSession


SESSION_TOKEN_TYPE = "eco_session"


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def encode_session_token(
    user_id: str,
    session_id: str,
    expires_at: datetime,
    issued_at: Optional[datetime] = None,
) -> str:
    """Sign the JWT carrying the session id as `jti`."""
    now = issued_at or datetime.now(timezone.utc)
    claims: Dict[str, Any] = {
        "sub": user_id,
        "jti": session_id,
        "type": SESSION_TOKEN_TYPE,
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_session_token(token: str) -> Dict[str, Any]:
    """Decode and validate a signed session token."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as exc:
        raise UnauthorizedError("Invalid or expired session token.") from exc

    token_type = str(payload.get("type", "")).strip()
    if token_type != SESSION_TOKEN_TYPE:
        raise UnauthorizedError("Invalid session token type.")

    if not str(payload.get("sub", "")).strip():
        raise UnauthorizedError("Session token missing subject.")
    if not str(payload.get("jti", "")).strip():
        raise UnauthorizedError("Session token missing id.")

    return payload


async def create_session(
    user_id: str,
    db: AsyncSession,
    expires_days: Optional[int] = None,
) -> Dict[str, Any]:
    """Persist a session row and return its signed token."""
    now = datetime.now(timezone.utc)
    ttl_days = int(expires_days or settings.SESSION_EXPIRATION_DAYS or 7)
    expires_at = now + timedelta(days=max(ttl_days, 1))
    row = UserSession(id=str(uuid.uuid4()), user_id=user_id, expires_at=expires_at)
    db.add(row)
    await db.commit()

    return {
        "token": encode_session_token(user_id, row.id, expires_at, issued_at=now),
        "expires_at": expires_at.isoformat(),
    }


async def _load_live_session(token: str, db: AsyncSession) -> UserSession:
    payload = decode_session_token(token)
    result = await db.execute(select(UserSession).where(UserSession.id == str(payload["jti"])))
    row = result.scalar_one_or_none()
    if row is None or row.user_id != str(payload["sub"]):
        raise UnauthorizedError("Unknown session.")
    if row.revoked_at is not None:
        raise UnauthorizedError("Session has been revoked.")
    if _as_utc(row.expires_at) <= datetime.now(timezone.utc):
        raise UnauthorizedError("Session has expired.")
    return row


async def resolve_token(token: str, db: AsyncSession) -> str:
    """Return the user id owning a live session token."""
    row = await _load_live_session(token, db)
    return row.user_id


async def revoke_session(token: str, db: AsyncSession) -> None:
    row = await _load_live_session(token, db)
    row.revoked_at = datetime.now(timezone.utc)
    await db.commit()
