"""Authentication dependencies for API user scoping."""

from dataclasses import dataclass

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from errors import UnauthorizedError
from services.session_token import resolve_token


auth_scheme = HTTPBearer(auto_error=False)


@dataclass
class AuthContext:
    user_id: str
    token: str


async def get_auth_context(
    credentials: HTTPAuthorizationCredentials = Depends(auth_scheme),
    db: AsyncSession = Depends(get_db),
) -> AuthContext:
    """Resolve the authenticated user from a Bearer session token."""
    if not credentials or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError("Missing Bearer session token.")

    user_id = await resolve_token(credentials.credentials, db)
    return AuthContext(user_id=user_id, token=credentials.credentials)
