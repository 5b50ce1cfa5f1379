"""
Auth module: token signing/verification and the request authorization dependencies.

Tokens are stateless HS256 JWTs. The server keeps no session or revocation list,
so a token stays valid until it expires; logging out only discards the cookie.
A token is accepted from the ``token`` cookie first, then from an
``Authorization: Bearer`` header.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from jose import jwt, JWTError

from pos_checklist.config import get_settings

TOKEN_COOKIE_NAME = "token"
UNAUTHORIZED_DETAIL = "Unauthorized. Please login again."


@dataclass
class TokenClaims:
    """Identity claims carried by a verified token."""
    user_id: str
    username: str
    issued_at: datetime
    expires_at: datetime


@dataclass
class UserPrincipal:
    """Resolved identity attached to each protected request."""
    user_id: str
    username: str


class TokenCodec:
    def __init__(self, secret_key: str, algorithm: str = "HS256",
                 lifetime: timedelta = timedelta(days=7)):
        if not secret_key:
            raise ValueError("a signing secret is required")
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.lifetime = lifetime

    def issue(self, user_id: str, username: str, now: Optional[datetime] = None) -> str:
        """Create a signed token for the given identity, valid for ``lifetime``."""
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "username": username,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.lifetime).timestamp()),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Optional[TokenClaims]:
        """Return the token's claims, or None if it is malformed, tampered with or expired."""
        if not token:
            return None
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self.algorithm])
            claims = TokenClaims(
                user_id=payload["sub"],
                username=payload["username"],
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (JWTError, KeyError, TypeError, ValueError):
            return None
        # jose still accepts a token during the second equal to exp
        if datetime.now(timezone.utc) >= claims.expires_at:
            return None
        return claims


@lru_cache()
def get_token_codec() -> TokenCodec:
    settings = get_settings()
    return TokenCodec(
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        lifetime=timedelta(days=settings.token_expire_days),
    )


def extract_token(request: Request) -> Optional[str]:
    token = request.cookies.get(TOKEN_COOKIE_NAME)
    if token:
        return token
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None


def resolve_principal(request: Request, codec: TokenCodec) -> Optional[UserPrincipal]:
    token = extract_token(request)
    if token is None:
        return None
    claims = codec.verify(token)
    if claims is None:
        return None
    return UserPrincipal(user_id=claims.user_id, username=claims.username)


async def get_current_user(
    request: Request,
    codec: TokenCodec = Depends(get_token_codec),
) -> UserPrincipal:
    """
    FastAPI dependency for protected routes. Raises 401 without saying whether
    the token was missing, malformed, tampered with or expired.
    """
    principal = resolve_principal(request, codec)
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=UNAUTHORIZED_DETAIL,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal
