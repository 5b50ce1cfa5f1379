from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pos_checklist.auth import (
    TOKEN_COOKIE_NAME,
    TokenCodec,
    get_token_codec,
    resolve_principal,
)
from pos_checklist.config import get_settings
from pos_checklist.database import get_db
from pos_checklist.logging_config import logger
from pos_checklist.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    UserSummary,
    VerifiedUser,
    VerifyResponse,
)
from pos_checklist.services import auth_service

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    codec: TokenCodec = Depends(get_token_codec),
):
    """
    Exchange username + password for a token. The token is returned in the
    body and also set as an HttpOnly, SameSite=Strict cookie.
    """
    if not body.username or not body.password:
        raise HTTPException(status_code=400, detail="Username and password are required")

    try:
        result = await auth_service.login(db, codec, body.username, body.password)
    except SQLAlchemyError:
        logger.exception("Login failed with a database error")
        raise HTTPException(status_code=500, detail="Internal server error")

    if result is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    settings = get_settings()
    response.set_cookie(
        TOKEN_COOKIE_NAME,
        result.token,
        max_age=int(codec.lifetime.total_seconds()),
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )
    return LoginResponse(
        message="Login successful",
        user=UserSummary(id=result.user.id, username=result.user.username),
        token=result.token,
    )


@router.get("/verify", response_model=VerifyResponse)
async def verify(request: Request, codec: TokenCodec = Depends(get_token_codec)):
    principal = resolve_principal(request, codec)
    if principal is None:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": "Unauthorized", "authenticated": False},
        )
    return VerifyResponse(
        authenticated=True,
        user=VerifiedUser(user_id=principal.user_id, username=principal.username),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    """Drop the token cookie. Tokens are not revoked server-side."""
    settings = get_settings()
    response.delete_cookie(
        TOKEN_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )
    return MessageResponse(message="Logged out")
