"""
api/routes/auth.py
------------------
Authentication endpoints.

POST /auth/register — Self-registration as a customer; opens a session.
POST /auth/login    — Exchange credentials for a session.
GET  /auth/self     — Return the authenticated user's profile.
POST /auth/refresh  — Rotate the session using the refreshToken cookie.
POST /auth/logout   — Revoke the refresh token and clear both cookies.

Sessions are delivered as two http-only, SameSite=strict cookies:
accessToken (1h) and refreshToken (1y).
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Cookie, Depends, Response, status

from auth_service.core.config import Settings
from auth_service.core.errors import AuthenticationError
from auth_service.core.policy import Identity
from auth_service.dependencies import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    can_access,
    get_app_settings,
    get_auth_service,
)
from auth_service.schemas.common import IdResponse
from auth_service.schemas.user import LoginRequest, UserRead, UserRegister
from auth_service.services.auth_service import AuthService
from auth_service.services.token_service import SessionTokens

router = APIRouter(prefix="/auth", tags=["Authentication"])


def set_session_cookies(response: Response, session: SessionTokens, settings: Settings) -> None:
    common = {
        "domain": settings.MAIN_DOMAIN,
        "samesite": "strict",
        "httponly": True,
        "secure": settings.COOKIE_SECURE,
    }
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        session.access_token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        **common,
    )
    response.set_cookie(
        REFRESH_TOKEN_COOKIE,
        session.refresh_token,
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        **common,
    )


def clear_session_cookies(response: Response, settings: Settings) -> None:
    for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(
            name,
            domain=settings.MAIN_DOMAIN,
            samesite="strict",
            httponly=True,
            secure=settings.COOKIE_SECURE,
        )


@router.post(
    "/register",
    response_model=IdResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new customer account",
)
async def register(
    body: UserRegister,
    response: Response,
    service: Annotated[AuthService, Depends(get_auth_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> IdResponse:
    """
    Create a customer account, issue an access/refresh token pair and
    attach both as cookies. Only the new user's id is returned.
    """
    user, session = await service.register(body)
    set_session_cookies(response, session, settings)
    return IdResponse(id=user.id)


@router.post(
    "/login",
    response_model=IdResponse,
    summary="Login and receive session cookies",
)
async def login(
    body: LoginRequest,
    response: Response,
    service: Annotated[AuthService, Depends(get_auth_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> IdResponse:
    user, session = await service.login(body)
    set_session_cookies(response, session, settings)
    return IdResponse(id=user.id)


@router.get(
    "/self",
    response_model=UserRead,
    summary="Get the currently authenticated user",
)
async def get_self(
    identity: Annotated[Identity, Depends(can_access("auth:self"))],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> UserRead:
    user = await service.get_self(identity.user_id)
    return UserRead.model_validate(user)


@router.post(
    "/refresh",
    response_model=IdResponse,
    summary="Rotate the session using the refresh token cookie",
)
async def refresh(
    response: Response,
    service: Annotated[AuthService, Depends(get_auth_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    refresh_token: Annotated[Optional[str], Cookie(alias=REFRESH_TOKEN_COOKIE)] = None,
) -> IdResponse:
    if not refresh_token:
        raise AuthenticationError("Refresh token is missing")
    user, session = await service.refresh(refresh_token)
    set_session_cookies(response, session, settings)
    return IdResponse(id=user.id)


@router.post(
    "/logout",
    summary="Revoke the refresh token and clear session cookies",
)
async def logout(
    response: Response,
    identity: Annotated[Identity, Depends(can_access("auth:logout"))],
    service: Annotated[AuthService, Depends(get_auth_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    refresh_token: Annotated[Optional[str], Cookie(alias=REFRESH_TOKEN_COOKIE)] = None,
) -> dict:
    await service.logout(identity.user_id, refresh_token)
    clear_session_cookies(response, settings)
    return {}
