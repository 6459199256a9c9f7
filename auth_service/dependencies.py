"""
dependencies.py
---------------
FastAPI dependency injection functions for authentication and authorisation.

Flow:
  1. extract_access_token reads the bearer credential: the Authorization
     header wins, the accessToken cookie is the fallback.
  2. get_current_identity verifies the RS256 access token (no DB round-trip)
     and exposes {user_id, role} as an Identity.
  3. can_access(operation) looks the operation up in core.policy.POLICIES
     and runs authorize() against the caller's identity. The caller's tenant
     is only loaded when the policy is tenant-scoped.

Each request authenticates on its own; there is no session continuation
beyond what the token encodes.
"""

from typing import Annotated, Callable, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from auth_service.core.config import Settings
from auth_service.core.errors import (
    AuthenticationError,
    AuthorizationError,
    InvalidTokenError,
)
from auth_service.core.logging import get_logger
from auth_service.core.policy import POLICIES, Identity, authorize
from auth_service.core.security import PasswordHasher
from auth_service.db.session import get_db
from auth_service.models.user import Role
from auth_service.services.auth_service import AuthService
from auth_service.services.tenant_service import TenantService
from auth_service.services.token_service import TokenService
from auth_service.services.user_service import UserService
from auth_service.stores.refresh_token_store import RefreshTokenStore
from auth_service.stores.tenant_store import TenantStore
from auth_service.stores.user_store import UserStore

logger = get_logger(__name__)

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"


def extract_access_token(request: Request) -> Optional[str]:
    authorization = request.headers.get("Authorization")
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip() and token.strip() != "undefined":
            return token.strip()
    return request.cookies.get(ACCESS_TOKEN_COOKIE) or None


async def get_token_service(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenService:
    state = request.app.state
    return TokenService(
        config=state.token_config,
        public_keys=state.public_keys,
        refresh_tokens=RefreshTokenStore(db),
    )


async def get_optional_identity(
    request: Request,
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> Optional[Identity]:
    """
    Identity of the caller, or None when no credential was sent.
    A credential that is present but invalid is still rejected.
    """
    token = extract_access_token(request)
    if token is None:
        return None
    try:
        payload = await tokens.verify_access_token(token)
        return Identity(user_id=int(payload["sub"]), role=Role(payload["role"]))
    except (InvalidTokenError, ValueError) as exc:
        logger.warning("Access token rejected", path=request.url.path, error=str(exc))
        raise AuthenticationError()


async def get_current_identity(
    identity: Annotated[Optional[Identity], Depends(get_optional_identity)],
) -> Identity:
    if identity is None:
        raise AuthenticationError("Access token is missing")
    return identity


def can_access(operation: str) -> Callable:
    """
    Build a dependency enforcing POLICIES[operation].

    Tenant-scoped policies compare the caller's tenant with the
    `tenant_id` path parameter of the route.
    """
    policy = POLICIES[operation]

    async def dependency(
        request: Request,
        identity: Annotated[Identity, Depends(get_current_identity)],
        db: Annotated[AsyncSession, Depends(get_db)],
    ) -> Identity:
        caller_tenant_id = None
        target_tenant_id = None
        if policy.tenant_scope is not None and identity.role != Role.admin:
            caller = await UserStore(db).get(identity.user_id)
            caller_tenant_id = caller.tenant_id if caller else None
            raw_target = request.path_params.get("tenant_id")
            if raw_target is not None and str(raw_target).isdigit():
                target_tenant_id = int(raw_target)
        try:
            authorize(
                policy,
                identity,
                caller_tenant_id=caller_tenant_id,
                target_tenant_id=target_tenant_id,
            )
        except AuthorizationError:
            logger.info(
                "Access denied",
                operation=operation,
                user_id=identity.user_id,
                role=identity.role.value,
            )
            raise
        return identity

    return dependency


# ── Service providers ────────────────────────────────────────────────────────

def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


async def get_auth_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> AuthService:
    return AuthService(users=UserStore(db), tokens=tokens, hasher=hasher)


async def get_user_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> UserService:
    return UserService(users=UserStore(db), tenants=TenantStore(db), hasher=hasher)


async def get_tenant_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TenantService:
    return TenantService(tenants=TenantStore(db))
