"""
services/auth_service.py
------------------------
Registration and session flows: register, login, refresh, logout, self.

Each step short-circuits on failure. All writes of one flow go through the
request's session and are committed once at the end of the flow, so a user
row and its first refresh record commit (or roll back) together, before the
route sets any cookie. bcrypt runs in the threadpool to keep the event loop
free.
"""

from typing import Optional, Tuple

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError

from auth_service.core.errors import (
    AuthenticationError,
    ConflictError,
    InternalError,
    InvalidTokenError,
)
from auth_service.core.logging import PASSWORD_MASK, get_logger
from auth_service.core.security import PasswordHasher
from auth_service.models.user import Role, User
from auth_service.schemas.user import LoginRequest, UserRegister
from auth_service.services.token_service import SessionTokens, TokenService
from auth_service.stores.user_store import UserStore

logger = get_logger(__name__)


class AuthService:
    def __init__(
        self, users: UserStore, tokens: TokenService, hasher: PasswordHasher
    ) -> None:
        self.users = users
        self.tokens = tokens
        self.hasher = hasher

    async def register(self, data: UserRegister) -> Tuple[User, SessionTokens]:
        """
        Create a customer account and open a session for it.
        Raises ConflictError if the (normalised) email is already taken.
        """
        logger.debug(
            "New request to register a user",
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            password=PASSWORD_MASK,
        )
        if await self.users.get_by_email(data.email) is not None:
            raise ConflictError("Email is already exist")

        hashed = await run_in_threadpool(self.hasher.hash, data.password)
        try:
            user = await self.users.create(
                first_name=data.first_name,
                last_name=data.last_name,
                email=data.email,
                password=hashed,
                role=Role.customer.value,
            )
        except SQLAlchemyError as exc:
            logger.error("Failed to store user", error=str(exc))
            raise InternalError("Failed to store data in the database") from exc

        session = await self.tokens.issue_session(user)
        await self.users.commit()
        logger.info("User has been registered", user_id=user.id)
        return user, session

    async def login(self, data: LoginRequest) -> Tuple[User, SessionTokens]:
        logger.debug("New request to login a user", email=data.email, password=PASSWORD_MASK)
        user = await self.users.get_by_email(data.email)
        if user is None or not await run_in_threadpool(
            self.hasher.verify, data.password, user.password
        ):
            raise AuthenticationError("Email or password does not match")

        session = await self.tokens.issue_session(user)
        await self.users.commit()
        logger.info("User has been logged in", user_id=user.id)
        return user, session

    async def refresh(self, refresh_token: str) -> Tuple[User, SessionTokens]:
        """
        Rotate a session: the presented refresh record is deleted and a new
        record + token pair is issued.
        """
        try:
            _, record = await self.tokens.verify_refresh_token(refresh_token)
        except InvalidTokenError as exc:
            logger.warning("Refresh token rejected", error=str(exc))
            raise AuthenticationError("Invalid refresh token") from exc

        user = await self.users.get(record.user_id)
        if user is None:
            raise AuthenticationError("Invalid refresh token")

        await self.tokens.delete_refresh_token(record.id)
        session = await self.tokens.issue_session(user)
        await self.users.commit()
        logger.info(
            "Session refreshed",
            user_id=user.id,
            revoked_refresh_token_id=record.id,
            refresh_token_id=session.refresh_token_id,
        )
        return user, session

    async def logout(self, user_id: int, refresh_token: Optional[str]) -> None:
        """Revoke the caller's refresh token, if it is one of theirs."""
        if not refresh_token:
            return
        try:
            _, record = await self.tokens.verify_refresh_token(refresh_token)
        except InvalidTokenError:
            # Already revoked or unreadable: nothing left to delete
            return
        if record.user_id != user_id:
            return
        await self.tokens.delete_refresh_token(record.id)
        await self.users.commit()
        logger.info("User has been logged out", user_id=user_id, refresh_token_id=record.id)

    async def get_self(self, user_id: int) -> User:
        user = await self.users.get(user_id)
        if user is None:
            logger.warning("User from valid token not found", user_id=user_id)
            raise AuthenticationError()
        return user
