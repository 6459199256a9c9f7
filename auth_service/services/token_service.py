"""
services/token_service.py
-------------------------
Issuance and verification of access and refresh tokens.

Design decisions:
  - Access tokens are RS256-signed and short-lived (1h). Verification only
    needs the public key, so no DB round-trip per request.
  - Refresh tokens are HS256-signed with a shared secret and long-lived (1y).
    Each one is bound to a refresh_tokens row through its 'jti' claim;
    deleting the row revokes the token.
  - The refresh row is always persisted before the refresh token is minted,
    since its id becomes the token's 'jti'.
  - Missing or unreadable signing material raises ConfigurationError.
    Nothing is ever signed with a fallback key or left unsigned.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple

from jose import JOSEError, jwt

from auth_service.core.errors import InvalidTokenError
from auth_service.core.keys import (
    ACCESS_TOKEN_ALGORITHM,
    REFRESH_TOKEN_ALGORITHM,
    PublicKeySource,
    TokenConfig,
)
from auth_service.core.logging import get_logger
from auth_service.models.refresh_token import RefreshToken
from auth_service.models.user import User
from auth_service.stores.refresh_token_store import RefreshTokenStore

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SessionTokens:
    access_token: str
    refresh_token: str
    refresh_token_id: int


def build_payload(user: User) -> Dict[str, Any]:
    return {"sub": str(user.id), "role": user.role}


class TokenService:
    def __init__(
        self,
        config: TokenConfig,
        public_keys: PublicKeySource,
        refresh_tokens: RefreshTokenStore,
        clock: Clock = utcnow,
    ) -> None:
        self.config = config
        self.public_keys = public_keys
        self.refresh_tokens = refresh_tokens
        self._now = clock

    def _claims(self, payload: Dict[str, Any], ttl) -> Dict[str, Any]:
        issued_at = self._now()
        claims = dict(payload)
        claims.update(
            {
                "iss": self.config.issuer,
                "iat": issued_at,
                "exp": issued_at + ttl,
            }
        )
        return claims

    # ── Issuance ─────────────────────────────────────────────────────────────

    def generate_access_token(self, payload: Dict[str, Any]) -> str:
        """
        Sign {sub, role} with the RS256 private key.

        Raises:
            ConfigurationError: PRIVATE_KEY is absent or cannot be parsed.
        """
        private_key = self.config.private_key_pem
        claims = self._claims(payload, self.config.access_ttl)
        return jwt.encode(claims, private_key, algorithm=ACCESS_TOKEN_ALGORITHM)

    def generate_refresh_token(self, payload: Dict[str, Any], record_id: int) -> str:
        """Sign {sub, role, jti=record_id} with the HS256 refresh secret."""
        secret = self.config.refresh_key
        claims = self._claims(payload, self.config.refresh_ttl)
        claims["jti"] = str(record_id)
        return jwt.encode(claims, secret, algorithm=REFRESH_TOKEN_ALGORITHM)

    async def persist_refresh_token(self, user: User) -> RefreshToken:
        record = await self.refresh_tokens.create(
            user_id=user.id,
            expires_at=self._now() + self.config.refresh_ttl,
        )
        logger.debug("Refresh token persisted", user_id=user.id, refresh_token_id=record.id)
        return record

    async def delete_refresh_token(self, record_id: int) -> None:
        deleted = await self.refresh_tokens.delete_by_id(record_id)
        logger.debug("Refresh token deleted", refresh_token_id=record_id, deleted=deleted)

    async def issue_session(self, user: User) -> SessionTokens:
        """Persist a refresh record, then mint the access/refresh pair."""
        payload = build_payload(user)
        record = await self.persist_refresh_token(user)
        access_token = self.generate_access_token(payload)
        refresh_token = self.generate_refresh_token(payload, record.id)
        return SessionTokens(
            access_token=access_token,
            refresh_token=refresh_token,
            refresh_token_id=record.id,
        )

    # ── Verification ─────────────────────────────────────────────────────────

    async def verify_access_token(self, token: str) -> Dict[str, Any]:
        """
        Verify an access token against the configured public key material.

        Raises:
            InvalidTokenError: bad signature, expired, wrong issuer,
                or missing sub/role claims.
        """
        key = await self.public_keys.get_key()
        try:
            payload = jwt.decode(
                token,
                key,
                algorithms=[ACCESS_TOKEN_ALGORITHM],
                issuer=self.config.issuer,
            )
        except JOSEError as exc:
            raise InvalidTokenError(str(exc)) from exc
        _require_claims(payload, "sub", "role")
        return payload

    async def verify_refresh_token(self, token: str) -> Tuple[Dict[str, Any], RefreshToken]:
        """
        Verify a refresh token and check it has not been revoked.

        The token is valid only while the refresh_tokens row named by its
        'jti' exists, belongs to its 'sub' and has not expired.
        """
        try:
            payload = jwt.decode(
                token,
                self.config.refresh_key,
                algorithms=[REFRESH_TOKEN_ALGORITHM],
                issuer=self.config.issuer,
            )
        except JOSEError as exc:
            raise InvalidTokenError(str(exc)) from exc
        _require_claims(payload, "sub", "role", "jti")

        record_id = _parse_int(payload["jti"])
        user_id = _parse_int(payload["sub"])
        record: Optional[RefreshToken] = await self.refresh_tokens.get(record_id)
        if record is None or record.user_id != user_id:
            logger.info("Revoked refresh token presented", refresh_token_id=record_id)
            raise InvalidTokenError("Refresh token has been revoked")
        if _as_utc(record.expires_at) <= self._now():
            raise InvalidTokenError("Refresh token has expired")
        return payload, record


def _require_claims(payload: Dict[str, Any], *names: str) -> None:
    missing = [name for name in names if not payload.get(name)]
    if missing:
        raise InvalidTokenError(f"Token is missing claims: {', '.join(missing)}")


def _parse_int(value: Any) -> int:
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise InvalidTokenError("Malformed token identifier") from exc


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
