"""
core/keys.py
------------
Key material for token signing and verification.

TokenConfig holds everything the token service needs from settings:
  - the RS256 private key for access tokens (validated on first use),
  - the HS256 shared secret for refresh tokens,
  - issuer and token lifetimes.

Public key sources resolve what access tokens are verified against:
  - StaticPublicKeySource: the configured PUBLIC_KEY, or the public half
    of PRIVATE_KEY.
  - JWKSPublicKeySource: a key set published at JWKS_URI, fetched with
    httpx and cached for JWKS_CACHE_SECONDS.
"""

import time
from datetime import timedelta
from typing import Any, Callable, Dict, Optional, Union

import httpx
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwk

from auth_service.core.config import Settings
from auth_service.core.errors import ConfigurationError, InvalidTokenError
from auth_service.core.logging import get_logger

logger = get_logger(__name__)

ACCESS_TOKEN_ALGORITHM = "RS256"
REFRESH_TOKEN_ALGORITHM = "HS256"

VerificationKey = Union[str, Dict[str, Any]]


class TokenConfig:
    def __init__(
        self,
        *,
        private_key: Optional[str],
        refresh_secret: str,
        public_key: Optional[str] = None,
        issuer: str = "auth-service",
        access_ttl: timedelta = timedelta(hours=1),
        refresh_ttl: timedelta = timedelta(days=365),
    ) -> None:
        self._private_key_pem = private_key
        self._public_key_pem = public_key
        self.refresh_secret = refresh_secret
        self.issuer = issuer
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self._private_key: Optional[rsa.RSAPrivateKey] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenConfig":
        return cls(
            private_key=settings.PRIVATE_KEY,
            public_key=settings.PUBLIC_KEY,
            refresh_secret=settings.REFRESH_TOKEN_SECRET,
            issuer=settings.TOKEN_ISSUER,
            access_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        )

    def _load_private_key(self) -> rsa.RSAPrivateKey:
        if self._private_key is not None:
            return self._private_key
        if not self._private_key_pem:
            raise ConfigurationError("PRIVATE_KEY is not set")
        try:
            key = serialization.load_pem_private_key(
                self._private_key_pem.encode("utf-8"), password=None
            )
        except (ValueError, TypeError) as exc:
            raise ConfigurationError("Error while reading private key") from exc
        if not isinstance(key, rsa.RSAPrivateKey):
            raise ConfigurationError("PRIVATE_KEY must be an RSA key")
        self._private_key = key
        return key

    @property
    def private_key_pem(self) -> str:
        """PEM used to sign access tokens. Raises ConfigurationError if unusable."""
        self._load_private_key()
        return self._private_key_pem  # type: ignore[return-value]

    @property
    def public_key_pem(self) -> str:
        if self._public_key_pem:
            return self._public_key_pem
        public_key = self._load_private_key().public_key()
        self._public_key_pem = public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        ).decode("utf-8")
        return self._public_key_pem

    @property
    def refresh_key(self) -> str:
        if not self.refresh_secret:
            raise ConfigurationError("REFRESH_TOKEN_SECRET is not set")
        return self.refresh_secret

    def check(self) -> None:
        """Fail fast on unusable signing material."""
        self._load_private_key()
        _ = self.refresh_key

    def public_jwks(self) -> Dict[str, Any]:
        """Key set document for the access-token verification key."""
        key = jwk.construct(self.public_key_pem, algorithm=ACCESS_TOKEN_ALGORITHM).to_dict()
        key["use"] = "sig"
        return {"keys": [key]}


class StaticPublicKeySource:
    def __init__(self, config: TokenConfig) -> None:
        self._config = config

    async def get_key(self) -> VerificationKey:
        return self._config.public_key_pem


class JWKSPublicKeySource:
    """
    Remote key set, cached in-process.

    A failed fetch is a verification failure for the request at hand;
    the next request tries again.
    """

    def __init__(
        self,
        uri: str,
        cache_seconds: int = 300,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.uri = uri
        self.cache_seconds = cache_seconds
        self._transport = transport
        self._clock = clock
        self._jwks: Optional[Dict[str, Any]] = None
        self._fetched_at = 0.0

    async def _fetch(self) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=10.0, transport=self._transport) as client:
            response = await client.get(self.uri)
            response.raise_for_status()
            document = response.json()
        if not isinstance(document, dict) or not isinstance(document.get("keys"), list):
            raise ValueError("key set document has no 'keys' list")
        return document

    async def get_key(self) -> VerificationKey:
        now = self._clock()
        if self._jwks is not None and now - self._fetched_at < self.cache_seconds:
            return self._jwks
        try:
            self._jwks = await self._fetch()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("JWKS fetch failed", uri=self.uri, error=str(exc))
            raise InvalidTokenError("Unable to fetch signing keys") from exc
        self._fetched_at = now
        logger.debug("JWKS refreshed", uri=self.uri, keys=len(self._jwks["keys"]))
        return self._jwks


PublicKeySource = Union[StaticPublicKeySource, JWKSPublicKeySource]


def build_public_key_source(settings: Settings, config: TokenConfig) -> PublicKeySource:
    if settings.JWKS_URI:
        return JWKSPublicKeySource(settings.JWKS_URI, settings.JWKS_CACHE_SECONDS)
    return StaticPublicKeySource(config)
