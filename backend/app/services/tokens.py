"""Session token issuing and verification (JWT, HS256)."""

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt.exceptions import PyJWTError

from app.core.config import Settings
from app.models.user import User


class ConfigurationError(Exception):
    """Required configuration is missing or invalid at startup."""

    pass


class TokenError(Exception):
    """JWT token error."""

    pass


class TokenExpiredError(TokenError):
    """JWT token has expired."""

    pass


class InvalidTokenError(TokenError):
    """JWT token is invalid."""

    pass


@dataclass(frozen=True)
class TokenConfig:
    """Signing parameters, fixed for the lifetime of the process."""

    secret_key: str
    issuer: str
    audience: str
    algorithm: str = "HS256"
    lifetime: timedelta = timedelta(hours=24)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenConfig":
        """Build the config from settings; a missing signing key is fatal."""
        if not settings.jwt_secret_key:
            raise ConfigurationError("JWT_SECRET_KEY is not set")
        return cls(
            secret_key=settings.jwt_secret_key,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            algorithm=settings.jwt_algorithm,
            lifetime=timedelta(hours=settings.jwt_token_lifetime_hours),
        )


@dataclass(frozen=True)
class IssuedToken:
    """A freshly minted token plus the claims callers usually need."""

    token: str
    jti: str
    issued_at: datetime
    expires_at: datetime


class TokenIssuer:
    """Mints and verifies session tokens with a single shared key."""

    def __init__(self, config: TokenConfig):
        self.config = config

    def issue(self, user: User) -> IssuedToken:
        """Create a signed token for an authenticated user.

        Every call gets a new jti. Whole-second timestamps keep exp exactly
        iat + lifetime once encoded.
        """
        issued_at = datetime.now(UTC).replace(microsecond=0)
        expires_at = issued_at + self.config.lifetime
        jti = uuid.uuid4().hex
        payload = {
            "jti": jti,
            "sub": str(user.id),
            "username": user.username,
            "email": user.email,
            "role": user.role.value,
            "iat": issued_at,
            "exp": expires_at,
            "iss": self.config.issuer,
            "aud": self.config.audience,
        }
        token = jwt.encode(payload, self.config.secret_key, algorithm=self.config.algorithm)
        return IssuedToken(token=str(token), jti=jti, issued_at=issued_at, expires_at=expires_at)

    def verify(self, token: str) -> dict[str, Any]:
        """Validate signature, expiry, issuer and audience; return the claims."""
        try:
            return jwt.decode(
                token,
                self.config.secret_key,
                algorithms=[self.config.algorithm],
                audience=self.config.audience,
                issuer=self.config.issuer,
                leeway=0,
                options={"require": ["exp", "iat", "sub", "jti"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except PyJWTError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e


def read_unverified_claims(token: str) -> dict[str, Any] | None:
    """Parse a token's claims without checking signature or expiry.

    Returns None when the token cannot be parsed at all.
    """
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except PyJWTError:
        return None
    if not isinstance(claims, dict):
        return None
    return claims
