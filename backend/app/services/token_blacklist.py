"""Token blacklist service - server-side revocation of session tokens by JTI."""

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.token_blacklist import BlacklistedToken
from app.services.tokens import read_unverified_claims

logger = logging.getLogger(__name__)

DEFAULT_REASON = "Logout"


class TokenBlacklistError(Exception):
    """A blacklist write could not be completed."""

    pass


def _extract_jti(token: str) -> tuple[str, dict[str, Any]] | None:
    claims = read_unverified_claims(token)
    if not claims:
        return None
    jti = claims.get("jti")
    if not isinstance(jti, str) or not jti:
        return None
    return jti, claims


class TokenBlacklistService:
    """Check, record and purge revoked tokens.

    Lookups are always by jti. Rows whose expires_at has passed count as
    not revoked even before purge_expired removes them.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def is_revoked(self, token: str) -> bool:
        """Return True if the token's jti is blacklisted and not yet expired.

        Tokens without a parseable jti are never considered revoked. Store
        errors propagate to the caller.
        """
        parsed = _extract_jti(token)
        if parsed is None:
            return False
        jti, _ = parsed

        result = await self.db.execute(
            select(BlacklistedToken.id).where(
                BlacklistedToken.token_id == jti,
                BlacklistedToken.expires_at > datetime.now(UTC),
            )
        )
        return result.first() is not None

    async def revoke(self, token: str, user_id: int, reason: str = DEFAULT_REASON) -> None:
        """Blacklist a token until its own expiry.

        Tokens without a jti or exp are ignored and revoking twice is a no-op. Any
        other store failure raises TokenBlacklistError.
        """
        parsed = _extract_jti(token)
        if parsed is None:
            return
        jti, claims = parsed
        exp = claims.get("exp")
        if not isinstance(exp, (int, float)):
            logger.debug(f"Token {jti} has no usable exp claim, not blacklisted")
            return

        try:
            if await self._exists(jti):
                return

            entry = BlacklistedToken(
                token_id=jti,
                token=token,
                user_id=user_id,
                blacklisted_at=datetime.now(UTC),
                expires_at=datetime.fromtimestamp(exp, tz=UTC),
                reason=reason,
            )
            self.db.add(entry)
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            # A concurrent revoke of the same token won the unique constraint
            if await self._exists(jti):
                logger.debug(f"Token {jti} was revoked concurrently")
                return
            raise TokenBlacklistError("Failed to blacklist token") from e
        except (SQLAlchemyError, OSError) as e:
            await self.db.rollback()
            raise TokenBlacklistError("Failed to blacklist token") from e

        logger.info(f"Token {jti} blacklisted for user {user_id}: {reason}")

    async def purge_expired(self) -> int:
        """Delete every entry whose expires_at <= now. Returns count removed."""
        now = datetime.now(UTC)
        try:
            result: CursorResult[Any] = await self.db.execute(  # type: ignore[assignment]
                delete(BlacklistedToken).where(BlacklistedToken.expires_at <= now)
            )
            await self.db.commit()
        except (SQLAlchemyError, OSError) as e:
            await self.db.rollback()
            raise TokenBlacklistError("Failed to cleanup expired tokens") from e
        return result.rowcount or 0

    async def _exists(self, jti: str) -> bool:
        result = await self.db.execute(
            select(BlacklistedToken.id).where(BlacklistedToken.token_id == jti)
        )
        return result.first() is not None
