"""Refresh token issuance, validation and revocation service."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
import logging

from sqlalchemy.orm import Session

from scaffold_api.config import settings
from scaffold_api.core.durations import parse_duration
from scaffold_api.core.exceptions import InvalidRefreshTokenError
from scaffold_api.core.security import (
    generate_refresh_token,
    get_password_hash,
    split_refresh_token,
    verify_password,
)
from scaffold_api.models.security import RefreshToken
from scaffold_api.models.user import User

logger = logging.getLogger(__name__)


class RefreshTokenService:
    """Manage long-lived opaque refresh tokens stored only as hashes."""

    @staticmethod
    def _utcnow() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def _naive_utc(dt: datetime) -> datetime:
        if dt is not None and dt.tzinfo is not None:
            return dt.astimezone(timezone.utc).replace(tzinfo=None)
        return dt

    @staticmethod
    def _find_matching(db: Session, raw_token: str, *, only_valid: bool) -> Optional[RefreshToken]:
        """
        Locate the stored record for a raw token

        Candidates are narrowed by the non-secret selector, then every
        candidate's hash is verified against the secret part.
        """
        parts = split_refresh_token(raw_token)
        if parts is None:
            return None
        selector, verifier = parts

        query = db.query(RefreshToken).filter(
            RefreshToken.selector == selector,
            RefreshToken.is_revoked == False,  # noqa: E712
        )
        if only_valid:
            query = query.filter(RefreshToken.expires_at > RefreshTokenService._utcnow())

        for candidate in query.all():
            if verify_password(verifier, candidate.token_hash):
                return candidate
        return None

    @staticmethod
    def create_refresh_token(
        db: Session,
        user: User,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
        expires_in: Optional[str] = None,
    ) -> str:
        """
        Create and store a refresh token for a user

        Args:
            db: Database session
            user: Token owner
            user_agent: Client user agent, if known
            ip_address: Client IP, if known
            expires_in: Duration string overriding REFRESH_TOKEN_EXPIRES_IN

        Returns:
            str: The raw token. It is returned only here and never persisted.

        Raises:
            InvalidConfigurationError: If the duration string is malformed
        """
        lifetime = parse_duration(expires_in or settings.REFRESH_TOKEN_EXPIRES_IN)
        raw_token, selector, verifier = generate_refresh_token()

        record = RefreshToken(
            selector=selector,
            token_hash=get_password_hash(verifier),
            user_id=user.id,
            expires_at=RefreshTokenService._utcnow() + lifetime,
            is_revoked=False,
            user_agent=user_agent[:512] if user_agent else None,
            ip_address=ip_address,
        )
        db.add(record)
        db.commit()
        return raw_token

    @staticmethod
    def validate_refresh_token(db: Session, raw_token: str) -> User:
        """
        Validate a refresh token and return its owner

        All failure causes raise the same error so callers cannot tell them apart.

        Raises:
            InvalidRefreshTokenError: If the token is unknown, revoked, expired
                or belongs to an inactive user
        """
        record = RefreshTokenService._find_matching(db, raw_token, only_valid=True)
        if record is None:
            raise InvalidRefreshTokenError()

        now = RefreshTokenService._naive_utc(RefreshTokenService._utcnow())
        if RefreshTokenService._naive_utc(record.expires_at) <= now:
            raise InvalidRefreshTokenError()

        user = record.user
        if user is None or not user.is_active:
            logger.info("Refresh token presented for inactive user %s", record.user_id)
            raise InvalidRefreshTokenError()

        return user

    @staticmethod
    def revoke_refresh_token(db: Session, raw_token: str) -> bool:
        """Revoke a refresh token; silently succeeds when nothing matches."""
        record = RefreshTokenService._find_matching(db, raw_token, only_valid=False)
        if record is None:
            return False
        record.is_revoked = True
        db.commit()
        return True

    @staticmethod
    def revoke_all_user_tokens(db: Session, user_id: str) -> int:
        """Revoke every active refresh token owned by a user ("log out everywhere")."""
        count = (
            db.query(RefreshToken)
            .filter(RefreshToken.user_id == user_id, RefreshToken.is_revoked == False)  # noqa: E712
            .update({RefreshToken.is_revoked: True}, synchronize_session=False)
        )
        db.commit()
        logger.info("Revoked %d refresh tokens for user %s", count, user_id)
        return count

    @staticmethod
    def cleanup_expired_tokens(db: Session) -> int:
        """
        Delete refresh tokens past their expiry

        Intended for periodic invocation by the token sweeper.

        Returns:
            int: Number of records deleted
        """
        count = (
            db.query(RefreshToken)
            .filter(RefreshToken.expires_at <= RefreshTokenService._utcnow())
            .delete(synchronize_session=False)
        )
        db.commit()
        return count


token_service = RefreshTokenService()
