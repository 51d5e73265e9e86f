"""Authentication service - registration, login, OAuth resolution and sessions"""

from typing import Optional
import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from scaffold_api.config import settings
from scaffold_api.core.exceptions import (
    ConflictError,
    DuplicateEmailError,
    InactiveAccountError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    OAuthAccountError,
)
from scaffold_api.core.metrics import AUTH_EVENTS
from scaffold_api.core.security import create_access_token, get_password_hash, verify_password
from scaffold_api.models.user import User
from scaffold_api.schemas.user import TokenResponse, UserResponse
from scaffold_api.services.oauth_providers import OAuthProfile
from scaffold_api.services.rbac_service import DEFAULT_USER_ROLE, rbac_service
from scaffold_api.services.token_service import token_service

logger = logging.getLogger(__name__)

PASSWORD_PROVIDER = "password"


class AuthService:
    """Service for identity verification and session issuance"""

    @staticmethod
    def generate_access_token(user: User) -> str:
        """
        Mint an access token embedding a snapshot of the user's roles

        Args:
            user: User with roles and permissions loaded

        Returns:
            str: Signed JWT
        """
        roles = [
            {
                "id": role.id,
                "name": role.name,
                "permissions": [
                    {"resource": p.resource, "action": p.action} for p in role.permissions
                ],
            }
            for role in user.roles
        ]
        return create_access_token({"sub": str(user.id), "email": user.email, "roles": roles})

    @staticmethod
    def issue_session(
        db: Session,
        user: User,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> TokenResponse:
        """Issue an access token plus a new refresh token for a user."""
        access_token = AuthService.generate_access_token(user)
        refresh_token = token_service.create_refresh_token(db, user, user_agent, ip_address)
        return AuthService._session_response(user, access_token, refresh_token)

    @staticmethod
    def _session_response(user: User, access_token: str, refresh_token: str) -> TokenResponse:
        return TokenResponse(
            access_token=access_token,
            refresh_token=refresh_token,
            token_type="bearer",
            expires_in=settings.access_token_lifetime_seconds(),
            user=UserResponse.model_validate(user),
        )

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email).first()

    @staticmethod
    def register(
        db: Session,
        email: str,
        password: str,
        name: Optional[str] = None,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> TokenResponse:
        """
        Register a password account and open a session

        Raises:
            DuplicateEmailError: If the email is already registered
        """
        if AuthService.get_user_by_email(db, email):
            AUTH_EVENTS.labels("register", "conflict").inc()
            raise DuplicateEmailError()

        user = User(
            email=email,
            password_hash=get_password_hash(password),
            name=name,
            is_active=True,
            auth_provider=PASSWORD_PROVIDER,
        )
        default_role = rbac_service.find_role_by_name(db, DEFAULT_USER_ROLE)
        if default_role:
            user.roles = [default_role]

        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            AUTH_EVENTS.labels("register", "conflict").inc()
            raise DuplicateEmailError()
        db.refresh(user)

        logger.info(f"Registered user: {user.id}")
        AUTH_EVENTS.labels("register", "success").inc()
        return AuthService.issue_session(db, user, user_agent, ip_address)

    @staticmethod
    def authenticate_user(db: Session, email: str, password: str) -> User:
        """
        Verify email and password

        Raises:
            AuthenticationError: Unknown email, OAuth-only account, wrong password or inactive account
        """
        user = AuthService.get_user_by_email(db, email)

        if not user:
            raise InvalidCredentialsError()

        if not user.password_hash:
            raise OAuthAccountError()

        if not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        if not user.is_active:
            raise InactiveAccountError()

        return user

    @staticmethod
    def login(
        db: Session,
        email: str,
        password: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> TokenResponse:
        try:
            user = AuthService.authenticate_user(db, email, password)
        except InvalidCredentialsError:
            AUTH_EVENTS.labels("login", "failure").inc()
            raise
        except (OAuthAccountError, InactiveAccountError):
            AUTH_EVENTS.labels("login", "rejected").inc()
            raise

        logger.info(f"User authenticated: {user.id}")
        AUTH_EVENTS.labels("login", "success").inc()
        return AuthService.issue_session(db, user, user_agent, ip_address)

    @staticmethod
    def validate_user(db: Session, user_id: str) -> Optional[User]:
        """Load an active user with fresh roles and permissions, or None."""
        return (
            db.query(User)
            .filter(User.id == user_id, User.is_active == True)  # noqa: E712
            .first()
        )

    @staticmethod
    def _find_oauth_match(db: Session, profile: OAuthProfile) -> Optional[User]:
        return (
            db.query(User)
            .filter(
                User.auth_provider == profile.provider,
                User.auth_provider_id == profile.provider_id,
            )
            .first()
        )

    @staticmethod
    def find_or_create_oauth_user(db: Session, profile: OAuthProfile) -> User:
        """
        Resolve an OAuth identity to a local user

        Resolution order:
          1) provider + provider id match: refresh cached profile and name
          2) email match: link the provider identity to the existing account
          3) otherwise create a passwordless user with the default role

        Repeating the call with the same profile returns the same user.
        """
        user = AuthService._find_oauth_match(db, profile)
        if user:
            user.auth_provider_data = profile.profile_data
            user.name = profile.name or user.name
            db.commit()
            db.refresh(user)
            return user

        user = AuthService.get_user_by_email(db, profile.email)
        if user:
            user.auth_provider = profile.provider
            user.auth_provider_id = profile.provider_id
            user.auth_provider_data = profile.profile_data
            db.commit()
            db.refresh(user)
            logger.info(f"Linked {profile.provider} identity to existing user {user.id}")
            AUTH_EVENTS.labels("oauth_link", "success").inc()
            return user

        default_role = rbac_service.find_role_by_name(db, DEFAULT_USER_ROLE)
        user = User(
            email=profile.email,
            name=profile.name,
            auth_provider=profile.provider,
            auth_provider_id=profile.provider_id,
            auth_provider_data=profile.profile_data,
            is_active=True,
            password_hash=None,
            roles=[default_role] if default_role else [],
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # A concurrent callback inserted the same identity first.
            db.rollback()
            existing = (
                db.query(User)
                .filter(
                    or_(
                        (User.auth_provider == profile.provider)
                        & (User.auth_provider_id == profile.provider_id),
                        User.email == profile.email,
                    )
                )
                .first()
            )
            if existing is None:
                raise ConflictError("OAuth account could not be created")
            logger.info(f"OAuth create race resolved to user {existing.id}")
            return existing

        db.refresh(user)
        logger.info(f"Created {profile.provider} user: {user.id}")
        AUTH_EVENTS.labels("oauth_signup", "success").inc()
        return user

    @staticmethod
    def refresh_access_token(db: Session, refresh_token: str) -> TokenResponse:
        """
        Mint a new access token from a refresh token

        The refresh token is returned unchanged (no rotation).
        """
        try:
            user = token_service.validate_refresh_token(db, refresh_token)
        except InvalidRefreshTokenError:
            AUTH_EVENTS.labels("refresh", "failure").inc()
            raise

        AUTH_EVENTS.labels("refresh", "success").inc()
        access_token = AuthService.generate_access_token(user)
        return AuthService._session_response(user, access_token, refresh_token)

    @staticmethod
    def logout(db: Session, refresh_token: str) -> None:
        """Revoke a refresh token; unknown tokens are ignored."""
        revoked = token_service.revoke_refresh_token(db, refresh_token)
        AUTH_EVENTS.labels("logout", "revoked" if revoked else "noop").inc()

    @staticmethod
    def logout_all(db: Session, user: User) -> int:
        return token_service.revoke_all_user_tokens(db, user.id)

    @staticmethod
    def set_user_active(db: Session, user: User, active: bool) -> User:
        """Activate or deactivate an account; deactivation also revokes its refresh tokens."""
        user.is_active = active
        db.commit()
        if not active:
            token_service.revoke_all_user_tokens(db, user.id)
        db.refresh(user)
        logger.info(f"User {user.id} active={active}")
        return user


# Singleton instance
auth_service = AuthService()
