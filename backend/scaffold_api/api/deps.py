"""API dependencies - authentication and authorization"""

from functools import lru_cache
from typing import Dict, Iterable, Optional, Tuple

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from scaffold_api.config import settings
from scaffold_api.core.database import get_db
from scaffold_api.core.security import decode_access_token
from scaffold_api.core.exceptions import AuthenticationError, AuthorizationError
from scaffold_api.models.user import User
from scaffold_api.services.auth_service import auth_service
from scaffold_api.services.oauth_providers import OAuthProvider, build_provider_registry
from scaffold_api.services.rbac_service import has_all_permissions, has_any_role

# HTTP Bearer token scheme; a missing header is handled by the dependencies below
security = HTTPBearer(auto_error=False)


def _user_from_token(db: Session, token: str) -> User:
    payload = decode_access_token(token)
    if not payload:
        raise AuthenticationError("Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token payload")

    # Roles and permissions come from the database, not the token snapshot.
    user = auth_service.validate_user(db, str(user_id))
    if not user:
        raise AuthenticationError("User not found or inactive")

    return user


def get_optional_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """
    Get current user if a bearer token was sent, None otherwise

    A token that is present but invalid is rejected rather than ignored.

    Raises:
        AuthenticationError: If the token is invalid or the user is gone or inactive
    """
    if not credentials:
        return None
    return _user_from_token(db, credentials.credentials)


def get_current_user(
    user: Optional[User] = Depends(get_optional_current_user)
) -> User:
    """
    Get current authenticated user from JWT token

    Raises:
        AuthenticationError: If no token was sent or it does not resolve to an active user
    """
    if user is None:
        raise AuthenticationError("Not authenticated")
    return user


class RouteAccess:
    """
    Route guard combining role and permission requirements

    Access is granted when the user holds any of the required roles (if any
    are declared) and every required permission (if any are declared).
    """

    def __init__(self, roles: Iterable[str] = (), permissions: Iterable[str] = ()):
        self.required_roles: Tuple[str, ...] = tuple(roles)
        self.required_permissions: Tuple[str, ...] = tuple(permissions)

    def allows(self, user: User) -> bool:
        if self.required_roles and not has_any_role(user, self.required_roles):
            return False
        if self.required_permissions and not has_all_permissions(user, self.required_permissions):
            return False
        return True

    def __call__(self, current_user: User = Depends(get_current_user)) -> User:
        if not self.allows(current_user):
            raise AuthorizationError()
        return current_user


def require_roles(*roles: str) -> RouteAccess:
    return RouteAccess(roles=roles)


def require_permissions(*permissions: str) -> RouteAccess:
    return RouteAccess(permissions=permissions)


def require_access(roles: Iterable[str] = (), permissions: Iterable[str] = ()) -> RouteAccess:
    return RouteAccess(roles=roles, permissions=permissions)


@lru_cache()
def get_oauth_registry() -> Dict[str, OAuthProvider]:
    """Configured OAuth providers, built once per process"""
    return build_provider_registry(settings)
