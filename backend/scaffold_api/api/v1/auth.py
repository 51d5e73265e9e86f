"""Authentication routes"""

from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from scaffold_api.core.database import get_db
from scaffold_api.config import settings
from scaffold_api.core.exceptions import (
    AuthenticationError,
    InactiveAccountError,
    RateLimitExceededError,
    ResourceNotFoundError,
)
from scaffold_api.core.security import create_oauth_state, verify_oauth_state
from scaffold_api.schemas.user import (
    LoginRequest,
    MessageResponse,
    RefreshTokenRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from scaffold_api.services.auth_service import auth_service
from scaffold_api.services.oauth_providers import OAuthProvider
from scaffold_api.services.rate_limiter import rate_limiter
from scaffold_api.api.deps import get_current_user, get_oauth_registry
from scaffold_api.models.user import User

router = APIRouter()


def _client_info(request: Request):
    client_ip = request.client.host if request.client else None
    return request.headers.get("user-agent"), client_ip


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    request: Request,
    db: Session = Depends(get_db)
):
    """Create a password account and return a session"""
    user_agent, client_ip = _client_info(request)
    return auth_service.register(
        db,
        email=body.email,
        password=body.password,
        name=body.name,
        user_agent=user_agent,
        ip_address=client_ip,
    )


@router.post("/login", response_model=TokenResponse, status_code=status.HTTP_200_OK)
def login(
    credentials: LoginRequest,
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Login endpoint - authenticate user and return a token pair

    Args:
        credentials: Email and password
        db: Database session

    Returns:
        Access token, refresh token and user info
    """
    user_agent, client_ip = _client_info(request)
    identity = f"{client_ip or 'unknown'}:{credentials.email}"
    for window, limit in ((60, settings.LOGIN_RATE_LIMIT_PER_MINUTE), (3600, settings.LOGIN_RATE_LIMIT_PER_HOUR)):
        key = f"login:{window}:{identity}"
        if not rate_limiter.allow(key, limit, window):
            raise RateLimitExceededError(
                "Too many login attempts. Please try again later.",
                retry_after=rate_limiter.retry_after(key, limit, window),
            )

    return auth_service.login(
        db,
        credentials.email,
        credentials.password,
        user_agent=user_agent,
        ip_address=client_ip,
    )


@router.post("/refresh", response_model=TokenResponse)
def refresh_token(
    req: RefreshTokenRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """Mint a new access token; the refresh token itself is returned unchanged"""
    client_ip = request.client.host if request.client else "unknown"
    for window, limit in ((60, settings.RATE_LIMIT_PER_MINUTE), (3600, settings.RATE_LIMIT_PER_HOUR)):
        key = f"refresh:{window}:{client_ip}"
        if not rate_limiter.allow(key, limit, window):
            raise RateLimitExceededError(
                "Too many refresh attempts. Slow down.",
                retry_after=rate_limiter.retry_after(key, limit, window),
            )

    return auth_service.refresh_access_token(db, req.refresh_token)


@router.post("/logout", response_model=MessageResponse, status_code=status.HTTP_200_OK)
def logout(
    body: RefreshTokenRequest,
    db: Session = Depends(get_db)
):
    """Revoke a refresh token. Unknown tokens still succeed."""
    auth_service.logout(db, body.refresh_token)
    return MessageResponse(message="Logged out successfully")


@router.post("/logout-all", response_model=MessageResponse, status_code=status.HTTP_200_OK)
def logout_all(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Revoke every refresh token of the current user"""
    count = auth_service.logout_all(db, current_user)
    return MessageResponse(message=f"Revoked {count} sessions")


@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    return UserResponse.model_validate(current_user)


def _get_provider(provider: str, registry: Dict[str, OAuthProvider]) -> OAuthProvider:
    oauth_provider = registry.get(provider)
    if oauth_provider is None:
        raise ResourceNotFoundError("OAuth provider")
    return oauth_provider


@router.get("/{provider}", response_class=RedirectResponse, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
def oauth_start(
    provider: str,
    registry: Dict[str, OAuthProvider] = Depends(get_oauth_registry),
):
    """Redirect the browser to the provider's consent screen"""
    oauth_provider = _get_provider(provider, registry)
    state = create_oauth_state(provider)
    return RedirectResponse(
        oauth_provider.build_authorization_url(state),
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    )


@router.get("/{provider}/callback", response_model=TokenResponse)
def oauth_callback(
    provider: str,
    request: Request,
    code: Optional[str] = Query(None, max_length=2048),
    state: Optional[str] = Query(None, max_length=4096),
    registry: Dict[str, OAuthProvider] = Depends(get_oauth_registry),
    db: Session = Depends(get_db),
):
    """
    Complete an OAuth sign-in

    Resolves the provider identity to a local user (creating or linking as
    needed) and returns a session.
    """
    oauth_provider = _get_provider(provider, registry)
    if not code or not state or not verify_oauth_state(state, provider):
        raise AuthenticationError("Invalid OAuth callback")

    profile = oauth_provider.fetch_profile(code)
    user = auth_service.find_or_create_oauth_user(db, profile)
    if not user.is_active:
        raise InactiveAccountError()

    user_agent, client_ip = _client_info(request)
    return auth_service.issue_session(db, user, user_agent=user_agent, ip_address=client_ip)
