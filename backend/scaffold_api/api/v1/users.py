"""User management routes"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List

from scaffold_api.core.database import get_db
from scaffold_api.core.exceptions import ResourceNotFoundError
from scaffold_api.schemas.user import UserResponse, UserWithRolesResponse
from scaffold_api.services.auth_service import auth_service
from scaffold_api.api.deps import get_current_user, require_permissions
from scaffold_api.models.user import User

router = APIRouter()


def _get_user_or_404(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise ResourceNotFoundError("User")
    return user


@router.get("/me", response_model=UserResponse)
def get_my_profile(
    current_user: User = Depends(get_current_user)
):
    """
    Get current user profile

    Args:
        current_user: Current authenticated user

    Returns:
        User profile
    """
    return UserResponse.model_validate(current_user)


@router.get("/", response_model=List[UserWithRolesResponse])
def get_all_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(require_permissions("users:read")),
    db: Session = Depends(get_db)
):
    """List users with their role names"""
    users = db.query(User).order_by(User.created_at.asc()).offset(skip).limit(limit).all()
    return [UserWithRolesResponse.from_user(user) for user in users]


@router.post("/{user_id}/deactivate", response_model=UserResponse)
def deactivate_user(
    user_id: str,
    current_user: User = Depends(require_permissions("users:update")),
    db: Session = Depends(get_db)
):
    """
    Deactivate an account

    All of the user's refresh tokens are revoked; outstanding access tokens
    stop working on their next request.
    """
    user = _get_user_or_404(db, user_id)
    return auth_service.set_user_active(db, user, False)


@router.post("/{user_id}/activate", response_model=UserResponse)
def activate_user(
    user_id: str,
    current_user: User = Depends(require_permissions("users:update")),
    db: Session = Depends(get_db)
):
    user = _get_user_or_404(db, user_id)
    return auth_service.set_user_active(db, user, True)
