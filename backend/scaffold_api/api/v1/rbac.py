"""Role and permission administration routes (admin only)"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from scaffold_api.core.database import get_db
from scaffold_api.schemas.rbac import (
    AssignPermissionsRequest,
    AssignRoleRequest,
    PermissionCreate,
    PermissionResponse,
    RoleCreate,
    RoleResponse,
)
from scaffold_api.schemas.user import UserWithRolesResponse
from scaffold_api.services.rbac_service import rbac_service
from scaffold_api.api.deps import require_roles
from scaffold_api.models.user import User

router = APIRouter()

admin_only = require_roles("admin")


@router.get("/roles", response_model=List[RoleResponse])
def list_roles(
    current_user: User = Depends(admin_only),
    db: Session = Depends(get_db)
):
    return rbac_service.list_roles(db)


@router.post("/roles", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
def create_role(
    body: RoleCreate,
    current_user: User = Depends(admin_only),
    db: Session = Depends(get_db)
):
    return rbac_service.create_role(db, body.name, body.description)


@router.get("/permissions", response_model=List[PermissionResponse])
def list_permissions(
    current_user: User = Depends(admin_only),
    db: Session = Depends(get_db)
):
    return rbac_service.list_permissions(db)


@router.post("/permissions", response_model=PermissionResponse, status_code=status.HTTP_201_CREATED)
def create_permission(
    body: PermissionCreate,
    current_user: User = Depends(admin_only),
    db: Session = Depends(get_db)
):
    return rbac_service.create_permission(db, body.resource, body.action, body.description)


@router.put("/roles/{role_id}/permissions", response_model=RoleResponse)
def assign_permissions(
    role_id: str,
    body: AssignPermissionsRequest,
    current_user: User = Depends(admin_only),
    db: Session = Depends(get_db)
):
    """Replace the permission set of a role"""
    return rbac_service.assign_permissions_to_role(db, role_id, body.permission_ids)


@router.post("/users/{user_id}/roles", response_model=UserWithRolesResponse)
def assign_role(
    user_id: str,
    body: AssignRoleRequest,
    current_user: User = Depends(admin_only),
    db: Session = Depends(get_db)
):
    user = rbac_service.assign_role_to_user(db, user_id, body.role_id)
    return UserWithRolesResponse.from_user(user)


@router.delete("/users/{user_id}/roles/{role_id}", response_model=UserWithRolesResponse)
def remove_role(
    user_id: str,
    role_id: str,
    current_user: User = Depends(admin_only),
    db: Session = Depends(get_db)
):
    user = rbac_service.remove_role_from_user(db, user_id, role_id)
    return UserWithRolesResponse.from_user(user)
