"""Pydantic schemas for API validation"""

from scaffold_api.schemas.user import (
    RegisterRequest,
    LoginRequest,
    RefreshTokenRequest,
    UserResponse,
    UserWithRolesResponse,
    TokenResponse,
    MessageResponse,
)
from scaffold_api.schemas.rbac import (
    PermissionCreate,
    PermissionResponse,
    RoleCreate,
    RoleResponse,
    AssignPermissionsRequest,
    AssignRoleRequest,
)
from scaffold_api.schemas.product import ProductCreate, ProductUpdate, ProductResponse
from scaffold_api.schemas.organization import (
    Theme,
    OrganizationCreate,
    OrganizationUpdate,
    OrganizationResponse,
    OrganizationDetailResponse,
    CustomerThemeResponse,
)

__all__ = [
    "RegisterRequest", "LoginRequest", "RefreshTokenRequest", "UserResponse",
    "UserWithRolesResponse", "TokenResponse", "MessageResponse",
    "PermissionCreate", "PermissionResponse", "RoleCreate", "RoleResponse",
    "AssignPermissionsRequest", "AssignRoleRequest",
    "ProductCreate", "ProductUpdate", "ProductResponse",
    "Theme", "OrganizationCreate", "OrganizationUpdate", "OrganizationResponse",
    "OrganizationDetailResponse", "CustomerThemeResponse",
]
