"""Database models"""

from scaffold_api.models.user import User
from scaffold_api.models.rbac import Role, Permission, user_roles, role_permissions
from scaffold_api.models.security import RefreshToken
from scaffold_api.models.product import Product
from scaffold_api.models.organization import Organization, user_organizations

__all__ = [
    "User", "Role", "Permission", "user_roles", "role_permissions", "RefreshToken", "Product",
    "Organization", "user_organizations",
]
