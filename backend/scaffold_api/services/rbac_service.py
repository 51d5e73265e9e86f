"""Role/permission store and access decision predicates"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from scaffold_api.core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from scaffold_api.models.rbac import Permission, Role
from scaffold_api.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_USER_ROLE = "user"

DEFAULT_PERMISSIONS: List[Tuple[str, str, str]] = [
    ("products", "read", "Read products"),
    ("products", "create", "Create products"),
    ("products", "update", "Update products"),
    ("products", "delete", "Delete products"),
    ("users", "read", "Read users"),
    ("users", "create", "Create users"),
    ("users", "update", "Update users"),
    ("users", "delete", "Delete users"),
]

DEFAULT_ROLES: Dict[str, Dict[str, Any]] = {
    "admin": {
        "description": "Administrator with full access",
        "permissions": [f"{resource}:{action}" for resource, action, _ in DEFAULT_PERMISSIONS],
    },
    "moderator": {
        "description": "Can manage the product catalog",
        "permissions": ["products:read", "products:create", "products:update"],
    },
    "user": {
        "description": "Regular user",
        "permissions": ["products:read"],
    },
}


# ---------------------------------------------------------------------------
# Access decision predicates
#
# A principal is anything exposing ``roles``; each role exposes ``name`` and
# ``permissions``, each permission exposes ``resource`` and ``action``.
# ---------------------------------------------------------------------------


def parse_permission_name(permission_name: str) -> Optional[Tuple[str, str]]:
    """
    Split a ``resource:action`` string

    Returns:
        (resource, action), or None if the string is malformed
    """
    if not isinstance(permission_name, str) or permission_name.count(":") != 1:
        return None
    resource, action = permission_name.split(":")
    if not resource or not action:
        return None
    return resource, action


def _roles_of(principal: Any) -> Sequence[Any]:
    if principal is None:
        return ()
    return getattr(principal, "roles", None) or ()


def has_role(principal: Any, role_name: str) -> bool:
    return any(role.name == role_name for role in _roles_of(principal))


def has_any_role(principal: Any, role_names: Iterable[str]) -> bool:
    wanted = set(role_names)
    return any(role.name in wanted for role in _roles_of(principal))


def has_permission(principal: Any, permission_name: str) -> bool:
    """True iff one of the principal's roles grants the permission; malformed names never match."""
    parsed = parse_permission_name(permission_name)
    if parsed is None:
        return False
    resource, action = parsed
    return any(
        permission.resource == resource and permission.action == action
        for role in _roles_of(principal)
        for permission in (getattr(role, "permissions", None) or ())
    )


def has_all_permissions(principal: Any, permission_names: Iterable[str]) -> bool:
    return all(has_permission(principal, name) for name in permission_names)


class RbacService:
    """Administrative operations on roles and permissions"""

    @staticmethod
    def find_role_by_name(db: Session, name: str) -> Optional[Role]:
        return db.query(Role).filter(Role.name == name).first()

    @staticmethod
    def find_permission(db: Session, resource: str, action: str) -> Optional[Permission]:
        return (
            db.query(Permission)
            .filter(Permission.resource == resource, Permission.action == action)
            .first()
        )

    @staticmethod
    def list_roles(db: Session) -> List[Role]:
        return db.query(Role).order_by(Role.name.asc()).all()

    @staticmethod
    def list_permissions(db: Session) -> List[Permission]:
        return db.query(Permission).order_by(Permission.resource.asc(), Permission.action.asc()).all()

    @staticmethod
    def create_role(db: Session, name: str, description: Optional[str] = None) -> Role:
        if RbacService.find_role_by_name(db, name):
            raise ConflictError(f"Role '{name}' already exists")

        role = Role(name=name, description=description)
        db.add(role)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError(f"Role '{name}' already exists")
        db.refresh(role)
        logger.info(f"Created role: {name}")
        return role

    @staticmethod
    def create_permission(
        db: Session,
        resource: str,
        action: str,
        description: Optional[str] = None,
    ) -> Permission:
        if parse_permission_name(f"{resource}:{action}") is None:
            raise ValidationError("Permission resource and action must be non-empty and contain no ':'")
        if RbacService.find_permission(db, resource, action):
            raise ConflictError(f"Permission '{resource}:{action}' already exists")

        permission = Permission(resource=resource, action=action, description=description)
        db.add(permission)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError(f"Permission '{resource}:{action}' already exists")
        db.refresh(permission)
        logger.info(f"Created permission: {permission.name}")
        return permission

    @staticmethod
    def assign_permissions_to_role(db: Session, role_id: str, permission_ids: List[str]) -> Role:
        """
        Replace a role's permission set

        Raises:
            ResourceNotFoundError: If the role or any permission id does not exist
        """
        role = db.query(Role).filter(Role.id == role_id).first()
        if not role:
            raise ResourceNotFoundError("Role")

        wanted = list(dict.fromkeys(permission_ids))
        permissions = db.query(Permission).filter(Permission.id.in_(wanted)).all() if wanted else []
        if len(permissions) != len(wanted):
            raise ResourceNotFoundError("Permission")

        role.permissions = permissions
        db.commit()
        db.refresh(role)
        logger.info(f"Role {role.name} now has {len(permissions)} permissions")
        return role

    @staticmethod
    def assign_role_to_user(db: Session, user_id: str, role_id: str) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise ResourceNotFoundError("User")
        role = db.query(Role).filter(Role.id == role_id).first()
        if not role:
            raise ResourceNotFoundError("Role")

        if role not in user.roles:
            user.roles.append(role)
            db.commit()
            db.refresh(user)
            logger.info(f"Assigned role {role.name} to user {user.id}")
        return user

    @staticmethod
    def remove_role_from_user(db: Session, user_id: str, role_id: str) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise ResourceNotFoundError("User")
        role = db.query(Role).filter(Role.id == role_id).first()
        if not role:
            raise ResourceNotFoundError("Role")

        if role in user.roles:
            user.roles.remove(role)
            db.commit()
            db.refresh(user)
            logger.info(f"Removed role {role.name} from user {user.id}")
        return user

    @staticmethod
    def seed_defaults(db: Session) -> Dict[str, int]:
        """
        Ensure the default permissions and roles exist

        Existing rows are left untouched, so this is safe to run on every startup.

        Returns:
            Counts of rows created
        """
        created = {"permissions": 0, "roles": 0}
        by_name: Dict[str, Permission] = {}

        for resource, action, description in DEFAULT_PERMISSIONS:
            permission = RbacService.find_permission(db, resource, action)
            if not permission:
                permission = Permission(resource=resource, action=action, description=description)
                db.add(permission)
                created["permissions"] += 1
            by_name[f"{resource}:{action}"] = permission
        db.flush()

        for name, definition in DEFAULT_ROLES.items():
            if RbacService.find_role_by_name(db, name):
                continue
            db.add(
                Role(
                    name=name,
                    description=definition["description"],
                    permissions=[by_name[p] for p in definition["permissions"]],
                )
            )
            created["roles"] += 1

        db.commit()
        if created["permissions"] or created["roles"]:
            logger.info(
                f"Seeded {created['permissions']} permissions and {created['roles']} roles"
            )
        return created


rbac_service = RbacService()
