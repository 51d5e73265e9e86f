import pytest

from scaffold_api.core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from scaffold_api.models.rbac import Permission, Role
from scaffold_api.services.rbac_service import DEFAULT_ROLES, rbac_service


def _permission_names(role):
    return sorted(p.name for p in role.permissions)


def test_seed_defaults_creates_roles_and_permissions(db):
    created = rbac_service.seed_defaults(db)
    assert created == {"permissions": 8, "roles": 3}

    assert _permission_names(rbac_service.find_role_by_name(db, "user")) == ["products:read"]
    assert _permission_names(rbac_service.find_role_by_name(db, "moderator")) == [
        "products:create",
        "products:read",
        "products:update",
    ]
    assert len(rbac_service.find_role_by_name(db, "admin").permissions) == 8


def test_seed_defaults_is_idempotent(db):
    rbac_service.seed_defaults(db)
    assert rbac_service.seed_defaults(db) == {"permissions": 0, "roles": 0}
    assert db.query(Role).count() == len(DEFAULT_ROLES)
    assert db.query(Permission).count() == 8


def test_seed_keeps_customised_roles(db):
    rbac_service.seed_defaults(db)
    user_role = rbac_service.find_role_by_name(db, "user")
    rbac_service.assign_permissions_to_role(db, user_role.id, [])

    rbac_service.seed_defaults(db)
    assert rbac_service.find_role_by_name(db, "user").permissions == []


def test_create_role_conflict(db):
    rbac_service.create_role(db, "auditor", "Read-only auditor")
    with pytest.raises(ConflictError):
        rbac_service.create_role(db, "auditor")


def test_create_permission_conflict_and_validation(db):
    permission = rbac_service.create_permission(db, "reports", "export")
    assert permission.name == "reports:export"

    with pytest.raises(ConflictError):
        rbac_service.create_permission(db, "reports", "export")
    with pytest.raises(ValidationError):
        rbac_service.create_permission(db, "reports", "")
    with pytest.raises(ValidationError):
        rbac_service.create_permission(db, "re:ports", "export")


def test_assign_permissions_replaces_set(db):
    role = rbac_service.create_role(db, "editor")
    read = rbac_service.create_permission(db, "posts", "read")
    write = rbac_service.create_permission(db, "posts", "write")

    rbac_service.assign_permissions_to_role(db, role.id, [read.id, write.id])
    assert _permission_names(role) == ["posts:read", "posts:write"]

    rbac_service.assign_permissions_to_role(db, role.id, [write.id])
    assert _permission_names(role) == ["posts:write"]


def test_assign_permissions_unknown_ids(db):
    role = rbac_service.create_role(db, "editor")
    read = rbac_service.create_permission(db, "posts", "read")

    with pytest.raises(ResourceNotFoundError):
        rbac_service.assign_permissions_to_role(db, "missing-role", [read.id])
    with pytest.raises(ResourceNotFoundError):
        rbac_service.assign_permissions_to_role(db, role.id, [read.id, "missing-permission"])
    # a failed assignment leaves the role unchanged
    assert role.permissions == []


def test_assign_and_remove_user_role(seeded_db, make_user):
    user = make_user(email="u@x.com", roles=["user"])
    moderator = rbac_service.find_role_by_name(seeded_db, "moderator")

    user = rbac_service.assign_role_to_user(seeded_db, user.id, moderator.id)
    assert sorted(user.role_names) == ["moderator", "user"]

    # assigning twice does not duplicate
    user = rbac_service.assign_role_to_user(seeded_db, user.id, moderator.id)
    assert sorted(user.role_names) == ["moderator", "user"]

    user = rbac_service.remove_role_from_user(seeded_db, user.id, moderator.id)
    assert user.role_names == ["user"]


def test_user_role_changes_with_unknown_ids(seeded_db, make_user):
    user = make_user(email="u@x.com")
    role = rbac_service.find_role_by_name(seeded_db, "user")

    with pytest.raises(ResourceNotFoundError):
        rbac_service.assign_role_to_user(seeded_db, "missing-user", role.id)
    with pytest.raises(ResourceNotFoundError):
        rbac_service.assign_role_to_user(seeded_db, user.id, "missing-role")
    with pytest.raises(ResourceNotFoundError):
        rbac_service.remove_role_from_user(seeded_db, user.id, "missing-role")
