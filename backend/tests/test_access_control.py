from types import SimpleNamespace

import pytest
from fastapi.security import HTTPAuthorizationCredentials

from scaffold_api.api import deps
from scaffold_api.api.deps import RouteAccess, require_access, require_permissions, require_roles
from scaffold_api.core.exceptions import AuthenticationError, AuthorizationError
from scaffold_api.core.security import create_access_token, create_oauth_state
from scaffold_api.services.auth_service import auth_service
from scaffold_api.services.rbac_service import (
    has_all_permissions,
    has_any_role,
    has_permission,
    has_role,
    parse_permission_name,
    rbac_service,
)


def _principal(*roles):
    """roles: (name, ["resource:action", ...]) pairs"""
    return SimpleNamespace(
        roles=[
            SimpleNamespace(
                name=name,
                permissions=[
                    SimpleNamespace(resource=p.split(":")[0], action=p.split(":")[1]) for p in perms
                ],
            )
            for name, perms in roles
        ]
    )


def test_parse_permission_name():
    assert parse_permission_name("products:read") == ("products", "read")
    assert parse_permission_name("bad-string-no-colon") is None
    assert parse_permission_name("a:b:c") is None
    assert parse_permission_name(":read") is None
    assert parse_permission_name("products:") is None


def test_malformed_permission_is_false_not_error():
    principal = _principal(("admin", ["products:read"]))
    assert has_permission(principal, "bad-string-no-colon") is False
    assert has_permission(principal, "") is False
    assert has_permission(principal, None) is False


@pytest.mark.parametrize(
    "granted, expected",
    [
        (["products:read", "products:create"], True),
        (["products:read"], False),
        (["products:create"], False),
        ([], False),
    ],
)
def test_has_all_permissions_is_a_conjunction(granted, expected):
    principal = _principal(("r", granted))
    wanted = ["products:read", "products:create"]
    assert has_all_permissions(principal, wanted) is expected
    assert expected == (has_permission(principal, wanted[0]) and has_permission(principal, wanted[1]))


def test_has_all_permissions_empty_list_is_true():
    assert has_all_permissions(_principal(), []) is True


def test_permissions_union_across_roles():
    principal = _principal(("a", ["products:read"]), ("b", ["products:create"]))
    assert has_all_permissions(principal, ["products:read", "products:create"]) is True


def test_role_predicates():
    principal = _principal(("moderator", []))
    assert has_role(principal, "moderator") is True
    assert has_role(principal, "admin") is False
    assert has_any_role(principal, ["admin", "moderator"]) is True
    assert has_any_role(principal, ["admin"]) is False
    assert has_any_role(None, ["admin"]) is False


def test_admin_with_delete_permission(seeded_db, make_user):
    role = rbac_service.create_role(seeded_db, "catalog-admin")
    delete = rbac_service.find_permission(seeded_db, "products", "delete")
    rbac_service.assign_permissions_to_role(seeded_db, role.id, [delete.id])
    user = make_user(email="u@x.com", roles=["catalog-admin"])

    assert has_permission(user, "products:delete") is True
    assert has_permission(user, "products:create") is False


def test_route_access_requires_both_role_and_permission():
    guard = require_access(roles=["admin", "moderator"], permissions=["products:create"])

    assert guard.allows(_principal(("moderator", ["products:create"]))) is True
    # right role, missing permission
    assert guard.allows(_principal(("moderator", ["products:read"]))) is False
    # right permission, wrong role
    assert guard.allows(_principal(("user", ["products:create"]))) is False


def test_route_access_without_declarations_is_open():
    principal = _principal()
    assert RouteAccess().allows(principal) is True
    assert require_roles().allows(principal) is True
    assert require_permissions().allows(principal) is True


def test_route_access_raises_forbidden():
    principal = _principal(("user", ["products:read"]))
    assert require_permissions("products:read")(current_user=principal) is principal

    with pytest.raises(AuthorizationError) as exc_info:
        require_roles("admin")(current_user=principal)
    assert exc_info.value.status_code == 403


def _bearer(token):
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def test_optional_user_without_header_is_none(db):
    assert deps.get_optional_current_user(credentials=None, db=db) is None


def test_current_user_without_header_is_rejected():
    with pytest.raises(AuthenticationError):
        deps.get_current_user(user=None)


def test_current_user_reloads_roles_from_database(seeded_db, make_user):
    user = make_user(email="u@x.com", roles=["user"])
    token = auth_service.generate_access_token(user)

    admin = rbac_service.find_role_by_name(seeded_db, "admin")
    rbac_service.assign_role_to_user(seeded_db, user.id, admin.id)

    resolved = deps.get_optional_current_user(credentials=_bearer(token), db=seeded_db)
    assert resolved.id == user.id
    assert sorted(resolved.role_names) == ["admin", "user"]


@pytest.mark.parametrize("token", ["garbage", create_oauth_state("github")])
def test_invalid_token_is_rejected_even_when_optional(db, token):
    with pytest.raises(AuthenticationError):
        deps.get_optional_current_user(credentials=_bearer(token), db=db)


def test_token_for_missing_user_is_rejected(db):
    token = create_access_token({"sub": "does-not-exist"})
    with pytest.raises(AuthenticationError):
        deps.get_optional_current_user(credentials=_bearer(token), db=db)


def test_deactivated_user_access_token_is_rejected(db, make_user):
    user = make_user(email="u@x.com")
    token = auth_service.generate_access_token(user)
    auth_service.set_user_active(db, user, False)

    with pytest.raises(AuthenticationError):
        deps.get_optional_current_user(credentials=_bearer(token), db=db)
