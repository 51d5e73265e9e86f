import pytest

from scaffold_api.core.exceptions import InvalidRefreshTokenError
from scaffold_api.models.security import RefreshToken
from scaffold_api.services.token_service import token_service


def test_created_token_validates_to_owner(db, make_user):
    user = make_user()
    raw = token_service.create_refresh_token(db, user, user_agent="pytest", ip_address="127.0.0.1")

    assert token_service.validate_refresh_token(db, raw).id == user.id


def test_raw_token_is_never_stored(db, make_user):
    user = make_user()
    raw = token_service.create_refresh_token(db, user)

    record = db.query(RefreshToken).one()
    selector, verifier = raw.split(".", 1)
    assert record.selector == selector
    assert verifier not in record.token_hash
    assert record.token_hash != raw


def test_revoked_token_fails_validation(db, make_user):
    user = make_user()
    raw = token_service.create_refresh_token(db, user)

    assert token_service.revoke_refresh_token(db, raw) is True
    with pytest.raises(InvalidRefreshTokenError):
        token_service.validate_refresh_token(db, raw)
    with pytest.raises(InvalidRefreshTokenError):
        token_service.validate_refresh_token(db, raw)


def test_token_with_past_expiry_fails_immediately(db, make_user):
    user = make_user()
    raw = token_service.create_refresh_token(db, user, expires_in="-1s")

    with pytest.raises(InvalidRefreshTokenError):
        token_service.validate_refresh_token(db, raw)


def test_two_tokens_are_independent(db, make_user):
    user = make_user()
    first = token_service.create_refresh_token(db, user)
    second = token_service.create_refresh_token(db, user)

    assert first != second
    assert token_service.validate_refresh_token(db, first).id == user.id
    assert token_service.validate_refresh_token(db, second).id == user.id

    token_service.revoke_refresh_token(db, first)
    assert token_service.validate_refresh_token(db, second).id == user.id


@pytest.mark.parametrize("raw", ["", "garbage", "abc.def", "."])
def test_unknown_or_malformed_token_fails(db, make_user, raw):
    make_user()
    with pytest.raises(InvalidRefreshTokenError):
        token_service.validate_refresh_token(db, raw)


def test_wrong_verifier_with_valid_selector_fails(db, make_user):
    user = make_user()
    raw = token_service.create_refresh_token(db, user)
    selector = raw.split(".", 1)[0]

    with pytest.raises(InvalidRefreshTokenError):
        token_service.validate_refresh_token(db, f"{selector}.not-the-verifier")


def test_token_of_inactive_user_fails(db, make_user):
    user = make_user()
    raw = token_service.create_refresh_token(db, user)
    user.is_active = False
    db.commit()

    with pytest.raises(InvalidRefreshTokenError):
        token_service.validate_refresh_token(db, raw)


def test_revoking_unknown_token_is_a_noop(db, make_user):
    make_user()
    assert token_service.revoke_refresh_token(db, "nothing.here") is False
    assert token_service.revoke_refresh_token(db, "malformed") is False


def test_revoke_all_user_tokens(db, make_user):
    alice = make_user(email="alice@example.com")
    bob = make_user(email="bob@example.com")
    alice_tokens = [token_service.create_refresh_token(db, alice) for _ in range(3)]
    bob_token = token_service.create_refresh_token(db, bob)

    assert token_service.revoke_all_user_tokens(db, alice.id) == 3
    for raw in alice_tokens:
        with pytest.raises(InvalidRefreshTokenError):
            token_service.validate_refresh_token(db, raw)
    assert token_service.validate_refresh_token(db, bob_token).id == bob.id

    # already revoked tokens are not counted again
    assert token_service.revoke_all_user_tokens(db, alice.id) == 0


def test_cleanup_deletes_only_expired_tokens(db, make_user):
    user = make_user()
    token_service.create_refresh_token(db, user, expires_in="-1h")
    token_service.create_refresh_token(db, user, expires_in="-1s")
    live = token_service.create_refresh_token(db, user)

    assert token_service.cleanup_expired_tokens(db) == 2
    assert db.query(RefreshToken).count() == 1
    assert token_service.validate_refresh_token(db, live).id == user.id
    assert token_service.cleanup_expired_tokens(db) == 0
