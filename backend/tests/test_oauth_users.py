from scaffold_api.models.user import User
from scaffold_api.services.auth_service import AuthService, auth_service
from scaffold_api.services.oauth_providers import OAuthProfile


def _profile(**overrides):
    values = {
        "provider": "github",
        "provider_id": "42",
        "email": "octo@example.com",
        "name": "Octo Cat",
        "profile_data": {"username": "octo"},
    }
    values.update(overrides)
    return OAuthProfile(**values)


def test_new_identity_creates_passwordless_user(seeded_db):
    user = auth_service.find_or_create_oauth_user(seeded_db, _profile())

    assert user.email == "octo@example.com"
    assert user.password_hash is None
    assert user.auth_provider == "github"
    assert user.auth_provider_id == "42"
    assert user.role_names == ["user"]


def test_repeated_identity_returns_same_user(seeded_db):
    first = auth_service.find_or_create_oauth_user(seeded_db, _profile())
    second = auth_service.find_or_create_oauth_user(seeded_db, _profile())

    assert first.id == second.id
    assert seeded_db.query(User).count() == 1


def test_repeat_login_refreshes_profile(seeded_db):
    auth_service.find_or_create_oauth_user(seeded_db, _profile())
    user = auth_service.find_or_create_oauth_user(
        seeded_db,
        _profile(name="Renamed", profile_data={"username": "octo", "bio": "new"}),
    )

    assert user.name == "Renamed"
    assert user.auth_provider_data["bio"] == "new"


def test_matching_email_links_existing_password_account(seeded_db, make_user):
    existing = make_user(email="octo@example.com", roles=["moderator"])

    user = auth_service.find_or_create_oauth_user(seeded_db, _profile())

    assert user.id == existing.id
    assert user.auth_provider == "github"
    assert user.auth_provider_id == "42"
    # the password still works and roles are untouched
    assert user.password_hash is not None
    assert user.role_names == ["moderator"]
    assert seeded_db.query(User).count() == 1


def test_different_providers_same_email_share_account(seeded_db):
    github_user = auth_service.find_or_create_oauth_user(seeded_db, _profile())
    google_user = auth_service.find_or_create_oauth_user(
        seeded_db, _profile(provider="google", provider_id="g-7")
    )

    assert google_user.id == github_user.id
    assert seeded_db.query(User).count() == 1


def test_concurrent_create_resolves_to_existing_user(seeded_db, monkeypatch):
    """A unique-constraint failure on insert falls back to the row the other request wrote."""
    winner = User(
        email="octo@example.com",
        auth_provider="github",
        auth_provider_id="42",
        is_active=True,
    )
    seeded_db.add(winner)
    seeded_db.commit()
    winner_id = winner.id

    # Simulate losing the race: both lookups miss, then the insert collides.
    monkeypatch.setattr(AuthService, "_find_oauth_match", staticmethod(lambda db, profile: None))
    monkeypatch.setattr(AuthService, "get_user_by_email", staticmethod(lambda db, email: None))

    user = auth_service.find_or_create_oauth_user(seeded_db, _profile())

    assert user.id == winner_id
    assert seeded_db.query(User).count() == 1

