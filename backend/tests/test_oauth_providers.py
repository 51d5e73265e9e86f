import httpx
import pytest

from scaffold_api.config import Settings
from scaffold_api.core.exceptions import AuthenticationError
from scaffold_api.services import oauth_providers
from scaffold_api.services.oauth_providers import (
    GitHubOAuthProvider,
    GoogleOAuthProvider,
    build_provider_registry,
)

_real_client = httpx.Client


def _mock_http(monkeypatch, handler):
    transport = httpx.MockTransport(handler)
    monkeypatch.setattr(
        oauth_providers.httpx,
        "Client",
        lambda **kwargs: _real_client(transport=transport, **kwargs),
    )


def _github():
    return GitHubOAuthProvider(
        client_id="gh-id",
        client_secret="gh-secret",
        callback_url="http://testserver/api/v1/auth/github/callback",
    )


def _google():
    return GoogleOAuthProvider(
        client_id="g-id",
        client_secret="g-secret",
        callback_url="http://testserver/api/v1/auth/google/callback",
    )


def test_registry_contains_only_configured_providers():
    registry = build_provider_registry(
        Settings(
            GOOGLE_CLIENT_ID="g-id",
            GOOGLE_CLIENT_SECRET="g-secret",
            GITHUB_CLIENT_ID="",
            GITHUB_CLIENT_SECRET="",
        )
    )
    assert sorted(registry) == ["google"]
    assert isinstance(registry["google"], GoogleOAuthProvider)


def test_registry_skips_provider_missing_secret():
    registry = build_provider_registry(
        Settings(GOOGLE_CLIENT_ID="", GOOGLE_CLIENT_SECRET="", GITHUB_CLIENT_ID="gh-id", GITHUB_CLIENT_SECRET="")
    )
    assert registry == {}


def test_provider_requires_credentials():
    with pytest.raises(ValueError):
        GitHubOAuthProvider(client_id="", client_secret="secret", callback_url="http://x")


def test_authorization_url_carries_state():
    url = httpx.URL(_github().build_authorization_url("state-123"))
    assert url.host == "github.com"
    assert url.params["state"] == "state-123"
    assert url.params["client_id"] == "gh-id"
    assert url.params["redirect_uri"] == "http://testserver/api/v1/auth/github/callback"


def test_google_profile(monkeypatch):
    def handler(request):
        if request.url.host == "oauth2.googleapis.com":
            assert b"code=the-code" in request.content
            return httpx.Response(200, json={"access_token": "tok"})
        assert request.headers["Authorization"] == "Bearer tok"
        return httpx.Response(
            200,
            json={
                "id": "1001",
                "email": "Alice@Example.com",
                "verified_email": True,
                "name": "Alice",
                "picture": "http://pic",
            },
        )

    _mock_http(monkeypatch, handler)
    profile = _google().fetch_profile("the-code")

    assert profile.provider == "google"
    assert profile.provider_id == "1001"
    assert profile.email == "alice@example.com"
    assert profile.name == "Alice"
    assert profile.profile_data["photos"] == ["http://pic"]


def test_google_unverified_email_is_rejected(monkeypatch):
    def handler(request):
        if request.url.host == "oauth2.googleapis.com":
            return httpx.Response(200, json={"access_token": "tok"})
        return httpx.Response(200, json={"id": "1002", "email": "victim@example.com", "verified_email": False})

    _mock_http(monkeypatch, handler)
    with pytest.raises(AuthenticationError, match="not verified"):
        _google().fetch_profile("code")


def test_oauth_provider_is_abstract():
    with pytest.raises(TypeError):
        oauth_providers.OAuthProvider(client_id="id", client_secret="secret", callback_url="http://x")


def test_github_uses_primary_verified_email(monkeypatch):
    def handler(request):
        if request.url.path == "/login/oauth/access_token":
            return httpx.Response(200, json={"access_token": "tok"})
        if request.url.path == "/user/emails":
            return httpx.Response(
                200,
                json=[
                    {"email": "old@example.com", "primary": False, "verified": True},
                    {"email": "octo@example.com", "primary": True, "verified": True},
                ],
            )
        return httpx.Response(200, json={"id": 42, "login": "octo", "email": None, "name": None})

    _mock_http(monkeypatch, handler)
    profile = _github().fetch_profile("code")

    assert profile.provider_id == "42"
    assert profile.email == "octo@example.com"
    assert profile.name == "octo"
    assert profile.profile_data["username"] == "octo"


def test_github_without_any_email_gets_placeholder(monkeypatch):
    def handler(request):
        if request.url.path == "/login/oauth/access_token":
            return httpx.Response(200, json={"access_token": "tok"})
        if request.url.path == "/user/emails":
            return httpx.Response(200, json=[])
        return httpx.Response(200, json={"id": 7, "login": "ghost"})

    _mock_http(monkeypatch, handler)
    assert _github().fetch_profile("code").email == "ghost@github.local"


def test_rejected_code_is_authentication_error(monkeypatch):
    _mock_http(monkeypatch, lambda request: httpx.Response(400, json={"error": "bad_verification_code"}))

    with pytest.raises(AuthenticationError):
        _github().fetch_profile("bad")


def test_token_response_without_access_token(monkeypatch):
    _mock_http(monkeypatch, lambda request: httpx.Response(200, json={"error": "nope"}))

    with pytest.raises(AuthenticationError):
        _google().fetch_profile("code")


def test_unreachable_provider_is_authentication_error(monkeypatch):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    _mock_http(monkeypatch, handler)
    with pytest.raises(AuthenticationError):
        _google().fetch_profile("code")
