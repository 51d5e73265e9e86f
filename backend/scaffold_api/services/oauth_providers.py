"""OAuth provider adapters and the provider registry.

Only providers whose client id and secret are both configured are placed in
the registry; an unconfigured provider is simply absent.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode

import httpx

from scaffold_api.config import Settings
from scaffold_api.core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass
class OAuthProfile:
    """Identity returned by a provider callback"""
    provider: str
    provider_id: str
    email: str
    name: Optional[str] = None
    profile_data: Dict[str, Any] = field(default_factory=dict)


class OAuthProvider(ABC):
    """Authorization-code flow against a single provider

    Subclasses supply the endpoint URLs and scope, and turn the provider's
    userinfo response into an OAuthProfile.
    """

    name: str = ""
    auth_url: str = ""
    token_url: str = ""
    userinfo_url: str = ""
    scope: str = ""

    def __init__(self, *, client_id: str, client_secret: str, callback_url: str, timeout: float = 10.0):
        if not client_id or not client_secret:
            raise ValueError(f"{self.name} OAuth requires a client id and secret")
        self._client_id = client_id
        self._client_secret = client_secret
        self._callback_url = callback_url
        self._timeout = timeout

    def build_authorization_url(self, state: str) -> str:
        params = {
            "client_id": self._client_id,
            "redirect_uri": self._callback_url,
            "response_type": "code",
            "scope": self.scope,
            "state": state,
        }
        return f"{self.auth_url}?{urlencode(params)}"

    def fetch_profile(self, code: str) -> OAuthProfile:
        """
        Exchange an authorization code and load the user's profile

        Raises:
            AuthenticationError: If the provider rejects the code or returns no identity
        """
        try:
            with httpx.Client(timeout=self._timeout) as client:
                token_resp = client.post(
                    self.token_url,
                    data={
                        "client_id": self._client_id,
                        "client_secret": self._client_secret,
                        "code": code,
                        "grant_type": "authorization_code",
                        "redirect_uri": self._callback_url,
                    },
                    headers={"Accept": "application/json"},
                )
                token_resp.raise_for_status()
                access_token = token_resp.json().get("access_token")
                if not access_token:
                    logger.error("OAuth token response without access_token (provider=%s)", self.name)
                    raise AuthenticationError("OAuth sign-in failed")

                return self._load_profile(client, access_token)
        except httpx.HTTPStatusError as exc:
            logger.error(
                "OAuth exchange failed (provider=%s, status=%s)",
                self.name,
                exc.response.status_code,
            )
            raise AuthenticationError("OAuth sign-in failed") from exc
        except httpx.RequestError as exc:
            logger.error("OAuth provider unreachable (provider=%s): %s", self.name, exc)
            raise AuthenticationError("OAuth sign-in failed") from exc

    @abstractmethod
    def _load_profile(self, client: httpx.Client, access_token: str) -> OAuthProfile:
        """Load the signed-in user's identity with an exchanged access token."""

    @staticmethod
    def _bearer(access_token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {access_token}", "Accept": "application/json"}


class GoogleOAuthProvider(OAuthProvider):
    name = "google"
    auth_url = "https://accounts.google.com/o/oauth2/v2/auth"
    token_url = "https://oauth2.googleapis.com/token"
    userinfo_url = "https://www.googleapis.com/oauth2/v2/userinfo"
    scope = "openid email profile"

    def _load_profile(self, client: httpx.Client, access_token: str) -> OAuthProfile:
        resp = client.get(self.userinfo_url, headers=self._bearer(access_token))
        resp.raise_for_status()
        info = resp.json()

        if not info.get("id") or not info.get("email"):
            logger.error("Google profile missing id or email")
            raise AuthenticationError("OAuth sign-in failed")

        # Email is the account-linking key and must be verified.
        if not info.get("verified_email"):
            logger.warning("Google profile %s has an unverified email", info["id"])
            raise AuthenticationError("OAuth email address is not verified")

        return OAuthProfile(
            provider=self.name,
            provider_id=str(info["id"]),
            email=info["email"].strip().lower(),
            name=info.get("name"),
            profile_data={
                "photos": [info["picture"]] if info.get("picture") else [],
                "raw_profile": info,
            },
        )


class GitHubOAuthProvider(OAuthProvider):
    name = "github"
    auth_url = "https://github.com/login/oauth/authorize"
    token_url = "https://github.com/login/oauth/access_token"
    userinfo_url = "https://api.github.com/user"
    emails_url = "https://api.github.com/user/emails"
    scope = "read:user user:email"

    def _load_profile(self, client: httpx.Client, access_token: str) -> OAuthProfile:
        resp = client.get(self.userinfo_url, headers=self._bearer(access_token))
        resp.raise_for_status()
        info = resp.json()

        if not info.get("id"):
            logger.error("GitHub profile missing id")
            raise AuthenticationError("OAuth sign-in failed")

        username = info.get("login") or str(info["id"])
        email = info.get("email") or self._primary_email(client, access_token)
        if not email:
            # Accounts with no visible email still get a stable address.
            email = f"{username}@github.local"

        return OAuthProfile(
            provider=self.name,
            provider_id=str(info["id"]),
            email=email.strip().lower(),
            name=info.get("name") or username,
            profile_data={
                "username": username,
                "photos": [info["avatar_url"]] if info.get("avatar_url") else [],
                "raw_profile": info,
            },
        )

    def _primary_email(self, client: httpx.Client, access_token: str) -> Optional[str]:
        resp = client.get(self.emails_url, headers=self._bearer(access_token))
        if resp.status_code != 200:
            return None
        entries = resp.json()
        if not isinstance(entries, list):
            return None
        for entry in entries:
            if entry.get("primary") and entry.get("verified") and entry.get("email"):
                return entry["email"]
        return None


ProviderFactory = Callable[[Settings], OAuthProvider]


def _google(s: Settings) -> OAuthProvider:
    return GoogleOAuthProvider(
        client_id=s.GOOGLE_CLIENT_ID,
        client_secret=s.GOOGLE_CLIENT_SECRET,
        callback_url=s.GOOGLE_CALLBACK_URL,
        timeout=s.OAUTH_HTTP_TIMEOUT_SECONDS,
    )


def _github(s: Settings) -> OAuthProvider:
    return GitHubOAuthProvider(
        client_id=s.GITHUB_CLIENT_ID,
        client_secret=s.GITHUB_CLIENT_SECRET,
        callback_url=s.GITHUB_CALLBACK_URL,
        timeout=s.OAUTH_HTTP_TIMEOUT_SECONDS,
    )


# provider name -> (credential check, factory)
PROVIDER_FACTORIES: Dict[str, tuple] = {
    "google": (lambda s: bool(s.GOOGLE_CLIENT_ID and s.GOOGLE_CLIENT_SECRET), _google),
    "github": (lambda s: bool(s.GITHUB_CLIENT_ID and s.GITHUB_CLIENT_SECRET), _github),
}


def build_provider_registry(s: Settings) -> Dict[str, OAuthProvider]:
    """Instantiate every provider whose credentials are configured."""
    registry: Dict[str, OAuthProvider] = {}
    for name, (is_configured, factory) in PROVIDER_FACTORIES.items():
        if is_configured(s):
            registry[name] = factory(s)
    logger.info("OAuth providers enabled: %s", ", ".join(sorted(registry)) or "none")
    return registry
