"""
Google OAuth Client

Authorization-code flow against Google's OAuth 2.0 endpoints using httpx.
The result of a callback is an OAuthProfile; mapping it onto a local
account is the AuthService's job.
"""

import logging
import secrets
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx

from syncora.config import settings
from syncora.exceptions import AuthenticationError, ServiceError

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"

OAUTH_SCOPES = ["openid", "email", "profile"]


@dataclass(frozen=True)
class OAuthProfile:
    """Identity delivered by the provider after a successful consent."""

    external_id: str
    email: str
    display_name: str | None = None
    avatar_url: str | None = None


def generate_state() -> str:
    return secrets.token_urlsafe(24)


class GoogleOAuthClient:
    """Minimal OAuth 2.0 client for Google sign-in."""

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        redirect_uri: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ):
        self.client_id = client_id or settings.google_client_id
        self.client_secret = client_secret or settings.google_client_secret
        self.redirect_uri = redirect_uri or settings.google_redirect_uri
        self._transport = transport
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(OAUTH_SCOPES),
            "state": state,
            "prompt": "select_account",
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def fetch_profile(self, code: str) -> OAuthProfile:
        """
        Exchange an authorization code and read the user's profile.

        Raises:
            AuthenticationError: the provider rejected the code or returned no email
            ServiceError: the provider could not be reached
        """
        async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
            try:
                token_response = await client.post(
                    GOOGLE_TOKEN_URL,
                    data={
                        "code": code,
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "redirect_uri": self.redirect_uri,
                        "grant_type": "authorization_code",
                    },
                )
                if token_response.status_code >= 400:
                    logger.warning(f"Google token exchange rejected: HTTP {token_response.status_code}")
                    raise AuthenticationError("Google sign-in failed")

                access_token = token_response.json().get("access_token")
                if not access_token:
                    raise AuthenticationError("Google sign-in failed")

                userinfo_response = await client.get(
                    GOOGLE_USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                userinfo_response.raise_for_status()
                info = userinfo_response.json()
            except httpx.HTTPError as e:
                logger.error(f"Google OAuth request failed: {e}")
                raise ServiceError("Google sign-in is temporarily unavailable", service="google_oauth") from e

        if not info.get("sub"):
            raise AuthenticationError("Google sign-in failed")
        if not info.get("email"):
            raise AuthenticationError("No email from Google")

        return OAuthProfile(
            external_id=info["sub"],
            email=info["email"],
            display_name=info.get("name"),
            avatar_url=info.get("picture"),
        )


def get_google_oauth_client() -> GoogleOAuthClient:
    """FastAPI dependency for the Google OAuth client."""
    return GoogleOAuthClient()
