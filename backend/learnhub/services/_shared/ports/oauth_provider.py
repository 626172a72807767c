from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from learnhub.services.auth.dto import OAuthProfileIn


class OAuthProvider(Protocol):
    """Port for an OAuth 2.0 authorization-code identity provider."""

    name: str

    def authorization_url(self, state: str) -> str:
        """Return the provider consent URL carrying ``state``."""

    def fetch_profile(self, code: str) -> OAuthProfileIn:
        """
        Exchange an authorization ``code`` for the user's verified profile.

        :raises OAuthLoginError: If the exchange fails or the email is unverified.
        """
