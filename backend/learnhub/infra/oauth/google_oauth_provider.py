# learnhub/infra/oauth/google_oauth_provider.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

import requests

from learnhub.services._shared.errors import OAuthLoginError
from learnhub.services._shared.ports import OAuthProvider
from learnhub.services.auth.dto import OAuthProfileIn

log = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
GOOGLE_SCOPES = ("openid", "email", "profile")


@dataclass(slots=True)
class GoogleOAuthProvider(OAuthProvider):
    """
    Google sign-in over the OAuth 2.0 authorization-code flow.

    The code is exchanged server-side for an access token, which is then used
    to read the OpenID Connect userinfo document. Only profiles whose email
    Google reports as verified are accepted.
    """

    client_id: str
    client_secret: str
    redirect_uri: str
    timeout: float = 10.0
    http: requests.Session = field(default_factory=requests.Session)
    name: str = "google"

    def authorization_url(self, state: str) -> str:
        query = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(GOOGLE_SCOPES),
            "state": state,
            "prompt": "select_account",
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(query)}"

    def fetch_profile(self, code: str) -> OAuthProfileIn:
        token = self._exchange_code(code)
        info = self._get_json(
            "userinfo_failed",
            "GET",
            GOOGLE_USERINFO_URL,
            headers={"Authorization": f"Bearer {token}"},
        )

        sub = str(info.get("sub") or "").strip()
        email = str(info.get("email") or "").strip().lower()
        if not sub or not email:
            raise OAuthLoginError("profile_incomplete")
        if info.get("email_verified") is not True:
            raise OAuthLoginError("email_unverified")

        name = str(info.get("name") or "").strip() or email.split("@", 1)[0]
        return OAuthProfileIn(
            email=email,
            name=name,
            provider_id=sub,
            avatar_url=info.get("picture") or None,
        )

    # ------------------------------------------------------------------ #

    def _exchange_code(self, code: str) -> str:
        body = self._get_json(
            "token_exchange_failed",
            "POST",
            GOOGLE_TOKEN_URL,
            data={
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": self.redirect_uri,
                "grant_type": "authorization_code",
            },
        )
        token = body.get("access_token")
        if not isinstance(token, str) or not token:
            raise OAuthLoginError("token_exchange_failed")
        return token

    def _get_json(self, reason: str, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            resp = self.http.request(method, url, timeout=self.timeout, **kwargs)
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as exc:
            log.warning("oauth.http_error", extra={"reason": reason, "error": type(exc).__name__})
            raise OAuthLoginError(reason) from exc
        if not isinstance(payload, dict):
            raise OAuthLoginError(reason)
        return payload
