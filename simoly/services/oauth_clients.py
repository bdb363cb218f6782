# --- services/oauth_clients.py ---
from dataclasses import dataclass
from urllib.parse import urlencode

import requests
from flask import current_app
from google.auth.exceptions import GoogleAuthError
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

EXTENSION_KEY = "simoly.oauth"

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"

FACEBOOK_GRAPH_VERSION = "v19.0"
FACEBOOK_AUTH_URL = f"https://www.facebook.com/{FACEBOOK_GRAPH_VERSION}/dialog/oauth"
FACEBOOK_TOKEN_URL = f"https://graph.facebook.com/{FACEBOOK_GRAPH_VERSION}/oauth/access_token"
FACEBOOK_PROFILE_URL = f"https://graph.facebook.com/{FACEBOOK_GRAPH_VERSION}/me"


class OAuthError(Exception):
    """The provider handshake failed (transport, bad code, bad token)."""


@dataclass(frozen=True)
class ExternalProfile:
    provider_id: str
    email: str | None
    first_name: str = ""
    last_name: str = ""


class _BoundedRequest(google_requests.Request):
    # google-auth fetches its signing certs with a 120s default timeout
    def __init__(self, timeout):
        super().__init__()
        self._timeout = timeout

    def __call__(self, url, method="GET", body=None, headers=None, timeout=None, **kwargs):
        return super().__call__(
            url, method=method, body=body, headers=headers, timeout=timeout or self._timeout, **kwargs
        )


def _json(response, what):
    try:
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        raise OAuthError(f"{what} failed: {e}") from e
    if not isinstance(data, dict):
        raise OAuthError(f"{what} returned an unexpected body")
    return data


class GoogleClient:
    def __init__(self, client_id, client_secret, timeout=10.0):
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout

    @property
    def configured(self):
        return bool(self.client_id and self.client_secret)

    def authorize_url(self, redirect_uri, state):
        params = {
            "client_id": self.client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": "openid email profile",
            "state": state,
            "prompt": "select_account",
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    def fetch_profile(self, code, redirect_uri) -> ExternalProfile:
        try:
            response = requests.post(
                GOOGLE_TOKEN_URL,
                data={
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": redirect_uri,
                    "grant_type": "authorization_code",
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise OAuthError(f"Google token exchange failed: {e}") from e

        raw_token = _json(response, "Google token exchange").get("id_token")
        if not raw_token:
            raise OAuthError("Google token response has no id_token")

        try:
            claims = id_token.verify_oauth2_token(
                raw_token,
                _BoundedRequest(self.timeout),
                self.client_id,
                clock_skew_in_seconds=60,
            )
        except (ValueError, GoogleAuthError) as e:
            raise OAuthError("Invalid Google ID token") from e

        if not claims.get("sub"):
            raise OAuthError("Google ID token has no subject")

        # an unverified address cannot be used to match an existing account
        email = claims.get("email") if claims.get("email_verified", False) else None
        return ExternalProfile(
            provider_id=str(claims["sub"]),
            email=email,
            first_name=claims.get("given_name", ""),
            last_name=claims.get("family_name", ""),
        )


class FacebookClient:
    def __init__(self, app_id, app_secret, timeout=10.0):
        self.app_id = app_id
        self.app_secret = app_secret
        self.timeout = timeout

    @property
    def configured(self):
        return bool(self.app_id and self.app_secret)

    def authorize_url(self, redirect_uri, state):
        params = {
            "client_id": self.app_id,
            "redirect_uri": redirect_uri,
            "state": state,
            "scope": "email",
            "response_type": "code",
        }
        return f"{FACEBOOK_AUTH_URL}?{urlencode(params)}"

    def fetch_profile(self, code, redirect_uri) -> ExternalProfile:
        try:
            token_response = requests.get(
                FACEBOOK_TOKEN_URL,
                params={
                    "client_id": self.app_id,
                    "client_secret": self.app_secret,
                    "redirect_uri": redirect_uri,
                    "code": code,
                },
                timeout=self.timeout,
            )
            access_token = _json(token_response, "Facebook token exchange").get("access_token")
            if not access_token:
                raise OAuthError("Facebook token response has no access_token")

            profile_response = requests.get(
                FACEBOOK_PROFILE_URL,
                params={"fields": "id,email,first_name,last_name", "access_token": access_token},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise OAuthError(f"Facebook request failed: {e}") from e

        data = _json(profile_response, "Facebook profile lookup")
        if not data.get("id"):
            raise OAuthError("Facebook profile has no id")
        return ExternalProfile(
            provider_id=str(data["id"]),
            email=data.get("email"),
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
        )


def init_oauth(app):
    timeout = app.config.get("OAUTH_HTTP_TIMEOUT", 10.0)
    app.extensions[EXTENSION_KEY] = {
        "google": GoogleClient(
            app.config.get("GOOGLE_CLIENT_ID"),
            app.config.get("GOOGLE_CLIENT_SECRET"),
            timeout,
        ),
        "facebook": FacebookClient(
            app.config.get("FACEBOOK_APP_ID"),
            app.config.get("FACEBOOK_APP_SECRET"),
            timeout,
        ),
    }


def get_client(name):
    return current_app.extensions[EXTENSION_KEY][name]
