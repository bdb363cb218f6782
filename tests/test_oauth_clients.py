from urllib.parse import parse_qs, urlparse

import pytest
import requests
from google.auth.exceptions import TransportError
from google.auth.transport import requests as google_requests

from simoly.model import Profile
from simoly.services import oauth_clients
from simoly.services.oauth_clients import ExternalProfile, FacebookClient, GoogleClient, OAuthError


class FakeResponse:
    def __init__(self, body=None, status=200):
        self.body = body
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} Client Error")

    def json(self):
        if self.body is None:
            raise ValueError("Expecting value")
        return self.body


class FakeHTTP:
    """Replaces the requests module used by the provider clients."""

    RequestException = requests.RequestException

    def __init__(self):
        self.responses = []
        self.error = None
        self.calls = []

    def _send(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error:
            raise self.error
        return self.responses.pop(0)

    def post(self, url, **kwargs):
        return self._send("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._send("GET", url, **kwargs)


GOOGLE_CLAIMS = {
    "sub": "g-1",
    "email": "gina@x.com",
    "email_verified": True,
    "given_name": "Gina",
    "family_name": "Google",
}


@pytest.fixture
def http(monkeypatch):
    fake = FakeHTTP()
    monkeypatch.setattr(oauth_clients, "requests", fake)
    return fake


@pytest.fixture
def id_token_check(monkeypatch):
    def verify(token, request, audience, clock_skew_in_seconds=0):
        verify.calls.append((token, request, audience))
        if isinstance(verify.result, Exception):
            raise verify.result
        return verify.result

    verify.calls = []
    verify.result = dict(GOOGLE_CLAIMS)
    monkeypatch.setattr(oauth_clients.id_token, "verify_oauth2_token", verify)
    return verify


def test_google_code_exchange(http, id_token_check):
    http.responses = [FakeResponse({"id_token": "raw-id-token"})]
    client = GoogleClient("cid", "secret", timeout=4)

    profile = client.fetch_profile("code-1", "http://api.test/auth/google/callback")

    assert profile == ExternalProfile("g-1", "gina@x.com", "Gina", "Google")
    method, url, kwargs = http.calls[0]
    assert (method, url) == ("POST", oauth_clients.GOOGLE_TOKEN_URL)
    assert kwargs["timeout"] == 4
    assert kwargs["data"]["code"] == "code-1"
    assert kwargs["data"]["grant_type"] == "authorization_code"

    token, request, audience = id_token_check.calls[0]
    assert (token, audience) == ("raw-id-token", "cid")
    assert isinstance(request, oauth_clients._BoundedRequest)
    assert request._timeout == 4


def test_google_unverified_email_is_dropped(http, id_token_check):
    http.responses = [FakeResponse({"id_token": "raw"})]
    id_token_check.result = dict(GOOGLE_CLAIMS, email_verified=False)

    profile = GoogleClient("cid", "secret").fetch_profile("code", "http://cb")
    assert profile.email is None
    assert profile.provider_id == "g-1"


@pytest.mark.parametrize("response", [
    FakeResponse({"access_token": "no id token here"}),
    FakeResponse({"error": "invalid_grant"}, status=400),
    FakeResponse(None),
    FakeResponse(["not", "an", "object"]),
])
def test_google_bad_token_response(http, id_token_check, response):
    http.responses = [response]
    with pytest.raises(OAuthError):
        GoogleClient("cid", "secret").fetch_profile("code", "http://cb")
    assert id_token_check.calls == []


def test_google_network_failure(http, id_token_check):
    http.error = requests.ConnectionError("connection refused")
    with pytest.raises(OAuthError):
        GoogleClient("cid", "secret").fetch_profile("code", "http://cb")


@pytest.mark.parametrize("error", [
    ValueError("Token expired"),
    TransportError("certs unreachable"),
])
def test_google_id_token_rejected(http, id_token_check, error):
    http.responses = [FakeResponse({"id_token": "raw"})]
    id_token_check.result = error
    with pytest.raises(OAuthError):
        GoogleClient("cid", "secret").fetch_profile("code", "http://cb")


def test_google_token_without_subject(http, id_token_check):
    http.responses = [FakeResponse({"id_token": "raw"})]
    id_token_check.result = {"email": "gina@x.com", "email_verified": True}
    with pytest.raises(OAuthError):
        GoogleClient("cid", "secret").fetch_profile("code", "http://cb")


def test_bounded_request_applies_default_timeout(monkeypatch):
    seen = []

    def send(self, url, method="GET", body=None, headers=None, timeout=None, **kwargs):
        seen.append(timeout)

    monkeypatch.setattr(google_requests.Request, "__call__", send)
    request = oauth_clients._BoundedRequest(3)
    request("https://www.googleapis.com/oauth2/v1/certs")
    request("https://www.googleapis.com/oauth2/v1/certs", timeout=9)
    assert seen == [3, 9]


def test_facebook_code_exchange(http):
    http.responses = [
        FakeResponse({"access_token": "fb-token"}),
        FakeResponse({"id": 42, "email": "fay@x.com", "first_name": "Fay", "last_name": "Book"}),
    ]
    client = FacebookClient("app", "secret", timeout=5)

    profile = client.fetch_profile("code-2", "http://api.test/auth/facebook/callback")

    assert profile == ExternalProfile("42", "fay@x.com", "Fay", "Book")
    (m1, url1, kw1), (m2, url2, kw2) = http.calls
    assert (m1, url1) == ("GET", oauth_clients.FACEBOOK_TOKEN_URL)
    assert kw1["params"]["code"] == "code-2"
    assert (m2, url2) == ("GET", oauth_clients.FACEBOOK_PROFILE_URL)
    assert kw2["params"]["access_token"] == "fb-token"
    assert kw1["timeout"] == kw2["timeout"] == 5


def test_facebook_without_access_token(http):
    http.responses = [FakeResponse({"token_type": "bearer"})]
    with pytest.raises(OAuthError):
        FacebookClient("app", "secret").fetch_profile("code", "http://cb")
    assert len(http.calls) == 1


def test_facebook_profile_without_id(http):
    http.responses = [
        FakeResponse({"access_token": "fb-token"}),
        FakeResponse({"email": "fay@x.com"}),
    ]
    with pytest.raises(OAuthError):
        FacebookClient("app", "secret").fetch_profile("code", "http://cb")


def test_facebook_network_failure(http):
    http.error = requests.Timeout("read timed out")
    with pytest.raises(OAuthError):
        FacebookClient("app", "secret").fetch_profile("code", "http://cb")


def test_configured_needs_id_and_secret():
    assert GoogleClient("cid", "secret").configured is True
    assert GoogleClient("cid", None).configured is False
    assert FacebookClient(None, "secret").configured is False


def test_cert_fetch_failure_redirects_to_login(app, client, http, id_token_check):
    http.responses = [FakeResponse({"id_token": "raw"})]
    id_token_check.result = TransportError("certs unreachable")

    start = client.get("/auth/google")
    assert start.headers["Location"].startswith(oauth_clients.GOOGLE_AUTH_URL)
    state = parse_qs(urlparse(start.headers["Location"]).query)["state"][0]

    resp = client.get(f"/auth/google/callback?code=abc&state={state}")
    assert resp.status_code == 302
    assert resp.headers["Location"] == "http://frontend.test/login?error=oauth_failed"
    with app.app_context():
        assert Profile.query.count() == 0
