import json
import secrets
from urllib.parse import quote

from flask import abort, current_app, redirect, request, session, url_for
from sqlalchemy.exc import SQLAlchemyError

from . import bp
from ..errors import ApiError
from ..services.oauth_clients import OAuthError, get_client
from ..services.oauth_service import PROVIDERS, NewIdentity, resolve_profile
from ..services.tokens import issue_token


def _provider_or_404(name):
    provider = PROVIDERS.get(name)
    if not provider:
        abort(404)
    return provider


def _frontend(path):
    return current_app.config["FRONTEND_URL"].rstrip("/") + path


def _login_redirect(error):
    return redirect(_frontend(f"/login?error={error}"))


def _callback_url(provider):
    base = current_app.config.get("OAUTH_CALLBACK_BASE_URL")
    path = url_for("oauth.callback", provider_name=provider.name)
    if base:
        return base.rstrip("/") + path
    return url_for("oauth.callback", provider_name=provider.name, _external=True)


def _state_key(provider):
    return f"oauth_state_{provider.name}"


@bp.get("/auth/<provider_name>")
def start(provider_name):
    provider = _provider_or_404(provider_name)
    client = get_client(provider.name)
    if not client.configured:
        current_app.logger.warning("%s OAuth is not configured", provider.label)
        return _login_redirect("oauth_unavailable")

    state = secrets.token_urlsafe(24)
    session[_state_key(provider)] = state
    return redirect(client.authorize_url(_callback_url(provider), state))


@bp.get("/auth/<provider_name>/callback")
def callback(provider_name):
    provider = _provider_or_404(provider_name)
    expected_state = session.pop(_state_key(provider), None)
    code = request.args.get("code")

    if request.args.get("error") or not code or not expected_state or request.args.get("state") != expected_state:
        current_app.logger.warning("%s OAuth callback rejected", provider.label)
        return _login_redirect("oauth_failed")

    try:
        external = get_client(provider.name).fetch_profile(code, _callback_url(provider))
        outcome = resolve_profile(provider, external)
    except (OAuthError, ApiError) as e:
        current_app.logger.warning("%s OAuth callback error: %s", provider.label, e)
        return _login_redirect("oauth_failed")
    except SQLAlchemyError:
        current_app.logger.exception("%s OAuth callback store failure", provider.label)
        return _login_redirect("oauth_failed")

    if isinstance(outcome, NewIdentity):
        data = quote(json.dumps(outcome.payload), safe="")
        return redirect(_frontend(f"/pricing?{provider.signup_flag}=true&{provider.data_param}={data}"))

    return redirect(_frontend(f"/auth/callback?token={issue_token(outcome.profile)}"))
