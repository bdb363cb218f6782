"""Client-held registration payloads.

A new identity is not written anywhere until a plan has been chosen, so the
profile travels through the browser between the first step (form submit or
OAuth callback) and the completion call. The readable fields are there for
the frontend; the server only trusts the encrypted copy in ``sealed``.
"""
import base64
import hashlib
import json

from cryptography.fernet import Fernet, InvalidToken
from flask import current_app

from ..errors import ValidationError

PASSWORD_FLOW = "password"

_INVALID_MESSAGES = {
    PASSWORD_FLOW: "Invalid registration data",
    "google": "Invalid Google profile data",
    "facebook": "Invalid Facebook profile data",
}


def _fernet(kind):
    # one key per flow: a payload sealed for one flow never opens in another
    secret = f"simoly.pending.{kind}:{current_app.config['SECRET_KEY']}".encode("utf-8")
    return Fernet(base64.urlsafe_b64encode(hashlib.sha256(secret).digest()))


def seal(kind, fields, hidden=()):
    payload = {k: v for k, v in fields.items() if k not in hidden}
    token = _fernet(kind).encrypt(json.dumps(fields).encode("utf-8"))
    payload["sealed"] = token.decode("ascii")
    return payload


def unseal(kind, payload, required=()):
    message = _INVALID_MESSAGES.get(kind, "Invalid registration data")
    token = payload.get("sealed") if isinstance(payload, dict) else None
    if not token or not isinstance(token, str):
        raise ValidationError(message)

    fernet = _fernet(kind)
    token = token.encode("ascii", "ignore")
    try:
        raw = fernet.decrypt(token, ttl=current_app.config["PENDING_IDENTITY_MAX_AGE"])
    except InvalidToken:
        # extract_timestamp checks the HMAC, so reaching the raise means only the age failed
        try:
            fernet.extract_timestamp(token)
        except InvalidToken:
            raise ValidationError(message)
        raise ValidationError("Registration data has expired, please sign up again")

    try:
        fields = json.loads(raw)
    except ValueError:
        raise ValidationError(message)
    if not isinstance(fields, dict) or any(not fields.get(key) for key in required):
        raise ValidationError(message)
    return fields
