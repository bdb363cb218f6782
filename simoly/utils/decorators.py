# ------- utils/decorators.py -------
import uuid
from functools import wraps

from flask import current_app, g
from flask_jwt_extended import get_jwt, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException, NoAuthorizationError
from jwt.exceptions import PyJWTError

from ..errors import Forbidden, InvalidToken, MissingToken
from ..extensions import db
from ..model import ROLE_ADMIN, Profile


def _verified_claims():
    try:
        verify_jwt_in_request()
    except NoAuthorizationError:
        raise MissingToken()
    except (JWTExtendedException, PyJWTError):
        raise InvalidToken()
    return get_jwt()


def load_profile(account_id):
    try:
        uid = uuid.UUID(str(account_id))
    except (TypeError, ValueError):
        return None
    return db.session.get(Profile, uid)


def current_account_id():
    return g.jwt_claims.get("sub")


def token_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        g.jwt_claims = _verified_claims()
        return fn(*args, **kwargs)
    return wrapper


def role_required(*roles, message: str | None = None):
    """Bearer token plus a live role lookup.

    The role claim inside the token is ignored: a role change has to apply
    to tokens issued before it, so the profile is read again on every call.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            claims = _verified_claims()
            user = load_profile(claims.get("sub"))
            if not user or user.role not in roles:
                current_app.logger.warning("Role check failed for account %s", claims.get("sub"))
                raise Forbidden(message)
            g.jwt_claims = claims
            g.current_user = user
            return fn(*args, **kwargs)
        return wrapper
    return decorator


def admin_required(fn):
    return role_required(ROLE_ADMIN, message="Administrator access required")(fn)
