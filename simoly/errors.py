# --- errors.py ---
from flask import current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from .extensions import db, jwt
from .utils.api import api_error


class ApiError(Exception):
    """Base for every error that is reported to the client as a JSON envelope."""

    status_code = 500
    message = "Internal server error"
    code = "internal_error"

    def __init__(self, message=None, status_code=None, error=None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        if status_code:
            self.status_code = status_code
        self.error = error or self.code

    def to_response(self):
        return jsonify(api_error(self.message, self.error)), self.status_code


class ValidationError(ApiError):
    status_code = 400
    message = "Invalid request"
    code = "validation_error"


class DuplicateEmail(ApiError):
    status_code = 409
    message = "User with this email already exists"
    code = "duplicate_email"


class DuplicateAccount(ApiError):
    status_code = 400
    message = "User with this email or external account already exists"
    code = "duplicate_account"


class MissingEmail(ApiError):
    status_code = 400
    message = "No email found in provider profile"
    code = "missing_email"


class InvalidCredentials(ApiError):
    status_code = 401
    message = "Invalid email or password"
    code = "invalid_credentials"


class MissingToken(ApiError):
    status_code = 401
    message = "Access token required"
    code = "missing_token"


class InvalidToken(ApiError):
    status_code = 403
    message = "Invalid or expired token"
    code = "invalid_token"


class Forbidden(ApiError):
    status_code = 403
    message = "Administrator access required"
    code = "forbidden"


class NotFound(ApiError):
    status_code = 404
    message = "User not found"
    code = "not_found"


class PaymentRequired(ApiError):
    status_code = 402
    message = "Payment has not been confirmed for this plan"
    code = "payment_required"


class TransientStoreFailure(ApiError):
    status_code = 500
    message = "Temporary storage failure, please retry"
    code = "store_failure"


# flask-jwt-extended raises before our decorators see the request when
# its own helpers are used directly; keep the envelope identical.
@jwt.unauthorized_loader
def _missing_token(reason):
    return MissingToken().to_response()


@jwt.invalid_token_loader
def _invalid_token(reason):
    return InvalidToken().to_response()


@jwt.expired_token_loader
def _expired_token(jwt_header, jwt_payload):
    return InvalidToken().to_response()


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(err):
        return err.to_response()

    @app.errorhandler(SQLAlchemyError)
    def handle_store_error(err):
        db.session.rollback()
        current_app.logger.exception("Database failure: %s", err)
        return TransientStoreFailure().to_response()

    @app.errorhandler(HTTPException)
    def handle_http_error(err):
        if err.code is None or err.code < 400:
            return err
        return jsonify(api_error(err.description or err.name, err.name.lower().replace(" ", "_"))), err.code
