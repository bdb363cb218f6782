from flask import jsonify

from . import bp
from ..services import auth_service, registration_service
from ..services.auth_service import PendingRegistration
from ..services.oauth_service import FACEBOOK, GOOGLE
from ..services.pending import PASSWORD_FLOW
from ..utils.api import api_ok, json_body
from ..utils.decorators import current_account_id, token_required


@bp.post("/register")
def register():
    data = json_body()
    result = auth_service.register(
        email=data.get("email"),
        password=data.get("password"),
        first_name=data.get("firstName"),
        last_name=data.get("lastName"),
        phone=data.get("phone"),
        plan_id=data.get("subscription_plan"),
    )
    if isinstance(result, PendingRegistration):
        return jsonify(api_ok("Payment required to complete registration", data=result.as_dict())), 200
    return jsonify(api_ok("User registered successfully", data=result.as_dict())), 201


@bp.post("/login")
def login():
    data = json_body()
    result = auth_service.login(data.get("email"), data.get("password"))
    return jsonify(api_ok("Login successful", data=result.as_dict())), 200


@bp.get("/me")
@token_required
def me():
    user = auth_service.get_current_user(current_account_id())
    return jsonify(api_ok(data={"user": user})), 200


@bp.post("/logout")
@token_required
def logout():
    # tokens are stateless; the client drops its copy
    return jsonify(api_ok("Logged out successfully")), 200


def _complete(kind, data, pending_identity, message):
    result = registration_service.complete_with_plan(
        kind,
        pending_identity,
        plan_id=data.get("subscription_plan"),
        payment_reference=data.get("payment_reference"),
    )
    return jsonify(api_ok(message, data=result.as_dict())), 201


@bp.post("/register/google")
def register_google():
    data = json_body()
    identity = data.get(GOOGLE.data_key) or data.get("providerData")
    return _complete(GOOGLE.name, data, identity, "Google user registered successfully")


@bp.post("/register/facebook")
def register_facebook():
    data = json_body()
    identity = data.get(FACEBOOK.data_key) or data.get("providerData")
    return _complete(FACEBOOK.name, data, identity, "Facebook user registered successfully")


@bp.post("/register/complete")
def register_complete():
    data = json_body()
    return _complete(PASSWORD_FLOW, data, data.get("pendingIdentity"), "User registered successfully")
