# --- services/auth_service.py ---
import re
from dataclasses import dataclass

from flask import current_app

from ..errors import DuplicateAccount, DuplicateEmail, InvalidCredentials, NotFound, ValidationError
from ..model import STATUS_ACTIVE, Profile, SubscriptionPlan, UserSubscription
from ..utils.decorators import load_profile
from ..utils.passwords import MAX_PASSWORD_BYTES, check_password, dummy_hash, hash_password
from . import pending
from .oauth_service import normalize_email
from .plan_service import find_plan
from .registration_service import AuthResult, create_account, send_welcome
from .tokens import issue_token

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


@dataclass
class PendingRegistration:
    """A paid-plan signup waiting for payment before the account exists."""

    pending_identity: dict
    plan: SubscriptionPlan

    def as_dict(self):
        return {
            "requiresPayment": True,
            "pendingIdentity": self.pending_identity,
            "plan": self.plan.as_dict(),
        }


def clean_text(value, field):
    """Strip a free-text JSON field; anything but a string or null is rejected."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"Invalid value for {field}")
    return value.strip()


def validate_new_account(email, password, first_name, last_name, message=None):
    if password is not None and not isinstance(password, str):
        raise ValidationError("Invalid value for password")
    if not email or not password or not first_name or not last_name:
        raise ValidationError(message or "Email, password, first name, and last name are required")
    if not EMAIL_RE.match(email):
        raise ValidationError("Invalid email address")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")


def register(email, password, first_name, last_name, phone=None, plan_id=None):
    email = normalize_email(email)
    first_name = clean_text(first_name, "firstName")
    last_name = clean_text(last_name, "lastName")
    phone = clean_text(phone, "phone") or None
    validate_new_account(email, password, first_name, last_name)

    plan = find_plan(plan_id) if plan_id else None

    if Profile.query.filter_by(email=email).first():
        raise DuplicateEmail()

    password_hash = hash_password(password)

    if plan and not plan.is_free:
        fields = {
            "email": email,
            "firstName": first_name,
            "lastName": last_name,
            "phone": phone,
            "passwordHash": password_hash,
        }
        identity = pending.seal(pending.PASSWORD_FLOW, fields, hidden=("passwordHash",))
        current_app.logger.info("Registration for plan %s deferred until payment", plan.id)
        return PendingRegistration(pending_identity=identity, plan=plan)

    try:
        profile = create_account(
            email,
            first_name,
            last_name,
            phone=phone,
            password_hash=password_hash,
            plan=plan,
        )
    except DuplicateAccount as e:
        raise DuplicateEmail() from e

    current_app.logger.info("User registered successfully: %s", profile.id)
    send_welcome(profile, plan)
    return AuthResult(user=profile.as_dict(), token=issue_token(profile))


def login(email, password) -> AuthResult:
    email = normalize_email(email)
    if not email or not password or not isinstance(password, str):
        raise ValidationError("Email and password are required")

    profile = Profile.query.filter_by(email=email).first()
    password_hash = profile.credential.password_hash if profile and profile.credential else None

    # unknown email, OAuth-only account and wrong password look the same
    # and each costs one bcrypt check
    valid = check_password(password, password_hash or dummy_hash())
    if not password_hash or not valid:
        current_app.logger.warning("Rejected login attempt")
        raise InvalidCredentials()

    current_app.logger.info("User logged in successfully: %s", profile.id)
    return AuthResult(user=profile.as_dict(), token=issue_token(profile))


def active_subscription(profile):
    return (
        UserSubscription.query.filter_by(user_id=profile.id, status=STATUS_ACTIVE)
        .order_by(UserSubscription.created_at.desc())
        .first()
    )


def get_current_user(account_id) -> dict:
    profile = load_profile(account_id)
    if not profile:
        raise NotFound()

    sub = active_subscription(profile)
    user = profile.as_dict()
    user["subscriptionPlan"] = sub.plan_id if sub else None
    user["subscriptionStatus"] = sub.status if sub else None
    return user
