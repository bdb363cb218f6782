# --- services/registration_service.py ---
from dataclasses import dataclass

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from ..errors import DuplicateAccount, PaymentRequired
from ..extensions import db
from ..model import ROLE_USER, STATUS_ACTIVE, Credential, Profile, UserSubscription
from . import payments, pending
from .email_service import get_mailer
from .oauth_service import PROVIDERS
from .plan_service import find_plan
from .tokens import issue_token


@dataclass
class AuthResult:
    user: dict
    token: str

    def as_dict(self):
        return {"user": self.user, "token": self.token}


def _attach_subscription(profile, plan):
    sub = UserSubscription(user_id=profile.id, plan_id=plan.id, status=STATUS_ACTIVE)
    db.session.add(sub)
    db.session.flush()
    return sub


def create_account(
    email,
    first_name,
    last_name,
    *,
    phone=None,
    password_hash=None,
    role=ROLE_USER,
    plan=None,
    provider=None,
    provider_id=None,
):
    """Insert profile, credential and (optionally) subscription as one unit.

    Either all rows are committed or none are. A unique-constraint hit at
    flush time means someone else created the same identity first.
    """
    profile = Profile(
        email=email,
        first_name=first_name,
        last_name=last_name,
        full_name=f"{first_name} {last_name}".strip(),
        phone=phone or None,
        role=role,
    )
    if provider:
        setattr(profile, provider.id_column, provider_id)

    try:
        db.session.add(profile)
        db.session.flush()
        db.session.add(Credential(user_id=profile.id, password_hash=password_hash))
        db.session.flush()
        if plan:
            _attach_subscription(profile, plan)
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        raise DuplicateAccount() from e
    except Exception:
        db.session.rollback()
        raise

    return profile


def send_welcome(profile, plan=None):
    # email is best-effort; the account already exists
    get_mailer().send_welcome(profile, plan)


def _duplicate_message(provider):
    if provider:
        return f"User with this email or {provider.label} account already exists"
    return "User with this email already exists"


def complete_with_plan(kind, pending_identity, plan_id=None, payment_reference=None) -> AuthResult:
    """Turn a client-held pending identity into an account bound to a plan."""
    provider = PROVIDERS.get(kind)
    required = ("email", provider.id_key) if provider else ("email", "passwordHash")
    fields = pending.unseal(kind, pending_identity, required=required)

    plan = find_plan(plan_id or current_app.config["DEFAULT_PLAN_ID"])
    if not plan.is_free and not payments.get_verifier().is_confirmed(payment_reference, plan):
        raise PaymentRequired()

    email = fields["email"]
    conditions = [Profile.email == email]
    if provider:
        conditions.append(getattr(Profile, provider.id_column) == fields[provider.id_key])
    if Profile.query.filter(or_(*conditions)).first():
        raise DuplicateAccount(_duplicate_message(provider))

    try:
        profile = create_account(
            email,
            fields.get("firstName") or "",
            fields.get("lastName") or "",
            phone=fields.get("phone"),
            password_hash=fields.get("passwordHash"),
            plan=plan,
            provider=provider,
            provider_id=fields.get(provider.id_key) if provider else None,
        )
    except DuplicateAccount as e:
        raise DuplicateAccount(_duplicate_message(provider)) from e

    current_app.logger.info("Completed %s registration for %s on plan %s", kind, profile.id, plan.id)
    send_welcome(profile, plan)

    user = profile.as_dict()
    user["subscription_plan"] = plan.id
    return AuthResult(user=user, token=issue_token(profile))
