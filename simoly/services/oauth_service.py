"""
Resolve an external (Google/Facebook) profile to an account.

Providers differ only in data: which column stores their id and which keys
their payloads use. Resolution never creates an account. An unknown identity
comes back as a signed payload the client carries to the pricing step.
"""
from dataclasses import dataclass

from flask import current_app
from sqlalchemy import case, or_
from sqlalchemy.exc import SQLAlchemyError

from ..errors import MissingEmail, ValidationError
from ..extensions import db
from ..model import Profile
from . import pending
from .oauth_clients import ExternalProfile


@dataclass(frozen=True)
class OAuthProvider:
    name: str
    label: str
    id_column: str
    id_key: str
    data_key: str

    @property
    def signup_flag(self):
        return f"{self.name}_signup"

    @property
    def data_param(self):
        return f"{self.name}_data"


GOOGLE = OAuthProvider("google", "Google", "google_id", "googleId", "googleData")
FACEBOOK = OAuthProvider("facebook", "Facebook", "facebook_id", "facebookId", "facebookData")
PROVIDERS = {p.name: p for p in (GOOGLE, FACEBOOK)}


@dataclass
class ExistingUser:
    profile: Profile
    linked: bool = False


@dataclass
class NewIdentity:
    provider: OAuthProvider
    payload: dict


def normalize_email(value):
    if value is not None and not isinstance(value, str):
        raise ValidationError("Invalid email address")
    return (value or "").strip().lower()


def find_matching_profile(provider: OAuthProvider, email, provider_id):
    column = getattr(Profile, provider.id_column)
    return (
        Profile.query.filter(or_(Profile.email == email, column == provider_id))
        # a row already linked to this external id wins over an email match
        .order_by(case((column == provider_id, 0), else_=1))
        .first()
    )


def resolve_profile(provider: OAuthProvider, external: ExternalProfile):
    email = normalize_email(external.email)
    if not email:
        raise MissingEmail(f"No email found in {provider.label} profile")

    profile = find_matching_profile(provider, email, external.provider_id)
    if profile:
        linked = False
        if not getattr(profile, provider.id_column):
            setattr(profile, provider.id_column, external.provider_id)
            try:
                db.session.commit()
            except SQLAlchemyError:
                db.session.rollback()
                raise
            linked = True
            current_app.logger.info("Linked %s id to account %s", provider.label, profile.id)
        return ExistingUser(profile=profile, linked=linked)

    current_app.logger.info("New %s identity, deferring account creation", provider.label)
    payload = pending.seal(
        provider.name,
        {
            "email": email,
            "firstName": external.first_name or "",
            "lastName": external.last_name or "",
            provider.id_key: external.provider_id,
        },
    )
    return NewIdentity(provider=provider, payload=payload)
