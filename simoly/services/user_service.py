# --- services/user_service.py ---
from flask import current_app
from sqlalchemy import case

from ..errors import DuplicateAccount, DuplicateEmail, Forbidden, NotFound, ValidationError
from ..extensions import db
from ..model import ROLE_ADMIN, ROLE_PREMIUM, ROLE_USER, ROLES, Profile
from ..utils.decorators import load_profile
from ..utils.passwords import hash_password
from .auth_service import clean_text, validate_new_account
from .oauth_service import normalize_email
from .plan_service import find_plan
from .registration_service import create_account

ROLE_ORDER = case(
    {ROLE_ADMIN: 1, ROLE_PREMIUM: 2, ROLE_USER: 3},
    value=Profile.role,
    else_=4,
)


def list_users():
    return Profile.query.order_by(ROLE_ORDER, Profile.created_at.desc()).all()


def get_user(user_id):
    profile = load_profile(user_id)
    if not profile:
        raise NotFound("Utente non trovato")
    return profile


def _check_role(role):
    if role not in ROLES:
        raise ValidationError("Ruolo non valido")


def create_user(data):
    email = normalize_email(data.get("email"))
    password = data.get("password")
    first_name = clean_text(data.get("firstName"), "firstName")
    last_name = clean_text(data.get("lastName"), "lastName")
    phone = clean_text(data.get("phone"), "phone") or None
    role = data.get("role") or ROLE_USER

    validate_new_account(
        email, password, first_name, last_name,
        message="Email, password, nome e cognome sono obbligatori",
    )
    _check_role(role)
    plan = find_plan(data["subscription_plan"]) if data.get("subscription_plan") else None

    duplicate = "Un utente con questa email esiste già"
    if Profile.query.filter_by(email=email).first():
        raise DuplicateEmail(duplicate)

    try:
        profile = create_account(
            email,
            first_name,
            last_name,
            phone=phone,
            password_hash=hash_password(password),
            role=role,
            plan=plan,
        )
    except DuplicateAccount as e:
        raise DuplicateEmail(duplicate) from e

    current_app.logger.info("User %s created by admin", profile.id)
    return profile


def update_role(user_id, role):
    _check_role(role)
    profile = get_user(user_id)

    if profile.role == ROLE_ADMIN and role != ROLE_ADMIN:
        admin_count = Profile.query.filter_by(role=ROLE_ADMIN).count()
        if admin_count <= 1:
            raise ValidationError("Impossibile rimuovere l'ultimo amministratore")

    profile.role = role
    db.session.commit()
    current_app.logger.info("User %s role updated to %s", profile.id, role)
    return profile


def delete_user(user_id):
    profile = get_user(user_id)
    if profile.role == ROLE_ADMIN:
        raise Forbidden("Non è possibile eliminare un amministratore")

    # credential and subscriptions go with the profile (ORM cascade)
    try:
        db.session.delete(profile)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    current_app.logger.info("User %s deleted", user_id)
