# --- model/user.py ---
import uuid

from sqlalchemy.sql import func

from ..extensions import db

ROLE_USER = "user"
ROLE_PREMIUM = "premium_user"
ROLE_ADMIN = "administrator"
ROLES = (ROLE_USER, ROLE_PREMIUM, ROLE_ADMIN)


class Profile(db.Model):
    """An account: identity, role and the external provider ids linked to it."""

    __tablename__ = "profiles"
    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    first_name = db.Column(db.String(120), nullable=False, default="")
    last_name = db.Column(db.String(120), nullable=False, default="")
    full_name = db.Column(db.String(255))
    phone = db.Column(db.String(40), nullable=True)
    role = db.Column(db.String(32), nullable=False, default=ROLE_USER, index=True)
    google_id = db.Column(db.String(64), unique=True, nullable=True)
    facebook_id = db.Column(db.String(64), unique=True, nullable=True)

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())

    credential = db.relationship(
        "Credential",
        backref="profile",
        uselist=False,
        cascade="all, delete-orphan",
    )
    subscriptions = db.relationship(
        "UserSubscription",
        backref="profile",
        cascade="all, delete-orphan",
        lazy=True,
    )

    @property
    def is_admin(self):
        return self.role == ROLE_ADMIN

    def as_dict(self):
        return {
            "id": str(self.id),
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "phone": self.phone,
            "role": self.role,
            "isAdmin": self.is_admin,
        }

    def as_admin_dict(self):
        return {
            "id": str(self.id),
            "email": self.email,
            "full_name": self.full_name,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "role": self.role,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "last_login": self.updated_at.isoformat() if self.updated_at else None,
        }


class Credential(db.Model):
    # one row per profile; password_hash stays empty for OAuth-only accounts
    __tablename__ = "auth"
    user_id = db.Column(
        db.Uuid,
        db.ForeignKey("profiles.id", ondelete="CASCADE"),
        primary_key=True,
    )
    password_hash = db.Column(db.String(100), nullable=True)
    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())
