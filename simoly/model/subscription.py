# --- model/subscription.py ---
import uuid

from sqlalchemy.sql import func

from ..extensions import db

STATUS_ACTIVE = "active"


class SubscriptionPlan(db.Model):
    __tablename__ = "subscription_plans"
    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.String(500))
    price = db.Column(db.Integer, nullable=False, default=0)  # euro cents
    interval = db.Column(db.String(16), nullable=False, default="month")
    features = db.Column(db.JSON, default=list)
    is_popular = db.Column(db.Boolean, default=False)
    active = db.Column(db.Boolean, default=True)

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())

    @property
    def is_free(self):
        return (self.price or 0) == 0

    def as_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "interval": self.interval,
            "features": list(self.features or []),
            "is_free": self.is_free,
            "is_popular": bool(self.is_popular),
        }


class UserSubscription(db.Model):
    __tablename__ = "user_subscriptions"
    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    user_id = db.Column(
        db.Uuid,
        db.ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    plan_id = db.Column(db.String(64), db.ForeignKey("subscription_plans.id"), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=STATUS_ACTIVE, index=True)

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())

    plan = db.relationship("SubscriptionPlan", lazy="joined")
