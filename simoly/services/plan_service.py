# --- services/plan_service.py ---
from ..errors import ValidationError
from ..extensions import db
from ..model import SubscriptionPlan

DEFAULT_PLANS = [
    {
        "id": "free",
        "name": "Gratuito",
        "description": "Per iniziare a esplorare SimolyAI",
        "price": 0,
        "features": ["1 questionario", "Report di base"],
    },
    {
        "id": "pro",
        "name": "Professionale",
        "description": "Per professionisti e piccoli team",
        "price": 2900,
        "features": ["Questionari illimitati", "Report avanzati", "Supporto email"],
        "is_popular": True,
    },
    {
        "id": "business",
        "name": "Business",
        "description": "Per aziende con esigenze strutturate",
        "price": 9900,
        "features": ["Tutto del piano Professionale", "Utenti multipli", "Supporto prioritario"],
    },
]


def list_plans():
    return (
        SubscriptionPlan.query.filter_by(active=True)
        .order_by(SubscriptionPlan.price.asc(), SubscriptionPlan.id.asc())
        .all()
    )


def find_plan(plan_id):
    plan = db.session.get(SubscriptionPlan, str(plan_id)) if plan_id else None
    if not plan or not plan.active:
        raise ValidationError("Invalid subscription plan")
    return plan


def seed_default_plans():
    created = 0
    for data in DEFAULT_PLANS:
        if db.session.get(SubscriptionPlan, data["id"]):
            continue
        db.session.add(SubscriptionPlan(**data))
        created += 1
    db.session.commit()
    return created
