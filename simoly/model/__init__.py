# ------ model/__init__.py ------

from .user import Profile, Credential, ROLES, ROLE_USER, ROLE_PREMIUM, ROLE_ADMIN
from .subscription import SubscriptionPlan, UserSubscription, STATUS_ACTIVE

__all__ = [
    "Profile",
    "Credential",
    "SubscriptionPlan",
    "UserSubscription",
    "ROLES",
    "ROLE_USER",
    "ROLE_PREMIUM",
    "ROLE_ADMIN",
    "STATUS_ACTIVE",
]
