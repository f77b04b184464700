"""
Fansnap platform core

This package provides:
- Identity registry with profiles and bcrypt credentials
- Content ledger gated by active subscriptions
- Subscription, store/order, referral, messaging and tip ledgers
- Commission-adjusted referral earnings with an auditable event history
- Read-only search over users and posts
"""

from .errors import (
    PlatformError,
    NotFoundError,
    ConflictError,
    InvalidInputError,
    UnauthenticatedError,
    ForbiddenError,
)
from .models import (
    Role,
    SubscriptionStatus,
    OrderStatus,
    User,
    Profile,
    Post,
    Subscription,
    StoreItem,
    Order,
    Referral,
    ReferralEarning,
    Message,
    Tip,
)
from .service import PlatformService
from .settings import Settings

__all__ = [
    "PlatformError",
    "NotFoundError",
    "ConflictError",
    "InvalidInputError",
    "UnauthenticatedError",
    "ForbiddenError",
    "Role",
    "SubscriptionStatus",
    "OrderStatus",
    "User",
    "Profile",
    "Post",
    "Subscription",
    "StoreItem",
    "Order",
    "Referral",
    "ReferralEarning",
    "Message",
    "Tip",
    "PlatformService",
    "Settings",
]
