import logging
from typing import Optional

from .collaborators import Clock, IdFactory
from .errors import InvalidInputError, NotFoundError
from .models import Subscription, SubscriptionStatus
from .settings import S, Settings
from .store import InMemoryLedger

logger = logging.getLogger(__name__)


class SubscriptionLedger(InMemoryLedger):
    """Holds subscriptions and answers the gating question for content."""

    def __init__(self, settings: Optional[Settings] = None,
                 id_factory: Optional[IdFactory] = None, clock: Optional[Clock] = None):
        super().__init__(id_factory, clock)
        self.settings = settings or S

    def subscribe(self, subscriber_id: str, creator_id: str, plan: Optional[str] = None) -> Subscription:
        if subscriber_id == creator_id:
            raise InvalidInputError("Cannot subscribe to yourself")

        # Duplicate active subscriptions for the same pair are allowed.
        sub_id = self.new_id()
        sub_data = {
            "id": sub_id,
            "subscriber_id": subscriber_id,
            "creator_id": creator_id,
            "plan": plan or self.settings.default_plan,
            "status": SubscriptionStatus.ACTIVE,
            "created_at": self.now(),
            "cancelled_at": None,
        }
        with self.lock:
            self.records[sub_id] = sub_data
            sub = Subscription(**sub_data)

        logger.info("Subscription %s: %s -> %s (%s)", sub_id, subscriber_id, creator_id, sub.plan)
        return sub

    def is_active(self, subscriber_id: Optional[str], creator_id: str) -> bool:
        if not subscriber_id:
            return False
        with self.lock:
            return any(
                s["subscriber_id"] == subscriber_id
                and s["creator_id"] == creator_id
                and s["status"] == SubscriptionStatus.ACTIVE
                for s in self.records.values()
            )

    def list_by_subscriber(self, subscriber_id: str) -> list[Subscription]:
        return [Subscription(**s) for s in self._snapshot() if s["subscriber_id"] == subscriber_id]

    def get(self, subscription_id: str) -> Optional[Subscription]:
        data = self._get(subscription_id)
        return Subscription(**data) if data else None

    def cancel(self, subscription_id: str) -> Subscription:
        with self.lock:
            sub_data = self.records.get(subscription_id)
            if sub_data is None:
                raise NotFoundError(f"Subscription {subscription_id} not found")
            if not Subscription(**sub_data).can_cancel():
                raise InvalidInputError(f"Subscription {subscription_id} is already {sub_data['status'].value}")
            sub_data["status"] = SubscriptionStatus.CANCELLED
            sub_data["cancelled_at"] = self.now()
            sub = Subscription(**sub_data)

        logger.info("Subscription %s cancelled", subscription_id)
        return sub
