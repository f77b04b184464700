import logging
from decimal import Decimal
from typing import Any, Optional

from .collaborators import Clock, IdFactory
from .errors import InvalidInputError
from .models import Message, Tip
from .settings import S, Settings
from .store import InMemoryLedger, as_amount

logger = logging.getLogger(__name__)


class MessagingLedger(InMemoryLedger):
    def __init__(self, settings: Optional[Settings] = None,
                 id_factory: Optional[IdFactory] = None, clock: Optional[Clock] = None):
        super().__init__(id_factory, clock)
        self.settings = settings or S

    def send(self, sender_id: str, recipient_id: str, content: str) -> Message:
        if not content or not isinstance(content, str):
            raise InvalidInputError("Missing content", {"field": "content"})
        if sender_id == recipient_id and not self.settings.allow_self_messages:
            raise InvalidInputError("Cannot message yourself")

        msg_id = self.new_id()
        msg_data = {
            "id": msg_id,
            "sender_id": sender_id,
            "recipient_id": recipient_id,
            "content": content,
            "created_at": self.now(),
        }
        with self.lock:
            self.records[msg_id] = msg_data
            return Message(**msg_data)

    def conversations_of(self, user_id: str) -> list[str]:
        """Distinct counterparts of ``user_id``, in the order they first appear."""
        partners: dict[str, None] = {}
        for msg in self._snapshot():
            if msg["sender_id"] == user_id:
                partners.setdefault(msg["recipient_id"])
            if msg["recipient_id"] == user_id:
                partners.setdefault(msg["sender_id"])
        return list(partners)

    def thread_between(self, a: str, b: str) -> list[Message]:
        return [
            Message(**m) for m in self._snapshot()
            if {m["sender_id"], m["recipient_id"]} == {a, b}
        ]


class TipLedger(InMemoryLedger):
    def send(self, sender_id: str, recipient_id: str, amount: Any) -> Tip:
        amount = as_amount(amount, "amount")
        if amount <= Decimal("0"):
            raise InvalidInputError("Invalid amount", {"field": "amount"})
        if sender_id == recipient_id:
            logger.warning("Rejected self-tip by %s", sender_id)
            raise InvalidInputError("Cannot tip yourself")

        tip_id = self.new_id()
        tip_data = {
            "id": tip_id,
            "sender_id": sender_id,
            "recipient_id": recipient_id,
            "amount": amount,
            "created_at": self.now(),
        }
        with self.lock:
            self.records[tip_id] = tip_data
            tip = Tip(**tip_data)

        logger.info("Tip %s of %s from %s to %s", tip_id, amount, sender_id, recipient_id)
        return tip

    def received_by(self, creator_id: str) -> list[Tip]:
        return [Tip(**t) for t in self._snapshot() if t["recipient_id"] == creator_id]

    def total_received(self, creator_id: str) -> Decimal:
        return sum((t.amount for t in self.received_by(creator_id)), Decimal("0"))
