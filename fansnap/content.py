import logging
from decimal import Decimal
from typing import Any, Iterable, Optional

from .collaborators import Clock, IdFactory
from .errors import InvalidInputError
from .models import Post
from .store import InMemoryLedger, as_amount
from .subscriptions import SubscriptionLedger

logger = logging.getLogger(__name__)


def _normalize_tags(tags: Optional[Iterable[Any]]) -> list[str]:
    if tags is None:
        return []
    if isinstance(tags, str) or not all(isinstance(t, str) for t in tags):
        raise InvalidInputError("tags must be a list of strings", {"field": "tags"})
    return list(dict.fromkeys(tags))


class ContentLedger(InMemoryLedger):
    """Posts, filtered for each requester by the subscription gate."""

    def __init__(self, subscriptions: SubscriptionLedger,
                 id_factory: Optional[IdFactory] = None, clock: Optional[Clock] = None):
        super().__init__(id_factory, clock)
        self.subscriptions = subscriptions

    def publish(
        self,
        creator_id: str,
        content: str,
        type: str = "text",
        price: Any = 0,
        subscriber_only: bool = False,
        tags: Optional[Iterable[str]] = None,
    ) -> Post:
        if not content or not isinstance(content, str):
            raise InvalidInputError("Missing content", {"field": "content"})
        price = as_amount(price, "price")
        if price < Decimal("0"):
            raise InvalidInputError("price must not be negative", {"field": "price"})
        tags = _normalize_tags(tags)

        post_id = self.new_id()
        post_data = {
            "id": post_id,
            "creator_id": creator_id,
            "content": content,
            "type": type or "text",
            "price": price,
            "subscriber_only": bool(subscriber_only),
            "tags": tags,
            "created_at": self.now(),
            "likes": 0,
            "views": 0,
        }
        with self.lock:
            self.records[post_id] = post_data
            post = Post(**post_data)

        logger.info("Post %s published by %s (subscriber_only=%s)", post_id, creator_id, post.subscriber_only)
        return post

    def list_by_creator(self, creator_id: str, requester_id: Optional[str] = None) -> list[Post]:
        posts = [p for p in self._snapshot() if p["creator_id"] == creator_id]
        if any(p["subscriber_only"] for p in posts):
            unlocked = self.subscriptions.is_active(requester_id, creator_id)
        else:
            unlocked = False
        return [Post(**p) for p in posts if not p["subscriber_only"] or unlocked]

    def get(self, post_id: str) -> Optional[Post]:
        data = self._get(post_id)
        return Post(**data) if data else None

    def delete_by_id(self, post_id: str) -> bool:
        with self.lock:
            removed = self.records.pop(post_id, None)
        if removed is not None:
            logger.info("Post %s deleted", post_id)
        return removed is not None

    def all_posts(self) -> list[Post]:
        return [Post(**p) for p in self._snapshot()]
