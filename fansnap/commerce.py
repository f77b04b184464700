import logging
from decimal import Decimal
from typing import Any, Optional

from .collaborators import Clock, IdFactory
from .errors import InvalidInputError, NotFoundError
from .models import Order, OrderStatus, StoreItem
from .store import InMemoryLedger, as_amount

logger = logging.getLogger(__name__)


class CommerceLedger(InMemoryLedger):
    """Store items (``records``) and the orders placed against them."""

    def __init__(self, id_factory: Optional[IdFactory] = None, clock: Optional[Clock] = None):
        super().__init__(id_factory, clock)
        self.orders: dict[str, dict] = {}

    def create_item(self, creator_id: str, name: str, description: str = "", price: Any = None) -> StoreItem:
        if not name or not isinstance(name, str):
            raise InvalidInputError("Missing item name", {"field": "name"})
        price = as_amount(price, "price")
        if price < Decimal("0"):
            raise InvalidInputError("price must not be negative", {"field": "price"})

        item_id = self.new_id()
        item_data = {
            "id": item_id,
            "creator_id": creator_id,
            "name": name,
            "description": description or "",
            "price": price,
            "created_at": self.now(),
        }
        with self.lock:
            self.records[item_id] = item_data
            item = StoreItem(**item_data)

        logger.info("Store item %s created by %s", item_id, creator_id)
        return item

    def list_items(self, creator_id: str) -> list[StoreItem]:
        return [StoreItem(**i) for i in self._snapshot() if i["creator_id"] == creator_id]

    def get_item(self, item_id: str) -> Optional[StoreItem]:
        data = self._get(item_id)
        return StoreItem(**data) if data else None

    def place_order(self, item_id: str, buyer_id: str) -> Order:
        # Payment capture is out of scope; orders stay pending.
        with self.lock:
            item_data = self.records.get(item_id)
            if item_data is None:
                raise NotFoundError(f"Item {item_id} not found")
            if item_data["creator_id"] == buyer_id:
                logger.warning("Rejected self-purchase of item %s by %s", item_id, buyer_id)
                raise InvalidInputError("Cannot order your own item")

            order_id = self.new_id()
            order_data = {
                "id": order_id,
                "item_id": item_id,
                "buyer_id": buyer_id,
                "status": OrderStatus.PENDING,
                "created_at": self.now(),
            }
            self.orders[order_id] = order_data
            order = Order(**order_data)

        logger.info("Order %s placed for item %s by %s", order_id, item_id, buyer_id)
        return order

    def list_orders_by_buyer(self, buyer_id: str) -> list[Order]:
        with self.lock:
            orders = [dict(o) for o in self.orders.values() if o["buyer_id"] == buyer_id]
        return [Order(**o) for o in orders]
