import copy
import threading
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from .collaborators import Clock, IdFactory, new_id, utc_now
from .errors import InvalidInputError


def as_amount(value: Any, field: str) -> Decimal:
    """Coerce a caller-supplied number to Decimal, rejecting bools, strings and non-finite values."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise InvalidInputError(f"{field} must be a number", {"field": field})
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        raise InvalidInputError(f"{field} must be a number", {"field": field})
    if not amount.is_finite():
        raise InvalidInputError(f"{field} must be finite", {"field": field})
    return amount


class InMemoryLedger:
    """Keyed record store for one entity type, guarded by a single-writer lock.

    Records are plain dicts owned by the ledger. Anything handed out is a deep
    copy, so callers cannot mutate ledger state behind the lock.
    """

    def __init__(self, id_factory: Optional[IdFactory] = None, clock: Optional[Clock] = None):
        self.records: dict[str, dict] = {}
        self.lock = threading.Lock()
        self.new_id = id_factory or new_id
        self.now = clock or utc_now

    def __len__(self) -> int:
        with self.lock:
            return len(self.records)

    def _get(self, record_id: str) -> Optional[dict]:
        with self.lock:
            record = self.records.get(record_id)
            return copy.deepcopy(record) if record is not None else None

    def _snapshot(self) -> list[dict]:
        with self.lock:
            return [copy.deepcopy(r) for r in self.records.values()]
