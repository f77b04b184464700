"""
Referral ledger.

A referral is looked up by its public code. Earnings only ever grow: each
recorded earning event credits ``amount * commission`` (the commission in
force when the event is recorded) and is kept as an immutable
``ReferralEarning`` entry, so ``Referral.earnings`` always equals the sum of
``credited`` over the code's history.
"""

import logging
from decimal import Decimal
from typing import Any, Optional

from .collaborators import Clock, IdFactory
from .errors import ConflictError, InvalidInputError, NotFoundError
from .models import Referral, ReferralEarning
from .settings import S, Settings
from .store import InMemoryLedger, as_amount

logger = logging.getLogger(__name__)


class ReferralLedger(InMemoryLedger):
    def __init__(self, settings: Optional[Settings] = None,
                 id_factory: Optional[IdFactory] = None, clock: Optional[Clock] = None):
        super().__init__(id_factory, clock)
        self.settings = settings or S
        self.code_index: dict[str, str] = {}
        self.earning_entries: dict[str, dict] = {}

    def create_code(self, creator_id: str, affiliate_id: str, code: str, commission: Any = None) -> Referral:
        if not code or not isinstance(code, str):
            raise InvalidInputError("Missing code", {"field": "code"})
        commission = self._validate_commission(
            self.settings.default_commission if commission is None else commission
        )

        with self.lock:
            if code in self.code_index:
                raise ConflictError(f"Referral code {code} already exists", {"code": code})
            ref_id = self.new_id()
            ref_data = {
                "id": ref_id,
                "creator_id": creator_id,
                "affiliate_id": affiliate_id,
                "code": code,
                "commission": commission,
                "signups": 0,
                "earnings": Decimal("0"),
                "created_at": self.now(),
            }
            self.records[ref_id] = ref_data
            self.code_index[code] = ref_id
            referral = Referral(**ref_data)

        logger.info("Referral code %s created for creator %s by %s", code, creator_id, affiliate_id)
        return referral

    def lookup_by_code(self, code: str) -> Optional[Referral]:
        with self.lock:
            ref_id = self.code_index.get(code)
            ref_data = self.records.get(ref_id) if ref_id else None
            return Referral(**ref_data) if ref_data else None

    def record_signup(self, code: str) -> Referral:
        # No dedup key: every call counts.
        with self.lock:
            ref_data = self._require(code)
            ref_data["signups"] += 1
            return Referral(**ref_data)

    def record_earning(self, code: str, amount: Any) -> Referral:
        amount = as_amount(amount, "amount")
        if amount < Decimal("0"):
            raise InvalidInputError("amount must not be negative", {"field": "amount"})

        with self.lock:
            ref_data = self._require(code)
            credited = amount * ref_data["commission"]
            ref_data["earnings"] += credited

            entry_id = self.new_id()
            self.earning_entries[entry_id] = {
                "id": entry_id,
                "referral_id": ref_data["id"],
                "code": code,
                "amount": amount,
                "commission": ref_data["commission"],
                "credited": credited,
                "earnings_after": ref_data["earnings"],
                "created_at": self.now(),
            }
            referral = Referral(**ref_data)

        logger.info("Referral %s credited %s (earnings now %s)", code, credited, referral.earnings)
        return referral

    def earning_history(self, code: str) -> list[ReferralEarning]:
        with self.lock:
            self._require(code)
            entries = [dict(e) for e in self.earning_entries.values() if e["code"] == code]
        return [ReferralEarning(**e) for e in entries]

    def list_by_affiliate(self, affiliate_id: str) -> list[Referral]:
        return [Referral(**r) for r in self._snapshot() if r["affiliate_id"] == affiliate_id]

    def _require(self, code: str) -> dict:
        # caller holds self.lock
        ref_id = self.code_index.get(code)
        if ref_id is None:
            raise NotFoundError("Referral code not found", {"code": code})
        return self.records[ref_id]

    def _validate_commission(self, commission: Any) -> Decimal:
        commission = as_amount(commission, "commission")
        if commission < Decimal("0"):
            raise InvalidInputError("commission must not be negative", {"field": "commission"})
        if self.settings.strict_commission and commission > Decimal("1"):
            raise InvalidInputError("commission must be between 0 and 1", {"field": "commission"})
        return commission
