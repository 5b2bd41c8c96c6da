"""
repositories/memory_repo.py
---------------------------
In-process storage backed by plain dicts.
Used by the test-suite and for running without a database.
"""

from dataclasses import replace
from datetime import datetime, timezone
from itertools import count
from typing import Optional

from models.obligation import Obligation
from models.payment import Payment
from repositories.base import (
    OBLIGATION_UPDATABLE_FIELDS,
    PAYMENT_UPDATABLE_FIELDS,
    ScheduleStorage,
    check_fields,
)
from utils.logger import get_logger

logger = get_logger(__name__)


class InMemoryStorage(ScheduleStorage):
    """
    Dict-backed implementation of :class:`ScheduleStorage`.

    Objects are copied on the way in and out so callers never share
    state with the store.
    """

    def __init__(self):
        self._obligations: dict[int, Obligation] = {}
        self._payments: dict[int, Payment] = {}
        self._obligation_ids = count(1)
        self._payment_ids = count(1)

    # ── Obligations ───────────────────────────────────────

    def add_obligation(self, obligation: Obligation) -> Obligation:
        obligation.id = next(self._obligation_ids)
        obligation.created_at = obligation.created_at or datetime.now(timezone.utc)
        self._obligations[obligation.id] = replace(obligation)
        logger.debug(f"Added obligation '{obligation.name}' #{obligation.id}")
        return obligation

    def get_obligation(self, obligation_id: int) -> Optional[Obligation]:
        stored = self._obligations.get(obligation_id)
        return replace(stored) if stored else None

    def get_obligations(self, user_id: int, active_only: bool = False) -> list[Obligation]:
        found = [
            replace(o) for o in self._obligations.values()
            if o.user_id == user_id and (o.is_active or not active_only)
        ]
        return sorted(found, key=lambda o: (o.next_due_date is None, o.next_due_date or o.anchor_date, o.id))

    def update_obligation(self, obligation_id: int, fields: dict) -> Optional[Obligation]:
        check_fields(fields, OBLIGATION_UPDATABLE_FIELDS)
        stored = self._obligations.get(obligation_id)
        if stored is None:
            return None
        updated = replace(stored, **fields)
        self._obligations[obligation_id] = updated
        return replace(updated)

    def delete_obligation(self, obligation_id: int) -> bool:
        if self._obligations.pop(obligation_id, None) is None:
            return False
        orphaned = [pid for pid, p in self._payments.items() if p.obligation_id == obligation_id]
        for pid in orphaned:
            del self._payments[pid]
        logger.debug(f"Deleted obligation #{obligation_id} and {len(orphaned)} payment(s)")
        return True

    # ── Payments ──────────────────────────────────────────

    def add_payment(self, payment: Payment) -> Payment:
        payment.id = next(self._payment_ids)
        payment.created_at = payment.created_at or datetime.now(timezone.utc)
        self._payments[payment.id] = replace(payment)
        return payment

    def get_payment(self, payment_id: int) -> Optional[Payment]:
        stored = self._payments.get(payment_id)
        return replace(stored) if stored else None

    def get_payments_for_obligation(self, obligation_id: int) -> list[Payment]:
        return [replace(p) for p in self._payments.values() if p.obligation_id == obligation_id]

    def update_payment(self, payment_id: int, fields: dict) -> Optional[Payment]:
        check_fields(fields, PAYMENT_UPDATABLE_FIELDS)
        stored = self._payments.get(payment_id)
        if stored is None:
            return None
        updated = replace(stored, **fields)
        self._payments[payment_id] = updated
        return replace(updated)

    def delete_payment(self, payment_id: int) -> bool:
        return self._payments.pop(payment_id, None) is not None
