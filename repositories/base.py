"""
repositories/base.py
--------------------
Storage contract consumed by the services.

The scheduling core only needs ``get_obligation``, ``update_obligation``
and ``get_payments_for_obligation``; the remaining methods back the
obligation and payment services.
"""

from abc import ABC, abstractmethod
from typing import Optional

from models.obligation import Obligation
from models.payment import Payment
from utils.errors import ValidationError

# Columns a caller may change through ``update_obligation``.
OBLIGATION_UPDATABLE_FIELDS = frozenset({
    "name", "amount", "frequency", "due_day", "anchor_date", "kind",
    "next_due_date", "last_paid_date", "is_active", "reminder_days",
    "category", "notes",
})

# Columns a caller may change through ``update_payment``.
PAYMENT_UPDATABLE_FIELDS = frozenset({
    "amount", "paid_date", "due_date", "status", "notes",
})


def check_fields(fields: dict, allowed: frozenset) -> None:
    """Raise ValidationError for any field outside ``allowed``."""
    unknown = set(fields) - allowed
    if unknown:
        raise ValidationError(f"Unknown field(s): {', '.join(sorted(unknown))}")


class ScheduleStorage(ABC):
    """Persistence backend for obligations and their payments."""

    # ── Obligations ───────────────────────────────────────

    @abstractmethod
    def add_obligation(self, obligation: Obligation) -> Obligation:
        """Persist a new obligation and return it with `id` populated."""

    @abstractmethod
    def get_obligation(self, obligation_id: int) -> Optional[Obligation]:
        ...

    @abstractmethod
    def get_obligations(self, user_id: int, active_only: bool = False) -> list[Obligation]:
        ...

    @abstractmethod
    def update_obligation(self, obligation_id: int, fields: dict) -> Optional[Obligation]:
        """
        Set the given fields in one write.

        Returns:
            The updated obligation, or None if it does not exist.
        """

    @abstractmethod
    def delete_obligation(self, obligation_id: int) -> bool:
        """Delete an obligation together with its payments."""

    # ── Payments ──────────────────────────────────────────

    @abstractmethod
    def add_payment(self, payment: Payment) -> Payment:
        ...

    @abstractmethod
    def get_payment(self, payment_id: int) -> Optional[Payment]:
        ...

    @abstractmethod
    def get_payments_for_obligation(self, obligation_id: int) -> list[Payment]:
        ...

    @abstractmethod
    def update_payment(self, payment_id: int, fields: dict) -> Optional[Payment]:
        ...

    @abstractmethod
    def delete_payment(self, payment_id: int) -> bool:
        ...
