"""
repositories/postgres_storage.py
--------------------------------
PostgreSQL implementation of the storage contract, composed of the
per-table repositories.
"""

from typing import Optional

from models.obligation import Obligation
from models.payment import Payment
from repositories.base import ScheduleStorage
from repositories.obligation_repo import ObligationRepository
from repositories.payment_repo import PaymentRepository


class PostgresStorage(ScheduleStorage):
    """Delegates to ObligationRepository and PaymentRepository."""

    def __init__(self):
        self.obligations = ObligationRepository()
        self.payments = PaymentRepository()

    def add_obligation(self, obligation: Obligation) -> Obligation:
        return self.obligations.add(obligation)

    def get_obligation(self, obligation_id: int) -> Optional[Obligation]:
        return self.obligations.get_by_id(obligation_id)

    def get_obligations(self, user_id: int, active_only: bool = False) -> list[Obligation]:
        return self.obligations.get_all(user_id, active_only=active_only)

    def update_obligation(self, obligation_id: int, fields: dict) -> Optional[Obligation]:
        return self.obligations.update(obligation_id, fields)

    def delete_obligation(self, obligation_id: int) -> bool:
        return self.obligations.delete(obligation_id)

    def add_payment(self, payment: Payment) -> Payment:
        return self.payments.add(payment)

    def get_payment(self, payment_id: int) -> Optional[Payment]:
        return self.payments.get_by_id(payment_id)

    def get_payments_for_obligation(self, obligation_id: int) -> list[Payment]:
        return self.payments.get_for_obligation(obligation_id)

    def update_payment(self, payment_id: int, fields: dict) -> Optional[Payment]:
        return self.payments.update(payment_id, fields)

    def delete_payment(self, payment_id: int) -> bool:
        return self.payments.delete(payment_id)
