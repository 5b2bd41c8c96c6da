"""
services/payment_service.py
---------------------------
Business logic for recording, editing and deleting payments.
Every mutation is followed by the matching schedule reconciliation.
"""

from datetime import date
from typing import Callable, Optional

from models.payment import PAID, Payment
from repositories.base import PAYMENT_UPDATABLE_FIELDS, ScheduleStorage, check_fields
from repositories.postgres_storage import PostgresStorage
from services.schedule_reconciler import ScheduleReconciler
from services.validation import validate_amount, validate_status
from utils.dates import DateLike, to_utc_date, utc_today
from utils.errors import ObligationNotFoundError
from utils.logger import get_logger

logger = get_logger(__name__)


class PaymentService:
    """
    Handles payment mutations for obligations.

    Responsibilities:
        - Validate and store payment records.
        - Trigger schedule reconciliation after each change.
    """

    def __init__(
        self,
        storage: Optional[ScheduleStorage] = None,
        today_provider: Callable[[], date] = utc_today,
    ):
        self.storage = storage or PostgresStorage()
        self.reconciler = ScheduleReconciler(self.storage, today_provider)

    def record_payment(
        self,
        obligation_id: int,
        amount,
        paid_date: DateLike,
        due_date: DateLike,
        status: str = PAID,
        notes: Optional[str] = None,
    ) -> Payment:
        """
        Store a payment and advance the schedule when it is paid.

        Args:
            obligation_id: Owning obligation.
            amount: Positive amount.
            paid_date: Day the money actually moved.
            due_date: The due-date instance this payment satisfies.
            status: 'paid', 'overdue' or 'cancelled'.
            notes: Optional free text.

        Raises:
            ObligationNotFoundError: If the obligation does not exist.
            ValidationError: On a bad amount or status.
        """
        obligation = self.storage.get_obligation(obligation_id)
        if obligation is None:
            raise ObligationNotFoundError(obligation_id)

        payment = Payment(
            obligation_id=obligation_id,
            amount=validate_amount(amount),
            paid_date=to_utc_date(paid_date),
            due_date=to_utc_date(due_date),
            status=validate_status(status),
            notes=notes,
        )
        saved = self.storage.add_payment(payment)
        logger.info(
            f"Recorded {saved.status} payment #{saved.id} of {saved.amount} "
            f"for obligation #{obligation_id} (due {saved.due_date})"
        )

        if saved.is_paid():
            self.reconciler.on_payment_recorded(obligation, saved)
        return saved

    def update_payment(self, payment_id: int, fields: dict) -> Optional[Payment]:
        """
        Edit a payment.

        A status change is reconciled through ``on_payment_status_changed``.
        Moving the dates of a payment that stays paid re-derives the
        schedule from the full history.

        Returns:
            The updated Payment, or None if it does not exist.
        """
        check_fields(fields, PAYMENT_UPDATABLE_FIELDS)
        old = self.storage.get_payment(payment_id)
        if old is None:
            return None

        changes = dict(fields)
        if "amount" in changes:
            changes["amount"] = validate_amount(changes["amount"])
        if "status" in changes:
            changes["status"] = validate_status(changes["status"])
        for key in ("paid_date", "due_date"):
            if key in changes:
                changes[key] = to_utc_date(changes[key])

        updated = self.storage.update_payment(payment_id, changes)
        if updated is None:
            return None

        obligation = self.storage.get_obligation(updated.obligation_id)
        if old.status != updated.status:
            logger.info(f"Payment #{payment_id} status {old.status} -> {updated.status}")
            self.reconciler.on_payment_status_changed(obligation, updated, old.status, updated.status)
        elif updated.is_paid() and (
            old.due_date != updated.due_date or old.paid_date != updated.paid_date
        ):
            self.reconciler.recompute(obligation)
        return updated

    def delete_payment(self, payment_id: int) -> bool:
        """Delete a payment; if it was paid the schedule is re-derived."""
        payment = self.storage.get_payment(payment_id)
        if payment is None:
            return False

        deleted = self.storage.delete_payment(payment_id)
        if deleted:
            logger.info(f"Deleted payment #{payment_id} of obligation #{payment.obligation_id}")
            obligation = self.storage.get_obligation(payment.obligation_id)
            self.reconciler.on_payment_deleted(obligation, payment)
        return deleted

    def list_payments(self, obligation_id: int) -> list[Payment]:
        """Payments of one obligation, latest due date first."""
        payments = self.storage.get_payments_for_obligation(obligation_id)
        return sorted(payments, key=lambda p: (p.due_date, p.id or 0), reverse=True)
