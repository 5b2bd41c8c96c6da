"""
services/schedule_reconciler.py
-------------------------------
Keeps an obligation's ``next_due_date`` and ``last_paid_date`` in step with
its payments.

Recording a paid payment moves the schedule forward from the instance that
payment satisfied. Anything that can take a paid payment away (deleting it,
or changing its status to something other than paid) re-derives both
fields from the payments that remain, so out-of-order edits always land on
the same state as if the removed payment had never existed.

Obligations that are missing, inactive or one-time are left untouched.
"""

from dataclasses import replace
from datetime import date, timedelta
from typing import Callable, Optional

from models.obligation import Obligation, ScheduleState
from models.payment import PAID, Payment
from repositories.base import ScheduleStorage
from services.due_date_calculator import calculate_next_due
from utils.dates import to_utc_date, utc_today
from utils.logger import get_logger

logger = get_logger(__name__)


def latest_paid(payments: list[Payment]) -> Optional[Payment]:
    """
    The paid payment covering the latest due-date instance.

    Ties on ``due_date`` go to the later ``paid_date``, then the higher id,
    so the choice does not depend on storage order.
    """
    paid = [p for p in payments if p.is_paid()]
    if not paid:
        return None
    return max(paid, key=lambda p: (to_utc_date(p.due_date), to_utc_date(p.paid_date), p.id or 0))


class ScheduleReconciler:
    """
    Recomputes schedule fields after payment mutations.

    Args:
        storage: Backend satisfying :class:`ScheduleStorage`.
        today_provider: Returns the current UTC day; injected for tests.
    """

    def __init__(self, storage: ScheduleStorage, today_provider: Callable[[], date] = utc_today):
        self.storage = storage
        self.today_provider = today_provider

    # ── Entry points ──────────────────────────────────────

    def on_payment_recorded(
        self, obligation: Optional[Obligation], payment: Payment
    ) -> Optional[ScheduleState]:
        """
        Advance the schedule past the instance a paid payment satisfied.

        Returns:
            The obligation's schedule state afterwards, or None if the
            obligation does not exist.
        """
        if not self._can_reconcile(obligation, payment):
            return obligation.schedule_state() if obligation else None
        if not payment.is_paid():
            return obligation.schedule_state()

        if self._is_backfill(obligation, payment):
            logger.debug(
                f"Payment for {payment.due_date} predates next due "
                f"{obligation.next_due_date} of obligation #{obligation.id}; recomputing"
            )
            return self.recompute(obligation)

        next_due = self._next_after(obligation, payment.due_date)
        return self._save(obligation, next_due, to_utc_date(payment.paid_date))

    def on_payment_status_changed(
        self,
        obligation: Optional[Obligation],
        payment: Payment,
        old_status: str,
        new_status: str,
    ) -> Optional[ScheduleState]:
        """
        React to a payment changing status.

        paid -> not paid behaves like a deletion, not paid -> paid like a
        new recording. Other transitions do not affect the schedule.
        """
        if not self._can_reconcile(obligation, payment):
            return obligation.schedule_state() if obligation else None

        if old_status == PAID and new_status != PAID:
            return self.recompute(obligation)
        if old_status != PAID and new_status == PAID:
            return self.on_payment_recorded(obligation, replace(payment, status=PAID))
        return obligation.schedule_state()

    def on_payment_deleted(
        self, obligation: Optional[Obligation], deleted_payment: Payment
    ) -> Optional[ScheduleState]:
        """Re-derive the schedule if the removed payment was counted as paid."""
        if not self._can_reconcile(obligation, deleted_payment):
            return obligation.schedule_state() if obligation else None
        if not deleted_payment.is_paid():
            return obligation.schedule_state()
        return self.recompute(obligation)

    def recompute(self, obligation: Optional[Obligation]) -> Optional[ScheduleState]:
        """
        Derive the schedule from the obligation's full payment history.

        With at least one paid payment, the one covering the latest due
        date sets ``last_paid_date`` and the point the schedule resumes
        from. Without any, the schedule returns to its never-paid state:
        the first instance on or after today, counted from the original
        anchor.
        """
        if obligation is None:
            return None
        if not obligation.is_schedulable():
            return obligation.schedule_state()

        latest = latest_paid(self.storage.get_payments_for_obligation(obligation.id))
        if latest is not None:
            next_due = self._next_after(obligation, latest.due_date)
            return self._save(obligation, next_due, to_utc_date(latest.paid_date))

        next_due = calculate_next_due(obligation, self.today_provider())
        return self._save(obligation, next_due, None)

    # ── Helpers ───────────────────────────────────────────

    @staticmethod
    def _can_reconcile(obligation: Optional[Obligation], payment: Payment) -> bool:
        if obligation is None:
            logger.debug(f"Payment #{payment.id} references a missing obligation; skipping")
            return False
        if not obligation.is_schedulable():
            logger.debug(f"Obligation #{obligation.id} has no recurring schedule; skipping")
            return False
        return True

    @staticmethod
    def _is_backfill(obligation: Obligation, payment: Payment) -> bool:
        """True when a paid history exists and the payment covers an earlier instance."""
        return (
            obligation.last_paid_date is not None
            and obligation.next_due_date is not None
            and to_utc_date(payment.due_date) < to_utc_date(obligation.next_due_date)
        )

    @staticmethod
    def _next_after(obligation: Obligation, paid_due_date: date) -> Optional[date]:
        """First instance after a paid one, phased from the paid instance's month."""
        paid_due_date = to_utc_date(paid_due_date)
        resume_from = paid_due_date + timedelta(days=1)
        return calculate_next_due(obligation, resume_from, anchor_override=paid_due_date)

    def _save(
        self,
        obligation: Obligation,
        next_due: Optional[date],
        last_paid: Optional[date],
    ) -> Optional[ScheduleState]:
        fields = {"last_paid_date": last_paid}
        # None means the search failed; keep the previous due date.
        if next_due is not None:
            fields["next_due_date"] = next_due

        updated = self.storage.update_obligation(obligation.id, fields)
        if updated is None:
            logger.debug(f"Obligation #{obligation.id} vanished before its schedule was saved")
            return None

        logger.info(
            f"Obligation #{obligation.id} schedule: next due {updated.next_due_date}, "
            f"last paid {updated.last_paid_date}"
        )
        return updated.schedule_state()
