"""
services/obligation_service.py
------------------------------
Business logic for creating, editing and querying obligations.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Optional

from config import DEFAULT_REMINDER_DAYS, UPCOMING_WINDOW_DAYS
from models.obligation import KIND_BILL, KINDS, Obligation
from repositories.base import OBLIGATION_UPDATABLE_FIELDS, ScheduleStorage, check_fields
from repositories.postgres_storage import PostgresStorage
from services.due_date_calculator import calculate_next_due, monthly_equivalent
from services.schedule_reconciler import ScheduleReconciler
from services.validation import (
    validate_amount,
    validate_reminder_days,
    validate_schedule,
)
from utils.dates import DateLike, to_utc_date, utc_today
from utils.errors import ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)

# Edits to any of these move the schedule.
_SCHEDULE_FIELDS = frozenset({"frequency", "due_day", "anchor_date", "is_active"})
# Derived fields are never accepted from callers.
_DERIVED_FIELDS = frozenset({"next_due_date", "last_paid_date"})


class ObligationService:
    """
    Handles all business logic for obligations.

    Responsibilities:
        - Validate and create obligations with an initial due date.
        - Re-derive the schedule when frequency, due day, anchor or
          active flag change.
        - Answer upcoming / overdue queries for dashboards and reminders.
    """

    def __init__(
        self,
        storage: Optional[ScheduleStorage] = None,
        today_provider: Callable[[], date] = utc_today,
    ):
        self.storage = storage or PostgresStorage()
        self.today_provider = today_provider
        self.reconciler = ScheduleReconciler(self.storage, today_provider)

    # ── Mutations ─────────────────────────────────────────

    def create_obligation(
        self,
        user_id: int,
        name: str,
        amount,
        frequency: str,
        due_day: Optional[int] = None,
        anchor_date: Optional[DateLike] = None,
        kind: str = KIND_BILL,
        reminder_days: int = DEFAULT_REMINDER_DAYS,
        category: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Obligation:
        """
        Validate and store a new obligation.

        Args:
            anchor_date: Schedule start; defaults to today (UTC).

        Returns:
            The saved obligation, its ``next_due_date`` set to the first
            instance on or after today.

        Raises:
            ValidationError: On any invalid input.
        """
        if not name or not name.strip():
            raise ValidationError("Name must not be empty")
        if kind not in KINDS:
            raise ValidationError(f"Unknown obligation kind: {kind!r}")

        today = self.today_provider()
        obligation = Obligation(
            user_id=user_id,
            name=name.strip(),
            amount=validate_amount(amount),
            frequency=frequency,
            due_day=validate_schedule(frequency, due_day),
            anchor_date=to_utc_date(anchor_date) if anchor_date is not None else today,
            kind=kind,
            reminder_days=validate_reminder_days(reminder_days),
            category=category,
            notes=notes,
        )
        obligation.next_due_date = calculate_next_due(obligation, today)

        saved = self.storage.add_obligation(obligation)
        logger.info(f"Created {saved.kind} '{saved.name}' #{saved.id}, next due {saved.next_due_date}")
        return saved

    def update_obligation(self, obligation_id: int, fields: dict) -> Optional[Obligation]:
        """
        Edit an obligation.

        ``next_due_date`` and ``last_paid_date`` cannot be set here; they
        are re-derived whenever a schedule field changes.

        Returns:
            The updated obligation or None if it does not exist.
        """
        check_fields(fields, OBLIGATION_UPDATABLE_FIELDS)
        derived = _DERIVED_FIELDS.intersection(fields)
        if derived:
            raise ValidationError(f"Derived field(s) cannot be set: {', '.join(sorted(derived))}")

        current = self.storage.get_obligation(obligation_id)
        if current is None:
            return None

        changes = dict(fields)
        if "amount" in changes:
            changes["amount"] = validate_amount(changes["amount"])
        if "name" in changes:
            if not changes["name"] or not changes["name"].strip():
                raise ValidationError("Name must not be empty")
            changes["name"] = changes["name"].strip()
        if "kind" in changes and changes["kind"] not in KINDS:
            raise ValidationError(f"Unknown obligation kind: {changes['kind']!r}")
        if "reminder_days" in changes:
            changes["reminder_days"] = validate_reminder_days(changes["reminder_days"])
        if "anchor_date" in changes:
            changes["anchor_date"] = to_utc_date(changes["anchor_date"])
        if "frequency" in changes or "due_day" in changes:
            frequency = changes.get("frequency", current.frequency)
            changes["due_day"] = validate_schedule(frequency, changes.get("due_day", current.due_day))

        updated = self.storage.update_obligation(obligation_id, changes)
        if updated is None:
            return None

        if any(getattr(current, f) != getattr(updated, f) for f in _SCHEDULE_FIELDS if f in changes):
            updated = self._reschedule(updated)
        return updated

    def delete_obligation(self, obligation_id: int) -> bool:
        """Delete an obligation and all of its payments."""
        deleted = self.storage.delete_obligation(obligation_id)
        if deleted:
            logger.info(f"Deleted obligation #{obligation_id}")
        return deleted

    # ── Queries ───────────────────────────────────────────

    def get_obligation(self, obligation_id: int) -> Optional[Obligation]:
        return self.storage.get_obligation(obligation_id)

    def list_obligations(self, user_id: int, active_only: bool = True) -> list[Obligation]:
        return self.storage.get_obligations(user_id, active_only=active_only)

    def get_upcoming(self, user_id: int, days_ahead: Optional[int] = None) -> list[Obligation]:
        """
        Active obligations due between today and ``today + days_ahead``.

        Args:
            days_ahead: Window length; when None each obligation's own
                ``reminder_days`` is used.
        """
        today = self.today_provider()
        upcoming = []
        for ob in self.storage.get_obligations(user_id, active_only=True):
            if ob.next_due_date is None:
                continue
            window = ob.reminder_days if days_ahead is None else days_ahead
            if today <= ob.next_due_date <= today + timedelta(days=window):
                upcoming.append(ob)
        return sorted(upcoming, key=lambda o: (o.next_due_date, o.id))

    def get_overdue(self, user_id: int) -> list[Obligation]:
        """Active obligations whose next due date has already passed."""
        today = self.today_provider()
        overdue = [
            ob for ob in self.storage.get_obligations(user_id, active_only=True)
            if ob.next_due_date is not None and ob.next_due_date < today
        ]
        return sorted(overdue, key=lambda o: (o.next_due_date, o.id))

    def dashboard_summary(self, user_id: int) -> dict:
        """Headline numbers for the dashboard."""
        active = self.storage.get_obligations(user_id, active_only=True)
        monthly_total = sum((monthly_equivalent(ob) for ob in active), Decimal("0"))
        return {
            "activeObligations": len(active),
            "upcomingPayments": len(self.get_upcoming(user_id, days_ahead=UPCOMING_WINDOW_DAYS)),
            "overduePayments": len(self.get_overdue(user_id)),
            "monthlyCommitment": str(monthly_total.quantize(Decimal("0.01"))),
        }

    # ── Helpers ───────────────────────────────────────────

    def _reschedule(self, obligation: Obligation) -> Obligation:
        """Re-derive schedule fields after a schedule-relevant edit."""
        if obligation.is_schedulable():
            self.reconciler.recompute(obligation)
        elif obligation.next_due_date is not None:
            self.storage.update_obligation(obligation.id, {"next_due_date": None})
        refreshed = self.storage.get_obligation(obligation.id)
        logger.info(f"Rescheduled obligation #{obligation.id}: next due {refreshed.next_due_date}")
        return refreshed
