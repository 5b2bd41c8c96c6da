"""
models/obligation.py
--------------------
Domain model for recurring obligations (investment contributions and bills).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from config import DEFAULT_REMINDER_DAYS
from utils.dates import format_date, parse_date, utc_today

MONTHLY = "monthly"
QUARTERLY = "quarterly"
HALF_YEARLY = "half_yearly"
YEARLY = "yearly"
ONE_TIME = "one_time"

FREQUENCIES = (MONTHLY, QUARTERLY, HALF_YEARLY, YEARLY, ONE_TIME)

KIND_INVESTMENT = "investment"
KIND_BILL = "bill"
KINDS = (KIND_INVESTMENT, KIND_BILL)


@dataclass(frozen=True)
class ScheduleState:
    """The two derived schedule fields of an obligation."""
    next_due_date: Optional[date]
    last_paid_date: Optional[date]


@dataclass
class Obligation:
    """
    Represents a recurring or one-time financial commitment.

    Attributes:
        id: Storage primary key (None for new records).
        user_id: Owner of the obligation.
        name: Friendly name (e.g., 'Rent', 'Index fund SIP').
        amount: Amount owed per occurrence.
        frequency: One of FREQUENCIES.
        due_day: Day of month the obligation falls on (1-31), None for one-time.
        anchor_date: Origin the recurrence phase is counted from.
        kind: 'investment' or 'bill'.
        next_due_date: Next occurrence still owed (derived).
        last_paid_date: Paid date of the latest paid instance (derived).
        is_active: Inactive obligations never have a next due date.
        reminder_days: How many days before the due date it counts as upcoming.
        category: Optional grouping label.
        notes: Optional free text.
        created_at: Timestamp when the record was created.
    """
    user_id: int
    name: str
    amount: Decimal
    frequency: str  # 'monthly' | 'quarterly' | 'half_yearly' | 'yearly' | 'one_time'
    due_day: Optional[int] = None
    anchor_date: date = field(default_factory=utc_today)
    kind: str = KIND_BILL
    next_due_date: Optional[date] = None
    last_paid_date: Optional[date] = None
    is_active: bool = True
    reminder_days: int = DEFAULT_REMINDER_DAYS
    category: Optional[str] = None
    notes: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def is_recurring(self) -> bool:
        """Returns True unless this is a one-time obligation."""
        return self.frequency != ONE_TIME

    def is_schedulable(self) -> bool:
        """Returns True if the obligation can produce a next due date."""
        return self.is_active and self.is_recurring() and self.due_day is not None

    def schedule_state(self) -> ScheduleState:
        return ScheduleState(self.next_due_date, self.last_paid_date)

    def to_dict(self) -> dict:
        """JSON-friendly representation with YYYY-MM-DD dates."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "kind": self.kind,
            "amount": str(self.amount),
            "frequency": self.frequency,
            "dueDay": self.due_day,
            "anchorDate": format_date(self.anchor_date),
            "nextDueDate": format_date(self.next_due_date),
            "lastPaidDate": format_date(self.last_paid_date),
            "isActive": self.is_active,
            "reminderDays": self.reminder_days,
            "category": self.category,
            "notes": self.notes,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Obligation":
        created_at = data.get("createdAt")
        return cls(
            id=data.get("id"),
            user_id=data["userId"],
            name=data["name"],
            kind=data.get("kind", KIND_BILL),
            amount=Decimal(str(data["amount"])),
            frequency=data["frequency"],
            due_day=data.get("dueDay"),
            anchor_date=parse_date(data.get("anchorDate")) or utc_today(),
            next_due_date=parse_date(data.get("nextDueDate")),
            last_paid_date=parse_date(data.get("lastPaidDate")),
            is_active=data.get("isActive", True),
            reminder_days=data.get("reminderDays", DEFAULT_REMINDER_DAYS),
            category=data.get("category"),
            notes=data.get("notes"),
            created_at=datetime.fromisoformat(created_at) if created_at else None,
        )

    def __str__(self) -> str:
        status = "active" if self.is_active else "paused"
        next_due = format_date(self.next_due_date) or "-"
        return f"[{status}] {self.name}: {self.amount} ({self.frequency}) - Next: {next_due}"
