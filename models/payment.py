"""
models/payment.py
-----------------
Domain model for a payment made against an obligation.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from utils.dates import format_date, parse_date

PAID = "paid"
OVERDUE = "overdue"
CANCELLED = "cancelled"

STATUSES = (PAID, OVERDUE, CANCELLED)


@dataclass
class Payment:
    """
    A single payment record.

    Attributes:
        id: Storage primary key (None for new records).
        obligation_id: Owning obligation.
        amount: Amount paid.
        paid_date: Day the payment was actually made.
        due_date: The due-date instance this payment satisfies.
        status: 'paid', 'overdue' or 'cancelled'.
        notes: Optional free text.
        created_at: Timestamp when the record was created.
    """
    obligation_id: int
    amount: Decimal
    paid_date: date
    due_date: date
    status: str = PAID  # 'paid' | 'overdue' | 'cancelled'
    notes: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def is_paid(self) -> bool:
        return self.status == PAID

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "obligationId": self.obligation_id,
            "amount": str(self.amount),
            "paidDate": format_date(self.paid_date),
            "dueDate": format_date(self.due_date),
            "status": self.status,
            "notes": self.notes,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Payment":
        created_at = data.get("createdAt")
        return cls(
            id=data.get("id"),
            obligation_id=data["obligationId"],
            amount=Decimal(str(data["amount"])),
            paid_date=parse_date(data["paidDate"]),
            due_date=parse_date(data["dueDate"]),
            status=data.get("status", PAID),
            notes=data.get("notes"),
            created_at=datetime.fromisoformat(created_at) if created_at else None,
        )

    def __str__(self) -> str:
        return f"#{self.id} {self.amount} for {format_date(self.due_date)} ({self.status})"
