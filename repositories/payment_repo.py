"""
repositories/payment_repo.py
----------------------------
Data access layer for payments.
All SQL queries related to the `payments` table live here.
"""

from typing import Optional

from psycopg2 import sql

from db.connection import transaction
from models.payment import Payment
from repositories.base import PAYMENT_UPDATABLE_FIELDS, check_fields
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = "id, obligation_id, amount, paid_date, due_date, status, notes, created_at"


class PaymentRepository:
    """Repository for CRUD operations on the payments table."""

    # ── CREATE ────────────────────────────────────────────

    def add(self, payment: Payment) -> Payment:
        """Insert a payment and populate its `id` and `created_at`."""
        query = """
            INSERT INTO payments (obligation_id, amount, paid_date, due_date, status, notes)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING id, created_at;
        """
        with transaction("add payment") as cur:
            cur.execute(query, (
                payment.obligation_id, payment.amount, payment.paid_date,
                payment.due_date, payment.status, payment.notes,
            ))
            payment.id, payment.created_at = cur.fetchone()
        logger.info(f"Added payment #{payment.id} for obligation #{payment.obligation_id}")
        return payment

    # ── READ ──────────────────────────────────────────────

    def get_by_id(self, payment_id: int) -> Optional[Payment]:
        with transaction(f"read payment #{payment_id}") as cur:
            cur.execute(f"SELECT {_COLUMNS} FROM payments WHERE id = %s;", (payment_id,))
            row = cur.fetchone()
        return Payment(*self._reorder(row)) if row else None

    def get_for_obligation(self, obligation_id: int) -> list[Payment]:
        """All payments of one obligation, latest due date first."""
        query = f"""
            SELECT {_COLUMNS} FROM payments
            WHERE obligation_id = %s
            ORDER BY due_date DESC, id DESC;
        """
        with transaction(f"list payments of obligation #{obligation_id}") as cur:
            cur.execute(query, (obligation_id,))
            rows = cur.fetchall()
        return [Payment(*self._reorder(r)) for r in rows]

    # ── UPDATE ────────────────────────────────────────────

    def update(self, payment_id: int, fields: dict) -> Optional[Payment]:
        check_fields(fields, PAYMENT_UPDATABLE_FIELDS)
        if not fields:
            return self.get_by_id(payment_id)

        names = list(fields)
        query = sql.SQL("UPDATE payments SET {} WHERE id = %s RETURNING {};").format(
            sql.SQL(", ").join(
                sql.SQL("{} = %s").format(sql.Identifier(name)) for name in names
            ),
            sql.SQL(_COLUMNS),
        )
        with transaction(f"update payment #{payment_id}") as cur:
            cur.execute(query, [fields[name] for name in names] + [payment_id])
            row = cur.fetchone()
        return Payment(*self._reorder(row)) if row else None

    # ── DELETE ────────────────────────────────────────────

    def delete(self, payment_id: int) -> bool:
        with transaction(f"delete payment #{payment_id}") as cur:
            cur.execute("DELETE FROM payments WHERE id = %s;", (payment_id,))
            deleted = cur.rowcount > 0
        if deleted:
            logger.info(f"Deleted payment #{payment_id}")
        return deleted

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _reorder(row: tuple) -> tuple:
        """Row in column order -> Payment positional field order (id last)."""
        id_, obligation_id, amount, paid_date, due_date, status, notes, created_at = row
        return obligation_id, amount, paid_date, due_date, status, notes, id_, created_at
