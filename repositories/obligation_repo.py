"""
repositories/obligation_repo.py
-------------------------------
Data access layer for obligations.
All SQL queries related to the `obligations` table live here.
"""

from typing import Optional

from psycopg2 import sql

from db.connection import transaction
from models.obligation import Obligation
from repositories.base import OBLIGATION_UPDATABLE_FIELDS, check_fields
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = (
    "id, user_id, name, kind, amount, frequency, due_day, anchor_date, "
    "next_due_date, last_paid_date, is_active, reminder_days, category, notes, created_at"
)


class ObligationRepository:
    """Repository for CRUD operations on the obligations table."""

    # ── CREATE ────────────────────────────────────────────

    def add(self, obligation: Obligation) -> Obligation:
        """
        Insert a new obligation.

        Returns:
            The same object with its `id` and `created_at` populated.
        """
        query = """
            INSERT INTO obligations
                (user_id, name, kind, amount, frequency, due_day, anchor_date,
                 next_due_date, last_paid_date, is_active, reminder_days, category, notes)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING id, created_at;
        """
        with transaction("add obligation") as cur:
            cur.execute(query, (
                obligation.user_id, obligation.name, obligation.kind,
                obligation.amount, obligation.frequency, obligation.due_day,
                obligation.anchor_date, obligation.next_due_date,
                obligation.last_paid_date, obligation.is_active,
                obligation.reminder_days, obligation.category, obligation.notes,
            ))
            obligation.id, obligation.created_at = cur.fetchone()
        logger.info(f"Added obligation '{obligation.name}' #{obligation.id}")
        return obligation

    # ── READ ──────────────────────────────────────────────

    def get_by_id(self, obligation_id: int) -> Optional[Obligation]:
        with transaction(f"read obligation #{obligation_id}") as cur:
            cur.execute(f"SELECT {_COLUMNS} FROM obligations WHERE id = %s;", (obligation_id,))
            row = cur.fetchone()
        return self._row_to_obligation(row) if row else None

    def get_all(self, user_id: int, active_only: bool = False) -> list[Obligation]:
        """All obligations of a user, soonest due first, unscheduled last."""
        query = f"SELECT {_COLUMNS} FROM obligations WHERE user_id = %s"
        if active_only:
            query += " AND is_active = TRUE"
        query += " ORDER BY next_due_date ASC NULLS LAST, id ASC;"

        with transaction(f"list obligations of user {user_id}") as cur:
            cur.execute(query, (user_id,))
            rows = cur.fetchall()
        return [self._row_to_obligation(r) for r in rows]

    # ── UPDATE ────────────────────────────────────────────

    def update(self, obligation_id: int, fields: dict) -> Optional[Obligation]:
        """
        Set several columns in a single statement.

        Returns:
            The updated Obligation or None if no row matched.
        """
        check_fields(fields, OBLIGATION_UPDATABLE_FIELDS)
        if not fields:
            return self.get_by_id(obligation_id)

        names = list(fields)
        query = sql.SQL("UPDATE obligations SET {} WHERE id = %s RETURNING {};").format(
            sql.SQL(", ").join(
                sql.SQL("{} = %s").format(sql.Identifier(name)) for name in names
            ),
            sql.SQL(_COLUMNS),
        )
        with transaction(f"update obligation #{obligation_id}") as cur:
            cur.execute(query, [fields[name] for name in names] + [obligation_id])
            row = cur.fetchone()
        return self._row_to_obligation(row) if row else None

    # ── DELETE ────────────────────────────────────────────

    def delete(self, obligation_id: int) -> bool:
        """Delete an obligation; its payments go with it (ON DELETE CASCADE)."""
        with transaction(f"delete obligation #{obligation_id}") as cur:
            cur.execute("DELETE FROM obligations WHERE id = %s;", (obligation_id,))
            deleted = cur.rowcount > 0
        if deleted:
            logger.info(f"Deleted obligation #{obligation_id}")
        return deleted

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_obligation(row: tuple) -> Obligation:
        """Convert a database row tuple to an Obligation domain object."""
        (id_, user_id, name, kind, amount, frequency, due_day, anchor_date,
         next_due_date, last_paid_date, is_active, reminder_days, category,
         notes, created_at) = row
        return Obligation(
            id=id_,
            user_id=user_id,
            name=name,
            kind=kind,
            amount=amount,
            frequency=frequency,
            due_day=due_day,
            anchor_date=anchor_date,
            next_due_date=next_due_date,
            last_paid_date=last_paid_date,
            is_active=is_active,
            reminder_days=reminder_days,
            category=category,
            notes=notes,
            created_at=created_at,
        )
