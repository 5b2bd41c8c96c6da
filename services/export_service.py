"""
services/export_service.py
---------------------------
Exports obligations and payments as JSON, CSV and Excel, and imports
a JSON export back.
"""

import io
from datetime import date, datetime, timezone
from decimal import InvalidOperation
from typing import Callable, Optional

import pandas as pd

from models.obligation import KINDS, Obligation
from models.payment import Payment
from repositories.base import ScheduleStorage
from repositories.postgres_storage import PostgresStorage
from services.schedule_reconciler import ScheduleReconciler
from services.validation import (
    validate_amount,
    validate_reminder_days,
    validate_schedule,
    validate_status,
)
from utils.dates import format_date, utc_today
from utils.errors import ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)

class ExportService:
    """Generates downloadable reports and full-data backups."""

    def __init__(
        self,
        storage: Optional[ScheduleStorage] = None,
        today_provider: Callable[[], date] = utc_today,
    ):
        self.storage = storage or PostgresStorage()
        self.reconciler = ScheduleReconciler(self.storage, today_provider)

    def _collect(self, user_id: int) -> tuple[list[Obligation], list[Payment]]:
        obligations = self.storage.get_obligations(user_id, active_only=False)
        payments: list[Payment] = []
        for ob in obligations:
            payments.extend(self.storage.get_payments_for_obligation(ob.id))
        return obligations, payments

    # ── JSON ──────────────────────────────────────────────

    def export_json(self, user_id: int) -> dict:
        """
        Full backup of a user's obligations and payments.

        Returns:
            Dict with ``exportDate``, ``obligations`` and ``payments``;
            all dates are ``YYYY-MM-DD`` strings.
        """
        obligations, payments = self._collect(user_id)
        logger.info(
            f"Exported {len(obligations)} obligations and {len(payments)} payments for user {user_id}"
        )
        return {
            "exportDate": datetime.now(timezone.utc).isoformat(),
            "obligations": [ob.to_dict() for ob in obligations],
            "payments": [p.to_dict() for p in payments],
        }

    def import_json(self, user_id: int, data: dict) -> dict:
        """
        Load a JSON backup for a user.

        Imported obligations get new ids; payments are re-linked to them.
        The stored ``nextDueDate`` / ``lastPaidDate`` are ignored and
        re-derived from the imported payments.

        Every record is parsed and validated before anything is written,
        so a rejected import leaves storage untouched.

        Returns:
            Dict with the number of imported obligations and payments.

        Raises:
            ValidationError: If a record is malformed.
        """
        obligations, payments = self._parse_import(user_id, data)

        id_map: dict = {}
        imported: list[Obligation] = []
        try:
            for old_id, ob in obligations:
                saved = self.storage.add_obligation(ob)
                id_map[old_id] = saved.id
                imported.append(saved)
            for old_obligation_id, p in payments:
                p.obligation_id = id_map[old_obligation_id]
                self.storage.add_payment(p)
        except Exception:
            logger.error(f"Import for user {user_id} failed; removing {len(imported)} partial obligations")
            for ob in imported:
                self.storage.delete_obligation(ob.id)
            raise

        for ob in imported:
            self.reconciler.recompute(ob)

        logger.info(f"Imported {len(imported)} obligations and {len(payments)} payments for user {user_id}")
        return {"obligations": len(imported), "payments": len(payments)}

    @staticmethod
    def _parse_import(
        user_id: int, data: dict
    ) -> tuple[list[tuple[object, Obligation]], list[tuple[object, Payment]]]:
        """Turn raw backup records into unsaved models, keyed by their exported ids."""
        obligations: list[tuple[object, Obligation]] = []
        payments: list[tuple[object, Payment]] = []
        try:
            for raw in data.get("obligations", []):
                ob = Obligation.from_dict({**raw, "userId": user_id})
                ob.amount = validate_amount(ob.amount)
                ob.due_day = validate_schedule(ob.frequency, ob.due_day)
                ob.reminder_days = validate_reminder_days(ob.reminder_days)
                if ob.kind not in KINDS:
                    raise ValidationError(f"Unknown obligation kind: {ob.kind!r}")
                old_id = ob.id
                ob.id, ob.created_at = None, None
                ob.next_due_date, ob.last_paid_date = None, None
                obligations.append((old_id, ob))

            known_ids = {old_id for old_id, _ in obligations}
            for raw in data.get("payments", []):
                old_obligation_id = raw.get("obligationId")
                if old_obligation_id not in known_ids:
                    logger.warning(f"Skipping payment {raw.get('id')} of unknown obligation")
                    continue
                p = Payment.from_dict(raw)
                p.amount = validate_amount(p.amount)
                validate_status(p.status)
                if p.paid_date is None or p.due_date is None:
                    raise ValidationError(f"Payment {raw.get('id')} needs both paidDate and dueDate")
                p.id, p.created_at = None, None
                payments.append((old_obligation_id, p))
        except ValidationError:
            raise
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            raise ValidationError(f"Malformed import data: {e}") from e
        return obligations, payments

    # ── Spreadsheets ──────────────────────────────────────

    @staticmethod
    def _payment_rows(obligations: list[Obligation], payments: list[Payment]) -> list[dict]:
        names = {ob.id: ob.name for ob in obligations}
        rows = [
            {
                "Obligation": names.get(p.obligation_id, ""),
                "Due date": format_date(p.due_date),
                "Paid date": format_date(p.paid_date),
                "Amount": float(p.amount),
                "Status": p.status,
                "Notes": p.notes or "",
            }
            for p in payments
        ]
        return sorted(rows, key=lambda r: (r["Due date"], r["Obligation"]))

    @staticmethod
    def _obligation_rows(obligations: list[Obligation]) -> list[dict]:
        return [
            {
                "Name": ob.name,
                "Kind": ob.kind,
                "Amount": float(ob.amount),
                "Frequency": ob.frequency,
                "Due day": ob.due_day,
                "Next due": format_date(ob.next_due_date) or "",
                "Last paid": format_date(ob.last_paid_date) or "",
                "Active": ob.is_active,
            }
            for ob in obligations
        ]

    def export_payments_csv(self, user_id: int) -> io.BytesIO:
        """
        Export every payment of a user as CSV.

        Returns:
            A BytesIO buffer containing the CSV data.
        """
        obligations, payments = self._collect(user_id)
        rows = self._payment_rows(obligations, payments)

        df = pd.DataFrame(rows, columns=["Obligation", "Due date", "Paid date", "Amount", "Status", "Notes"])
        buffer = io.BytesIO()
        df.to_csv(buffer, index=False, encoding="utf-8-sig")
        buffer.seek(0)
        logger.info(f"Exported {len(rows)} payments as CSV for user {user_id}")
        return buffer

    def export_excel(self, user_id: int) -> io.BytesIO:
        """
        Export obligations and payments as an Excel (.xlsx) workbook.

        Sheets: Obligations, Payments and (when any payment is paid) a
        Summary of paid totals per obligation.
        """
        obligations, payments = self._collect(user_id)
        payment_rows = self._payment_rows(obligations, payments)

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            pd.DataFrame(self._obligation_rows(obligations)).to_excel(
                writer, sheet_name="Obligations", index=False
            )
            payments_df = pd.DataFrame(payment_rows)
            payments_df.to_excel(writer, sheet_name="Payments", index=False)

            paid = pd.DataFrame(
                [{"obligation_id": p.obligation_id, "Total paid": float(p.amount)}
                 for p in payments if p.is_paid()],
                columns=["obligation_id", "Total paid"],
            )
            if not paid.empty:
                # One row per obligation id; names may repeat.
                names = {ob.id: ob.name for ob in obligations}
                summary = paid.groupby("obligation_id", sort=False)["Total paid"].sum().reset_index()
                summary.insert(0, "Obligation", summary["obligation_id"].map(names))
                summary.drop(columns="obligation_id").to_excel(writer, sheet_name="Summary", index=False)

        buffer.seek(0)
        logger.info(f"Exported {len(obligations)} obligations as Excel for user {user_id}")
        return buffer
