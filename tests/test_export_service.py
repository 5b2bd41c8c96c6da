"""Tests for JSON backup/restore and spreadsheet exports."""

from datetime import date

import pandas as pd
import pytest

from repositories.memory_repo import InMemoryStorage
from services.obligation_service import ObligationService
from services.export_service import ExportService
from utils.errors import ValidationError


@pytest.fixture
def exporter(storage, clock):
    return ExportService(storage, today_provider=clock)


@pytest.fixture
def history(payments, quarterly):
    payments.record_payment(quarterly.id, "300", date(2024, 3, 8), date(2024, 3, 10))
    payments.record_payment(quarterly.id, "300", date(2024, 6, 12), date(2024, 6, 10), status="overdue")
    return quarterly


@pytest.mark.unit
class TestJson:

    def test_dates_are_iso_strings(self, exporter, history):
        data = exporter.export_json(1)
        ob = data["obligations"][0]
        assert ob["anchorDate"] == "2024-03-10"
        assert ob["nextDueDate"] == "2024-06-10"
        assert ob["lastPaidDate"] == "2024-03-08"
        assert ob["amount"] == "300"
        assert {p["dueDate"] for p in data["payments"]} == {"2024-03-10", "2024-06-10"}

    def test_import_rederives_schedule(self, exporter, history, clock):
        data = exporter.export_json(1)
        data["obligations"][0]["nextDueDate"] = "1999-01-01"
        data["obligations"][0]["lastPaidDate"] = None

        target = InMemoryStorage()
        counts = ExportService(target, today_provider=clock).import_json(7, data)
        assert counts == {"obligations": 1, "payments": 2}

        [restored] = target.get_obligations(7)
        assert restored.next_due_date == date(2024, 6, 10)
        assert restored.last_paid_date == date(2024, 3, 8)
        assert len(target.get_payments_for_obligation(restored.id)) == 2

    def test_import_rejects_malformed_records(self, exporter):
        with pytest.raises(ValidationError):
            exporter.import_json(1, {"obligations": [{"name": "No amount", "frequency": "monthly"}]})

    def test_import_rejects_bad_frequency(self, exporter):
        record = {"name": "Bad", "amount": "5", "frequency": "daily", "dueDay": 1}
        with pytest.raises(ValidationError):
            exporter.import_json(1, {"obligations": [record]})

    def test_import_rejects_bad_date_string(self, exporter):
        record = {"id": 1, "name": "Rent", "amount": "800", "frequency": "monthly",
                  "dueDay": 15, "anchorDate": "2024-13-45"}
        with pytest.raises(ValidationError):
            exporter.import_json(1, {"obligations": [record]})


def rent_backup(payment_overrides: dict) -> dict:
    return {
        "obligations": [{"id": 10, "name": "Rent", "amount": "800", "frequency": "monthly",
                         "dueDay": 15, "anchorDate": "2024-01-15"}],
        "payments": [
            {"id": 1, "obligationId": 10, "amount": "800",
             "paidDate": "2024-01-14", "dueDate": "2024-01-15"},
            {"id": 2, "obligationId": 10, "amount": "800",
             "paidDate": "2024-02-14", "dueDate": "2024-02-15", **payment_overrides},
        ],
    }


class FailingPaymentStorage(InMemoryStorage):
    """Accepts obligations but refuses every payment write."""

    def add_payment(self, payment):
        raise RuntimeError("disk full")


@pytest.mark.unit
class TestImportAtomicity:

    @pytest.mark.parametrize("bad", [
        {"status": "pending"},
        {"amount": "-1"},
        {"dueDate": "not-a-date"},
        {"paidDate": None},
    ])
    def test_rejected_import_leaves_storage_unchanged(self, clock, bad):
        target = InMemoryStorage()
        existing = ObligationService(target, clock).create_obligation(
            1, "Gym", "40", "monthly", 5, date(2024, 1, 5)
        )
        before = target.get_obligations(1)

        with pytest.raises(ValidationError):
            ExportService(target, today_provider=clock).import_json(1, rent_backup(bad))

        assert target.get_obligations(1) == before
        assert [ob.id for ob in before] == [existing.id]
        assert target.get_payments_for_obligation(existing.id) == []

    def test_write_failure_removes_partial_obligations(self, clock):
        target = FailingPaymentStorage()
        with pytest.raises(RuntimeError):
            ExportService(target, today_provider=clock).import_json(1, rent_backup({}))
        assert target.get_obligations(1) == []

    def test_mixed_import_rebuilds_each_schedule(self, clock):
        data = {
            "obligations": [
                {"id": 1, "name": "Rent", "amount": "800", "frequency": "monthly",
                 "dueDay": 15, "anchorDate": "2024-01-15",
                 "nextDueDate": "2030-01-01", "lastPaidDate": "2030-01-01"},
                {"id": 2, "name": "Insurance", "amount": "90", "frequency": "quarterly",
                 "dueDay": 31, "anchorDate": "2024-03-31", "isActive": False},
                {"id": 3, "name": "Laptop", "amount": "900", "frequency": "one_time",
                 "anchorDate": "2024-01-05"},
                {"id": 4, "name": "Index fund", "amount": "300", "frequency": "quarterly",
                 "dueDay": 10, "anchorDate": "2024-03-10", "kind": "investment"},
            ],
            "payments": [
                {"id": 1, "obligationId": 1, "amount": "800",
                 "paidDate": "2024-02-14", "dueDate": "2024-02-15"},
                {"id": 2, "obligationId": 1, "amount": "800",
                 "paidDate": "2024-01-14", "dueDate": "2024-01-15"},
                {"id": 3, "obligationId": 2, "amount": "90",
                 "paidDate": "2024-03-30", "dueDate": "2024-03-31"},
                {"id": 4, "obligationId": 3, "amount": "900",
                 "paidDate": "2024-01-05", "dueDate": "2024-01-05"},
                {"id": 5, "obligationId": 4, "amount": "300",
                 "paidDate": "2024-03-12", "dueDate": "2024-03-10", "status": "overdue"},
                {"id": 6, "obligationId": 99, "amount": "1",
                 "paidDate": "2024-01-01", "dueDate": "2024-01-01"},
            ],
        }
        target = InMemoryStorage()
        counts = ExportService(target, today_provider=clock).import_json(1, data)
        assert counts == {"obligations": 4, "payments": 5}

        schedules = {ob.name: (ob.next_due_date, ob.last_paid_date) for ob in target.get_obligations(1)}
        assert schedules == {
            "Rent": (date(2024, 3, 15), date(2024, 2, 14)),
            "Insurance": (None, None),
            "Laptop": (None, None),
            "Index fund": (date(2024, 3, 10), None),
        }


@pytest.mark.unit
class TestSpreadsheets:

    def test_csv(self, exporter, history):
        df = pd.read_csv(exporter.export_payments_csv(1), encoding="utf-8-sig")
        assert list(df["Due date"]) == ["2024-03-10", "2024-06-10"]
        assert list(df["Status"]) == ["paid", "overdue"]

    def test_excel_sheets(self, exporter, history):
        sheets = pd.read_excel(exporter.export_excel(1), sheet_name=None)
        assert set(sheets) == {"Obligations", "Payments", "Summary"}
        summary = sheets["Summary"]
        assert summary.loc[0, "Obligation"] == "Index fund"
        assert summary.loc[0, "Total paid"] == 300

    def test_summary_keeps_same_named_obligations_apart(self, exporter, obligations, payments):
        first = obligations.create_obligation(1, "Insurance", "90", "monthly", 1, date(2024, 1, 1))
        second = obligations.create_obligation(1, "Insurance", "15", "monthly", 20, date(2024, 1, 20))
        payments.record_payment(first.id, "90", date(2024, 1, 1), date(2024, 1, 1))
        payments.record_payment(second.id, "15", date(2024, 1, 19), date(2024, 1, 20))

        summary = pd.read_excel(exporter.export_excel(1), sheet_name="Summary")
        assert list(summary["Obligation"]) == ["Insurance", "Insurance"]
        assert sorted(summary["Total paid"]) == [15, 90]
