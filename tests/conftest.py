"""Shared fixtures: in-memory storage and a fixed clock."""

from datetime import date

import pytest

from repositories.memory_repo import InMemoryStorage
from services.obligation_service import ObligationService
from services.payment_service import PaymentService


class FixedClock:
    """Callable returning a settable 'today'."""

    def __init__(self, today: date):
        self.today = today

    def __call__(self) -> date:
        return self.today


@pytest.fixture
def clock():
    return FixedClock(date(2024, 1, 1))


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def obligations(storage, clock):
    return ObligationService(storage, today_provider=clock)


@pytest.fixture
def payments(storage, clock):
    return PaymentService(storage, today_provider=clock)


@pytest.fixture
def quarterly(obligations):
    """Quarterly obligation phased from March, due on the 10th."""
    return obligations.create_obligation(
        user_id=1,
        name="Index fund",
        amount="300",
        frequency="quarterly",
        due_day=10,
        anchor_date=date(2024, 3, 10),
        kind="investment",
    )
