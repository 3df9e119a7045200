"""Pytest configuration and fixtures."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable

import pytest

from fin_tracker.models.finance import CreditCard, Emi, User
from fin_tracker.store.memory import InMemoryLedgerStore


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def sample_user_id() -> str:
    """Sample user ID."""
    return "user-test-001"


@pytest.fixture
def other_user_id() -> str:
    """A second user, for ownership checks."""
    return "user-test-002"


@pytest.fixture
def sample_card_id() -> str:
    """Sample credit card ID."""
    return "card-test-001"


@pytest.fixture
def now() -> datetime:
    """Fixed "now" after the due day of the sample EMI."""
    return datetime(2024, 1, 20, 10, 30)


@pytest.fixture
def make_emi(sample_user_id: str) -> Callable[..., Emi]:
    """Factory for EMIs; defaults to a fresh 12-month loan due on the 15th."""

    def _make(**overrides: Any) -> Emi:
        values: dict[str, Any] = {
            "emi_id": "emi-test-001",
            "user_id": sample_user_id,
            "title": "Car Loan",
            "amount": Decimal("5000.00"),
            "due_day": 15,
            "start_date": date(2024, 1, 1),
            "total_installments": 12,
            "paid_installments": 0,
            "remaining_installments": 12,
        }
        values.update(overrides)
        return Emi(**values)

    return _make


@pytest.fixture
def store(sample_user_id: str, other_user_id: str, sample_card_id: str) -> InMemoryLedgerStore:
    """Store with two users; the first owns a credit card."""
    store = InMemoryLedgerStore()
    store.add_user(User(user_id=sample_user_id, external_id="idp|alice"))
    store.add_user(User(user_id=other_user_id, external_id="idp|bob"))
    store.add_credit_card(
        CreditCard(
            card_id=sample_card_id,
            user_id=sample_user_id,
            name="HDFC Regalia",
            limit=Decimal("100000"),
            available_amount=Decimal("100000"),
            due_day=5,
        )
    )
    return store
