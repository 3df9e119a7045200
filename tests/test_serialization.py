"""Tests for JSON-ready record views."""

import json
from datetime import date, datetime
from decimal import Decimal
from typing import Callable

from fin_tracker.engine.emi import apply_payment
from fin_tracker.models.finance import Emi, ExpenseCategory
from fin_tracker.serialization import emi_view, payment_view, serialize_value, to_dict

MakeEmi = Callable[..., Emi]


class TestSerializeValue:
    """Tests for serialize_value."""

    def test_decimal(self) -> None:
        assert serialize_value(Decimal("5000.00")) == "5000.00"

    def test_enum(self) -> None:
        assert serialize_value(ExpenseCategory.CREDIT_CARD_PAYMENT) == "credit_card_payment"

    def test_datetime_and_date(self) -> None:
        assert serialize_value(datetime(2024, 1, 20, 10, 30)) == "2024-01-20T10:30:00"
        assert serialize_value(date(2024, 1, 20)) == "2024-01-20"

    def test_nested(self) -> None:
        value = {"amounts": [Decimal("1"), Decimal("2.5")], "when": date(2024, 1, 1)}
        assert serialize_value(value) == {"amounts": ["1", "2.5"], "when": "2024-01-01"}

    def test_passthrough(self) -> None:
        assert serialize_value(12) == 12
        assert serialize_value(None) is None


class TestToDict:
    """Tests for to_dict."""

    def test_dataclass(self, make_emi: MakeEmi) -> None:
        data = to_dict(make_emi())

        assert data["amount"] == "5000.00"
        assert data["start_date"] == "2024-01-01"
        assert data["last_payment_date"] is None
        json.dumps(data)

    def test_other_object(self) -> None:
        assert to_dict(42) == {"value": "42"}


class TestViews:
    """Tests for emi_view and payment_view."""

    def test_emi_view_adds_derived_fields(self, make_emi: MakeEmi) -> None:
        data = emi_view(make_emi(), datetime(2024, 3, 20))

        assert data["remaining_installments"] == 9
        assert data["status"] == "ACTIVE"
        assert data["next_due_date"] == "2024-04-15"

    def test_payment_view(self, make_emi: MakeEmi, now: datetime) -> None:
        result = apply_payment(make_emi(), now, expense_id="exp-001")
        data = payment_view(result)

        assert data["paid_installments"] == 1
        assert data["remaining_installments"] == 11
        assert data["expense_created"] is True
        assert data["expense_id"] == "exp-001"
        json.dumps(data)
