"""Tests for EMI reconciliation and payment transitions."""

import dataclasses
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Callable

import pytest

from fin_tracker.engine.emi import (
    PaymentResult,
    apply_payment,
    effective_paid,
    emi_status,
    is_active,
    is_fully_paid,
    is_outstanding_this_month,
    months_between,
    next_due_date,
    project_remaining,
    refresh_remaining,
)
from fin_tracker.models.finance import Emi, EmiStatus, ExpenseCategory

MakeEmi = Callable[..., Emi]


class TestMonthsBetween:
    """Tests for calendar month arithmetic."""

    def test_same_month(self) -> None:
        assert months_between(date(2024, 1, 1), date(2024, 1, 31)) == 0

    def test_across_year_boundary(self) -> None:
        assert months_between(date(2023, 11, 1), date(2024, 2, 1)) == 3

    def test_negative_when_end_is_earlier(self) -> None:
        assert months_between(date(2024, 3, 1), date(2024, 1, 1)) == -2

    def test_ignores_day_of_month(self) -> None:
        assert months_between(date(2024, 1, 31), date(2025, 3, 1)) == 14


class TestProjectRemaining:
    """Tests for the display-time remaining count."""

    def test_before_first_due_day(self, make_emi: MakeEmi) -> None:
        """Nothing elapsed and the due day has not passed."""
        emi = make_emi()
        assert project_remaining(emi, datetime(2024, 1, 10)) == 12

    def test_after_first_due_day(self, make_emi: MakeEmi) -> None:
        """The current month counts once its due day has passed."""
        emi = make_emi()
        assert project_remaining(emi, datetime(2024, 1, 20)) == 11

    def test_on_due_day_not_yet_passed(self, make_emi: MakeEmi) -> None:
        emi = make_emi()
        assert project_remaining(emi, datetime(2024, 1, 15, 23, 59)) == 12

    def test_behind_schedule_uses_time_projection(self, make_emi: MakeEmi) -> None:
        """Four months elapsed plus this month's passed due day beat three confirmations."""
        emi = make_emi(paid_installments=3, remaining_installments=9)
        now = datetime(2024, 5, 20)

        assert effective_paid(emi, now) == 5
        assert project_remaining(emi, now) == 12 - 5

    def test_prepaid_keeps_confirmed_count(self, make_emi: MakeEmi) -> None:
        emi = make_emi(paid_installments=6, remaining_installments=6)
        assert project_remaining(emi, datetime(2024, 2, 10)) == 6

    def test_projection_capped_at_term(self, make_emi: MakeEmi) -> None:
        emi = make_emi(start_date=date(2020, 1, 1))
        assert project_remaining(emi, datetime(2024, 6, 20)) == 0

    def test_start_date_mid_month_counts_from_month_start(self, make_emi: MakeEmi) -> None:
        emi = make_emi(start_date=date(2024, 1, 28))
        assert project_remaining(emi, datetime(2024, 3, 10)) == 10

    def test_start_date_as_datetime(self, make_emi: MakeEmi) -> None:
        emi = make_emi(start_date=datetime(2024, 1, 1, 9, 0))
        assert project_remaining(emi, datetime(2024, 1, 20)) == 11

    def test_future_start_clamps_elapsed_months(self, make_emi: MakeEmi) -> None:
        emi = make_emi(start_date=date(2024, 6, 1))
        assert project_remaining(emi, datetime(2024, 1, 10)) == 12

    def test_numeric_string_fields_are_accepted(self, make_emi: MakeEmi) -> None:
        emi = make_emi(total_installments="12", due_day="15")
        assert project_remaining(emi, datetime(2024, 1, 20)) == 11

    def test_is_idempotent_and_does_not_mutate(self, make_emi: MakeEmi) -> None:
        emi = make_emi(paid_installments=2, remaining_installments=10)
        before = dataclasses.replace(emi)
        now = datetime(2024, 4, 20)

        first = project_remaining(emi, now)
        second = project_remaining(emi, now)

        assert first == second
        assert emi == before


class TestProjectRemainingFallback:
    """Tests for degraded computation on malformed records."""

    @pytest.mark.parametrize("due_day", [None, "abc", float("nan")])
    def test_bad_due_day_uses_confirmed_count(self, make_emi: MakeEmi, due_day: object) -> None:
        emi = make_emi(due_day=due_day, paid_installments=3)
        assert project_remaining(emi, datetime(2024, 6, 20)) == 9

    def test_bad_start_date_uses_confirmed_count(self, make_emi: MakeEmi) -> None:
        emi = make_emi(start_date=None, paid_installments=3)
        assert project_remaining(emi, datetime(2024, 6, 20)) == 9

    def test_missing_total_uses_cached_remaining(self, make_emi: MakeEmi) -> None:
        emi = make_emi(total_installments=None, remaining_installments=4)
        assert project_remaining(emi, datetime(2024, 6, 20)) == 4

    def test_fallback_never_negative(self, make_emi: MakeEmi) -> None:
        emi = make_emi(due_day=None, paid_installments=15)
        assert project_remaining(emi, datetime(2024, 6, 20)) == 0

    def test_fallback_logs_warning(self, make_emi: MakeEmi, caplog: pytest.LogCaptureFixture) -> None:
        emi = make_emi(due_day="abc")

        with caplog.at_level(logging.WARNING, logger="fin_tracker.engine.emi"):
            project_remaining(emi, datetime(2024, 1, 20))

        assert "due_day is not numeric" in caplog.text
        assert "emi-test-001" in caplog.text

    def test_effective_paid_none_without_due_day(self, make_emi: MakeEmi) -> None:
        assert effective_paid(make_emi(due_day=None), datetime(2024, 1, 20)) is None


class TestRefreshRemaining:
    """Tests for listing-time refresh."""

    def test_returns_copy_with_projection(self, make_emi: MakeEmi) -> None:
        emi = make_emi()
        refreshed = refresh_remaining(emi, datetime(2024, 3, 20))

        assert refreshed.remaining_installments == 9
        assert refreshed.paid_installments == 0
        assert emi.remaining_installments == 12


class TestApplyPayment:
    """Tests for confirming an installment."""

    def test_first_payment(self, make_emi: MakeEmi, now: datetime) -> None:
        emi = make_emi()
        result = apply_payment(emi, now)

        assert isinstance(result, PaymentResult)
        assert result.emi.paid_installments == 1
        assert result.emi.remaining_installments == 11
        assert result.emi.last_payment_date == now
        assert result.emi.updated_at == now
        assert result.expense.amount == emi.amount
        assert result.expense.title.endswith("- EMI Payment")

    def test_ledger_entry_fields(self, make_emi: MakeEmi, now: datetime, sample_user_id: str) -> None:
        result = apply_payment(make_emi(), now)
        expense = result.expense

        assert expense.title == "Car Loan - EMI Payment"
        assert expense.user_id == sample_user_id
        assert expense.category == ExpenseCategory.EMI
        assert expense.is_paid is True
        assert expense.is_recurring is False
        assert expense.paid_at == now
        assert expense.due_day == 20
        assert expense.source == "Bank Account"
        assert expense.destination == "Car Loan"
        assert expense.credit_card_id is None

    def test_title_is_trimmed(self, make_emi: MakeEmi, now: datetime) -> None:
        result = apply_payment(make_emi(title="  Home Loan \n"), now)

        assert result.expense.title == "Home Loan - EMI Payment"
        assert result.expense.destination == "Home Loan"

    def test_custom_source_and_id(self, make_emi: MakeEmi, now: datetime) -> None:
        result = apply_payment(make_emi(), now, source_label="Savings", expense_id="exp-001")

        assert result.expense.source == "Savings"
        assert result.expense.expense_id == "exp-001"

    def test_generated_ids_are_unique(self, make_emi: MakeEmi, now: datetime) -> None:
        emi = make_emi()
        ids = {apply_payment(emi, now).expense.expense_id for _ in range(5)}
        assert len(ids) == 5

    def test_does_not_mutate_input(self, make_emi: MakeEmi, now: datetime) -> None:
        emi = make_emi()
        apply_payment(emi, now)

        assert emi.paid_installments == 0
        assert emi.remaining_installments == 12
        assert emi.last_payment_date is None

    def test_advances_by_one_regardless_of_projection(self, make_emi: MakeEmi) -> None:
        """A confirmation does not jump ahead to the elapsed-time estimate."""
        emi = make_emi(paid_installments=3, remaining_installments=9)
        result = apply_payment(emi, datetime(2024, 5, 20))

        assert result.emi.paid_installments == 4
        assert result.emi.remaining_installments == 8

    def test_completed_loan_clamps(self, make_emi: MakeEmi, now: datetime) -> None:
        emi = make_emi(paid_installments=12, remaining_installments=0)
        result = apply_payment(emi, now)

        assert result.emi.paid_installments == 12
        assert result.emi.remaining_installments == 0
        assert result.expense.amount == emi.amount

    def test_repeated_payments_stay_in_bounds(self, make_emi: MakeEmi, now: datetime) -> None:
        emi = make_emi()
        previous_paid = emi.paid_installments

        for _ in range(15):
            result = apply_payment(emi, now)
            emi = result.emi

            assert 0 <= emi.paid_installments <= emi.total_installments
            assert emi.remaining_installments == emi.total_installments - emi.paid_installments
            assert emi.paid_installments >= previous_paid
            assert result.expense.amount == Decimal("5000.00")
            previous_paid = emi.paid_installments

        assert emi.paid_installments == 12
        assert emi.remaining_installments == 0

    def test_missing_total_decrements_cached_count(self, make_emi: MakeEmi, now: datetime) -> None:
        emi = make_emi(total_installments=None, paid_installments=2, remaining_installments=5)
        result = apply_payment(emi, now)

        assert result.emi.paid_installments == 3
        assert result.emi.remaining_installments == 4

    def test_over_paid_record_keeps_its_count(self, make_emi: MakeEmi, now: datetime) -> None:
        """A stored count already past the term is never lowered."""
        emi = make_emi(paid_installments=14, remaining_installments=0)
        result = apply_payment(emi, now)

        assert result.emi.paid_installments == 14
        assert result.emi.remaining_installments == 0


class TestNextDueDate:
    """Tests for the next installment date."""

    def test_due_later_this_month(self, make_emi: MakeEmi) -> None:
        assert next_due_date(make_emi(), datetime(2024, 1, 10)) == date(2024, 1, 15)

    def test_due_today(self, make_emi: MakeEmi) -> None:
        assert next_due_date(make_emi(), datetime(2024, 1, 15, 18, 0)) == date(2024, 1, 15)

    def test_passed_rolls_to_next_month(self, make_emi: MakeEmi) -> None:
        assert next_due_date(make_emi(), datetime(2024, 1, 20)) == date(2024, 2, 15)

    def test_passed_in_december_rolls_year(self, make_emi: MakeEmi) -> None:
        assert next_due_date(make_emi(), datetime(2024, 12, 20)) == date(2025, 1, 15)

    def test_day_clamped_to_short_month(self, make_emi: MakeEmi) -> None:
        assert next_due_date(make_emi(due_day=31), datetime(2024, 2, 10)) == date(2024, 2, 29)

    def test_rollover_clamped_to_short_month(self, make_emi: MakeEmi) -> None:
        assert next_due_date(make_emi(due_day=30), datetime(2025, 1, 31)) == date(2025, 2, 28)

    def test_december_rollover_keeps_day(self, make_emi: MakeEmi) -> None:
        assert next_due_date(make_emi(due_day=31), datetime(2023, 12, 31, 9, 0)) == date(2023, 12, 31)

    def test_out_of_range_due_day_is_clamped(self, make_emi: MakeEmi) -> None:
        assert next_due_date(make_emi(due_day=45), datetime(2024, 4, 10)) == date(2024, 4, 30)


class TestEmiStatus:
    """Tests for lifecycle state."""

    def test_active(self, make_emi: MakeEmi, now: datetime) -> None:
        emi = make_emi()
        assert emi_status(emi, now) == EmiStatus.ACTIVE
        assert is_active(emi, now) is True

    def test_completed(self, make_emi: MakeEmi, now: datetime) -> None:
        emi = make_emi(paid_installments=12, remaining_installments=0)
        assert emi_status(emi, now) == EmiStatus.COMPLETED
        assert is_active(emi, now) is False

    def test_pending_before_start(self, make_emi: MakeEmi) -> None:
        emi = make_emi(start_date=date(2024, 3, 1))
        assert emi_status(emi, datetime(2024, 2, 10)) == EmiStatus.PENDING


class TestOutstandingThisMonth:
    """Tests for the budget inclusion filter."""

    def test_due_and_unpaid(self, make_emi: MakeEmi) -> None:
        assert is_outstanding_this_month(make_emi(), datetime(2024, 1, 10)) is True

    def test_due_day_passed(self, make_emi: MakeEmi) -> None:
        assert is_outstanding_this_month(make_emi(), datetime(2024, 1, 20)) is False

    def test_paid_earlier_this_month(self, make_emi: MakeEmi) -> None:
        emi = make_emi(last_payment_date=datetime(2024, 2, 3), paid_installments=1)
        assert is_outstanding_this_month(emi, datetime(2024, 2, 10)) is False

    def test_paid_last_month(self, make_emi: MakeEmi) -> None:
        emi = make_emi(last_payment_date=datetime(2024, 1, 14), paid_installments=1)
        assert is_outstanding_this_month(emi, datetime(2024, 2, 10)) is True

    def test_completed_loan(self, make_emi: MakeEmi) -> None:
        emi = make_emi(paid_installments=12, remaining_installments=0)
        assert is_outstanding_this_month(emi, datetime(2024, 2, 10)) is False


class TestIsFullyPaid:
    """Tests for the confirmed-count completion check."""

    def test_partially_paid(self, make_emi: MakeEmi) -> None:
        assert is_fully_paid(make_emi(paid_installments=11, remaining_installments=1)) is False

    def test_all_confirmed(self, make_emi: MakeEmi) -> None:
        assert is_fully_paid(make_emi(paid_installments=12, remaining_installments=0)) is True

    def test_ignores_time_projection(self, make_emi: MakeEmi) -> None:
        """A loan whose term has elapsed but is unconfirmed is not fully paid."""
        assert is_fully_paid(make_emi(start_date=date(2020, 1, 1))) is False

    @pytest.mark.parametrize("remaining, expected", [(3, False), (0, True), (None, True)])
    def test_missing_total_uses_cached_remaining(
        self, make_emi: MakeEmi, remaining: object, expected: bool
    ) -> None:
        emi = make_emi(total_installments=None, remaining_installments=remaining)
        assert is_fully_paid(emi) is expected
