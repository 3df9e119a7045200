"""Ledger operations as seen by a request handler.

Each method maps to one user action. Ownership is enforced by passing the
caller's ``user_id`` to every store lookup; the EMI engine supplies the
state transitions and the store makes them durable.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from fin_tracker.config import LedgerConfig
from fin_tracker.engine import (
    PaymentResult,
    apply_payment,
    calculate_monthly_budget,
    is_fully_paid,
    refresh_remaining,
)
from fin_tracker.exceptions import InvalidEntityStateError, StorageError, ValidationError
from fin_tracker.logging import get_logger
from fin_tracker.models.finance import (
    Emi,
    Expense,
    ExpenseCategory,
    Income,
    IncomeCategory,
    IncomeFrequency,
    MonthlyBudget,
    User,
)
from fin_tracker.store.base import LedgerStore

logger = get_logger(__name__)


def _validate_due_day(due_day: int) -> None:
    if isinstance(due_day, bool) or not isinstance(due_day, int) or not 1 <= due_day <= 31:
        raise ValidationError(f"due_day must be an integer between 1 and 31, got {due_day!r}")


def _validate_amount(amount: Decimal) -> None:
    if not isinstance(amount, Decimal) or not amount.is_finite() or amount <= 0:
        raise ValidationError(f"amount must be a positive Decimal, got {amount!r}")


class LedgerService:
    """User-facing ledger operations over a ``LedgerStore``.

    Parameters
    ----------
    store : LedgerStore
        Backend holding the user's records.
    config : LedgerConfig | None
        Payment flow settings. Defaults to ``LedgerConfig()``.
    """

    def __init__(self, store: LedgerStore, config: LedgerConfig | None = None) -> None:
        self.store = store
        self.config = config or LedgerConfig()

    def ensure_user(self, external_id: str, now: datetime) -> User:
        """Resolve the identity-provider subject to a user, creating it on first sight."""
        if not external_id:
            raise ValidationError("external_id is required")
        return self.store.get_or_create_user(external_id, now)

    def create_emi(
        self,
        user_id: str,
        title: str,
        amount: Decimal,
        due_day: int,
        start_date: date,
        total_installments: int,
        now: datetime,
        credit_card_id: str | None = None,
    ) -> Emi:
        """Register a new EMI with nothing paid yet."""
        if not title or not title.strip():
            raise ValidationError("title must not be empty")
        _validate_amount(amount)
        _validate_due_day(due_day)
        if isinstance(total_installments, bool) or not isinstance(total_installments, int) or total_installments <= 0:
            raise ValidationError(f"total_installments must be a positive integer, got {total_installments!r}")

        emi = Emi(
            emi_id=str(uuid.uuid4()),
            user_id=user_id,
            title=title.strip(),
            amount=amount,
            due_day=due_day,
            start_date=start_date,
            total_installments=total_installments,
            paid_installments=0,
            remaining_installments=total_installments,
            credit_card_id=credit_card_id,
            created_at=now,
            updated_at=now,
        )
        self.store.add_emi(emi)
        logger.info("Created EMI %s for user %s (%d installments)", emi.emi_id, user_id, total_installments)
        return emi

    def change_due_day(self, user_id: str, emi_id: str, due_day: int, now: datetime) -> Emi:
        """Correct the day of month an EMI falls due."""
        _validate_due_day(due_day)
        return self.store.update_emi_due_day(emi_id, user_id, due_day, now)

    def delete_emi(self, user_id: str, emi_id: str) -> None:
        """Delete an EMI owned by the user."""
        self.store.delete_emi(emi_id, user_id)
        logger.info("Deleted EMI %s for user %s", emi_id, user_id)

    def list_emis(self, user_id: str, now: datetime) -> list[Emi]:
        """EMIs with remaining counts projected to ``now``. Storage is not updated."""
        return [refresh_remaining(emi, now) for emi in self.store.list_emis(user_id)]

    def mark_emi_paid(self, user_id: str, emi_id: str, now: datetime) -> PaymentResult:
        """Confirm one installment of an EMI and record the ledger entry.

        Raises
        ------
        EntityNotFoundError
            If the EMI does not exist for this user.
        InvalidEntityStateError
            If the EMI lacks a title or amount, or is already completed while
            ``reject_completed_payments`` is enabled.
        StorageError
            If the write failed; neither record was persisted.
        """
        emi = self.store.load_emi(emi_id, user_id)

        if not emi.title or not emi.amount:
            logger.error("EMI %s is incomplete: title=%r amount=%r", emi_id, emi.title, emi.amount)
            raise InvalidEntityStateError(f"EMI {emi_id} is missing a title or amount")

        if self.config.reject_completed_payments and is_fully_paid(emi):
            raise InvalidEntityStateError(f"EMI {emi_id} is already fully paid")

        result = apply_payment(emi, now, source_label=self.config.payment_source_label)

        try:
            self.store.record_payment(result.emi, result.expense, expected_paid=emi.paid_installments)
        except StorageError:
            logger.error(
                "Failed to record payment for EMI %s",
                emi_id,
                extra={"context": {"user_id": user_id, "emi_id": emi_id}},
            )
            raise

        logger.info(
            "EMI %s paid: %d/%d installments, expense %s",
            emi_id,
            result.emi.paid_installments,
            result.emi.total_installments,
            result.expense.expense_id,
            extra={
                "context": {
                    "user_id": user_id,
                    "emi_id": emi_id,
                    "expense_id": result.expense.expense_id,
                    "amount": result.expense.amount,
                }
            },
        )
        return result

    def add_expense(
        self,
        user_id: str,
        title: str,
        amount: Decimal,
        now: datetime,
        category: ExpenseCategory = ExpenseCategory.EXPENSE,
        is_paid: bool = True,
        is_recurring: bool = False,
        source: str | None = None,
        destination: str | None = None,
        credit_card_id: str | None = None,
    ) -> Expense:
        """Record an expense entered by the user."""
        if not title or not title.strip():
            raise ValidationError("title must not be empty")
        _validate_amount(amount)

        expense = Expense(
            expense_id=str(uuid.uuid4()),
            user_id=user_id,
            title=title.strip(),
            amount=amount,
            due_day=now.day,
            category=category,
            is_recurring=is_recurring,
            is_paid=is_paid,
            paid_at=now if is_paid else None,
            source=source,
            destination=destination,
            credit_card_id=credit_card_id,
            created_at=now,
            updated_at=now,
        )
        self.store.add_expense(expense)
        return expense

    def add_income(
        self,
        user_id: str,
        source: str,
        amount: Decimal,
        now: datetime,
        frequency: IncomeFrequency | None = None,
        category: IncomeCategory | None = None,
        description: str | None = None,
        next_payment_date: date | None = None,
    ) -> Income:
        """Record an income source."""
        if not source or not source.strip():
            raise ValidationError("source must not be empty")
        _validate_amount(amount)

        income = Income(
            income_id=str(uuid.uuid4()),
            user_id=user_id,
            source=source.strip(),
            amount=amount,
            is_recurring=frequency not in (None, IncomeFrequency.ONE_TIME),
            frequency=frequency,
            category=category,
            description=description,
            next_payment_date=next_payment_date,
            created_at=now,
            updated_at=now,
        )
        self.store.add_income(income)
        return income

    def monthly_budget(self, user_id: str, now: datetime) -> MonthlyBudget:
        """Budget summary for ``now``'s month."""
        return calculate_monthly_budget(
            self.store.list_incomes(user_id),
            self.store.list_expenses(user_id),
            self.store.list_emis(user_id),
            now,
        )
