"""Sample data generators for personal finance records."""

import random
from datetime import timedelta
from decimal import Decimal
from typing import Iterator

from fin_tracker.generators.base import BaseGenerator
from fin_tracker.models.finance import (
    CreditCard,
    Emi,
    Expense,
    ExpenseCategory,
    Income,
    IncomeCategory,
    IncomeFrequency,
)


class CreditCardGenerator(BaseGenerator):
    """Generate credit cards."""

    ISSUERS = ["HDFC", "ICICI", "SBI", "Axis", "Kotak"]

    def generate(self, user_id: str) -> CreditCard:
        """Generate a credit card with nothing spent yet."""
        limit = self.amount(50_000, 500_000, step=10_000)
        return CreditCard(
            card_id=self.fake.uuid4(),
            user_id=user_id,
            name=f"{random.choice(self.ISSUERS)} {self.fake.credit_card_provider()}",
            limit=limit,
            used_amount=Decimal("0"),
            available_amount=limit,
            due_day=random.randint(1, 28),
            created_at=self.as_of,
        )


class EmiGenerator(BaseGenerator):
    """Generate EMIs at various stages of repayment."""

    PURPOSES = ["Home Loan", "Car Loan", "Personal Loan", "Phone", "Laptop", "Education Loan"]
    TERMS = [6, 9, 12, 18, 24, 36, 60]

    def generate(self, user_id: str, credit_card_id: str | None = None) -> Emi:
        """Generate an EMI that started up to two years before ``as_of``.

        The confirmed count lags the elapsed months by up to two installments
        so listings exercise both sides of the reconciliation.
        """
        total = random.choice(self.TERMS)
        months_ago = random.randint(0, 24)
        start = (self.as_of - timedelta(days=30 * months_ago)).date().replace(day=1)
        paid = max(0, min(total, months_ago - random.randint(0, 2)))

        return Emi(
            emi_id=self.fake.uuid4(),
            user_id=user_id,
            title=random.choice(self.PURPOSES),
            amount=self.amount(1_000, 50_000, step=100),
            due_day=random.randint(1, 28),
            start_date=start,
            total_installments=total,
            paid_installments=paid,
            remaining_installments=total - paid,
            credit_card_id=credit_card_id,
            created_at=self.as_of,
        )

    def generate_batch(self, user_id: str, count: int) -> Iterator[Emi]:
        """Generate several EMIs for one user."""
        for _ in range(count):
            yield self.generate(user_id)


class ExpenseGenerator(BaseGenerator):
    """Generate everyday expenses."""

    TITLES = ["Groceries", "Rent", "Electricity", "Internet", "Fuel", "Dining out", "Pharmacy"]

    def generate(self, user_id: str, credit_card_id: str | None = None) -> Expense:
        """Generate a paid expense from this month."""
        paid_at = self.as_of - timedelta(days=random.randint(0, self.as_of.day - 1))
        return Expense(
            expense_id=self.fake.uuid4(),
            user_id=user_id,
            title=random.choice(self.TITLES),
            amount=self.amount(100, 20_000),
            due_day=paid_at.day,
            category=ExpenseCategory.EXPENSE,
            is_recurring=random.random() < 0.3,
            is_paid=True,
            paid_at=paid_at,
            source="Credit Card" if credit_card_id else "Bank Account",
            destination=self.fake.company(),
            credit_card_id=credit_card_id,
            created_at=paid_at,
        )

    def generate_batch(self, user_id: str, count: int) -> Iterator[Expense]:
        """Generate several cash expenses for one user."""
        for _ in range(count):
            yield self.generate(user_id)


class IncomeGenerator(BaseGenerator):
    """Generate income sources."""

    def generate(self, user_id: str) -> Income:
        """Generate an income source, salaried most of the time."""
        category = random.choices(
            list(IncomeCategory),
            weights=[0.6, 0.15, 0.1, 0.05, 0.05, 0.05],
            k=1,
        )[0]
        recurring = category in (IncomeCategory.SALARY, IncomeCategory.RENTAL)

        return Income(
            income_id=self.fake.uuid4(),
            user_id=user_id,
            source=self.fake.company(),
            amount=self.amount(20_000, 300_000, step=1_000),
            is_recurring=recurring,
            frequency=IncomeFrequency.MONTHLY if recurring else IncomeFrequency.ONE_TIME,
            category=category,
            description=None,
            next_payment_date=(self.as_of + timedelta(days=30)).date() if recurring else None,
            created_at=self.as_of,
        )
