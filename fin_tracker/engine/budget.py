"""Monthly budget summary computed from a user's records."""

from datetime import datetime
from decimal import Decimal
from typing import Iterable

from fin_tracker.engine.emi import is_outstanding_this_month
from fin_tracker.models.finance import Emi, Expense, ExpenseCategory, Income, MonthlyBudget


def is_cash_expense(expense: Expense) -> bool:
    """True when the entry reduces the cash or bank balance.

    Card-charged entries hit the card's balance instead; transfers move money
    between the user's own accounts.
    """
    return expense.credit_card_id is None and expense.category != ExpenseCategory.TRANSFER


def calculate_monthly_budget(
    incomes: Iterable[Income],
    expenses: Iterable[Expense],
    emis: Iterable[Emi],
    now: datetime,
) -> MonthlyBudget:
    """Summarise income, cash expenses and EMIs still due in ``now``'s month.

    An EMI confirmed paid this month already appears as an EMI ledger entry,
    so it is excluded from the outstanding EMI total.
    """
    total_income = sum((i.amount for i in incomes), Decimal("0"))
    total_expenses = sum((e.amount for e in expenses if is_cash_expense(e)), Decimal("0"))
    total_emis = sum(
        (emi.amount for emi in emis if is_outstanding_this_month(emi, now)),
        Decimal("0"),
    )

    return MonthlyBudget(
        total_income=total_income,
        total_expenses=total_expenses,
        total_emis=total_emis,
        balance=total_income - total_expenses - total_emis,
        month=now.month,
        year=now.year,
    )
