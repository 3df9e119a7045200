"""Personal finance domain models."""

from fin_tracker.models.finance.budget import MonthlyBudget
from fin_tracker.models.finance.credit_card import CreditCard
from fin_tracker.models.finance.emi import Emi
from fin_tracker.models.finance.enums import (
    EmiStatus,
    ExpenseCategory,
    IncomeCategory,
    IncomeFrequency,
)
from fin_tracker.models.finance.expense import Expense
from fin_tracker.models.finance.income import Income
from fin_tracker.models.finance.user import User

__all__ = [
    "CreditCard",
    "Emi",
    "EmiStatus",
    "Expense",
    "ExpenseCategory",
    "Income",
    "IncomeCategory",
    "IncomeFrequency",
    "MonthlyBudget",
    "User",
]
