"""Expense ledger entry model."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from fin_tracker.models.finance.enums import ExpenseCategory


@dataclass
class Expense:
    """Money leaving the user's tracked cash or bank balance."""

    expense_id: str
    user_id: str
    title: str
    amount: Decimal
    due_day: int  # Day of month (1-31)
    category: ExpenseCategory = ExpenseCategory.EXPENSE
    is_recurring: bool = False
    is_paid: bool = False
    paid_at: datetime | None = None
    source: str | None = None
    destination: str | None = None
    credit_card_id: str | None = None  # Charged to a card rather than cash
    created_at: datetime | None = None
    updated_at: datetime | None = None
