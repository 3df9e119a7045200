"""Monthly budget summary model."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass
class MonthlyBudget:
    """Income minus cash expenses minus EMIs still due this month."""

    total_income: Decimal
    total_expenses: Decimal
    total_emis: Decimal
    balance: Decimal
    month: int
    year: int
