"""Seedable sample data generators."""

from fin_tracker.generators.finance import (
    CreditCardGenerator,
    EmiGenerator,
    ExpenseGenerator,
    IncomeGenerator,
)

__all__ = [
    "CreditCardGenerator",
    "EmiGenerator",
    "ExpenseGenerator",
    "IncomeGenerator",
]
