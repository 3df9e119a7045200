"""Domain models for the finance tracker."""

from fin_tracker.models.finance import CreditCard, Emi, Expense, Income, MonthlyBudget, User

__all__ = ["CreditCard", "Emi", "Expense", "Income", "MonthlyBudget", "User"]
