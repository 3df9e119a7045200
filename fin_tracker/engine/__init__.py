"""EMI reconciliation and budgeting logic. Pure functions, no I/O."""

from fin_tracker.engine.budget import calculate_monthly_budget, is_cash_expense
from fin_tracker.engine.emi import (
    PaymentResult,
    apply_payment,
    effective_paid,
    emi_status,
    is_active,
    is_fully_paid,
    is_outstanding_this_month,
    next_due_date,
    project_remaining,
    refresh_remaining,
)

__all__ = [
    "PaymentResult",
    "apply_payment",
    "calculate_monthly_budget",
    "effective_paid",
    "emi_status",
    "is_active",
    "is_cash_expense",
    "is_fully_paid",
    "is_outstanding_this_month",
    "next_due_date",
    "project_remaining",
    "refresh_remaining",
]
