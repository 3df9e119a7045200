"""EMI (fixed-installment loan) model."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal


@dataclass
class Emi:
    """Installment loan repaid in a fixed number of equal monthly installments.

    ``paid_installments`` is the authoritative count of installments the user
    confirmed. ``remaining_installments`` is a cached value recomputed on every
    write and refreshed from elapsed time when listed.
    """

    emi_id: str
    user_id: str
    title: str
    amount: Decimal  # Installment amount charged per month
    due_day: int  # Day of month (1-31)
    start_date: date
    total_installments: int
    paid_installments: int = 0
    remaining_installments: int = 0
    last_payment_date: datetime | None = None
    credit_card_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
