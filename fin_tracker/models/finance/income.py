"""Income source model."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from fin_tracker.models.finance.enums import IncomeCategory, IncomeFrequency


@dataclass
class Income:
    """Income source."""

    income_id: str
    user_id: str
    source: str
    amount: Decimal
    is_recurring: bool = False
    frequency: IncomeFrequency | None = None
    category: IncomeCategory | None = None
    description: str | None = None
    next_payment_date: date | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
