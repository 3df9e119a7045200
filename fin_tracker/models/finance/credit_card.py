"""Credit card model."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class CreditCard:
    """Credit card an EMI or expense can be charged against."""

    card_id: str
    user_id: str
    name: str
    limit: Decimal
    used_amount: Decimal = Decimal("0")
    available_amount: Decimal = Decimal("0")
    due_day: int = 1
    created_at: datetime | None = None
    updated_at: datetime | None = None
