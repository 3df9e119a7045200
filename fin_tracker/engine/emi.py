"""EMI installment reconciliation and payment transitions.

Two counters describe an EMI's progress:

- ``paid_installments``: installments the user explicitly confirmed.
- the time projection: months elapsed since the start month, plus one once
  this month's due day has passed.

Listing reconciles them by taking the larger of the two, so a prepaid user
is never shown as behind and a user who has not confirmed recent payments
sees the elapsed-time estimate. Confirming a payment advances the confirmed
count by exactly one and never jumps ahead to match elapsed time.

All functions take ``now`` explicitly and perform no I/O.
"""

import dataclasses
import math
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from dateutil.relativedelta import relativedelta

from fin_tracker.logging import get_logger
from fin_tracker.models.finance import Emi, EmiStatus, Expense, ExpenseCategory

logger = get_logger(__name__)

DEFAULT_PAYMENT_SOURCE = "Bank Account"
PAYMENT_TITLE_SUFFIX = " - EMI Payment"


@dataclass
class PaymentResult:
    """Updated EMI and its companion ledger entry. Persist both or neither."""

    emi: Emi
    expense: Expense


def _as_int(value: Any) -> int | None:
    """Coerce a stored numeric field, returning None when unusable."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        if isinstance(value, Decimal) and not value.is_finite():
            return None
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return None


def months_between(start: date, end: date) -> int:
    """Whole calendar months from ``start``'s month to ``end``'s month."""
    delta = relativedelta(end.replace(day=1), start.replace(day=1))
    return delta.years * 12 + delta.months


def _fallback_remaining(emi: Emi, reason: str) -> int:
    total = _as_int(emi.total_installments)
    paid = _as_int(emi.paid_installments) or 0
    logger.warning(
        "EMI %s: %s; using confirmed installment count only",
        emi.emi_id,
        reason,
    )
    if total is None:
        return max(0, _as_int(emi.remaining_installments) or 0)
    return max(0, total - paid)


def _time_projected_paid(emi: Emi, total: int, due_day: int, now: datetime) -> int | None:
    start = _as_date(emi.start_date)
    if start is None:
        return None

    months_elapsed = max(0, months_between(start.replace(day=1), now.date().replace(day=1)))
    due_passed = 1 if now.day > due_day else 0
    return min(total, months_elapsed + due_passed)


def effective_paid(emi: Emi, now: datetime) -> int | None:
    """Larger of the confirmed count and the elapsed-time projection.

    Returns None when the record lacks the fields needed for a projection.
    """
    total = _as_int(emi.total_installments)
    due_day = _as_int(emi.due_day)
    if total is None or due_day is None:
        return None

    projected = _time_projected_paid(emi, total, due_day, now)
    if projected is None:
        return None

    paid = _as_int(emi.paid_installments) or 0
    return max(paid, projected)


def project_remaining(emi: Emi, now: datetime) -> int:
    """Installments still outstanding as of ``now``, for display.

    Never raises and never mutates ``emi``. Records with a missing or
    non-numeric term, due day or start date degrade to
    ``total_installments - paid_installments``.
    """
    if _as_int(emi.total_installments) is None:
        return _fallback_remaining(emi, "total_installments is not numeric")
    if _as_int(emi.due_day) is None:
        return _fallback_remaining(emi, "due_day is not numeric")

    paid = effective_paid(emi, now)
    if paid is None:
        return _fallback_remaining(emi, "start_date is not a date")

    return max(0, _as_int(emi.total_installments) - paid)


def refresh_remaining(emi: Emi, now: datetime) -> Emi:
    """Return a copy of ``emi`` with the projected remaining count."""
    return dataclasses.replace(emi, remaining_installments=project_remaining(emi, now))


def emi_status(emi: Emi, now: datetime) -> EmiStatus:
    """Lifecycle state of an EMI as of ``now``."""
    if project_remaining(emi, now) == 0:
        return EmiStatus.COMPLETED

    start = _as_date(emi.start_date)
    if start is not None and now.date() <= start:
        return EmiStatus.PENDING
    return EmiStatus.ACTIVE


def is_active(emi: Emi, now: datetime) -> bool:
    """True when the EMI has started and installments remain."""
    return emi_status(emi, now) == EmiStatus.ACTIVE


def is_fully_paid(emi: Emi) -> bool:
    """True when every installment has been confirmed.

    Uses the confirmed count only, not the time projection. Without a usable
    term the cached remaining count decides.
    """
    total = _as_int(emi.total_installments)
    if total is None:
        return (_as_int(emi.remaining_installments) or 0) <= 0
    return (_as_int(emi.paid_installments) or 0) >= total


def next_due_date(emi: Emi, now: datetime) -> date:
    """Next installment due date on or after today.

    A due day past the end of a short month falls on that month's last day.
    """
    due_day = min(max(_as_int(emi.due_day) or 1, 1), 31)
    month_start = now.date().replace(day=1)
    if now.day > due_day:
        return month_start + relativedelta(months=1, day=due_day)
    return month_start + relativedelta(day=due_day)


def paid_this_month(emi: Emi, now: datetime) -> bool:
    """True when the last confirmed payment falls in ``now``'s calendar month."""
    last = _as_date(emi.last_payment_date)
    return last is not None and (last.year, last.month) == (now.year, now.month)


def is_outstanding_this_month(emi: Emi, now: datetime) -> bool:
    """True when this month's installment still has to be paid.

    Requires installments remaining after projection, the due day not yet
    passed, and no confirmed payment earlier this month.
    """
    if project_remaining(emi, now) <= 0:
        return False

    due_day = _as_int(emi.due_day)
    if due_day is not None and now.day > due_day:
        return False

    return not paid_this_month(emi, now)


def apply_payment(
    emi: Emi,
    now: datetime,
    source_label: str = DEFAULT_PAYMENT_SOURCE,
    expense_id: str | None = None,
) -> PaymentResult:
    """Confirm one installment as paid.

    Advances the confirmed count by one, independent of the time projection.
    On a completed EMI the counts stay at the term and a ledger entry is
    still produced.

    Parameters
    ----------
    emi : Emi
        Current EMI record. Not modified.
    now : datetime
        Payment timestamp.
    source_label : str
        Account the money leaves from, recorded on the ledger entry.
    expense_id : str | None
        Id for the ledger entry; a UUID is generated when omitted.

    Returns
    -------
    PaymentResult
        The updated EMI and the ledger entry to persist with it.
    """
    total = _as_int(emi.total_installments)
    current = _as_int(emi.paid_installments) or 0
    paid = current + 1

    if total is None:
        logger.warning("EMI %s: total_installments is not numeric; decrementing cached count", emi.emi_id)
        remaining = max(0, (_as_int(emi.remaining_installments) or 0) - 1)
    else:
        # Never past the term, never below what was already confirmed
        paid = max(current, min(paid, total))
        remaining = max(0, total - paid)

    updated = dataclasses.replace(
        emi,
        paid_installments=paid,
        remaining_installments=remaining,
        last_payment_date=now,
        updated_at=now,
    )

    title = (emi.title or "").strip()
    expense = Expense(
        expense_id=expense_id or str(uuid.uuid4()),
        user_id=emi.user_id,
        title=f"{title}{PAYMENT_TITLE_SUFFIX}",
        amount=emi.amount,
        due_day=now.day,
        category=ExpenseCategory.EMI,
        is_recurring=False,
        is_paid=True,
        paid_at=now,
        source=source_label,
        destination=title,
        created_at=now,
        updated_at=now,
    )

    return PaymentResult(emi=updated, expense=expense)
