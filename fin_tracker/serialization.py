"""JSON-ready views of ledger records."""

from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from fin_tracker.engine.emi import PaymentResult, emi_status, next_due_date, project_remaining
from fin_tracker.models.finance import Emi


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output."""
    if isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif is_dataclass(value) and not isinstance(value, type):
        return to_dict(value)
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return value


def to_dict(obj: Any) -> dict[str, Any]:
    """Convert a record (dataclass or dict) to a JSON-ready dict."""
    if is_dataclass(obj):
        return {f.name: serialize_value(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, dict):
        return {k: serialize_value(v) for k, v in obj.items()}
    return {"value": str(obj)}


def emi_view(emi: Emi, now: datetime) -> dict[str, Any]:
    """EMI as shown in a listing: projected remaining count plus derived fields."""
    data = to_dict(emi)
    data["remaining_installments"] = project_remaining(emi, now)
    data["status"] = emi_status(emi, now).value
    data["next_due_date"] = next_due_date(emi, now).isoformat()
    return data


def payment_view(result: PaymentResult) -> dict[str, Any]:
    """Response body for a confirmed payment."""
    data = to_dict(result.emi)
    data["expense_created"] = True
    data["expense_id"] = result.expense.expense_id
    return data
