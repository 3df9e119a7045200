"""User model."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    """Internal user record mapped from an identity-provider subject."""

    user_id: str
    external_id: str  # Opaque subject issued by the identity provider
    created_at: datetime | None = None
