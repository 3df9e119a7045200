"""Base class for the sample data generators."""

from __future__ import annotations

import random
from abc import ABC
from datetime import datetime
from decimal import Decimal

from faker import Faker


class BaseGenerator(ABC):
    """Shared Faker instance, seeding and reference time.

    Parameters
    ----------
    seed : int | None
        Seeds both Faker and ``random`` so a run can be replayed.
    locale : str
        Faker locale (default ``en_IN``; amounts are in rupees).
    as_of : datetime | None
        Reference "now" for generated dates. Defaults to the wall clock.
    """

    def __init__(
        self,
        seed: int | None = None,
        locale: str = "en_IN",
        as_of: datetime | None = None,
    ) -> None:
        self.fake = Faker(locale)
        self.as_of = as_of or datetime.now()
        if seed is not None:
            self.fake.seed_instance(seed)
            random.seed(seed)

    @staticmethod
    def amount(low: int, high: int, step: int = 1) -> Decimal:
        """Random whole-rupee amount in ``[low, high]`` rounded to ``step``."""
        return Decimal(random.randint(low // step, high // step) * step)
