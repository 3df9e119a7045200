"""Personal finance tracker: EMI ledger engine, budgeting and storage."""

__version__ = "0.1.0"
