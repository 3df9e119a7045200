"""Ledger stores: the storage contract and its backends."""

from fin_tracker.store.base import LedgerStore
from fin_tracker.store.memory import InMemoryLedgerStore

__all__ = ["InMemoryLedgerStore", "LedgerStore"]
