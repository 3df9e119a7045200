"""In-memory ledger store with referential integrity."""

import dataclasses
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime

from fin_tracker.exceptions import (
    ConcurrentUpdateError,
    EntityNotFoundError,
    ReferentialIntegrityError,
)
from fin_tracker.models.finance import CreditCard, Emi, Expense, Income, User
from fin_tracker.store.base import LedgerStore


def _due_day_key(emi: Emi) -> tuple[int, int]:
    # Records with an unusable due day sort last instead of breaking the listing
    try:
        return (0, int(emi.due_day))
    except (TypeError, ValueError):
        return (1, 0)


@dataclass
class InMemoryLedgerStore(LedgerStore):
    """Dict-backed store for tests and demos.

    Records are copied on the way in and out so callers cannot change stored
    state without going through the store. A single lock serializes writes,
    which makes ``record_payment`` atomic and its compare-and-swap race-free.
    """

    # Primary entities
    users: dict[str, User] = field(default_factory=dict)
    emis: dict[str, Emi] = field(default_factory=dict)
    credit_cards: dict[str, CreditCard] = field(default_factory=dict)

    # Append-only records
    expenses: list[Expense] = field(default_factory=list)
    incomes: list[Income] = field(default_factory=list)

    # Relationship indexes
    _users_by_external_id: dict[str, str] = field(default_factory=dict)
    _user_emis: dict[str, list[str]] = field(default_factory=dict)
    _user_cards: dict[str, list[str]] = field(default_factory=dict)
    _user_expenses: dict[str, list[int]] = field(default_factory=dict)
    _user_incomes: dict[str, list[int]] = field(default_factory=dict)

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def get_or_create_user(self, external_id: str, now: datetime | None = None) -> User:
        """Return the user for ``external_id``, creating it if unseen."""
        with self._lock:
            user_id = self._users_by_external_id.get(external_id)
            if user_id is None:
                user = User(
                    user_id=str(uuid.uuid4()),
                    external_id=external_id,
                    created_at=now or datetime.now(),
                )
                self._register_user(user)
                user_id = user.user_id
            return dataclasses.replace(self.users[user_id])

    def add_user(self, user: User) -> None:
        """Add a user with a known id."""
        with self._lock:
            self._register_user(dataclasses.replace(user))

    def _register_user(self, user: User) -> None:
        self.users[user.user_id] = user
        self._users_by_external_id[user.external_id] = user.user_id
        self._user_emis[user.user_id] = []
        self._user_cards[user.user_id] = []
        self._user_expenses[user.user_id] = []
        self._user_incomes[user.user_id] = []

    def _check_user(self, user_id: str) -> None:
        if user_id not in self.users:
            raise ReferentialIntegrityError(f"User {user_id} not found")

    def _check_card(self, user_id: str, card_id: str | None) -> None:
        if card_id is None:
            return
        card = self.credit_cards.get(card_id)
        if card is None or card.user_id != user_id:
            raise ReferentialIntegrityError(f"Credit card {card_id} not found")

    def _owned_emi(self, emi_id: str, user_id: str) -> Emi:
        emi = self.emis.get(emi_id)
        if emi is None or emi.user_id != user_id:
            raise EntityNotFoundError(f"EMI {emi_id} not found")
        return emi

    def add_emi(self, emi: Emi) -> None:
        """Add an EMI to the store."""
        with self._lock:
            self._check_user(emi.user_id)
            self._check_card(emi.user_id, emi.credit_card_id)

            self.emis[emi.emi_id] = dataclasses.replace(emi)
            self._user_emis[emi.user_id].append(emi.emi_id)

    def load_emi(self, emi_id: str, user_id: str) -> Emi:
        """Load an EMI owned by ``user_id``."""
        with self._lock:
            return dataclasses.replace(self._owned_emi(emi_id, user_id))

    def list_emis(self, user_id: str) -> list[Emi]:
        """All EMIs of a user ordered by due day."""
        with self._lock:
            emi_ids = self._user_emis.get(user_id, [])
            emis = [dataclasses.replace(self.emis[eid]) for eid in emi_ids]
        return sorted(emis, key=_due_day_key)

    def update_emi_due_day(self, emi_id: str, user_id: str, due_day: int, now: datetime) -> Emi:
        """Correct an EMI's due day."""
        with self._lock:
            emi = self._owned_emi(emi_id, user_id)
            emi.due_day = due_day
            emi.updated_at = now
            return dataclasses.replace(emi)

    def delete_emi(self, emi_id: str, user_id: str) -> None:
        """Delete an EMI. Its ledger entries are kept."""
        with self._lock:
            self._owned_emi(emi_id, user_id)
            del self.emis[emi_id]
            self._user_emis[user_id].remove(emi_id)

    def add_expense(self, expense: Expense) -> None:
        """Add a ledger entry to the store."""
        with self._lock:
            self._insert_expense(expense)

    def _insert_expense(self, expense: Expense) -> None:
        self._check_user(expense.user_id)
        self._check_card(expense.user_id, expense.credit_card_id)

        idx = len(self.expenses)
        self.expenses.append(dataclasses.replace(expense))
        self._user_expenses[expense.user_id].append(idx)

    def list_expenses(self, user_id: str) -> list[Expense]:
        """All ledger entries of a user."""
        with self._lock:
            indices = self._user_expenses.get(user_id, [])
            return [dataclasses.replace(self.expenses[i]) for i in indices]

    def add_income(self, income: Income) -> None:
        """Add an income source to the store."""
        with self._lock:
            self._check_user(income.user_id)

            idx = len(self.incomes)
            self.incomes.append(dataclasses.replace(income))
            self._user_incomes[income.user_id].append(idx)

    def list_incomes(self, user_id: str) -> list[Income]:
        """All income sources of a user."""
        with self._lock:
            indices = self._user_incomes.get(user_id, [])
            return [dataclasses.replace(self.incomes[i]) for i in indices]

    def add_credit_card(self, card: CreditCard) -> None:
        """Add a credit card to the store."""
        with self._lock:
            self._check_user(card.user_id)

            self.credit_cards[card.card_id] = dataclasses.replace(card)
            self._user_cards[card.user_id].append(card.card_id)

    def list_credit_cards(self, user_id: str) -> list[CreditCard]:
        """All credit cards of a user."""
        with self._lock:
            card_ids = self._user_cards.get(user_id, [])
            return [dataclasses.replace(self.credit_cards[cid]) for cid in card_ids]

    def record_payment(self, emi: Emi, expense: Expense, expected_paid: int) -> None:
        """Store the updated EMI and its ledger entry under one lock."""
        with self._lock:
            current = self._owned_emi(emi.emi_id, emi.user_id)
            if current.paid_installments != expected_paid:
                raise ConcurrentUpdateError(
                    f"EMI {emi.emi_id} changed: expected {expected_paid} paid installments, "
                    f"found {current.paid_installments}"
                )

            # Validate the entry before touching the EMI so a failure writes nothing
            self._check_user(expense.user_id)
            self._check_card(expense.user_id, expense.credit_card_id)

            self.emis[emi.emi_id] = dataclasses.replace(emi)
            self._insert_expense(expense)

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "users": len(self.users),
            "emis": len(self.emis),
            "credit_cards": len(self.credit_cards),
            "expenses": len(self.expenses),
            "incomes": len(self.incomes),
        }
