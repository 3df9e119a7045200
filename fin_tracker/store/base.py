"""Storage contract shared by every ledger backend."""

from abc import ABC, abstractmethod
from datetime import datetime

from fin_tracker.models.finance import CreditCard, Emi, Expense, Income, User


class LedgerStore(ABC):
    """Persistence for a user's finance records.

    Every read and mutation is scoped to the owning user. A record that exists
    but belongs to someone else is reported as not found.
    """

    @abstractmethod
    def get_or_create_user(self, external_id: str, now: datetime | None = None) -> User:
        """Map an identity-provider subject to a user, provisioning on first sight."""

    @abstractmethod
    def add_emi(self, emi: Emi) -> None:
        """Insert a new EMI."""

    @abstractmethod
    def load_emi(self, emi_id: str, user_id: str) -> Emi:
        """Load an EMI owned by ``user_id``.

        Raises
        ------
        EntityNotFoundError
            If the EMI does not exist for this user.
        """

    @abstractmethod
    def list_emis(self, user_id: str) -> list[Emi]:
        """All EMIs of a user ordered by due day."""

    @abstractmethod
    def update_emi_due_day(self, emi_id: str, user_id: str, due_day: int, now: datetime) -> Emi:
        """Correct an EMI's due day and return the stored record."""

    @abstractmethod
    def delete_emi(self, emi_id: str, user_id: str) -> None:
        """Delete an EMI owned by ``user_id``."""

    @abstractmethod
    def add_expense(self, expense: Expense) -> None:
        """Insert a ledger entry."""

    @abstractmethod
    def list_expenses(self, user_id: str) -> list[Expense]:
        """All ledger entries of a user."""

    @abstractmethod
    def add_income(self, income: Income) -> None:
        """Insert an income source."""

    @abstractmethod
    def list_incomes(self, user_id: str) -> list[Income]:
        """All income sources of a user."""

    @abstractmethod
    def add_credit_card(self, card: CreditCard) -> None:
        """Insert a credit card."""

    @abstractmethod
    def list_credit_cards(self, user_id: str) -> list[CreditCard]:
        """All credit cards of a user."""

    @abstractmethod
    def record_payment(self, emi: Emi, expense: Expense, expected_paid: int) -> None:
        """Persist a confirmed payment as one atomic unit.

        Writes the updated EMI and inserts its ledger entry together, only if
        the stored ``paid_installments`` still equals ``expected_paid``.

        Raises
        ------
        EntityNotFoundError
            If the EMI no longer exists for its owner.
        ConcurrentUpdateError
            If another payment was recorded since the EMI was loaded.
        StorageError
            If the backend fails. Nothing is written.
        """
