#!/usr/bin/env python3
"""Seed a demo user with sample finance records.

Generates credit cards, EMIs, expenses and incomes for one user, confirms
one EMI payment through the ledger service, and writes the resulting
records as JSON files. Records go to PostgreSQL with --postgres, otherwise
to an in-memory store.
"""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from fin_tracker.config import FinTrackerConfig
from fin_tracker.exceptions import FinTrackerError
from fin_tracker.generators import (
    CreditCardGenerator,
    EmiGenerator,
    ExpenseGenerator,
    IncomeGenerator,
)
from fin_tracker.logging import get_logger, setup_logging
from fin_tracker.serialization import emi_view, to_dict
from fin_tracker.service import LedgerService
from fin_tracker.store import InMemoryLedgerStore, LedgerStore

logger = get_logger("seed_demo")


def save_json(data: list, filename: str, output_dir: Path) -> None:
    """Save records to a JSON file."""
    filepath = output_dir / filename
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    logger.info("Saved %d records to %s", len(data), filepath)


def seed_user(
    store: LedgerStore,
    external_id: str,
    num_emis: int,
    num_expenses: int,
    seed: int,
    now: datetime,
) -> str:
    """Populate one user's records and return the internal user id."""
    user = store.get_or_create_user(external_id, now)

    card_gen = CreditCardGenerator(seed=seed, as_of=now)
    emi_gen = EmiGenerator(seed=seed, as_of=now)
    expense_gen = ExpenseGenerator(seed=seed, as_of=now)
    income_gen = IncomeGenerator(seed=seed, as_of=now)

    card = card_gen.generate(user.user_id)
    store.add_credit_card(card)

    for emi in emi_gen.generate_batch(user.user_id, num_emis):
        store.add_emi(emi)
    store.add_emi(emi_gen.generate(user.user_id, credit_card_id=card.card_id))

    for expense in expense_gen.generate_batch(user.user_id, num_expenses):
        store.add_expense(expense)
    store.add_expense(expense_gen.generate(user.user_id, credit_card_id=card.card_id))

    store.add_income(income_gen.generate(user.user_id))

    logger.info("Seeded user %s (%s)", user.user_id, external_id)
    return user.user_id


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Seed demo finance records")
    parser.add_argument("--user", type=str, default="demo-user", help="Identity-provider subject (default: demo-user)")
    parser.add_argument("--emis", type=int, default=4, help="Number of EMIs (default: 4)")
    parser.add_argument("--expenses", type=int, default=10, help="Number of cash expenses (default: 10)")
    parser.add_argument("--seed", type=int, default=None, help="Random seed (default: $SEED or 42)")
    parser.add_argument("--output", type=str, default="local", help="Output directory (default: local/)")
    parser.add_argument("--postgres", action="store_true", help="Write to PostgreSQL (POSTGRES_* env vars)")
    args = parser.parse_args()

    config = FinTrackerConfig.from_env()
    setup_logging(config.log_level, config.log_format)
    seed = args.seed if args.seed is not None else (config.seed if config.seed is not None else 42)
    now = datetime.now()

    store: LedgerStore
    if args.postgres:
        from fin_tracker.store.postgres import PostgresLedgerStore

        store = PostgresLedgerStore(config.postgres.connection_string)
        store.create_tables()
    else:
        store = InMemoryLedgerStore()

    service = LedgerService(store, config.ledger)

    try:
        user_id = seed_user(store, args.user, args.emis, args.expenses, seed, now)

        emis = service.list_emis(user_id, now)
        if emis:
            result = service.mark_emi_paid(user_id, emis[0].emi_id, now)
            logger.info("Confirmed payment: %s", result.expense.title)

        budget = service.monthly_budget(user_id, now)
        emis = service.list_emis(user_id, now)
        expenses = store.list_expenses(user_id)
    except FinTrackerError as e:
        logger.error("Seeding failed: %s", e)
        return 1
    finally:
        if args.postgres:
            store.close()

    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)
    save_json([emi_view(emi, now) for emi in emis], "emis.json", output_dir)
    save_json([to_dict(e) for e in expenses], "expenses.json", output_dir)
    save_json([to_dict(budget)], "budget.json", output_dir)

    logger.info(
        "Budget %02d/%d: income %s, expenses %s, EMIs due %s, balance %s",
        budget.month,
        budget.year,
        budget.total_income,
        budget.total_expenses,
        budget.total_emis,
        budget.balance,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
