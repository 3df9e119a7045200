"""Enumeration types for personal finance entities."""

from enum import Enum


class ExpenseCategory(str, Enum):
    EXPENSE = "expense"
    EMI = "emi"
    TRANSFER = "transfer"
    CREDIT_CARD_PAYMENT = "credit_card_payment"


class EmiStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class IncomeFrequency(str, Enum):
    MONTHLY = "monthly"
    WEEKLY = "weekly"
    YEARLY = "yearly"
    DAILY = "daily"
    ONE_TIME = "one-time"


class IncomeCategory(str, Enum):
    SALARY = "salary"
    FREELANCE = "freelance"
    INVESTMENT = "investment"
    BUSINESS = "business"
    RENTAL = "rental"
    OTHER = "other"
