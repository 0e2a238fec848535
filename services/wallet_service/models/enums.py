"""Enum definitions for wallet service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class TransactionType(str, enum.Enum):
    MILESTONE_REWARD = "milestone_reward"
    SPRINT_PURCHASE = "sprint_purchase"


class TransactionDirection(str, enum.Enum):
    CREDIT = "credit"
    DEBIT = "debit"
