"""Wallet and milestone schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from services.wallet_service.models import TransactionDirection, TransactionType
from services.wallet_service.services.milestones import MilestoneMetric


class MilestoneResponse(BaseModel):
    id: str
    title: str
    description: str
    metric: MilestoneMetric
    target: int
    points: int
    current: int
    unlocked: bool
    claimed: bool
    claimable: bool


class TransactionResponse(BaseModel):
    id: str
    idempotency_key: str
    transaction_type: TransactionType
    direction: TransactionDirection
    amount: int
    balance_before: int
    balance_after: int
    description: str
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ClaimResponse(BaseModel):
    milestone_id: str
    points: int
    wallet_balance: int
    transaction: TransactionResponse


class WalletResponse(BaseModel):
    participant_id: str
    wallet_balance: int
    claimed_milestone_ids: List[str]
    transactions: List[TransactionResponse]
