"""Participant record: enrolled sprints, milestone claims and wallet credits."""

from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from sqlalchemy import JSON, CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column


class Participant(Base):
    """One row per participant, keyed by the auth user id."""

    __tablename__ = "participants"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    email: Mapped[Optional[str]] = mapped_column(String, index=True, nullable=True)
    display_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    enrolled_sprint_ids: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    # Milestone claims; an id appears at most once and is never removed
    claimed_milestone_ids: Mapped[list] = mapped_column(
        JSON, default=list, nullable=False
    )
    wallet_balance: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Impact stats
    people_helped: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    current_stage: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "wallet_balance >= 0", name="ck_participant_wallet_balance_non_negative"
        ),
    )

    def __repr__(self) -> str:
        return f"<Participant {self.id} balance={self.wallet_balance}>"
