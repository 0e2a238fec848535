from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.enrollments_service.models.enums import (
    EnrollmentStatus,
    PaymentSource,
    enum_values,
)
from sqlalchemy import JSON, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column


def enrollment_id_for(participant_id: str, sprint_id: str) -> str:
    return f"enrollment_{participant_id}_{sprint_id}"


class Enrollment(Base):
    """One participant's attempt at one sprint. Never deleted."""

    __tablename__ = "enrollments"

    # Deterministic: enrollment_{participant_id}_{sprint_id}
    id: Mapped[str] = mapped_column(String, primary_key=True)
    sprint_id: Mapped[str] = mapped_column(String, index=True, nullable=False)
    participant_id: Mapped[str] = mapped_column(String, index=True, nullable=False)
    coach_id: Mapped[str] = mapped_column(String, index=True, nullable=False)

    status: Mapped[EnrollmentStatus] = mapped_column(
        SAEnum(
            EnrollmentStatus,
            name="enrollment_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=EnrollmentStatus.ACTIVE,
        nullable=False,
    )

    # Commercial
    price_paid: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    currency: Mapped[str] = mapped_column(String, default="NGN", nullable=False)
    payment_source: Mapped[PaymentSource] = mapped_column(
        SAEnum(
            PaymentSource,
            name="payment_source_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=PaymentSource.DIRECT,
        nullable=False,
    )
    referral_source: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    # [{day, completed, completed_at?, submission?, submission_file_url?,
    #   reflection?, proof_selection?}]
    progress: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    # Inactivity thresholds (days) already nudged
    sent_nudges: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    last_activity_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    @property
    def is_fully_completed(self) -> bool:
        progress = self.progress or []
        return bool(progress) and all(entry.get("completed") for entry in progress)

    def __repr__(self) -> str:
        return f"<Enrollment {self.id} status={self.status}>"
