import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.sprints_service.models.enums import ApprovalStatus, enum_values
from sqlalchemy import JSON, Boolean, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column


def generate_sprint_id() -> str:
    return f"sprint_{uuid.uuid4().hex[:12]}"


class Sprint(Base):
    """Coach-authored multi-day sprint.

    The columns hold the canonical (live) content. ``pending_changes`` holds a
    staged subset of content fields awaiting admin audit.
    """

    __tablename__ = "sprints"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_sprint_id)
    coach_id: Mapped[str] = mapped_column(String, index=True, nullable=False)

    # Lifecycle
    approval_status: Mapped[ApprovalStatus] = mapped_column(
        SAEnum(
            ApprovalStatus,
            name="approval_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=ApprovalStatus.DRAFT,
        index=True,
        nullable=False,
    )
    published: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Registry content
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    transformation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String, index=True, nullable=False)
    difficulty: Mapped[str] = mapped_column(String, default="Beginner", nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[int] = mapped_column(Integer, default=0, nullable=False)  # Naira
    pricing_type: Mapped[str] = mapped_column(String, default="cash", nullable=False)
    point_cost: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    cover_image_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    outcomes: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    for_who: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    not_for_who: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    method_snapshot: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    protocol: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    outcome_tag: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    outcome_statement: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sprint_type: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    # Curriculum: [{day, lesson_text, task_prompt, ...}]
    daily_content: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    # Staging and review
    pending_changes: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    review_feedback: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    # Bumped on every write; callers may pass it back to detect lost updates
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    submitted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    approved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        return f"<Sprint {self.id} status={self.approval_status} v{self.version}>"
