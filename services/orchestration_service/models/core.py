import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from sqlalchemy import JSON, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

CURRENT_MAPPING_ID = "current_mapping"


class OrchestrationMapping(Base):
    """Global slot -> sprint mapping. A single row, written whole on every save."""

    __tablename__ = "orchestration_mappings"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=CURRENT_MAPPING_ID)
    # {slot_id: {"sprint_id": str, "focus_criteria": [str]}}
    assignments: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    updated_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        return f"<OrchestrationMapping v{self.version} slots={len(self.assignments or {})}>"


class OrchestratorLog(Base):
    """Record of a focus -> sprint resolution for a participant."""

    __tablename__ = "orchestrator_logs"

    id: Mapped[str] = mapped_column(
        String, primary_key=True, default=lambda: f"orlog_{uuid.uuid4().hex[:12]}"
    )
    user_id: Mapped[str] = mapped_column(String, index=True, nullable=False)
    trigger: Mapped[str] = mapped_column(String, nullable=False)
    input_focus: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    resolved_sprint_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    slot_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
