from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class ParticipantResponse(BaseModel):
    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    joined_at: datetime
    enrolled_sprint_ids: List[str] = []
    claimed_milestone_ids: List[str] = []
    wallet_balance: int = 0
    people_helped: int = 0
    streak: int = 0
    current_stage: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
