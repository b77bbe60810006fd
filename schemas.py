"""
Request and response schemas of the HTTP API
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from models import Subsection


class ChannelRegister(BaseModel):
    guild_id: str = Field(..., min_length=1)
    channel_id: str = Field(..., min_length=1)


class ChannelResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    channel_id: str
    guild_id: str
    score: int
    high_score: int
    stage: int
    subsection: Subsection
    subsection_entries_so_far: int
    highest_album: Optional[str] = None
    rounds_completed: int
    used_songs: int = 0


class AnswerSubmit(BaseModel):
    guild_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    # raw message text, normalized by the API before validation
    content: str


class OutcomeResponse(BaseModel):
    valid: bool
    message: str
    silent: bool
    cycle_complete: bool
    reason: Optional[str] = None
    song: Optional[str] = None


class UserStatsResponse(BaseModel):
    user_id: str
    correct_answers: int
    times_failed: int
    percentage_correct: float


class HelpResponse(BaseModel):
    text: str
