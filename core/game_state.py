"""
Game state records passed between the engine and the repositories

These are plain values, independent of the storage technology.
"""
from dataclasses import dataclass, replace
from typing import Optional

from models import Subsection


@dataclass
class ChannelGameState:
    channel_id: str
    guild_id: Optional[str] = None
    stage: int = 1
    subsection: Subsection = Subsection.NUMBER
    subsection_entries_so_far: int = 0
    last_player_id: Optional[str] = None
    score: int = 0
    high_score: int = 0
    highest_album: Optional[str] = None
    rounds_completed: int = 0

    def copy(self) -> "ChannelGameState":
        return replace(self)

    def reset(self) -> None:
        """Back to stage 1; the high score and historical fields survive"""
        self.stage = 1
        self.subsection = Subsection.NUMBER
        self.subsection_entries_so_far = 0
        self.last_player_id = None
        self.score = 0


@dataclass
class UserStats:
    user_id: str
    correct_answers: int = 0
    times_failed: int = 0


@dataclass
class Outcome:
    """
    Result of one submitted answer

    Attributes:
        valid: the answer was accepted
        message: text for the channel (empty when there is nothing to say)
        silent: the caller must not post the message
        cycle_complete: this answer finished a full traversal of the catalog
        reason: rejection kind, None when valid
        song: canonical song name credited by this answer
    """
    valid: bool
    message: str = ""
    silent: bool = False
    cycle_complete: bool = False
    reason: Optional[str] = None
    song: Optional[str] = None
