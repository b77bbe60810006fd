"""
SQLAlchemy implementation of GameRepository

Operations only flush; transaction() owns commit and rollback so one answer's
state update, song insert and stats update land together or not at all.
"""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import Channel, Song, User, Subsection
from core.exceptions import PersistenceFailure
from core.game_state import ChannelGameState, UserStats
from core.locks import with_channel_lock
from core.repository import GameRepository

logger = logging.getLogger(__name__)


def _to_state(channel: Channel) -> ChannelGameState:
    return ChannelGameState(
        channel_id=channel.channel_id,
        guild_id=channel.guild_id,
        stage=channel.stage,
        subsection=Subsection(channel.subsection),
        subsection_entries_so_far=channel.subsection_entries_so_far,
        last_player_id=channel.last_player_id,
        score=channel.score,
        high_score=channel.high_score,
        highest_album=channel.highest_album,
        rounds_completed=channel.rounds_completed,
    )


class SqlGameRepository(GameRepository):

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def transaction(self) -> Iterator["SqlGameRepository"]:
        """
        Commit on success, roll back on any failure

        Raises:
            PersistenceFailure: the database rejected the work (wraps SQLAlchemyError)
            anything else raised inside the block, after rollback
        """
        try:
            yield self
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Game state transaction failed: {e}", exc_info=True)
            raise PersistenceFailure(f"Could not store game state: {e}") from e
        except Exception:
            self.db.rollback()
            raise

    # ============ Channel ============

    def get_channel_state(self, channel_id: str) -> Optional[ChannelGameState]:
        channel = with_channel_lock(channel_id, self.db).first()
        return _to_state(channel) if channel else None

    def save_channel_state(self, state: ChannelGameState) -> None:
        channel = self.db.get(Channel, state.channel_id)
        if channel is None:
            raise PersistenceFailure(f"Channel {state.channel_id} disappeared while saving")

        channel.stage = state.stage
        channel.subsection = int(state.subsection)
        channel.subsection_entries_so_far = state.subsection_entries_so_far
        channel.last_player_id = state.last_player_id
        channel.score = state.score
        channel.high_score = state.high_score
        channel.highest_album = state.highest_album
        channel.rounds_completed = state.rounds_completed
        self.db.flush()

    def register_channel(self, guild_id: str, channel_id: str) -> ChannelGameState:
        # 1. drop the guild's previous channel (and this one, if registered elsewhere)
        stale = self.db.query(Channel).filter(
            (Channel.guild_id == guild_id) | (Channel.channel_id == channel_id)
        ).all()
        for channel in stale:
            self.db.delete(channel)  # cascades to its songs
        self.db.flush()

        # 2. fresh game
        channel = Channel(
            channel_id=channel_id,
            guild_id=guild_id,
            score=0,
            high_score=0,
            stage=1,
            subsection=int(Subsection.NUMBER),
            subsection_entries_so_far=0,
            last_player_id=None,
            rounds_completed=0,
        )
        self.db.add(channel)
        self.db.flush()
        return _to_state(channel)

    def is_channel_registered(self, channel_id: str, guild_id: Optional[str] = None) -> bool:
        query = self.db.query(Channel).filter(Channel.channel_id == channel_id)
        if guild_id is not None:
            query = query.filter(Channel.guild_id == guild_id)
        return query.first() is not None

    # ============ Used songs ============

    def add_used_song(self, channel_id: str, song_name: str) -> None:
        self.db.add(Song(channel_id=channel_id, song_name=song_name))
        self.db.flush()

    def is_song_used(self, channel_id: str, song_name: str) -> bool:
        return self.db.query(Song).filter(
            Song.channel_id == channel_id,
            Song.song_name == song_name
        ).first() is not None

    def clear_used_songs(self, channel_id: str) -> None:
        self.db.query(Song).filter(Song.channel_id == channel_id).delete(
            synchronize_session="fetch"
        )
        self.db.flush()

    # ============ Users ============

    def get_user_stats(self, user_id: str) -> UserStats:
        user = self.db.get(User, user_id)
        if user is None:
            return UserStats(user_id=user_id)
        return UserStats(
            user_id=user.user_id,
            correct_answers=user.correct_answers,
            times_failed=user.times_failed,
        )

    def record_user_result(self, user_id: str, correct: bool) -> UserStats:
        user = self.db.get(User, user_id)
        if user is None:
            user = User(user_id=user_id, correct_answers=0, times_failed=0)
            self.db.add(user)

        if correct:
            user.correct_answers += 1
        else:
            user.times_failed += 1
        self.db.flush()

        return UserStats(
            user_id=user.user_id,
            correct_answers=user.correct_answers,
            times_failed=user.times_failed,
        )
