"""
Game state repository

The engine only talks to storage through GameRepository, so it can run
against the database in production and against memory in tests.

Contract:
- every operation is scoped to one channel or one user
- work done inside `with repo.transaction():` commits together or not at all
- get_channel_state returns a detached copy; changes are only stored by
  save_channel_state
"""
import copy
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Set

from core.game_state import ChannelGameState, UserStats


class GameRepository(ABC):

    @abstractmethod
    def transaction(self):
        """Context manager making the enclosed work atomic"""

    # ============ Channel ============

    @abstractmethod
    def get_channel_state(self, channel_id: str) -> Optional[ChannelGameState]:
        """State of the channel, or None when it is not registered"""

    @abstractmethod
    def save_channel_state(self, state: ChannelGameState) -> None:
        pass

    @abstractmethod
    def register_channel(self, guild_id: str, channel_id: str) -> ChannelGameState:
        """Create a fresh game for the channel, replacing every channel of the guild"""

    @abstractmethod
    def is_channel_registered(self, channel_id: str, guild_id: Optional[str] = None) -> bool:
        pass

    # ============ Used songs ============

    @abstractmethod
    def add_used_song(self, channel_id: str, song_name: str) -> None:
        pass

    @abstractmethod
    def is_song_used(self, channel_id: str, song_name: str) -> bool:
        pass

    @abstractmethod
    def clear_used_songs(self, channel_id: str) -> None:
        pass

    # ============ Users ============

    @abstractmethod
    def get_user_stats(self, user_id: str) -> UserStats:
        """Counters of the user (zeros for a user never seen before)"""

    @abstractmethod
    def record_user_result(self, user_id: str, correct: bool) -> UserStats:
        pass


class InMemoryGameRepository(GameRepository):
    """
    Dict-backed repository for tests and single-process tools

    A failing transaction restores the data as it was when the
    transaction started. The snapshot covers every channel, so one
    repository-wide lock serializes all transactions: answers for
    different channels run one after another here, never in parallel.
    SqlGameRepository is the adapter where channels proceed concurrently.
    """

    def __init__(self):
        self.channels: Dict[str, ChannelGameState] = {}
        self.used_songs: Dict[str, Set[str]] = {}
        self.users: Dict[str, UserStats] = {}
        self._lock = threading.RLock()
        self._depth = 0

    @contextmanager
    def transaction(self) -> Iterator["InMemoryGameRepository"]:
        with self._lock:
            if self._depth:
                # nested: the outer transaction owns commit and rollback
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            saved = copy.deepcopy((self.channels, self.used_songs, self.users))
            self._depth = 1
            try:
                yield self
            except Exception:
                self.channels, self.used_songs, self.users = saved
                raise
            finally:
                self._depth = 0

    def get_channel_state(self, channel_id: str) -> Optional[ChannelGameState]:
        state = self.channels.get(channel_id)
        return state.copy() if state else None

    def save_channel_state(self, state: ChannelGameState) -> None:
        self.channels[state.channel_id] = state.copy()

    def register_channel(self, guild_id: str, channel_id: str) -> ChannelGameState:
        stale = [
            cid for cid, state in self.channels.items()
            if state.guild_id == guild_id or cid == channel_id
        ]
        for cid in stale:
            del self.channels[cid]
            self.used_songs.pop(cid, None)

        state = ChannelGameState(channel_id=channel_id, guild_id=guild_id)
        self.channels[channel_id] = state
        return state.copy()

    def is_channel_registered(self, channel_id: str, guild_id: Optional[str] = None) -> bool:
        state = self.channels.get(channel_id)
        if state is None:
            return False
        return guild_id is None or state.guild_id == guild_id

    def add_used_song(self, channel_id: str, song_name: str) -> None:
        self.used_songs.setdefault(channel_id, set()).add(song_name)

    def is_song_used(self, channel_id: str, song_name: str) -> bool:
        return song_name in self.used_songs.get(channel_id, set())

    def clear_used_songs(self, channel_id: str) -> None:
        self.used_songs.pop(channel_id, None)

    def get_user_stats(self, user_id: str) -> UserStats:
        stats = self.users.get(user_id)
        return copy.copy(stats) if stats else UserStats(user_id=user_id)

    def record_user_result(self, user_id: str, correct: bool) -> UserStats:
        stats = self.users.setdefault(user_id, UserStats(user_id=user_id))
        if correct:
            stats.correct_answers += 1
        else:
            stats.times_failed += 1
        return copy.copy(stats)
