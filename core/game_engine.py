"""
Game Engine: the album chain state machine

Every answer in a channel goes through submit_answer(). It is the only code
that changes a channel's game state.

A channel moves through stages. At stage k (logical stage L = ((k-1) mod N)+1)
the players must give, one answer per turn:
1. the number token of album L, L times
2. the name of album L, L times
3. L songs from album L (no duplicates, title track not first)

Any mistake resets the channel to stage 1. Finishing stage N, 2N, 3N ...
completes a cycle and reverses the catalog for every channel.
"""
import logging
from typing import Optional

from models import Subsection
from core.catalog import Catalog, CatalogView, logical_stage
from core.exceptions import (
    AnswerRejected,
    ChannelNotRegistered,
    DuplicateSong,
    RepeatPlayer,
    ValidationFailure,
)
from core.game_state import ChannelGameState, Outcome
from core.locks import ChannelLocks, channel_locks
from core.repository import GameRepository
from services.similarity_service import DEFAULT_THRESHOLD

logger = logging.getLogger(__name__)

CYCLE_COMPLETE_MESSAGE = (
    "🎉 CONGRATULATIONS 🎉!!! You reached the end of the round! "
    "Now we reverse the direction, keep going! ({number}, {album}, {song} etc)"
)


def is_cycle_complete(old_stage: int, new_stage: int, stage_count: int) -> bool:
    """
    A cycle ends when the last stage of a traversal is finished

    Examples (stage_count=10):
        is_cycle_complete(10, 11, 10) -> True
        is_cycle_complete(20, 21, 10) -> True
        is_cycle_complete(10, 10, 10) -> False  (still inside stage 10)
    """
    return old_stage % stage_count == 0 and new_stage % stage_count == 1


class GameEngine:
    """Validates answers and advances or resets a channel's game"""

    def __init__(
        self,
        repository: GameRepository,
        catalog: Catalog,
        locks: Optional[ChannelLocks] = None,
        similarity_threshold: float = DEFAULT_THRESHOLD,
        disallow_same_player_twice: bool = True,
    ):
        self.repository = repository
        self.catalog = catalog
        self.locks = locks if locks is not None else channel_locks
        self.similarity_threshold = similarity_threshold
        self.disallow_same_player_twice = disallow_same_player_twice

    def submit_answer(self, channel_id: str, user_id: str, text: str) -> Outcome:
        """
        Check one answer and update the channel

        Flow:
        1. Lock the channel and load its state
        2. Validate the answer against the current stage and subsection
        3. Valid: advance the state. Invalid: reset the channel
        4. Update the player's stats
        5. Commit everything at once
        6. After commit, reverse the catalog if a cycle was completed

        Args:
            channel_id: chat channel id
            user_id: chat user id of the player answering
            text: the answer, already normalized (lower case, no punctuation)

        Returns:
            Outcome (valid answers and mistakes alike)

        Raises:
            ChannelNotRegistered: the channel has no game (nothing was changed)
            PersistenceFailure: storage failed (nothing was changed)
        """
        with self.locks.hold(channel_id):
            with self.repository.transaction():
                # 1. current state
                state = self.repository.get_channel_state(channel_id)
                if state is None:
                    raise ChannelNotRegistered(channel_id)
                view = self.catalog.snapshot()

                # 2-3. validate, then advance or reset
                try:
                    song = self._check_answer(state, view, user_id, text)
                except AnswerRejected as rejection:
                    outcome = self._reject(state, rejection)
                else:
                    outcome = self._advance(state, view, user_id, song)

                # 4. stats (silent only hides the message, the miss still counts)
                self.repository.record_user_result(user_id, outcome.valid)

            # 6. only a committed answer may flip the direction
            if outcome.cycle_complete:
                reversed_view = self.catalog.reverse()
                outcome.message = "\n".join(
                    part for part in (self._cycle_message(reversed_view), outcome.message) if part
                )

        return outcome

    def _check_answer(
        self,
        state: ChannelGameState,
        view: CatalogView,
        user_id: str,
        text: str
    ) -> Optional[str]:
        """
        Validate an answer

        Returns:
            canonical song name for a valid song, None for a valid number or album

        Raises:
            RepeatPlayer, ValidationFailure, DuplicateSong
        """
        if self.disallow_same_player_twice and state.last_player_id == user_id:
            raise RepeatPlayer(user_id)

        stage = view.stage_for(state.stage)

        if state.subsection == Subsection.NUMBER:
            if not stage.accepts_number(text):
                # at stage 1 random chatter is forgiven: no message is posted
                raise ValidationFailure(
                    f"Pay attention! Pay attention! You should've said {stage.number}!",
                    silent=state.stage == 1,
                    reason="wrong_number",
                )
            return None

        if state.subsection == Subsection.ALBUM:
            if not stage.accepts_album(text, self.similarity_threshold):
                raise ValidationFailure(
                    f"Pay attention! Pay attention! You should've said {stage.album_name}!",
                    reason="wrong_album",
                )
            return None

        song = stage.resolve_song(text, self.similarity_threshold)
        if song is None:
            raise ValidationFailure(
                f"Pay attention! Pay attention! You should've given a song from {stage.album_name}!",
                reason="unknown_song",
            )
        if song == stage.album_name and state.subsection_entries_so_far == 0:
            raise ValidationFailure(
                "NO! The title track is not allowed right after the album names!",
                reason="title_track_first",
            )
        if self.repository.is_song_used(state.channel_id, song):
            raise DuplicateSong(song)
        return song

    def _reject(self, state: ChannelGameState, rejection: AnswerRejected) -> Outcome:
        logger.info(
            f"Channel {state.channel_id} reset at stage {state.stage} "
            f"(score {state.score}): {rejection.reason}"
        )
        state.reset()
        self.repository.save_channel_state(state)
        self.repository.clear_used_songs(state.channel_id)

        return Outcome(
            valid=False,
            message=rejection.message,
            silent=rejection.silent,
            reason=rejection.reason,
        )

    def _advance(
        self,
        state: ChannelGameState,
        view: CatalogView,
        user_id: str,
        song: Optional[str]
    ) -> Outcome:
        """
        Move the state forward after a valid answer

        Rules (L = logical stage):
        - the L-th entry of a subsection closes it: Number -> Album -> Song,
          and closing Song starts the next stage with a clean song list
        - any earlier song entry is remembered for duplicate checks
        """
        old_stage = state.stage
        stage_count = view.size
        current_logical = logical_stage(old_stage, stage_count)
        album_name = view.stage_for(old_stage).album_name

        if state.subsection_entries_so_far + 1 == current_logical:
            state.subsection_entries_so_far = 0
            if state.subsection == Subsection.SONG:
                state.subsection = Subsection.NUMBER
                state.stage = old_stage + 1
                self.repository.clear_used_songs(state.channel_id)
            else:
                state.subsection = Subsection(state.subsection + 1)
        else:
            state.subsection_entries_so_far += 1
            if state.subsection == Subsection.SONG:
                self.repository.add_used_song(state.channel_id, song)

        state.score += 1
        if state.score > state.high_score:
            state.high_score = state.score
            state.highest_album = album_name
            state.rounds_completed = (old_stage - 1) // stage_count
        state.last_player_id = user_id

        self.repository.save_channel_state(state)

        cycle_complete = is_cycle_complete(old_stage, state.stage, stage_count)
        if cycle_complete:
            logger.info(f"Channel {state.channel_id} completed a cycle at stage {old_stage}")

        return Outcome(valid=True, cycle_complete=cycle_complete, song=song)

    @staticmethod
    def _cycle_message(view: CatalogView) -> str:
        first = view.stages[0]
        first_song = first.songs[0].name if first.songs else ""
        return CYCLE_COMPLETE_MESSAGE.format(
            number=first.number,
            album=first.album_name,
            song=first_song,
        )
