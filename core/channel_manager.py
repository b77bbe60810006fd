"""
Channel Manager: registration of game channels

Responsibilities:
1. Register a channel for a guild (one game channel per guild)
2. Check that a message comes from a registered channel
3. Look up a channel's game for summaries

Answers are not handled here; they belong to GameEngine.
"""
from sqlalchemy.orm import Session
import logging

from models import Channel, Song
from core.exceptions import ChannelNotRegistered
from core.game_state import ChannelGameState
from core.sql_repository import SqlGameRepository
from database import transactional

logger = logging.getLogger(__name__)


class ChannelManager:
    """Lifecycle of registered channels"""

    @staticmethod
    @transactional
    def register_channel_for_guild(db: Session, guild_id: str, channel_id: str) -> ChannelGameState:
        """
        Register a channel for a guild, clearing previous data

        Flow:
        1. Delete the guild's previously registered channel and its songs
        2. Delete any earlier registration of this channel
        3. Create a fresh game (stage 1, score 0, high score 0)

        Args:
            db: SQLAlchemy Session
            guild_id: chat guild (server) id
            channel_id: chat channel id

        Returns:
            the new channel state

        Notes:
            - uses @transactional, commit/rollback are automatic
            - the high score of a replaced channel is lost as well
        """
        state = SqlGameRepository(db).register_channel(guild_id, channel_id)
        logger.info(f"Registered channel {channel_id} for guild {guild_id}")
        return state

    @staticmethod
    def is_registered_channel(db: Session, channel_id: str, guild_id: str) -> bool:
        """
        Whether a message from (guild_id, channel_id) should be treated as an answer

        Returns:
            True only when the channel is the guild's registered channel
        """
        return SqlGameRepository(db).is_channel_registered(channel_id, guild_id)

    @staticmethod
    def get_channel(db: Session, channel_id: str) -> Channel:
        """
        Fetch a registered channel

        Raises:
            ChannelNotRegistered: no game in this channel
        """
        channel = db.query(Channel).filter(Channel.channel_id == channel_id).first()
        if not channel:
            raise ChannelNotRegistered(channel_id)
        return channel

    @staticmethod
    def get_used_song_count(db: Session, channel_id: str) -> int:
        """Songs said so far in the channel's current stage"""
        return db.query(Song).filter(Song.channel_id == channel_id).count()
