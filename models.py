"""
Database models

Three tables, one per persisted concept:
- Channel: the game state of one registered channel (one per guild)
- Song: songs already said in a channel during the current run
- User: global answer counters for one player
"""
import enum

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from database import Base


class Subsection(enum.IntEnum):
    """The kind of answer a channel currently expects"""
    NUMBER = 0
    ALBUM = 1
    SONG = 2


class Channel(Base):
    __tablename__ = "channels"

    channel_id = Column(String, primary_key=True)
    guild_id = Column(String, nullable=False, index=True)
    score = Column(Integer, nullable=False, default=0)
    high_score = Column(Integer, nullable=False, default=0)
    stage = Column(Integer, nullable=False, default=1)
    subsection = Column(Integer, nullable=False, default=int(Subsection.NUMBER))
    subsection_entries_so_far = Column(Integer, nullable=False, default=0)
    last_player_id = Column(String, nullable=True)
    highest_album = Column(String, nullable=True)
    rounds_completed = Column(Integer, nullable=False, default=0)

    songs = relationship("Song", back_populates="channel", cascade="all, delete-orphan")


class Song(Base):
    __tablename__ = "songs"
    __table_args__ = (
        UniqueConstraint("channel_id", "song_name", name="uq_song_per_channel"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    channel_id = Column(String, ForeignKey("channels.channel_id"), nullable=False, index=True)
    song_name = Column(String, nullable=False)

    channel = relationship("Channel", back_populates="songs")


class User(Base):
    __tablename__ = "users"

    user_id = Column(String, primary_key=True)
    correct_answers = Column(Integer, nullable=False, default=0)
    times_failed = Column(Integer, nullable=False, default=0)
