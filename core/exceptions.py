"""
Custom exceptions

All game exceptions live here so the API layer can translate them in one place.

Two families matter to callers:
- AnswerRejected and its subclasses: the player made a mistake. The engine
  catches these, resets the channel and reports an invalid outcome.
- PersistenceFailure: storage is broken. Never turned into an outcome;
  it propagates so operators can tell it apart from a player's mistake.
"""
from typing import Optional


class AlbumChainException(Exception):
    """Base class for every game exception"""
    pass


# ============ Channel ============

class ChannelNotRegistered(AlbumChainException):
    """The channel has no game registered (the message should be ignored)"""
    def __init__(self, channel_id):
        self.channel_id = channel_id
        super().__init__(f"Channel {channel_id} is not registered")


# ============ Answer rejections ============

class AnswerRejected(AlbumChainException):
    """
    A submitted answer was not accepted

    Every rejection shares the same recovery: the channel is reset to stage 1.

    Attributes:
        message: text shown to the players
        reason: machine-readable rejection kind
        silent: True when the caller should not post the message
    """
    reason = "rejected"

    def __init__(self, message: str, silent: bool = False, reason: Optional[str] = None):
        self.message = message
        self.silent = silent
        if reason is not None:
            self.reason = reason
        super().__init__(message)


class ValidationFailure(AnswerRejected):
    """Wrong number, wrong album, unknown song or title track given first"""
    reason = "invalid_answer"


class RepeatPlayer(AnswerRejected):
    """The same player answered twice in a row"""
    reason = "repeat_player"

    def __init__(self, user_id):
        self.user_id = user_id
        super().__init__("You can't go twice in a row!")


class DuplicateSong(AnswerRejected):
    """The song was already said in this channel's current stage"""
    reason = "duplicate_song"

    def __init__(self, song_name: str):
        self.song_name = song_name
        super().__init__(f"No duplicate songs! {song_name} has already been said!")


# ============ Storage ============

class PersistenceFailure(AlbumChainException):
    """A storage write failed; the current answer had no effect"""
    pass


# ============ Catalog ============

class CatalogError(AlbumChainException):
    """Reference data is missing or malformed"""
    pass
