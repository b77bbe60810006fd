"""Tests for the exception hierarchy in core/exceptions.py."""

from core.exceptions import (
    AlbumChainException,
    AnswerRejected,
    CatalogError,
    ChannelNotRegistered,
    DuplicateSong,
    PersistenceFailure,
    RepeatPlayer,
    ValidationFailure,
)


class TestHierarchy:
    def test_all_share_a_base(self):
        for cls in (ChannelNotRegistered, AnswerRejected, PersistenceFailure, CatalogError):
            assert issubclass(cls, AlbumChainException)

    def test_rejections(self):
        for cls in (ValidationFailure, RepeatPlayer, DuplicateSong):
            assert issubclass(cls, AnswerRejected)

    def test_storage_failure_is_not_a_rejection(self):
        assert not issubclass(PersistenceFailure, AnswerRejected)


class TestAttrs:
    def test_channel_not_registered(self):
        err = ChannelNotRegistered("chan-9")
        assert err.channel_id == "chan-9"
        assert "chan-9" in str(err)

    def test_repeat_player(self):
        err = RepeatPlayer("alice")
        assert err.user_id == "alice"
        assert err.message == "You can't go twice in a row!"
        assert err.reason == "repeat_player"
        assert err.silent is False

    def test_duplicate_song(self):
        err = DuplicateSong("Love Story")
        assert err.message == "No duplicate songs! Love Story has already been said!"
        assert err.reason == "duplicate_song"

    def test_validation_failure_reason_override(self):
        assert ValidationFailure("x").reason == "invalid_answer"
        err = ValidationFailure("x", silent=True, reason="wrong_number")
        assert err.reason == "wrong_number"
        assert err.silent is True
        # the class default stays intact
        assert ValidationFailure.reason == "invalid_answer"
