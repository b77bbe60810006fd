"""
Shared test fixtures for the album chain backend.
Uses an in-memory SQLite database and a small three-album catalog so tests
never touch a real database file or the shared process catalog.
"""

import itertools
import json
import os
import sys

import pytest

# Keep the module-level engine in database.py off the disk
os.environ.setdefault("DATABASE_URL", "sqlite://")

# Add project root to path so imports work
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import models  # noqa: E402,F401
from database import Base  # noqa: E402
from core.catalog import Catalog, DEFAULT_ALBUMS_PATH, DEFAULT_NUMBERS_PATH, build_stages  # noqa: E402
from core.game_engine import GameEngine  # noqa: E402
from core.locks import ChannelLocks  # noqa: E402
from core.repository import InMemoryGameRepository  # noqa: E402
from services.text_service import normalize_answer  # noqa: E402


TEST_ALBUMS = [
    {
        "name": "Fearless",
        "allowedNames": ["fearless"],
        "songs": [
            {"name": "Fearless", "allowedNames": ["fearless"]},
            {"name": "Love Story", "allowedNames": ["love story"]},
            {"name": "Fifteen", "allowedNames": ["fifteen", "15"]},
            {"name": "White Horse", "allowedNames": ["white horse"]},
        ],
    },
    {
        "name": "Red",
        "allowedNames": ["red"],
        "songs": [
            {"name": "Red", "allowedNames": ["red"]},
            {"name": "State of Grace", "allowedNames": ["state of grace"]},
            {"name": "Treacherous", "allowedNames": ["treacherous"]},
            {"name": "All Too Well", "allowedNames": ["all too well", "atw"]},
        ],
    },
    {
        "name": "Lover",
        "allowedNames": ["lover"],
        "songs": [
            {"name": "Lover", "allowedNames": ["lover"]},
            {"name": "Cruel Summer", "allowedNames": ["cruel summer"]},
            {"name": "The Archer", "allowedNames": ["the archer", "archer"]},
            {"name": "Paper Rings", "allowedNames": ["paper rings"]},
            {"name": "Daylight", "allowedNames": ["daylight"]},
        ],
    },
]

TEST_NUMBERS = [
    {"number": "1", "allowedNames": ["1", "one", "first"]},
    {"number": "2", "allowedNames": ["2", "two", "second"]},
    {"number": "3", "allowedNames": ["3", "three", "third"]},
]


@pytest.fixture
def catalog():
    """Fresh three-album catalog (reversal never leaks between tests)."""
    return Catalog(build_stages(TEST_ALBUMS, TEST_NUMBERS))


@pytest.fixture
def ten_album_catalog():
    """The first ten albums of the bundled reference data."""
    with open(DEFAULT_ALBUMS_PATH, encoding="utf-8") as f:
        albums = json.load(f)
    with open(DEFAULT_NUMBERS_PATH, encoding="utf-8") as f:
        numbers = json.load(f)
    return Catalog(build_stages(albums[:10], numbers[:10]))


@pytest.fixture
def repo():
    """In-memory game repository with one registered channel."""
    repository = InMemoryGameRepository()
    repository.register_channel("guild-1", "chan-1")
    return repository


@pytest.fixture
def game(repo, catalog):
    """Engine over the in-memory repository and the three-album catalog."""
    return GameEngine(repo, catalog, locks=ChannelLocks())


@pytest.fixture
def players():
    """Endless alternation of two players, so nobody answers twice in a row."""
    return itertools.cycle(["alice", "bob"])


def stage_answers(stage, count):
    """Every correct answer of one stage, in order (title track never first)."""
    songs = [song.name for song in stage.songs if song.name != stage.album_name]
    return (
        [stage.number] * count
        + [stage.album_variants[0]] * count
        + [normalize_answer(name) for name in songs[:count]]
    )


def play_stage(engine, channel_id, stage_number, players):
    """Answer one whole stage correctly and return the outcomes."""
    view = engine.catalog.snapshot()
    stage = view.stage_for(stage_number)
    count = ((stage_number - 1) % view.size) + 1
    return [
        engine.submit_answer(channel_id, next(players), answer)
        for answer in stage_answers(stage, count)
    ]


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest.fixture
def db_engine():
    """In-memory SQLite shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()
