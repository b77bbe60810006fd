"""
Catalog: the album reference data

Responsibilities:
1. Load albums, songs and number tokens from JSON
2. Answer "which stage is this?" for any unbounded stage number
3. Reverse the traversal direction when a channel completes a cycle

The ordering is process-wide shared state: when any channel completes a cycle,
every channel in the process continues in the new direction. Readers take a
snapshot (an immutable tuple) so a validation never sees a half-reversed list;
reverse() swaps the snapshot under a writer lock.
"""
import json
import logging
import threading
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import FrozenSet, List, Optional, Sequence, Tuple

from core.exceptions import CatalogError
from services.similarity_service import DEFAULT_THRESHOLD, matches_any
from services.text_service import normalize_answer

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"
DEFAULT_ALBUMS_PATH = DATA_DIR / "albums.json"
DEFAULT_NUMBERS_PATH = DATA_DIR / "numbers.json"


def logical_stage(stage: int, stage_count: int) -> int:
    """
    Position of an unbounded stage inside one traversal, in [1, stage_count]

    Examples (stage_count=10):
        logical_stage(1, 10) -> 1
        logical_stage(10, 10) -> 10
        logical_stage(11, 10) -> 1
    """
    return ((stage - 1) % stage_count) + 1


@dataclass(frozen=True)
class Song:
    name: str
    variants: Tuple[str, ...]


@dataclass(frozen=True)
class Stage:
    """One album: its number token, its name and its songs"""
    number: str
    number_variants: FrozenSet[str]
    album_name: str
    album_variants: Tuple[str, ...]
    songs: Tuple[Song, ...]

    def accepts_number(self, text: str) -> bool:
        # exact match only, "1" and "11" are too close for fuzzy matching
        return text in self.number_variants

    def accepts_album(self, text: str, threshold: float = DEFAULT_THRESHOLD) -> bool:
        return matches_any(text, self.album_variants, threshold)

    def resolve_song(self, text: str, threshold: float = DEFAULT_THRESHOLD) -> Optional[str]:
        """Canonical name of the first song whose variants match, or None"""
        for song in self.songs:
            if matches_any(text, song.variants, threshold):
                return song.name
        return None


@dataclass(frozen=True)
class CatalogView:
    """An immutable snapshot of the catalog ordering"""
    stages: Tuple[Stage, ...]

    @property
    def size(self) -> int:
        return len(self.stages)

    def stage_for(self, stage: int) -> Stage:
        return self.stages[logical_stage(stage, self.size) - 1]


class Catalog:
    """Album reference data with a shared, reversible ordering"""

    def __init__(self, stages: Sequence[Stage]):
        if not stages:
            raise CatalogError("Catalog needs at least one stage")
        self._view = CatalogView(tuple(stages))
        self._lock = threading.Lock()
        self._reversed = False

    @property
    def size(self) -> int:
        return self._view.size

    @property
    def is_reversed(self) -> bool:
        return self._reversed

    def snapshot(self) -> CatalogView:
        return self._view

    def reverse(self) -> CatalogView:
        """
        Reverse the traversal direction for every channel

        Number tokens travel with their album, so after reversing a
        10-album catalog stage 1 asks for "10" and the tenth album.

        Returns:
            the new snapshot
        """
        with self._lock:
            self._view = CatalogView(tuple(reversed(self._view.stages)))
            self._reversed = not self._reversed
            logger.info(
                f"Catalog reversed (reversed={self._reversed}), "
                f"first stage is now {self._view.stages[0].album_name}"
            )
            return self._view


def _variants(canonical: str, allowed: List[str]) -> Tuple[str, ...]:
    # keep the author's order, drop duplicates and empties
    seen = []
    for variant in [normalize_answer(name) for name in allowed] + [normalize_answer(canonical)]:
        if variant and variant not in seen:
            seen.append(variant)
    return tuple(seen)


def build_stages(albums: List[dict], numbers: List[dict]) -> List[Stage]:
    """
    Combine album records and number records into stages

    The i-th number record belongs to the i-th album.

    Raises:
        CatalogError: the two lists differ in length or a record is malformed
    """
    if len(albums) != len(numbers):
        raise CatalogError(
            f"Catalog has {len(albums)} albums but {len(numbers)} number tokens"
        )

    stages = []
    for album, number in zip(albums, numbers):
        try:
            songs = tuple(
                Song(name=song["name"], variants=_variants(song["name"], song.get("allowedNames", [])))
                for song in album["songs"]
            )
            stages.append(Stage(
                number=str(number["number"]),
                number_variants=frozenset(_variants(str(number["number"]), number.get("allowedNames", []))),
                album_name=album["name"],
                album_variants=_variants(album["name"], album.get("allowedNames", [])),
                songs=songs,
            ))
        except (KeyError, TypeError) as e:
            raise CatalogError(f"Malformed catalog record {album!r}: {e}") from e

    return stages


def load_catalog(albums_path=None, numbers_path=None) -> Catalog:
    """
    Load the catalog from JSON files

    Args:
        albums_path: list of {name, allowedNames, songs: [{name, allowedNames}]}
        numbers_path: list of {number, allowedNames}, one per album

    Raises:
        CatalogError: a file is missing, is not JSON, or does not line up
    """
    albums_path = Path(albums_path or DEFAULT_ALBUMS_PATH)
    numbers_path = Path(numbers_path or DEFAULT_NUMBERS_PATH)

    try:
        albums = json.loads(albums_path.read_text(encoding="utf-8"))
        numbers = json.loads(numbers_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise CatalogError(f"Could not read catalog data: {e}") from e

    catalog = Catalog(build_stages(albums, numbers))
    logger.info(f"Loaded catalog with {catalog.size} stages from {albums_path}")
    return catalog


@lru_cache()
def get_catalog() -> Catalog:
    """The process-wide catalog shared by every channel"""
    from database import get_settings

    settings = get_settings()
    return load_catalog(settings.catalog_path, settings.numbers_path)
