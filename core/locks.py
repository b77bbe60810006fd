"""
Concurrency helpers

Answers for the same channel must be processed one at a time: two players
racing the same duplicate-song check must not both get through. Two layers
provide that:

1. ChannelLocks: an in-process lock per channel (FastAPI runs sync endpoints
   in a thread pool)
2. with_channel_lock: a database row lock (SELECT ... FOR UPDATE) for
   deployments running several processes against PostgreSQL

Different channels never share a lock, so they never wait on each other.
"""
import threading
from contextlib import contextmanager
from typing import Dict, Iterator

from sqlalchemy.orm import Session, Query

from models import Channel


def with_channel_lock(channel_id: str, db: Session) -> Query:
    """
    Lock one Channel row

    Usage:
        channel = with_channel_lock(channel_id, db).first()
        if not channel:
            raise ChannelNotRegistered(channel_id)
        channel.score += 1
        db.commit()

    Args:
        channel_id: chat channel id
        db: SQLAlchemy Session

    Returns:
        Query object (call .first() to fetch the row)

    Notes:
        - nowait=False waits for the lock instead of failing
        - must run inside a transaction (commit or rollback releases it)
        - SQLite has no row locks; the clause is dropped there and
          ChannelLocks does the work
    """
    return db.query(Channel).filter(
        Channel.channel_id == channel_id
    ).with_for_update(nowait=False)


class ChannelLocks:
    """
    Registry of one threading.Lock per channel id

    A lock only lives while someone holds or waits for it: the last user
    removes it, so ids that are never seen again leave nothing behind.
    """

    def __init__(self):
        self._guard = threading.Lock()
        # channel id -> [lock, number of holders and waiters]
        self._locks: Dict[str, list] = {}

    def _acquire_entry(self, channel_id: str) -> threading.Lock:
        with self._guard:
            entry = self._locks.get(channel_id)
            if entry is None:
                entry = self._locks[channel_id] = [threading.Lock(), 0]
            entry[1] += 1
            return entry[0]

    def _release_entry(self, channel_id: str) -> None:
        with self._guard:
            entry = self._locks[channel_id]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[channel_id]

    @contextmanager
    def hold(self, channel_id: str) -> Iterator[None]:
        """Serialize the enclosed block against other holders of the same channel"""
        lock = self._acquire_entry(channel_id)
        try:
            with lock:
                yield
        finally:
            self._release_entry(channel_id)

    def __len__(self) -> int:
        return len(self._locks)


# shared by every request of the process
channel_locks = ChannelLocks()
