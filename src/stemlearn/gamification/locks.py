"""Per-user write serialization."""

from __future__ import annotations

import asyncio
import weakref


class UserLocks:
    """One asyncio.Lock per user id, created on first use.

    Gamification writes for the same user (XP, streak, badges) run one at a
    time; different users never wait on each other. Entries are weak: a lock
    lives only while a holder or waiter references it, so the registry stays
    the size of the set of users with writes in flight.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def for_user(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)
