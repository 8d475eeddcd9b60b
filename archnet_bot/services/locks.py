from __future__ import annotations

import asyncio
import weakref
from typing import Hashable


class KeyedLocks:
    """One ``asyncio.Lock`` per key, released from memory once nobody holds it."""

    def __init__(self) -> None:
        self._locks: "weakref.WeakValueDictionary[Hashable, asyncio.Lock]" = weakref.WeakValueDictionary()

    def get(self, key: Hashable) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock
