# app/common/locks.py

import threading
import zlib
from typing import Hashable


class KeyedLocks:
    """
    A fixed set of locks, picked by hashing the key.

    Callers holding the lock for one key never block callers working on a
    key that hashes to another stripe.
    """

    def __init__(self, stripes: int = 64):
        if stripes < 1:
            raise ValueError("stripes must be >= 1")
        self._locks = [threading.Lock() for _ in range(stripes)]

    def for_key(self, key: Hashable) -> threading.Lock:
        # str keys use crc32 so the stripe is stable across processes
        if isinstance(key, str):
            index = zlib.crc32(key.encode("utf-8"))
        else:
            index = hash(key)
        return self._locks[index % len(self._locks)]
