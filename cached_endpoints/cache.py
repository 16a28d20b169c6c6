from datetime import timedelta
import base64
import json
import logging
import threading
import time
from typing import Callable, Optional

from .model import CacheEntry
from .storage import Storage
from .util import DataclassJSONDecoder, DataclassJSONEncoder


logger = logging.getLogger(__name__)


class CorruptEntry(Exception):
    def __init__(self, fingerprint: str):
        super().__init__(fingerprint)
        self.__fingerprint = fingerprint

    @property
    def fingerprint(self) -> str:
        return self.__fingerprint


class ResponseCache:
    """
    Remembers raw response payloads by fingerprint, on top of a `Storage`.

    The cache does not decide what is cacheable; the pipeline does. What the cache owns is expiry: a lookup is given a
    TTL and evicts the entry it finds if the entry is too old. There is no background eviction.

    Operations on the same fingerprint are serialized, so a stale read can never delete an entry that a concurrent
    `store()` just wrote. Operations on different fingerprints only contend when they happen to share a lock stripe.
    """

    LOCK_STRIPES = 64

    def __init__(self, storage: Storage, clock: Callable[[], float] = time.time) -> None:
        """
        @param storage
          Where entries are persisted.
        @param clock
          Returns the current time in seconds since the epoch.
        """
        self.__storage = storage
        self.__clock = clock
        self.__locks = [threading.Lock() for _ in range(self.LOCK_STRIPES)]

    def _lock_for(self, fingerprint: str) -> threading.Lock:
        return self.__locks[hash(fingerprint) % self.LOCK_STRIPES]

    def _load(self, fingerprint: str) -> Optional[CacheEntry]:
        serialized = self.__storage.get(fingerprint)
        if serialized is None:
            return None
        try:
            entry = json.loads(serialized, cls=DataclassJSONDecoder, class_type=CacheEntry)
        except (TypeError, ValueError):
            raise CorruptEntry(fingerprint)
        if entry.fingerprint != fingerprint or not isinstance(entry.payload, str):
            raise CorruptEntry(fingerprint)
        try:
            base64.b64decode(entry.payload, validate=True)
        except ValueError:
            raise CorruptEntry(fingerprint)
        return entry

    def lookup(self, fingerprint: str, ttl: timedelta) -> Optional[CacheEntry]:
        """
        Retrieve a fresh cache entry.

        @param fingerprint
          The key of the entry.
        @param ttl
          How old the entry may be. A zero TTL never produces a hit.
        @return
          The entry, or `None` if there is none or it has expired. Expired entries are deleted.
        """
        if ttl <= timedelta(0):
            return None

        with self._lock_for(fingerprint):
            try:
                entry = self._load(fingerprint)
            except CorruptEntry as e:
                logger.warning('Found a corrupt cache entry. Deleting the entry {}.'.format(e.fingerprint))
                self.__storage.delete(e.fingerprint)
                return None

            if entry is None:
                logger.info('No matching cache entry found.')
                return None

            age = self.__clock() - entry.written_at
            if age >= ttl.total_seconds():
                logger.info('Cache entry is {:.3f}s old, which exceeds the TTL of {}. Deleting the entry.'.format(
                    age, ttl))
                self.__storage.delete(fingerprint)
                return None

        logger.info('Found a fresh cache entry.')
        return entry

    def store(self, fingerprint: str, body: bytes) -> CacheEntry:
        """
        Write a cache entry, overwriting any existing entry for `fingerprint`.

        @param fingerprint
          The key of the entry.
        @param body
          The raw response body.
        @return
          The entry that was written.
        """
        entry = CacheEntry(fingerprint=fingerprint,
                           written_at=self.__clock(),
                           payload=base64.b64encode(body).decode('ascii'))
        serialized = json.dumps(entry, cls=DataclassJSONEncoder)
        with self._lock_for(fingerprint):
            self.__storage.set(fingerprint, serialized)
        logger.info('Stored cache entry {}.'.format(fingerprint))
        return entry

    def remove(self, fingerprint: str) -> None:
        with self._lock_for(fingerprint):
            self.__storage.delete(fingerprint)

    def close(self):
        self.__storage.close()
