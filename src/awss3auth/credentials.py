"""
Credential cache keyed by auth configuration id
"""

import logging
import threading
from typing import Callable, Dict, Mapping, Optional, Union

from .models import Credentials

logger = logging.getLogger(__name__)

# Resolves an auth configuration id to credentials (or a raw auth method
# configuration mapping), or None when the id is unknown.
CredentialLoader = Callable[[str], Optional[Union[Credentials, Mapping[str, str]]]]


class CredentialCache:
    """
    Thread-safe cache of resolved credentials.

    Reads and writes are serialized by one lock; cached ``Credentials`` are
    immutable so callers may use them after the lock is released.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: Dict[str, Credentials] = {}

    def lookup(self, authcfg: str) -> Optional[Credentials]:
        with self._lock:
            return self._entries.get(authcfg)

    def put(self, authcfg: str, credentials: Credentials) -> None:
        with self._lock:
            logger.debug("Putting AWS S3 credentials for authcfg: %s", authcfg)
            self._entries[authcfg] = credentials

    def invalidate(self, authcfg: str) -> bool:
        """Drop the entry for ``authcfg``; return whether one was cached."""
        with self._lock:
            if self._entries.pop(authcfg, None) is None:
                return False
        logger.debug("Removed AWS S3 credentials for authcfg: %s", authcfg)
        return True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, authcfg: str) -> bool:
        with self._lock:
            return authcfg in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_or_load(self, authcfg: str, loader: CredentialLoader) -> Optional[Credentials]:
        """
        Return cached credentials, loading and caching them on a miss.

        A loader result of ``None`` is not cached, so the next call retries.
        Concurrent misses may each call the loader; the last ``put`` wins.
        """
        cached = self.lookup(authcfg)
        if cached is not None:
            logger.debug("Retrieved cached credentials for authcfg: %s", authcfg)
            return cached

        loaded = loader(authcfg)
        if loaded is None:
            logger.debug("No credentials available for authcfg: %s", authcfg)
            return None
        if not isinstance(loaded, Credentials):
            loaded = Credentials.from_config(loaded)

        self.put(authcfg, loaded)
        return loaded
