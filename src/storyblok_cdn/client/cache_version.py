"""Thread-safe holder for the edge cache-busting version (``cv``).

A :class:`CacheVersion` starts out *unfetched* (``value is None``) and becomes
*fetched* the first time a version is stored. It never goes back: later
refreshes only replace the stored string. Concurrent refreshes may race; the
last writer wins, which is harmless because any recently issued version is
accepted by the CDN.
"""

from __future__ import annotations

import threading
from typing import Optional


class CacheVersion:
    """The most recent cache version fetched from ``spaces/me``."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: Optional[str] = None

    @property
    def value(self) -> Optional[str]:
        """The stored version, or ``None`` if none was fetched yet."""
        with self._lock:
            return self._value

    @property
    def is_fetched(self) -> bool:
        return self.value is not None

    def set(self, value: str) -> None:
        """Replace the stored version."""
        with self._lock:
            self._value = value

    def __repr__(self) -> str:
        return f"CacheVersion({self.value!r})"
