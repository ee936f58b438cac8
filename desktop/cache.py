"""Keyed cache of server reads, invalidated explicitly after mutations."""

from __future__ import annotations

from typing import Any, Awaitable, Callable

import structlog

logger = structlog.get_logger()

FILES_KEY = "/api/files"
DELETED_FILES_KEY = "/api/files/deleted"
SETTINGS_KEY = "/api/settings"
USER_KEY = "/api/auth/user"


class QueryCache:
    """Each key holds the last fetched value until invalidated.

    Invalidation is exact-match: invalidating ``/api/files`` leaves
    ``/api/files/deleted`` alone.
    """

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}
        self.fetch_counts: dict[str, int] = {}

    async def get(self, key: str, fetch: Callable[[], Awaitable[Any]]) -> Any:
        if key not in self._entries:
            self._entries[key] = await fetch()
            self.fetch_counts[key] = self.fetch_counts.get(key, 0) + 1
        return self._entries[key]

    def is_cached(self, key: str) -> bool:
        return key in self._entries

    def invalidate(self, *keys: str) -> None:
        for key in keys:
            self._entries.pop(key, None)
        logger.debug("cache_invalidated", keys=list(keys))

    def clear(self) -> None:
        self._entries.clear()
