"""Single-flight cache of repository documents for one resolution call."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from helm_updater.core.fetchers import FetchResult

logger = logging.getLogger(__name__)

FetchFn = Callable[[], Awaitable[FetchResult]]


class RepositoryCache:
    """Deduplicates fetches by normalized fetch URL.

    The task for a key is stored before the fetch starts, so concurrent
    callers for the same key await the same in-flight fetch instead of
    starting their own.  Failed fetches are cached too: a repository that
    failed once is not retried within the same call.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task[FetchResult]] = {}
        self.fetch_count = 0

    @property
    def size(self) -> int:
        return len(self._tasks)

    async def get_or_fetch(self, key: str, fetch: FetchFn) -> FetchResult:
        task = self._tasks.get(key)
        if task is None:
            self.fetch_count += 1
            task = asyncio.create_task(fetch(), name=f"fetch {key}")
            self._tasks[key] = task
        else:
            logger.debug("Reusing fetch of %s", key)
        # A cancelled waiter must not cancel the fetch other waiters share.
        return await asyncio.shield(task)

    def cancel_pending(self) -> None:
        """Cancel fetches nobody is waiting for anymore."""
        for task in self._tasks.values():
            if not task.done():
                task.cancel()
