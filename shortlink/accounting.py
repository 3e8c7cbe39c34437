"""Click accounting for resolved short links."""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional, Set

from .database.base import LinkStoreBase
from .expiration import utcnow


class ClickAccountant:
    """Records accesses as blind atomic increments against the store.

    Two entry points:
        record_access: awaited by the caller (cache-miss path).
        schedule: fire-and-forget task detached from the caller (cache-hit path).
            Failures are logged and never retried, so a crash loses at most the
            clicks still pending.
    """

    def __init__(
        self,
        store: LinkStoreBase,
        logger: Optional[logging.Logger] = None,
        max_pending: int = 10000,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize click accountant.

        Args:
            store: Store to update
            logger: Optional logger
            max_pending: Maximum in-flight scheduled increments; extra clicks are dropped
            clock: Source of access timestamps
        """
        self.store = store
        self.logger = logger or logging.getLogger(__name__)
        self.max_pending = max_pending
        self.clock = clock
        self._pending: Set[asyncio.Task] = set()
        self.dropped = 0

    async def record_access(self, code: str) -> bool:
        """Increment the click count and stamp last access for an active code.

        Args:
            code: The short code that was accessed

        Returns:
            True if an active link was updated, False if the code is no longer active
        """
        updated = await self.store.increment_access(code, self.clock())
        if not updated:
            self.logger.debug(f"Click dropped for inactive code: {code}")
        return updated

    def schedule(self, code: str) -> Optional[asyncio.Task]:
        """Record an access in a background task without awaiting it.

        The task is not tied to the caller: cancelling the caller does not
        cancel the increment.

        Returns:
            The scheduled task, or None if the click was dropped
        """
        if len(self._pending) >= self.max_pending:
            self.dropped += 1
            self.logger.warning(f"Too many pending click updates, dropping click for {code}")
            return None

        task = asyncio.get_running_loop().create_task(self.record_access(code))
        self._pending.add(task)
        task.add_done_callback(self._on_done(code))
        return task

    def _on_done(self, code: str):
        def callback(task: asyncio.Task) -> None:
            self._pending.discard(task)
            if task.cancelled():
                self.logger.warning(f"Click update cancelled for {code}")
                return
            error = task.exception()
            if error is not None:
                self.logger.error(f"Failed to increment click count for {code}: {error}")

        return callback

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for all scheduled click updates to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
