"""In-memory short-link store.

Keeps the same semantics as the Postgres store (active-only uniqueness,
blind increments, soft deletion) so the engine can run without a database.
Every method completes without yielding to the event loop, which makes each
one atomic with respect to other coroutines on the same loop.
"""

import itertools
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..errors import CodeTakenError
from .base import LinkStoreBase
from .models import LinkStatus, ShortLink


class MemoryLinkStore(LinkStoreBase):
    """Process-local store for development and tests."""

    def __init__(self):
        self._rows: List[ShortLink] = []
        self._active_by_code: Dict[str, ShortLink] = {}
        self._ids = itertools.count(1)
        self._code_ids = itertools.count(1)

    async def create(self, link: ShortLink) -> ShortLink:
        if link.active and link.code in self._active_by_code:
            raise CodeTakenError(link.code)

        link.id = next(self._ids)
        self._rows.append(link)
        if link.active:
            self._active_by_code[link.code] = link
        return link

    async def find_active_by_code(self, code: str) -> Optional[ShortLink]:
        return self._active_by_code.get(code)

    async def find_active_by_target(self, target: str) -> Optional[ShortLink]:
        for link in reversed(self._rows):
            if link.active and link.target == target:
                return link
        return None

    async def find_latest_by_code(self, code: str) -> Optional[ShortLink]:
        for link in reversed(self._rows):
            if link.code == code:
                return link
        return None

    async def next_id(self) -> int:
        return next(self._code_ids)

    async def exists_active(self, code: str) -> bool:
        return code in self._active_by_code

    async def increment_access(self, code: str, accessed_at: datetime) -> bool:
        link = self._active_by_code.get(code)
        if link is None:
            return False
        link.click_count += 1
        link.last_access_at = accessed_at
        return True

    async def deactivate(self, code: str) -> bool:
        link = self._active_by_code.pop(code, None)
        if link is None:
            return False
        link.status = LinkStatus.INACTIVE
        return True

    async def deactivate_expired(self, now: datetime) -> int:
        expired = [link for link in self._active_by_code.values() if link.is_expired(now)]
        for link in expired:
            await self.deactivate(link.code)
        return len(expired)

    async def get_statistics(self) -> Dict[str, Any]:
        return {
            "total_urls": len(self._rows),
            "active_urls": len(self._active_by_code),
            "total_accesses": sum(link.click_count for link in self._rows),
            "database": "memory",
        }

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        pass
