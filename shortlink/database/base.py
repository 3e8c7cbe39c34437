"""Abstract base class for short-link store implementations."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional

from .models import ShortLink


class LinkStoreBase(ABC):
    """Abstract base class for the authoritative short-link store.

    Every lookup here only sees active links unless stated otherwise.
    Implementations raise StoreError for infrastructure failures.
    """

    @abstractmethod
    async def create(self, link: ShortLink) -> ShortLink:
        """Persist a new short link.

        The store enforces uniqueness of code among active links; this is the
        final arbiter when concurrent writers race for the same code.

        Args:
            link: Link to persist

        Returns:
            The stored link (with any store-assigned fields filled in)

        Raises:
            CodeTakenError: If an active link already owns the code
        """

    @abstractmethod
    async def find_active_by_code(self, code: str) -> Optional[ShortLink]:
        """Get the active link for a code.

        Args:
            code: The short code to lookup

        Returns:
            The link if found, None otherwise
        """

    @abstractmethod
    async def find_active_by_target(self, target: str) -> Optional[ShortLink]:
        """Get an active link pointing at exactly this target.

        Args:
            target: Normalized target URL

        Returns:
            The most recently created matching link, None otherwise
        """

    @abstractmethod
    async def find_latest_by_code(self, code: str) -> Optional[ShortLink]:
        """Get the most recent link for a code, active or not."""

    @abstractmethod
    async def next_id(self) -> int:
        """Reserve the next value of the store-wide code id sequence.

        Values are never handed out twice, across processes and restarts,
        so codes derived from them with from_id() never repeat.
        """

    @abstractmethod
    async def exists_active(self, code: str) -> bool:
        """Check if an active link owns the code."""

    @abstractmethod
    async def increment_access(self, code: str, accessed_at: datetime) -> bool:
        """Atomically add one click and stamp the last access time.

        Expressed as a single blind update, never read-then-write.

        Args:
            code: The short code to update
            accessed_at: Access timestamp

        Returns:
            True if an active link was updated, False otherwise
        """

    @abstractmethod
    async def deactivate(self, code: str) -> bool:
        """Mark the active link for a code inactive.

        Returns:
            True if a link was deactivated, False if none was active
        """

    @abstractmethod
    async def deactivate_expired(self, now: datetime) -> int:
        """Deactivate every active link whose expiry is before now.

        Returns:
            Number of links deactivated
        """

    @abstractmethod
    async def get_statistics(self) -> Dict[str, Any]:
        """Get store statistics (total_urls, active_urls, total_accesses)."""

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is healthy."""

    @abstractmethod
    async def close(self) -> None:
        """Release store connections."""
