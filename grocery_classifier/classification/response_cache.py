"""
Short-lived memo of full classification responses.

The cache is keyed by an order-independent signature of the raw item list.
It only ever grows up to ``capacity`` entries; once full, new responses are
dropped until the next wholesale clear. Clears happen when the configured
interval has elapsed on the injected clock, or explicitly via ``clear()``.
Catalog writes never invalidate individual entries.
"""

import hashlib
import json
import logging
import time
from typing import Callable, Dict, Optional, Sequence

from ..models import ClassificationResponse

logger = logging.getLogger(__name__)


class ResponseCache:
    """Bounded, periodically cleared response cache."""

    def __init__(
        self,
        capacity: int = 1000,
        clear_interval_seconds: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.capacity = capacity
        self.clear_interval_seconds = clear_interval_seconds
        self._clock = clock
        self._entries: Dict[str, ClassificationResponse] = {}
        self._last_cleared = clock()

    @staticmethod
    def signature(items: Sequence[str]) -> str:
        """Digest of the sorted raw item list; permutations share a signature."""
        payload = json.dumps(sorted(items), ensure_ascii=False)
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()

    def _clear_if_expired(self) -> None:
        now = self._clock()
        if now - self._last_cleared >= self.clear_interval_seconds:
            if self._entries:
                logger.info(f"Response cache interval elapsed, dropping {len(self._entries)} entries")
            self._entries.clear()
            self._last_cleared = now

    def get(self, signature: str) -> Optional[ClassificationResponse]:
        """Return the cached response or None on a miss."""
        self._clear_if_expired()
        response = self._entries.get(signature)
        logger.debug(f"Response cache {'hit' if response else 'miss'} for {signature[:12]}")
        return response

    def put(self, signature: str, response: ClassificationResponse) -> bool:
        """
        Store a response if there is room.

        Returns:
            True if the response was stored (or already present)
        """
        self._clear_if_expired()
        if signature in self._entries:
            return True
        if len(self._entries) >= self.capacity:
            logger.debug("Response cache full, dropping new entry")
            return False
        self._entries[signature] = response
        return True

    def clear(self) -> None:
        """Drop every entry and restart the clear interval."""
        self._entries.clear()
        self._last_cleared = self._clock()

    def __len__(self) -> int:
        return len(self._entries)
