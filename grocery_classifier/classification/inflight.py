"""
In-flight AI request de-duplication.

Concurrent classification requests that share an unknown product would each
call the LLM for it. The registry hands the first request ownership of the
normalized key; later requests wait on the owner's future instead.
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Tuple

logger = logging.getLogger(__name__)


def _consume_exception(future: "asyncio.Future[Any]") -> None:
    # Marks the exception as retrieved when no other request awaited it.
    if not future.cancelled():
        future.exception()


class InFlightRegistry:
    """Maps normalized keys to the pending result of the request resolving them."""

    def __init__(self) -> None:
        self._pending: Dict[str, "asyncio.Future[Any]"] = {}

    def claim(
        self, keys: Iterable[str]
    ) -> Tuple[List[str], Dict[str, "asyncio.Future[Any]"]]:
        """
        Claim keys for resolution.

        Returns:
            The keys now owned by the caller, and futures for keys another
            request is already resolving
        """
        loop = asyncio.get_running_loop()
        owned: List[str] = []
        waiting: Dict[str, "asyncio.Future[Any]"] = {}

        for key in dict.fromkeys(keys):
            future = self._pending.get(key)
            if future is None:
                self._pending[key] = loop.create_future()
                owned.append(key)
            else:
                waiting[key] = future

        if waiting:
            logger.debug(f"Waiting on {len(waiting)} products already being classified")
        return owned, waiting

    def resolve(self, key: str, value: Any) -> None:
        future = self._pending.pop(key, None)
        if future is not None and not future.done():
            future.set_result(value)

    def fail(self, key: str, exc: BaseException) -> None:
        future = self._pending.pop(key, None)
        if future is not None and not future.done():
            future.add_done_callback(_consume_exception)
            future.set_exception(exc)

    def pending_keys(self) -> List[str]:
        return list(self._pending)

    def __len__(self) -> int:
        return len(self._pending)
