"""
Module: pending.py
Description: Table of in-flight delivery requests.

Maps request ids to the serialized payload of the event being
delivered. An id stays in the table across redirects and leaves it
exactly once, on terminal success or failure.

The table does no locking of its own; DeliveryCoordinator guards every
access with its condition lock.
"""

from typing import Dict, Iterator, Optional

from ..utils.logger import get_logger

logger = get_logger(__name__)


class PendingRequestTable:
    """In-flight request bodies keyed by request id."""

    def __init__(self) -> None:
        self._requests: Dict[int, bytes] = {}

    def insert(self, request_id: int, body: bytes) -> None:
        """
        Register a new in-flight request.

        Raises:
            ValueError: If request_id is already tracked
        """
        if request_id in self._requests:
            raise ValueError(f"request {request_id} is already pending")
        self._requests[request_id] = body

    def remove(self, request_id: int) -> bool:
        """
        Deregister a settled request.

        Returns:
            True if the id was tracked, False for stale or duplicate completions
        """
        if self._requests.pop(request_id, None) is None:
            logger.debug("Completion for untracked request ignored", request_id=request_id)
            return False
        return True

    def lookup(self, request_id: int) -> Optional[bytes]:
        return self._requests.get(request_id)

    def is_empty(self) -> bool:
        return not self._requests

    def __len__(self) -> int:
        return len(self._requests)

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._requests

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._requests))
