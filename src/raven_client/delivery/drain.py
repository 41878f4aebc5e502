"""
Module: drain.py
Description: Bounded wait for in-flight deliveries.

A shutting-down process calls wait_for_idle() to give outstanding
deliveries a chance to finish. The wait ends as soon as the pending
table empties or the timeout elapses, whichever comes first. Only one
drain may be active at a time; a second caller is turned away
immediately and the first drain is unaffected.

Requests still pending after a timeout are abandoned in place: they
stay in the table, and late completions for them are absorbed.
"""

import threading
import time
from typing import Callable

from ..models.outcome import DrainOutcome, DrainStatus
from ..utils.logger import get_logger
from .pending import PendingRequestTable

logger = get_logger(__name__)


class DrainController:
    """
    Non-reentrant drain over a PendingRequestTable.

    Shares ``condition`` with the DeliveryCoordinator that mutates the
    table, so emptiness checks and wake-ups are race free.
    """

    def __init__(
        self,
        table: PendingRequestTable,
        condition: threading.Condition,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._table = table
        self._condition = condition
        self._clock = clock
        self._draining = False

    @property
    def is_draining(self) -> bool:
        with self._condition:
            return self._draining

    def wait_for_idle(self, timeout: float) -> DrainOutcome:
        """
        Block until no request is pending or ``timeout`` seconds pass.

        Args:
            timeout: Upper bound on the wait in seconds

        Returns:
            DrainOutcome with the exit reason and elapsed time
        """
        with self._condition:
            if self._draining:
                logger.error("Recursive drain rejected", pending=len(self._table))
                return DrainOutcome(status=DrainStatus.REJECTED, pending=len(self._table))

            if self._table.is_empty():
                return DrainOutcome(status=DrainStatus.IDLE)

            self._draining = True
            started = self._clock()
            try:
                drained = self._condition.wait_for(self._table.is_empty, timeout=max(timeout, 0.0))
            finally:
                self._draining = False
            elapsed = max(self._clock() - started, 0.0)
            pending = len(self._table)

        if drained:
            logger.debug("Drain finished", elapsed_ms=round(elapsed * 1000))
            return DrainOutcome(status=DrainStatus.DRAINED, elapsed=elapsed)

        logger.warning(
            "Drain ended on timeout",
            elapsed_ms=round(elapsed * 1000),
            timeout_ms=round(timeout * 1000),
            pending=pending
        )
        return DrainOutcome(status=DrainStatus.TIMED_OUT, elapsed=elapsed, pending=pending)

    def notify_if_idle(self) -> None:
        """
        Release an active drain once the table is empty.

        Must be called with the shared condition held.
        """
        if self._draining and self._table.is_empty():
            self._condition.notify_all()
