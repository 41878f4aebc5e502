"""
Module: coordinator.py
Description: Delivery coordination for serialized events.

DeliveryCoordinator accepts payloads, hands them to a Transport, and
resolves the asynchronous completions: redirects replay the stored
payload under the same request id, success and failure settle the
request. Completions arrive on transport threads, so the pending table
and drain state are guarded by one condition lock.

Key Components:
- DeliveryCoordinator: submit(), on_complete(), wait_for_idle()
- Attempt: Per-operation context threaded through the completion callback

Dependencies: threading, itertools
"""

import itertools
import json
import threading
import time
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Dict, Optional

from ..config.dsn import Endpoint
from ..config.settings import CLIENT_NAME, CLIENT_VERSION
from ..models.outcome import (
    CertificateWarning,
    DrainOutcome,
    Failure,
    Outcome,
    Redirected,
    Success,
)
from ..utils.logger import get_logger
from .drain import DrainController
from .pending import PendingRequestTable
from .transport import OperationHandle, Transport

logger = get_logger(__name__)

DEFAULT_MAX_REDIRECTS = 5


@dataclass
class Attempt:
    """
    Context of one transport operation for a request.

    Attributes:
        url: URL the operation was sent to
        headers: Headers it carried, reused for redirects
        redirects: Redirects followed before this operation
    """

    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    redirects: int = 0


def _collector_event_id(body: bytes) -> str:
    """Pull the collector-assigned id out of a store response."""
    try:
        document = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return body[:200].decode("utf-8", errors="replace")
    if isinstance(document, dict) and "id" in document:
        return str(document["id"])
    return str(document)[:200]


class DeliveryCoordinator:
    """
    Fire-and-forget delivery of serialized events.

    submit() never blocks and never raises. Failures are logged and the
    request is dropped; only redirects cause a payload to be sent again.
    """

    def __init__(
        self,
        transport: Transport,
        endpoint: Optional[Endpoint] = None,
        *,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        ignore_certificate_errors: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the coordinator.

        Args:
            transport: Transport used for every POST
            endpoint: Collector endpoint; None keeps the coordinator disabled
            max_redirects: Redirects followed per request before failing it
            ignore_certificate_errors: Override certificate failures (lenient TLS)
            clock: Source of Unix timestamps for the auth header
        """
        self._transport = transport
        self._endpoint = endpoint
        self._max_redirects = max_redirects
        self._ignore_certificate_errors = ignore_certificate_errors
        self._clock = clock
        self._ids = itertools.count(1)
        self._condition = threading.Condition()
        self._table = PendingRequestTable()
        self._drain = DrainController(self._table, self._condition)

    @property
    def endpoint(self) -> Optional[Endpoint]:
        return self._endpoint

    @endpoint.setter
    def endpoint(self, endpoint: Optional[Endpoint]) -> None:
        self._endpoint = endpoint

    @property
    def enabled(self) -> bool:
        return self._endpoint is not None

    @property
    def pending_count(self) -> int:
        with self._condition:
            return len(self._table)

    def is_pending(self, request_id: int) -> bool:
        with self._condition:
            return request_id in self._table

    def build_headers(self, endpoint: Endpoint) -> Dict[str, str]:
        """Headers for a POST to ``endpoint`` sent now."""
        return {
            "Content-Type": "application/json",
            "User-Agent": f"{CLIENT_NAME}/{CLIENT_VERSION}",
            "X-Sentry-Auth": endpoint.auth_header(int(self._clock())),
        }

    def submit(self, payload: bytes) -> Optional[int]:
        """
        Start delivering ``payload``.

        Args:
            payload: Serialized event

        Returns:
            The request id, or None when the coordinator is disabled or
            the transport refused the request
        """
        endpoint = self._endpoint
        if endpoint is None:
            return None

        with self._condition:
            request_id = next(self._ids)
            self._table.insert(request_id, payload)

        attempt = Attempt(url=endpoint.store_url, headers=self.build_headers(endpoint))
        logger.debug("Submitting event", request_id=request_id, url=attempt.url, size=len(payload))

        if not self._issue(request_id, attempt, payload):
            return None
        return request_id

    def on_complete(
        self,
        request_id: int,
        outcome: Outcome,
        attempt: Optional[Attempt] = None,
        handle: Optional[OperationHandle] = None,
    ) -> None:
        """
        Resolve a transport completion for ``request_id``.

        Args:
            request_id: Id assigned by submit()
            outcome: What the transport reported
            attempt: Context of the operation that completed, if known
            handle: Operation handle, needed to override certificate errors
        """
        if isinstance(outcome, CertificateWarning):
            self._on_certificate_warning(request_id, outcome, handle)
            return

        if isinstance(outcome, Redirected) and (attempt is None or outcome.url != attempt.url):
            if self._follow_redirect(request_id, outcome, attempt):
                return
            outcome = Failure(
                status_code=outcome.status_code,
                error=f"redirect limit of {self._max_redirects} exceeded"
            )

        with self._condition:
            tracked = request_id in self._table

        if tracked:
            self._log_outcome(request_id, outcome, attempt)
        self._settle(request_id)

    def wait_for_idle(self, timeout: float) -> DrainOutcome:
        """Block until nothing is pending or ``timeout`` seconds pass."""
        return self._drain.wait_for_idle(timeout)

    @property
    def is_draining(self) -> bool:
        return self._drain.is_draining

    def _issue(self, request_id: int, attempt: Attempt, body: bytes) -> bool:
        callback = partial(self._on_transport_complete, request_id, attempt)
        try:
            self._transport.post(attempt.url, attempt.headers, body, callback)
        except Exception as e:
            logger.error(
                "Transport refused request",
                request_id=request_id,
                url=attempt.url,
                error=str(e),
                error_type=type(e).__name__
            )
            self._settle(request_id)
            return False
        return True

    def _on_transport_complete(
        self,
        request_id: int,
        attempt: Attempt,
        handle: OperationHandle,
        outcome: Outcome,
    ) -> None:
        self.on_complete(request_id, outcome, attempt=attempt, handle=handle)

    def _on_certificate_warning(
        self,
        request_id: int,
        outcome: CertificateWarning,
        handle: Optional[OperationHandle],
    ) -> None:
        if self._ignore_certificate_errors and handle is not None:
            logger.warning(
                "Ignoring certificate error",
                request_id=request_id,
                url=handle.url,
                detail=outcome.detail
            )
            handle.ignore_certificate_errors()
            return

        logger.warning(
            "Certificate error not overridden",
            request_id=request_id,
            detail=outcome.detail
        )

    def _follow_redirect(
        self,
        request_id: int,
        outcome: Redirected,
        attempt: Optional[Attempt],
    ) -> bool:
        """Replay the stored body against the redirect target; False if the cap is hit."""
        with self._condition:
            body = self._table.lookup(request_id)

        if body is None:
            logger.debug("Redirect for untracked request ignored", request_id=request_id)
            # Stale redirect: nothing left to settle.
            with self._condition:
                self._drain.notify_if_idle()
            return True

        redirects = attempt.redirects if attempt is not None else 0
        if redirects >= self._max_redirects:
            return False

        if attempt is not None:
            headers = attempt.headers
        elif self._endpoint is not None:
            headers = self.build_headers(self._endpoint)
        else:
            headers = {}

        logger.debug(
            "Following redirect",
            request_id=request_id,
            url=outcome.url,
            redirects=redirects + 1
        )
        self._issue(request_id, Attempt(url=outcome.url, headers=headers, redirects=redirects + 1), body)
        return True

    def _log_outcome(self, request_id: int, outcome: Outcome, attempt: Optional[Attempt]) -> None:
        if isinstance(outcome, Success):
            logger.info(
                "Event accepted by collector",
                request_id=request_id,
                sentry_event_id=_collector_event_id(outcome.body)
            )
        elif isinstance(outcome, Failure):
            logger.warning(
                "Failed to send event",
                request_id=request_id,
                status_code=outcome.status_code,
                error=outcome.error,
                response=outcome.body[:500].decode("utf-8", errors="replace")
            )
        else:
            logger.warning(
                "Redirect loops back to the same URL",
                request_id=request_id,
                url=attempt.url if attempt else None,
                status_code=outcome.status_code
            )

    def _settle(self, request_id: int) -> None:
        with self._condition:
            self._table.remove(request_id)
            self._drain.notify_if_idle()
