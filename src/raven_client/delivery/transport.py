"""
Module: transport.py
Description: Asynchronous HTTP transport for event delivery.

Each POST runs on a worker thread and reports exactly one terminal
outcome (Success, Failure or Redirected) through the completion
callback. A certificate verification failure is reported first as a
CertificateWarning; the callback may then call
OperationHandle.ignore_certificate_errors() to have the request sent
again without verification.

Key Components:
- Transport: Protocol consumed by DeliveryCoordinator
- OperationHandle: One in-flight POST
- HttpxTransport: httpx-backed implementation

Dependencies: httpx, tenacity
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Mapping, Optional, Protocol

import httpx

from ..models.outcome import CertificateWarning, Failure, Outcome, Redirected, Success
from ..utils.logger import get_logger
from .retry import connection_retrying, is_certificate_error

logger = get_logger(__name__)


class OperationHandle:
    """Handle for one POST issued by a transport."""

    def __init__(self, url: str) -> None:
        self.url = url
        self._ignore_certificate_errors = False
        self._done = threading.Event()

    def ignore_certificate_errors(self) -> None:
        """Proceed as if the server certificate were valid."""
        self._ignore_certificate_errors = True

    @property
    def certificate_errors_ignored(self) -> bool:
        return self._ignore_certificate_errors

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def mark_done(self) -> None:
        self._done.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the terminal outcome was reported."""
        return self._done.wait(timeout)


CompletionCallback = Callable[[OperationHandle, Outcome], None]


class Transport(Protocol):
    """Asynchronous POST capability."""

    def post(
        self,
        url: str,
        headers: Mapping[str, str],
        body: bytes,
        on_complete: CompletionCallback,
    ) -> OperationHandle:
        ...

    def close(self) -> None:
        ...


class HttpxTransport:
    """
    Transport posting through a shared httpx.Client on a thread pool.

    Redirects are not followed here; they are reported as Redirected so
    the coordinator can replay the payload and enforce its redirect cap.
    """

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        max_workers: int = 4,
        connect_retries: int = 0,
        retry_backoff: float = 0.5,
    ):
        """
        Initialize the transport.

        Args:
            timeout_seconds: HTTP timeout in seconds
            max_workers: Worker threads issuing requests
            connect_retries: Extra attempts on connection-level errors
            retry_backoff: Backoff multiplier in seconds between those attempts
        """
        self.timeout = httpx.Timeout(timeout_seconds, connect=timeout_seconds)
        self.connect_retries = connect_retries
        self.retry_backoff = retry_backoff
        self._client = httpx.Client(timeout=self.timeout, follow_redirects=False)
        self._insecure_client: Optional[httpx.Client] = None
        self._lock = threading.Lock()
        self._closed = False
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="raven-transport"
        )

        logger.debug(
            "HTTP transport initialized",
            timeout_seconds=timeout_seconds,
            max_workers=max_workers,
            connect_retries=connect_retries
        )

    def post(
        self,
        url: str,
        headers: Mapping[str, str],
        body: bytes,
        on_complete: CompletionCallback,
    ) -> OperationHandle:
        """
        Start an asynchronous POST.

        Raises:
            RuntimeError: If the transport was closed
        """
        handle = OperationHandle(url)
        with self._lock:
            if self._closed:
                raise RuntimeError("transport is closed")
            self._executor.submit(self._run, handle, dict(headers), body, on_complete)
        return handle

    def close(self) -> None:
        """Stop accepting requests and release connections."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._client.close()
        if self._insecure_client is not None:
            self._insecure_client.close()

    def _run(
        self,
        handle: OperationHandle,
        headers: Mapping[str, str],
        body: bytes,
        on_complete: CompletionCallback,
    ) -> None:
        try:
            outcome = self._perform(handle, headers, body, on_complete)
        except httpx.HTTPError as e:
            outcome = Failure(error=f"{type(e).__name__}: {e}")
        except Exception as e:
            logger.error(
                "Unexpected transport error",
                url=handle.url,
                error=str(e),
                error_type=type(e).__name__
            )
            outcome = Failure(error=f"{type(e).__name__}: {e}")

        try:
            on_complete(handle, outcome)
        finally:
            handle.mark_done()

    def _perform(
        self,
        handle: OperationHandle,
        headers: Mapping[str, str],
        body: bytes,
        on_complete: CompletionCallback,
    ) -> Outcome:
        try:
            response = self._send(self._client, handle.url, headers, body)
        except httpx.ConnectError as e:
            if not is_certificate_error(e):
                raise
            on_complete(handle, CertificateWarning(detail=str(e)))
            if not handle.certificate_errors_ignored:
                return Failure(error=f"certificate verification failed: {e}")
            response = self._send(self._unverified_client(), handle.url, headers, body)

        return self._classify(handle.url, response)

    def _send(
        self,
        client: httpx.Client,
        url: str,
        headers: Mapping[str, str],
        body: bytes,
    ) -> httpx.Response:
        retrying = connection_retrying(self.connect_retries, self.retry_backoff)
        return retrying(client.post, url, content=body, headers=headers)

    def _unverified_client(self) -> httpx.Client:
        with self._lock:
            if self._insecure_client is None:
                self._insecure_client = httpx.Client(
                    timeout=self.timeout, follow_redirects=False, verify=False
                )
            return self._insecure_client

    @staticmethod
    def _classify(url: str, response: httpx.Response) -> Outcome:
        if response.is_success:
            return Success(status_code=response.status_code, body=response.content)

        location = response.headers.get("location")
        if response.is_redirect and location:
            target = str(response.url.join(location))
            if target != url:
                return Redirected(url=target, status_code=response.status_code)

        return Failure(status_code=response.status_code, body=response.content)
