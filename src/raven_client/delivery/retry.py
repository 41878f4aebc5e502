"""
Module: delivery/retry.py
Description: Retry policy for connection-level delivery failures.

Only failures to reach the collector are retried. HTTP error responses,
redirects and certificate failures are reported to the coordinator as
they are.
"""

import ssl

import httpx
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ..utils.logger import get_logger

logger = get_logger(__name__)


def is_certificate_error(exc: BaseException) -> bool:
    """
    Return True if ``exc`` is, or wraps, a certificate verification failure.

    The ``__cause__``/``__context__`` chain is searched for an
    ssl.SSLCertVerificationError. Only when no SSL error is chained at
    all is the OpenSSL ``CERTIFICATE_VERIFY_FAILED`` reason matched in
    the messages, for transports that re-raise without chaining.
    """
    chain = []
    current = exc
    while current is not None and all(current is not seen for seen in chain):
        chain.append(current)
        current = current.__cause__ or current.__context__

    if any(isinstance(error, ssl.SSLCertVerificationError) for error in chain):
        return True
    if any(isinstance(error, ssl.SSLError) for error in chain):
        return False
    return any("CERTIFICATE_VERIFY_FAILED" in str(error) for error in chain)


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError)):
        return not is_certificate_error(exc)
    return False


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.info(
        "Retrying delivery after connection error",
        attempt=retry_state.attempt_number,
        error=str(exc),
        error_type=type(exc).__name__
    )


def connection_retrying(retries: int, backoff: float = 0.5) -> Retrying:
    """
    Build a tenacity controller for one delivery attempt.

    Args:
        retries: Extra attempts after the first
        backoff: Exponential backoff multiplier in seconds

    Returns:
        Retrying that re-raises the last error once attempts are exhausted
    """
    return Retrying(
        stop=stop_after_attempt(retries + 1),
        wait=wait_exponential(multiplier=backoff, min=0, max=30),
        retry=retry_if_exception(_is_retryable),
        before_sleep=_log_retry,
        reraise=True
    )
