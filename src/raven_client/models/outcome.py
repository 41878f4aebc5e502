"""
Module: outcome.py
Description: Delivery outcome models.

Transport completions are reported as one of the outcome types below;
drains report a DrainOutcome.

Key Components:
- Success, Failure, Redirected, CertificateWarning: Transport outcomes
- DrainStatus, DrainOutcome: Result of wait_for_idle
"""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _Outcome(BaseModel):
    model_config = ConfigDict(frozen=True)


class Success(_Outcome):
    """Collector accepted the event."""

    status_code: int = 200
    body: bytes = b""


class Failure(_Outcome):
    """
    Delivery failed.

    Attributes:
        status_code: HTTP status when a response was received
        error: Transport error description when none was
        body: Response body, if any
    """

    status_code: Optional[int] = None
    error: Optional[str] = None
    body: bytes = b""


class Redirected(_Outcome):
    """Collector asked for the request to be sent to ``url``."""

    url: str
    status_code: int = 302


class CertificateWarning(_Outcome):
    """Certificate validation failed; the operation waits for a decision."""

    detail: str = ""


Outcome = Union[Success, Failure, Redirected, CertificateWarning]


class DrainStatus(str, Enum):
    """Why wait_for_idle returned."""

    IDLE = "idle"
    DRAINED = "drained"
    TIMED_OUT = "timed_out"
    REJECTED = "rejected"


class DrainOutcome(BaseModel):
    """
    Result of a drain.

    Attributes:
        status: Exit reason
        elapsed: Seconds spent waiting
        pending: Requests still in flight on return
    """

    model_config = ConfigDict(frozen=True)

    status: DrainStatus
    elapsed: float = Field(default=0.0, ge=0)
    pending: int = Field(default=0, ge=0)

    @property
    def completed(self) -> bool:
        """True when nothing was left in flight."""
        return self.status in (DrainStatus.IDLE, DrainStatus.DRAINED)
