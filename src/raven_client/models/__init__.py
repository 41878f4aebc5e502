"""
Package: models
Description: Event and delivery outcome models.
"""

from .event import Event, Level, UserInfo, merge_tags
from .outcome import (
    CertificateWarning,
    DrainOutcome,
    DrainStatus,
    Failure,
    Outcome,
    Redirected,
    Success,
)

__all__ = [
    "CertificateWarning",
    "DrainOutcome",
    "DrainStatus",
    "Event",
    "Failure",
    "Level",
    "Outcome",
    "Redirected",
    "Success",
    "UserInfo",
    "merge_tags",
]
