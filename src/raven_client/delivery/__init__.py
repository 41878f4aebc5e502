"""
Package: delivery
Description: Asynchronous event delivery.

Provides the pending request table, the delivery coordinator that
resolves transport completions, the drain used at shutdown, and the
httpx-backed transport.
"""

from .coordinator import Attempt, DeliveryCoordinator
from .drain import DrainController
from .pending import PendingRequestTable
from .transport import HttpxTransport, OperationHandle, Transport

__all__ = [
    "Attempt",
    "DeliveryCoordinator",
    "DrainController",
    "HttpxTransport",
    "OperationHandle",
    "PendingRequestTable",
    "Transport",
]
