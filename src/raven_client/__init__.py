"""
raven_client

Sentry event reporting client. Events are delivered asynchronously;
wait_for_idle() gives a shutting-down process a bounded wait for
outstanding deliveries.
"""

from .client import RavenClient, get_client, init, shutdown
from .config import ClientSettings, Endpoint, InvalidDsnError, parse_dsn
from .models import DrainOutcome, DrainStatus, Event, Level
from .utils.location import here, location_info

__all__ = [
    "ClientSettings",
    "DrainOutcome",
    "DrainStatus",
    "Endpoint",
    "Event",
    "InvalidDsnError",
    "Level",
    "RavenClient",
    "get_client",
    "here",
    "init",
    "location_info",
    "parse_dsn",
    "shutdown",
]
