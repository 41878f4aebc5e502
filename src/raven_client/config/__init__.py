"""
Package: config
Description: Client settings and DSN handling.
"""

from .dsn import Endpoint, InvalidDsnError, parse_dsn
from .settings import ClientSettings

__all__ = ["ClientSettings", "Endpoint", "InvalidDsnError", "parse_dsn"]
