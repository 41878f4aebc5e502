"""
Module: event.py
Description: Event data models for the Raven client.

Defines the structured diagnostic event sent to a Sentry collector and
the pieces it is built from.

Key Components:
- Level: Sentry severity levels with syslog mapping
- UserInfo: User block attached to every event
- Event: Serializable event with JSON encoding
- merge_tags(): Global and explicit tag merge

Dependencies: pydantic, datetime, uuid
"""

import json
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config.settings import CLIENT_NAME, PLATFORM
from ..utils.host import local_address, local_host_name


class Level(str, Enum):
    """Sentry severity level."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"

    @classmethod
    def from_unix_level(cls, value: int) -> "Level":
        """
        Convert a syslog level (0 emergency .. 7 debug) to a Sentry level.

        Unknown values map to DEBUG.
        """
        if value == 0:
            return cls.FATAL
        if value in (1, 2, 3):
            return cls.ERROR
        if value == 4:
            return cls.WARNING
        if value in (5, 6):
            return cls.INFO
        return cls.DEBUG


class UserInfo(BaseModel):
    """
    User block attached to events.

    Attributes:
        id: Application user id
        username: User name
        email: Email address
        data: Custom fields merged into the block
        ip_address: Address visible to the client
    """

    model_config = ConfigDict(validate_assignment=True)

    id: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    data: Dict[str, str] = Field(default_factory=dict)
    ip_address: str = Field(default_factory=local_address)

    def to_payload(self) -> Dict[str, Any]:
        """Flatten into the wire user block, skipping empty fields."""
        block: Dict[str, Any] = {}
        if self.id:
            block["id"] = self.id
        if self.username:
            block["username"] = self.username
        if self.email:
            block["email"] = self.email
        block.update(self.data)
        block["ip_address"] = self.ip_address
        return block


def merge_tags(
    global_tags: Optional[Mapping[str, str]],
    tags: Optional[Mapping[str, Any]],
) -> Dict[str, Any]:
    """
    Merge global tags with the tags of a single event.

    Explicit event tags win on key collision.
    """
    merged: Dict[str, Any] = dict(global_tags or {})
    merged.update(tags or {})
    return merged


class Event(BaseModel):
    """
    One diagnostic report.

    Attributes:
        event_id: Unique event identifier (uuid4 hex)
        timestamp: Creation time (UTC)
        server_name: Reporting host name
        user: User block
        level: Severity
        culprit: Origin of the event
        message: Free-text message
        logger: Reporting client name
        platform: Platform tag
        tags: Merged tag set
        extra: Free-form extra data
    """

    event_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    server_name: str = Field(default_factory=local_host_name)
    user: UserInfo = Field(default_factory=UserInfo)
    level: Level = Level.ERROR
    culprit: str = ""
    message: str
    logger: str = CLIENT_NAME
    platform: str = PLATFORM
    tags: Dict[str, Any] = Field(default_factory=dict)
    extra: Dict[str, Any] = Field(default_factory=dict)

    @field_validator('event_id')
    @classmethod
    def validate_event_id(cls, v: str) -> str:
        """Event ids are 32 lowercase hex characters."""
        value = v.replace("-", "").lower()
        if len(value) != 32 or any(c not in "0123456789abcdef" for c in value):
            raise ValueError("event_id must be a 32 character hex string")
        return value

    def to_payload(self) -> Dict[str, Any]:
        """Build the JSON document sent to the collector."""
        payload: Dict[str, Any] = {
            "event_id": self.event_id,
            "timestamp": self.timestamp.strftime("%Y-%m-%dT%H:%M:%S"),
            "server_name": self.server_name,
            "user": self.user.to_payload(),
            "level": self.level.value,
            "culprit": self.culprit,
            "message": self.message,
            "logger": self.logger,
            "platform": self.platform,
        }
        if self.tags:
            payload["tags"] = self.tags
        if self.extra:
            payload["extra"] = self.extra
        return payload

    def encode(self) -> bytes:
        """Serialize to UTF-8 JSON bytes."""
        return json.dumps(self.to_payload(), default=str).encode("utf-8")
