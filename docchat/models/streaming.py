"""
Envelope schemas for the realtime chat channel.

Defines envelope types and payloads exchanged over the WebSocket.

Dependencies: pydantic
System role: Realtime protocol schemas
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import Field

from docchat.models.common import CamelModel


class EnvelopeType(str, Enum):
    """Envelope kinds exchanged over the channel."""

    MESSAGE = "message"
    TYPING = "typing"
    ERROR = "error"


class Envelope(CamelModel):
    """
    Outbound envelope sent to a client.

    Attributes:
        type: Envelope kind
        content: Message text or human-readable error
        is_user: Sender flag, set on message envelopes
        timestamp: Time the envelope was produced
    """

    type: EnvelopeType
    content: str | None = None
    is_user: bool | None = None
    timestamp: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def message(cls, content: str, timestamp: datetime | None = None) -> "Envelope":
        return cls(
            type=EnvelopeType.MESSAGE,
            content=content,
            is_user=False,
            timestamp=timestamp or datetime.now(UTC),
        )

    @classmethod
    def typing(cls) -> "Envelope":
        return cls(type=EnvelopeType.TYPING, timestamp=datetime.now(UTC))

    @classmethod
    def error(cls, content: str) -> "Envelope":
        return cls(type=EnvelopeType.ERROR, content=content)


class InboundEnvelope(CamelModel):
    """
    Envelope received from a client.

    Only ``message`` envelopes are acted on; they must carry a session id
    and non-empty content.
    """

    type: str
    session_id: str | None = None
    content: str | None = None
    is_user: bool = True
    timestamp: str | None = Field(default=None, description="Client-side send time, not interpreted")
