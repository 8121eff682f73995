"""
Realtime chat channel.

Wraps one accepted WebSocket connection: tracks liveness, binds the
connection to at most one chat session, parses inbound envelopes and sends
outbound ones. Sends on a closed connection are dropped, never raised.

Connection state: UNBOUND -> BOUND(session_id) -> CLOSED.

Dependencies: fastapi, pydantic, docchat.models.streaming
System role: Per-connection realtime protocol handler
"""

import asyncio
import json
import logging
import uuid
from enum import Enum
from typing import Protocol

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PydanticValidationError

from docchat.core.exceptions import EnvelopeError, SessionBindingError
from docchat.models.streaming import Envelope, EnvelopeType, InboundEnvelope

logger = logging.getLogger(__name__)


class EnvelopeSink(Protocol):
    """Destination for outbound envelopes of one connection."""

    async def send(self, envelope: Envelope) -> bool: ...


class ChannelState(str, Enum):
    """Connection lifecycle states."""

    UNBOUND = "unbound"
    BOUND = "bound"
    CLOSED = "closed"


def parse_envelope(raw: str | bytes) -> InboundEnvelope:
    """
    Parse and validate one inbound frame.

    Binary frames are accepted when they carry UTF-8 encoded JSON.

    Args:
        raw: Raw text or binary frame payload

    Returns:
        InboundEnvelope: A ``message`` envelope with session id and content

    Raises:
        EnvelopeError: If the frame is not UTF-8 JSON, not an object, of an
            unknown type, or missing its session id or content
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EnvelopeError("Envelope must be UTF-8 text", {"error_msg": str(e)}) from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise EnvelopeError("Invalid JSON format", {"error_msg": str(e)}) from e

    if not isinstance(data, dict):
        raise EnvelopeError("Envelope must be a JSON object")

    try:
        envelope = InboundEnvelope.model_validate(data)
    except PydanticValidationError as e:
        raise EnvelopeError("Malformed envelope", {"errors": e.error_count()}) from e

    if envelope.type != EnvelopeType.MESSAGE.value:
        raise EnvelopeError(f"Unknown envelope type: {envelope.type}")
    if not envelope.session_id:
        raise EnvelopeError("Message envelope requires a sessionId")
    if not envelope.content or not envelope.content.strip():
        raise EnvelopeError("Message envelope requires content")

    return envelope


class RealtimeChannel:
    """One client connection and its session binding."""

    def __init__(self, websocket: WebSocket) -> None:
        self.websocket = websocket
        self.connection_id = uuid.uuid4().hex
        self.state = ChannelState.UNBOUND
        self.session_id: str | None = None
        self._send_lock = asyncio.Lock()

    @property
    def alive(self) -> bool:
        return self.state is not ChannelState.CLOSED

    async def accept(self) -> None:
        await self.websocket.accept()
        logger.info(
            "WebSocket connection established",
            extra={"connection_id": self.connection_id, "client_host": str(self.websocket.client)},
        )

    def bind(self, session_id: str) -> None:
        """
        Bind the connection to a session.

        Binding to the already-bound session is a no-op.

        Raises:
            SessionBindingError: If bound to a different session
        """
        if self.state is ChannelState.BOUND:
            if session_id != self.session_id:
                raise SessionBindingError(self.session_id or "", session_id)
            return
        if self.state is ChannelState.CLOSED:
            return
        self.session_id = session_id
        self.state = ChannelState.BOUND
        logger.info(
            "Connection bound to session",
            extra={"connection_id": self.connection_id, "session_id": session_id},
        )

    async def receive(self) -> str | bytes:
        """
        Wait for the next frame and return its payload.

        Text frames yield ``str`` and binary frames yield ``bytes``; decoding
        is left to ``parse_envelope`` so a bad frame becomes an error envelope.

        Raises:
            WebSocketDisconnect: When the client closes the connection
        """
        message = await self.websocket.receive()
        if message["type"] == "websocket.disconnect":
            raise WebSocketDisconnect(message.get("code", 1000), message.get("reason"))
        if message.get("text") is not None:
            return message["text"]
        return message.get("bytes") or b""

    async def send(self, envelope: Envelope) -> bool:
        """
        Send an envelope if the connection is still open.

        Returns:
            bool: True if sent, False if dropped because the client is gone
        """
        if not self.alive:
            logger.info(
                "Dropping envelope for closed connection",
                extra={
                    "connection_id": self.connection_id,
                    "session_id": self.session_id,
                    "envelope_type": envelope.type.value,
                },
            )
            return False

        async with self._send_lock:
            try:
                await self.websocket.send_json(envelope.to_dict())
                return True
            except (WebSocketDisconnect, RuntimeError, OSError) as e:
                logger.info(
                    "Send failed, marking connection closed",
                    extra={
                        "connection_id": self.connection_id,
                        "error_type": type(e).__name__,
                    },
                )
                self.close()
                return False

    async def send_error(self, content: str) -> bool:
        return await self.send(Envelope.error(content))

    def close(self) -> None:
        if self.state is not ChannelState.CLOSED:
            self.state = ChannelState.CLOSED
            logger.info(
                "WebSocket connection closed",
                extra={"connection_id": self.connection_id, "session_id": self.session_id},
            )
