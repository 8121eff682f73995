"""
Test suite for the realtime channel.

Tests inbound envelope validation, session binding rules, and that sends
on a closed or broken connection are dropped instead of raised.

System role: Verification of the per-connection realtime protocol handler
"""

import json
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import WebSocketDisconnect

from docchat.core.exceptions import EnvelopeError, SessionBindingError
from docchat.core.realtime import ChannelState, RealtimeChannel, parse_envelope
from docchat.models.streaming import Envelope


@pytest.fixture
def websocket() -> MagicMock:
    ws = MagicMock()
    ws.accept = AsyncMock()
    ws.send_json = AsyncMock()
    ws.receive_text = AsyncMock()
    return ws


class TestParseEnvelope:
    """Test suite for parse_envelope."""

    def test_valid_message_envelope(self) -> None:
        raw = json.dumps({"type": "message", "sessionId": "s1", "content": "hi", "isUser": True})

        envelope = parse_envelope(raw)

        assert envelope.session_id == "s1"
        assert envelope.content == "hi"

    @pytest.mark.parametrize(
        ("raw", "error"),
        [
            ("not json", "Invalid JSON format"),
            ("[1, 2]", "Envelope must be a JSON object"),
            (json.dumps({"content": "hi"}), "Malformed envelope"),
            (json.dumps({"type": "ping", "sessionId": "s1"}), "Unknown envelope type: ping"),
            (json.dumps({"type": "message", "content": "hi"}), "requires a sessionId"),
            (json.dumps({"type": "message", "sessionId": "s1", "content": "  "}), "requires content"),
        ],
    )
    def test_invalid_envelopes_raise(self, raw: str, error: str) -> None:
        with pytest.raises(EnvelopeError) as exc_info:
            parse_envelope(raw)

        assert error in exc_info.value.message

    def test_binary_frame_with_utf8_json_is_accepted(self) -> None:
        raw = json.dumps({"type": "message", "sessionId": "s1", "content": "hi"}).encode()

        assert parse_envelope(raw).content == "hi"

    def test_binary_frame_that_is_not_utf8_is_rejected(self) -> None:
        with pytest.raises(EnvelopeError, match="UTF-8"):
            parse_envelope(b"\xff\xfe\x00")

    def test_client_timestamp_is_not_interpreted(self) -> None:
        raw = json.dumps({"type": "message", "sessionId": "s1", "content": "hi", "timestamp": "just now"})

        assert parse_envelope(raw).timestamp == "just now"


class TestBinding:
    """Test suite for session binding."""

    def test_first_bind_binds(self, websocket: MagicMock) -> None:
        channel = RealtimeChannel(websocket)

        channel.bind("s1")

        assert channel.state is ChannelState.BOUND
        assert channel.session_id == "s1"

    def test_rebind_to_same_session_is_noop(self, websocket: MagicMock) -> None:
        channel = RealtimeChannel(websocket)
        channel.bind("s1")

        channel.bind("s1")

        assert channel.session_id == "s1"

    def test_rebind_to_other_session_raises(self, websocket: MagicMock) -> None:
        """Test a connection stays bound to its first session."""
        channel = RealtimeChannel(websocket)
        channel.bind("s1")

        with pytest.raises(SessionBindingError):
            channel.bind("s2")

        assert channel.session_id == "s1"


class TestSend:
    """Test suite for RealtimeChannel.send."""

    @pytest.mark.asyncio
    async def test_send_serializes_camel_case(self, websocket: MagicMock) -> None:
        channel = RealtimeChannel(websocket)
        timestamp = datetime(2024, 1, 1, tzinfo=UTC)

        sent = await channel.send(Envelope.message("hello", timestamp))

        assert sent is True
        payload = websocket.send_json.await_args.args[0]
        assert payload["type"] == "message"
        assert payload["content"] == "hello"
        assert payload["isUser"] is False
        assert payload["timestamp"].startswith("2024-01-01T00:00:00")

    @pytest.mark.asyncio
    async def test_error_envelope_has_no_sender_flag(self, websocket: MagicMock) -> None:
        channel = RealtimeChannel(websocket)

        await channel.send_error("boom")

        assert websocket.send_json.await_args.args[0] == {"type": "error", "content": "boom"}

    @pytest.mark.asyncio
    async def test_send_after_close_is_dropped(self, websocket: MagicMock) -> None:
        channel = RealtimeChannel(websocket)
        channel.close()

        sent = await channel.send(Envelope.typing())

        assert sent is False
        websocket.send_json.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [WebSocketDisconnect(), RuntimeError("closed"), OSError("reset")])
    async def test_send_failure_marks_channel_closed(self, websocket: MagicMock, error: Exception) -> None:
        """Test a broken transport is treated as a disconnect."""
        websocket.send_json.side_effect = error
        channel = RealtimeChannel(websocket)

        sent = await channel.send(Envelope.typing())

        assert sent is False
        assert channel.alive is False
        assert await channel.send(Envelope.typing()) is False
        assert websocket.send_json.await_count == 1

    def test_connection_ids_are_unique(self, websocket: MagicMock) -> None:
        assert RealtimeChannel(websocket).connection_id != RealtimeChannel(websocket).connection_id


class TestReceive:
    """Test suite for RealtimeChannel.receive."""

    @pytest.mark.asyncio
    async def test_text_frame_returns_str(self, websocket: MagicMock) -> None:
        websocket.receive = AsyncMock(return_value={"type": "websocket.receive", "text": "hello"})

        assert await RealtimeChannel(websocket).receive() == "hello"

    @pytest.mark.asyncio
    async def test_binary_frame_returns_bytes(self, websocket: MagicMock) -> None:
        websocket.receive = AsyncMock(return_value={"type": "websocket.receive", "bytes": b"\x01\x02"})

        assert await RealtimeChannel(websocket).receive() == b"\x01\x02"

    @pytest.mark.asyncio
    async def test_disconnect_raises(self, websocket: MagicMock) -> None:
        websocket.receive = AsyncMock(return_value={"type": "websocket.disconnect", "code": 1001})

        with pytest.raises(WebSocketDisconnect) as exc_info:
            await RealtimeChannel(websocket).receive()

        assert exc_info.value.code == 1001
