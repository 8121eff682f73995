"""
WebSocket chat endpoint.

Routes: WS /ws

Client sends:
    {"type": "message", "sessionId": "...", "content": "...", "isUser": true, "timestamp": "..."}

Server sends:
    {"type": "typing", "timestamp": "..."}
    {"type": "message", "content": "...", "isUser": false, "timestamp": "..."}
    {"type": "error", "content": "..."}

Dependencies: docchat.application.services.session_manager, docchat.core.realtime
System role: Realtime chat transport
"""

import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status

from docchat.api.deps import get_session_manager
from docchat.application.services import SessionManager
from docchat.application.services.session_manager import SESSION_NOT_FOUND_MESSAGE
from docchat.core.exceptions import ChannelError
from docchat.core.realtime import ChannelState, RealtimeChannel, parse_envelope
from docchat.observability.correlation import set_correlation_id

logger = logging.getLogger(__name__)
router = APIRouter(tags=["streaming"])


@router.websocket("/ws")
async def websocket_chat(
    websocket: WebSocket,
    session_manager: SessionManager = Depends(get_session_manager),
) -> None:
    """
    Realtime chat endpoint.

    The connection binds to the session named by its first valid message
    envelope. Each message starts a user turn in the background so the
    connection keeps reading while a completion is pending. Malformed frames
    produce an error envelope and the connection stays open.

    Args:
        websocket: WebSocket connection
        session_manager: Injected SessionManager
    """
    channel = RealtimeChannel(websocket)
    set_correlation_id(channel.connection_id)
    await channel.accept()

    try:
        while True:
            raw_data = await channel.receive()
            logger.debug(
                "Raw WebSocket message received",
                extra={"connection_id": channel.connection_id, "raw_data_length": len(raw_data)},
            )

            try:
                envelope = parse_envelope(raw_data)
                if channel.state is ChannelState.UNBOUND:
                    if await session_manager.get_session(envelope.session_id) is None:
                        logger.warning(
                            "Message for unknown session",
                            extra={"connection_id": channel.connection_id, "session_id": envelope.session_id},
                        )
                        await channel.send_error(SESSION_NOT_FOUND_MESSAGE)
                        continue
                channel.bind(envelope.session_id)
            except ChannelError as e:
                logger.warning(
                    "Rejected inbound envelope",
                    extra={
                        "connection_id": channel.connection_id,
                        "error_type": type(e).__name__,
                        "error_msg": str(e),
                    },
                )
                await channel.send_error(e.message)
                continue

            session_manager.submit_user_turn(envelope.session_id, envelope.content, channel)

    except WebSocketDisconnect:
        logger.info("WebSocket client disconnected", extra={"connection_id": channel.connection_id})
    except Exception as e:
        logger.exception(
            "Unexpected error in WebSocket handler",
            extra={"connection_id": channel.connection_id, "error_type": type(e).__name__},
        )
        try:
            await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        except RuntimeError:
            logger.debug("WebSocket already closed", extra={"connection_id": channel.connection_id})
    finally:
        channel.close()
