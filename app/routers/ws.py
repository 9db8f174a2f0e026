import json
import logging
import time
from collections import defaultdict

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from starlette.websockets import WebSocketState

from app.schemas.ws import ErrorPayload, MessageType, WSClientMessage, WSServerMessage
from app.services.room import RoomRegistry
from app.services.websocket import (
    ConnectionManager,
    HandlerContext,
    HandlerResult,
    cancel_rooms_for,
    dispatch,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])

# Rate limiting configuration
MAX_MESSAGE_SIZE = 64 * 1024  # 64 KB
MAX_MESSAGES_PER_SECOND = 10
RATE_LIMIT_WINDOW = 1.0  # seconds


class RateLimiter:
    """Sliding-window message counter per connection."""

    def __init__(
        self, max_tokens: int = MAX_MESSAGES_PER_SECOND, window: float = RATE_LIMIT_WINDOW
    ):
        self.max_tokens = max_tokens
        self.window = window
        self._tokens: dict[str, list[float]] = defaultdict(list)

    def is_allowed(self, connection_id: str) -> bool:
        now = time.time()
        cutoff = now - self.window

        self._tokens[connection_id] = [t for t in self._tokens[connection_id] if t > cutoff]
        if len(self._tokens[connection_id]) >= self.max_tokens:
            return False

        self._tokens[connection_id].append(now)
        return True

    def remove(self, connection_id: str) -> None:
        self._tokens.pop(connection_id, None)


_rate_limiter = RateLimiter()


def _error(error_code: str, message: str, request_id: str | None = None) -> WSServerMessage:
    return WSServerMessage(
        type=MessageType.ERROR,
        request_id=request_id,
        payload=ErrorPayload(error_code=error_code, message=message).model_dump(),
    )


async def _deliver(manager: ConnectionManager, connection_id: str, result: HandlerResult) -> None:
    """Send a handler result: requester first, then the room, then private messages."""
    if result.response:
        await manager.send_to_connection(connection_id, result.response)

    if result.broadcast and result.room_id:
        await manager.send_to_room(
            result.room_id,
            result.broadcast,
            exclude_connection=connection_id,
        )

    if result.direct:
        await manager.send_private(result.direct)


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """WebSocket endpoint for domino rooms.

    Clients connect with: ws://host/api/v1/ws

    On connect the server sends a 'connected' message whose connection_id is
    the player id used by every room. Closing the socket cancels any room
    the connection is seated in.
    """
    manager: ConnectionManager = websocket.app.state.connection_manager
    registry: RoomRegistry = websocket.app.state.room_registry

    await websocket.accept()
    connection = await manager.connect(websocket)
    connection_id = connection.connection_id

    try:
        while True:
            if websocket.client_state != WebSocketState.CONNECTED:
                logger.debug("WebSocket no longer connected, exiting loop")
                break

            try:
                message_data = await websocket.receive()
            except Exception as e:
                logger.debug("Error receiving message: %s", e)
                break

            if message_data.get("type") == "websocket.disconnect":
                break

            raw_text = message_data.get("text")
            raw_bytes = message_data.get("bytes")
            if raw_text:
                message_size = len(raw_text.encode("utf-8"))
            elif raw_bytes:
                message_size = len(raw_bytes)
                raw_text = raw_bytes.decode("utf-8", errors="replace")
            else:
                continue

            if message_size > MAX_MESSAGE_SIZE:
                logger.warning(
                    "Message too large from connection %s: %d bytes",
                    connection_id,
                    message_size,
                )
                await manager.send_to_connection(
                    connection_id,
                    _error(
                        "MESSAGE_TOO_LARGE",
                        f"Message exceeds maximum size of {MAX_MESSAGE_SIZE} bytes",
                    ),
                )
                continue

            if not _rate_limiter.is_allowed(connection_id):
                logger.warning("Rate limit exceeded for connection %s", connection_id)
                await manager.send_to_connection(
                    connection_id,
                    _error("RATE_LIMITED", "Too many messages, please slow down"),
                )
                continue

            try:
                data = json.loads(raw_text)
            except json.JSONDecodeError:
                logger.warning("Invalid JSON from connection %s", connection_id)
                await manager.send_to_connection(
                    connection_id, _error("INVALID_JSON", "Invalid JSON format")
                )
                continue

            try:
                message = WSClientMessage.model_validate(data)
            except ValidationError as e:
                logger.warning("Invalid message from connection %s: %s", connection_id, e)
                await manager.send_to_connection(
                    connection_id, _error("INVALID_MESSAGE", "Invalid message format")
                )
                continue

            ctx = HandlerContext(
                connection_id=connection_id,
                message=message,
                manager=manager,
                registry=registry,
            )
            result = await dispatch(ctx)

            if result is None:
                await manager.send_to_connection(
                    connection_id,
                    _error(
                        "UNSUPPORTED_MESSAGE",
                        f"Message type {message.type.value} is not accepted from clients",
                        message.request_id,
                    ),
                )
                continue

            await _deliver(manager, connection_id, result)

    except WebSocketDisconnect as e:
        logger.info("WS disconnected: connection %s, code %s", connection_id, e.code)
    except Exception as e:
        logger.error("WS error for connection %s: %s", connection_id, e)
    finally:
        _rate_limiter.remove(connection_id)
        await cancel_rooms_for(manager, registry, connection_id, reason="player_disconnected")
        await manager.disconnect(connection_id)
