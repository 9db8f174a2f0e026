import asyncio
import logging
import os
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from fastapi import WebSocket

from app.config import Settings, get_settings
from app.schemas.ws import (
    ConnectedPayload,
    MessageType,
    WSCloseCode,
    WSServerMessage,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Connection:
    """An open socket and the room it follows.

    The connection id doubles as the player id seen by rooms. Following a
    room only routes its broadcasts here; seats are tracked by the room.
    """

    connection_id: str
    websocket: WebSocket
    connected_at: datetime = field(default_factory=_utcnow)
    last_heartbeat: datetime = field(default_factory=_utcnow)
    room_id: str | None = None


class ConnectionManager:
    """In-process registry of sockets and room followers.

    Local storage:
        - _connections: connection_id -> Connection
        - _followers: room_id -> set of connection_ids following it
    """

    def __init__(self, settings: Settings | None = None, server_id: str | None = None):
        self._settings = settings or get_settings()
        self._server_id = server_id or os.getenv("HOSTNAME", str(uuid.uuid4())[:8])

        self._connections: dict[str, Connection] = {}
        self._followers: dict[str, set[str]] = {}

        self._cleanup_task: asyncio.Task | None = None

        logger.info("ConnectionManager ready (server_id=%s)", self._server_id)

    @property
    def server_id(self) -> str:
        return self._server_id

    # --- lifecycle ---------------------------------------------------------

    async def connect(self, websocket: WebSocket) -> Connection:
        """Track an accepted socket and greet it with its player id."""
        connection = Connection(connection_id=str(uuid.uuid4()), websocket=websocket)
        self._connections[connection.connection_id] = connection
        logger.info("Player connection %s opened", connection.connection_id)

        await self.send_to_connection(
            connection.connection_id,
            WSServerMessage(
                type=MessageType.CONNECTED,
                payload=ConnectedPayload(
                    connection_id=connection.connection_id,
                    server_id=self._server_id,
                ).model_dump(),
            ),
        )
        return connection

    async def disconnect(self, connection_id: str) -> None:
        """Forget a connection and stop routing its room's broadcasts to it."""
        connection = self._connections.pop(connection_id, None)
        if connection is None:
            return

        if connection.room_id:
            self._drop_follower(connection.room_id, connection_id)
        logger.info("Player connection %s closed", connection_id)

    async def heartbeat(self, connection_id: str) -> None:
        connection = self._connections.get(connection_id)
        if connection:
            connection.last_heartbeat = _utcnow()

    async def _close(self, connection_id: str) -> None:
        connection = self._connections.get(connection_id)
        if connection:
            try:
                await connection.websocket.close(code=WSCloseCode.GOING_AWAY)
            except Exception as e:
                logger.debug("Error closing websocket %s: %s", connection_id, e)
        await self.disconnect(connection_id)

    async def cleanup_stale_connections(self) -> list[str]:
        """Close sockets that stopped pinging.

        Closing ends the socket's receive loop, which cancels any room the
        player was seated in.

        Returns:
            The ids of the connections that were closed.
        """
        now = _utcnow()
        timeout = self._settings.WS_CONNECTION_TIMEOUT
        stale = [
            conn_id
            for conn_id, connection in self._connections.items()
            if (now - connection.last_heartbeat).total_seconds() > timeout
        ]

        for conn_id in stale:
            logger.warning("Connection %s idle for more than %ds", conn_id, timeout)
            await self._close(conn_id)

        if stale:
            logger.info("Closed %d idle connections", len(stale))
        return stale

    async def start_cleanup_task(self) -> None:
        """Start the periodic idle-connection sweep."""
        if self._cleanup_task is not None:
            logger.warning("Cleanup task already running")
            return

        async def cleanup_loop():
            interval = self._settings.WS_HEARTBEAT_INTERVAL
            logger.info("Idle sweep every %ds", interval)
            while True:
                try:
                    await asyncio.sleep(interval)
                    await self.cleanup_stale_connections()
                except asyncio.CancelledError:
                    break
                except Exception as e:
                    logger.error("Error in cleanup task: %s", e)

        self._cleanup_task = asyncio.create_task(cleanup_loop())

    async def stop_cleanup_task(self) -> None:
        if self._cleanup_task is not None:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None
            logger.info("Cleanup task stopped")

    async def close_all_connections(self) -> None:
        """Close every socket on shutdown."""
        logger.info("Closing all %d connections", len(self._connections))
        for conn_id in list(self._connections):
            await self._close(conn_id)

    # --- sending -----------------------------------------------------------

    async def send_to_connection(self, connection_id: str, message: WSServerMessage) -> bool:
        """Send one message; a failed send drops the connection.

        Returns:
            True if sent successfully, False otherwise.
        """
        connection = self._connections.get(connection_id)
        if connection is None:
            logger.debug("Connection %s gone, dropping %s", connection_id, message.type.value)
            return False

        try:
            await connection.websocket.send_json(message.model_dump(mode="json", exclude_none=True))
            return True
        except Exception as e:
            logger.warning("Failed to send to connection %s: %s", connection_id, e)
            await self.disconnect(connection_id)
            return False

    async def send_private(self, messages: Iterable[tuple[str, WSServerMessage]]) -> int:
        """Send per-player messages such as a hand that only its owner may see.

        Returns:
            Number of messages delivered.
        """
        sent = 0
        for connection_id, message in messages:
            if await self.send_to_connection(connection_id, message):
                sent += 1
        return sent

    async def send_to_room(
        self, room_id: str, message: WSServerMessage, exclude_connection: str | None = None
    ) -> int:
        """Send a message to everyone following a room.

        Returns:
            Number of connections the message was sent to.
        """
        return await self.send_private(
            (conn_id, message)
            for conn_id in self.room_followers(room_id)
            if conn_id != exclude_connection
        )

    # --- room following ----------------------------------------------------

    async def follow_room(self, connection_id: str, room_id: str) -> None:
        """Route a room's broadcasts to this connection, replacing any previous room."""
        connection = self._connections.get(connection_id)
        if connection is None:
            logger.warning("Connection %s not found, cannot follow room %s", connection_id, room_id)
            return

        if connection.room_id and connection.room_id != room_id:
            self._drop_follower(connection.room_id, connection_id)

        connection.room_id = room_id
        self._followers.setdefault(room_id, set()).add(connection_id)
        logger.info("Connection %s follows room %s", connection_id, room_id)

    async def unfollow_room(self, connection_id: str) -> None:
        connection = self._connections.get(connection_id)
        if connection is None or connection.room_id is None:
            return

        self._drop_follower(connection.room_id, connection_id)
        connection.room_id = None

    def _drop_follower(self, room_id: str, connection_id: str) -> None:
        """Remove a connection from a room's followers; leaves connection.room_id alone."""
        followers = self._followers.get(room_id)
        if followers is None:
            return
        followers.discard(connection_id)
        if not followers:
            del self._followers[room_id]

    async def release_room(self, room_id: str) -> None:
        """Detach every follower from a destroyed room."""
        for conn_id in self._followers.pop(room_id, set()):
            connection = self._connections.get(conn_id)
            if connection is not None and connection.room_id == room_id:
                connection.room_id = None
        logger.debug("Followers released for room %s", room_id)

    def followed_room(self, connection_id: str) -> str | None:
        connection = self._connections.get(connection_id)
        return connection.room_id if connection is not None else None

    # --- queries -----------------------------------------------------------

    def get_connection(self, connection_id: str) -> Connection | None:
        return self._connections.get(connection_id)

    def room_followers(self, room_id: str) -> set[str]:
        return set(self._followers.get(room_id, set()))

    def get_total_connection_count(self) -> int:
        return len(self._connections)
