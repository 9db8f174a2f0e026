"""Handler for LEAVE_ROOM messages and the shared room teardown."""

import logging
from typing import TYPE_CHECKING

from app.schemas.ws import GameCancelledPayload, MessageType, WSServerMessage
from app.services.room import RoomRegistry

from . import handler
from .base import HandlerContext, HandlerResult

if TYPE_CHECKING:
    from app.services.websocket.manager import ConnectionManager

logger = logging.getLogger(__name__)


async def cancel_rooms_for(
    manager: "ConnectionManager",
    registry: RoomRegistry,
    connection_id: str,
    reason: str = "player_left",
) -> list[str]:
    """Destroy every room the connection sits in and every empty room it created.

    Works from the registry alone, so it also runs after the manager has
    already forgotten the connection (idle sweep).

    Remaining followers receive ``game_cancelled`` before the room releases
    them.

    Returns:
        Ids of the destroyed rooms.
    """
    rooms = registry.rooms_for_actor(connection_id) + registry.empty_rooms_created_by(
        connection_id
    )

    cancelled = []
    for room in rooms:
        registry.destroy(room.room_id)
        await manager.send_to_room(
            room.room_id,
            WSServerMessage(
                type=MessageType.GAME_CANCELLED,
                payload=GameCancelledPayload(
                    room_id=room.room_id,
                    reason=reason,
                    player_id=connection_id,
                ).model_dump(),
            ),
            exclude_connection=connection_id,
        )
        await manager.release_room(room.room_id)
        cancelled.append(room.room_id)
        logger.info(
            "Room cancelled: room_id=%s, by=%s, reason=%s",
            room.room_id,
            connection_id,
            reason,
        )
    return cancelled


@handler(MessageType.LEAVE_ROOM)
async def handle_leave_room(ctx: HandlerContext) -> HandlerResult:
    """Leave the current room. Any room the connection sat in is torn down."""
    room_id = ctx.manager.followed_room(ctx.connection_id)

    cancelled = await cancel_rooms_for(ctx.manager, ctx.registry, ctx.connection_id)
    await ctx.manager.unfollow_room(ctx.connection_id)

    return HandlerResult(
        success=True,
        response=WSServerMessage(
            type=MessageType.GAME_CANCELLED,
            request_id=ctx.message.request_id,
            payload=GameCancelledPayload(
                room_id=cancelled[0] if cancelled else room_id or "",
                reason="player_left",
                player_id=ctx.connection_id,
            ).model_dump(),
        ),
    )
