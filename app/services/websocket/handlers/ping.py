"""Heartbeat handler."""

import logging

from app.schemas.ws import MessageType, PongPayload, WSServerMessage

from . import handler
from .base import HandlerContext, HandlerResult

logger = logging.getLogger(__name__)


@handler(MessageType.PING)
async def handle_ping(ctx: HandlerContext) -> HandlerResult:
    """Refresh the heartbeat; pong echoes the room the socket follows."""
    await ctx.manager.heartbeat(ctx.connection_id)
    room_id = ctx.manager.followed_room(ctx.connection_id)
    logger.debug("Pong to %s (room=%s)", ctx.connection_id, room_id)

    return HandlerResult(
        success=True,
        response=WSServerMessage(
            type=MessageType.PONG,
            request_id=ctx.message.request_id,
            payload=PongPayload(room_id=room_id).model_dump(),
        ),
    )
