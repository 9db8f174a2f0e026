"""Handler for CREATE_ROOM messages."""

import logging

from app.config import get_settings
from app.schemas.ws import CreateRoomPayload, MessageType, RoomCreatedPayload, WSServerMessage

from . import handler
from .base import (
    HandlerContext,
    HandlerResult,
    room_error,
    seated_elsewhere,
    validate_payload,
)

logger = logging.getLogger(__name__)


@handler(MessageType.CREATE_ROOM)
async def handle_create_room(ctx: HandlerContext) -> HandlerResult:
    """Create a room; the creator follows it without taking a seat.

    It still has to send join_room to play. Omitted options fall back to
    the configured room defaults.
    """
    payload, error = validate_payload(
        ctx.message.payload,
        CreateRoomPayload,
        ctx.message.request_id,
    )
    if error:
        logger.warning("Invalid create_room payload from connection %s", ctx.connection_id)
        return error

    refused = seated_elsewhere(ctx, payload.room_id)
    if refused:
        return refused

    settings = get_settings()
    max_players = payload.max_players
    if max_players is None:
        max_players = settings.DEFAULT_MAX_PLAYERS
    draw_settings = {
        "draw_rule": payload.draw_rule or settings.DEFAULT_DRAW_RULE.value,
        "max_draws_per_turn": (
            payload.max_draws_per_turn
            if payload.max_draws_per_turn is not None
            else settings.DEFAULT_MAX_DRAWS_PER_TURN
        ),
    }

    result = ctx.registry.create(
        payload.room_id,
        max_players,
        draw_settings,
        created_by=ctx.connection_id,
    )
    if not result.success:
        logger.warning(
            "CREATE_ROOM rejected: room_id=%s, reason=%s, connection=%s",
            payload.room_id,
            result.reason,
            ctx.connection_id,
        )
        return room_error(result, ctx.message.request_id)

    room = result.room
    await ctx.manager.follow_room(ctx.connection_id, room.room_id)

    logger.info("CREATE_ROOM ok: room_id=%s, connection=%s", room.room_id, ctx.connection_id)

    return HandlerResult(
        success=True,
        response=WSServerMessage(
            type=MessageType.ROOM_CREATED,
            request_id=ctx.message.request_id,
            payload=RoomCreatedPayload(
                room_id=room.room_id,
                max_players=room.max_players,
                draw_rule=room.draw_rule,
                max_draws_per_turn=room.max_draws_per_turn,
            ).model_dump(mode="json"),
        ),
        room_id=room.room_id,
    )
