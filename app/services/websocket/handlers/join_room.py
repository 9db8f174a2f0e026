"""Handler for JOIN_ROOM messages."""

import logging

from app.schemas.ws import (
    GameStartedPayload,
    JoinRoomPayload,
    MessageType,
    RoomJoinedPayload,
    RoomUpdatedPayload,
    WSServerMessage,
)
from app.services.room import ReasonCode, Room

from . import handler
from .base import (
    HandlerContext,
    HandlerResult,
    error_response,
    room_error,
    seated_elsewhere,
    validate_payload,
)

logger = logging.getLogger(__name__)


def build_game_started(room: Room, player_id: str) -> WSServerMessage:
    """Private start-of-game snapshot for one seat."""
    current = room.get_current_player_id()
    return WSServerMessage(
        type=MessageType.GAME_STARTED,
        payload=GameStartedPayload(
            room_id=room.room_id,
            hand=room.get_hand(player_id) or [],
            players=room.get_players_summary(exclude_id=player_id),
            board=room.get_board_tiles(),
            current_player_id=current,
            initial=current == player_id,
            remaining=room.get_remaining_pile_count(),
        ).model_dump(),
    )


@handler(MessageType.JOIN_ROOM)
async def handle_join_room(ctx: HandlerContext) -> HandlerResult:
    """Seat the connection in a room.

    The joiner gets ``room_joined``, everyone else ``room_updated``. When the
    join fills the last seat every seated connection also receives its own
    ``game_started`` snapshot.
    """
    payload, error = validate_payload(
        ctx.message.payload,
        JoinRoomPayload,
        ctx.message.request_id,
    )
    if error:
        logger.warning("Invalid join_room payload from connection %s", ctx.connection_id)
        return error

    refused = seated_elsewhere(ctx, payload.room_id)
    if refused:
        return refused

    room = ctx.registry.get(payload.room_id)
    if room is None:
        return error_response(
            error_code=ReasonCode.ROOM_NOT_FOUND.value,
            message="Room not found",
            request_id=ctx.message.request_id,
        )

    result = room.add_player(ctx.connection_id, payload.name)
    if not result.success:
        logger.warning(
            "JOIN_ROOM rejected: room_id=%s, reason=%s, connection=%s",
            room.room_id,
            result.reason,
            ctx.connection_id,
        )
        return room_error(result, ctx.message.request_id)

    await ctx.manager.follow_room(ctx.connection_id, room.room_id)

    logger.info(
        "JOIN_ROOM ok: room_id=%s, seats=%d/%d, started=%s, connection=%s",
        room.room_id,
        len(room.players),
        room.max_players,
        result.started,
        ctx.connection_id,
    )

    direct = []
    if result.started:
        direct = [(p.player_id, build_game_started(room, p.player_id)) for p in room.players]

    return HandlerResult(
        success=True,
        response=WSServerMessage(
            type=MessageType.ROOM_JOINED,
            request_id=ctx.message.request_id,
            payload=RoomJoinedPayload(
                room_id=room.room_id,
                remaining=room.max_players - len(room.players),
                started=result.started,
            ).model_dump(),
        ),
        broadcast=WSServerMessage(
            type=MessageType.ROOM_UPDATED,
            payload=RoomUpdatedPayload(
                room_id=room.room_id,
                players=room.get_players_summary(),
            ).model_dump(),
        ),
        room_id=room.room_id,
        direct=direct,
    )
