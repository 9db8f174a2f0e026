"""Handlers for in-game messages: MAKE_MOVE, ASK_FOR_PIECE and PASS_TURN.

Every handler resolves the room the connection follows, calls the matching
Room operation and turns its result into envelopes. Rule violations come
back as ``error`` envelopes carrying the room's reason code.
"""

import logging

from app.schemas.game_engine import Direction
from app.schemas.ws import (
    MakeMovePayload,
    MessageType,
    MoveMadePayload,
    PieceDrawnPayload,
    PlayersUpdatedPayload,
    TurnPassedPayload,
    WSServerMessage,
)
from app.services.game.engine import TilePlayed

from . import handler
from .base import (
    HandlerContext,
    HandlerResult,
    get_current_room,
    room_error,
    validate_payload,
)

logger = logging.getLogger(__name__)

SIDE_TO_DIRECTION = {"start": Direction.TOP.value, "end": Direction.BOTTOM.value}


@handler(MessageType.MAKE_MOVE)
async def handle_make_move(ctx: HandlerContext) -> HandlerResult:
    """Play a tile and announce the new board to the room.

    The mover's copy of ``move_made`` also carries its updated hand.
    """
    room, error = get_current_room(ctx)
    if error:
        return error

    payload, error = validate_payload(
        ctx.message.payload,
        MakeMovePayload,
        ctx.message.request_id,
    )
    if error:
        return error

    result = room.make_move(ctx.connection_id, payload.tile, payload.direction)
    if not result.success:
        return room_error(result, ctx.message.request_id)

    played = next(e for e in result.events if isinstance(e, TilePlayed))
    move = MoveMadePayload(
        player_id=ctx.connection_id,
        tile=played.tile,
        direction=SIDE_TO_DIRECTION[played.position],
        board=room.get_board_tiles(),
        players=room.get_players_summary(),
        next_player_id=result.next_player_id,
        game_over=result.game_over,
        winner=result.winner,
    )

    if result.game_over:
        logger.info(
            "Game over: room_id=%s, winner=%s",
            room.room_id,
            result.winner.player_id if result.winner else None,
        )

    return HandlerResult(
        success=True,
        response=WSServerMessage(
            type=MessageType.MOVE_MADE,
            request_id=ctx.message.request_id,
            payload=move.model_copy(update={"hand": room.get_hand(ctx.connection_id)}).model_dump(),
        ),
        broadcast=WSServerMessage(
            type=MessageType.MOVE_MADE,
            payload=move.model_dump(),
        ),
        room_id=room.room_id,
    )


@handler(MessageType.ASK_FOR_PIECE)
async def handle_ask_for_piece(ctx: HandlerContext) -> HandlerResult:
    """Draw a tile privately and tell the others how many tiles everyone holds."""
    room, error = get_current_room(ctx)
    if error:
        return error

    result = room.ask_for_piece(ctx.connection_id)
    if not result.success:
        return room_error(result, ctx.message.request_id)

    return HandlerResult(
        success=True,
        response=WSServerMessage(
            type=MessageType.PIECE_DRAWN,
            request_id=ctx.message.request_id,
            payload=PieceDrawnPayload(
                tile=result.tile.to_pair(),
                passed_turn=result.passed_turn,
                next_player_id=result.next_player_id,
                remaining=result.remaining,
                hand=room.get_hand(ctx.connection_id) or [],
                game_over=result.game_over,
                winner=result.winner,
            ).model_dump(),
        ),
        broadcast=WSServerMessage(
            type=MessageType.PLAYERS_UPDATED,
            payload=PlayersUpdatedPayload(
                players=room.get_players_summary(),
                next_player_id=result.next_player_id,
                remaining=result.remaining,
                game_over=result.game_over,
                winner=result.winner,
            ).model_dump(),
        ),
        room_id=room.room_id,
    )


@handler(MessageType.PASS_TURN)
async def handle_pass_turn(ctx: HandlerContext) -> HandlerResult:
    room, error = get_current_room(ctx)
    if error:
        return error

    result = room.pass_turn(ctx.connection_id)
    if not result.success:
        return room_error(result, ctx.message.request_id)

    passed = TurnPassedPayload(
        player_id=ctx.connection_id,
        next_player_id=result.next_player_id,
        game_over=result.game_over,
        winner=result.winner,
    ).model_dump()

    return HandlerResult(
        success=True,
        response=WSServerMessage(
            type=MessageType.TURN_PASSED,
            request_id=ctx.message.request_id,
            payload=passed,
        ),
        broadcast=WSServerMessage(type=MessageType.TURN_PASSED, payload=passed),
        room_id=room.room_id,
    )
