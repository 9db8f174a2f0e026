"""Handler for VERIFY_ROOM messages."""

import logging

from app.schemas.ws import MessageType, RoomVerifiedPayload, VerifyRoomPayload, WSServerMessage

from . import handler
from .base import HandlerContext, HandlerResult, validate_payload

logger = logging.getLogger(__name__)


@handler(MessageType.VERIFY_ROOM)
async def handle_verify_room(ctx: HandlerContext) -> HandlerResult:
    """Report whether a room exists and whether a player is seated in it.

    ``player_id`` defaults to the asking connection.
    """
    payload, error = validate_payload(
        ctx.message.payload,
        VerifyRoomPayload,
        ctx.message.request_id,
    )
    if error:
        return error

    check = ctx.registry.verify(payload.room_id, payload.player_id or ctx.connection_id)
    logger.debug(
        "VERIFY_ROOM: room_id=%s, exists=%s, member=%s",
        payload.room_id,
        check.exists,
        check.member,
    )

    return HandlerResult(
        success=True,
        response=WSServerMessage(
            type=MessageType.ROOM_VERIFIED,
            request_id=ctx.message.request_id,
            payload=RoomVerifiedPayload(
                room_id=payload.room_id,
                exists=check.exists,
                member=check.member,
            ).model_dump(),
        ),
    )
