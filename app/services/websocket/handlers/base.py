"""Base types and helpers for WebSocket message handlers."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

from pydantic import BaseModel, ValidationError

from app.schemas.ws import (
    ErrorPayload,
    MessageType,
    WSClientMessage,
    WSServerMessage,
)
from app.services.room import ReasonCode, Room, RoomRegistry, RoomResult

if TYPE_CHECKING:
    from app.services.websocket.manager import ConnectionManager

_RESULT_KEYS = ("ok", "reason", "message")

T = TypeVar("T", bound=BaseModel)


@dataclass
class HandlerContext:
    """Context passed to each message handler."""

    connection_id: str
    message: WSClientMessage
    manager: "ConnectionManager"
    registry: RoomRegistry


@dataclass
class HandlerResult:
    """Result returned by message handlers.

    The router sends ``response`` to the requester, then ``broadcast`` to the
    rest of ``room_id``, then each ``(connection_id, message)`` in ``direct``.
    """

    success: bool
    response: WSServerMessage | None = None
    broadcast: WSServerMessage | None = None
    room_id: str | None = None
    direct: list[tuple[str, WSServerMessage]] = field(default_factory=list)


def validate_payload(
    payload: dict | None,
    schema: type[T],
    request_id: str | None,
    error_type: MessageType = MessageType.ERROR,
) -> tuple[T | None, HandlerResult | None]:
    """Validate payload against a Pydantic schema.

    Returns:
        Tuple of (validated_payload, error_result). One will be None.
    """
    try:
        validated = schema.model_validate(payload or {})
        return validated, None
    except ValidationError as e:
        return None, HandlerResult(
            success=False,
            response=WSServerMessage(
                type=error_type,
                request_id=request_id,
                payload=ErrorPayload(
                    error_code="VALIDATION_ERROR",
                    message=str(e),
                ).model_dump(),
            ),
        )


def error_response(
    error_code: str,
    message: str,
    error_type: MessageType = MessageType.ERROR,
    request_id: str | None = None,
    details: dict | None = None,
) -> HandlerResult:
    """Build an error HandlerResult."""
    return HandlerResult(
        success=False,
        response=WSServerMessage(
            type=error_type,
            request_id=request_id,
            payload=ErrorPayload(
                error_code=error_code,
                message=message,
                details=details,
            ).model_dump(),
        ),
    )


def room_error(result: RoomResult, request_id: str | None = None) -> HandlerResult:
    """Translate a failed room result into an error envelope carrying its reason code."""
    data = result.to_dict()
    details = {k: v for k, v in data.items() if k not in _RESULT_KEYS} or None
    return error_response(
        error_code=result.reason or "internal_error",
        message=result.error_message or "Unknown error",
        request_id=request_id,
        details=details,
    )


def get_current_room(ctx: HandlerContext) -> tuple[Room | None, HandlerResult | None]:
    """The room this connection is following.

    Returns:
        Tuple of (room, error_result). One will be None.
    """
    room_id = ctx.manager.followed_room(ctx.connection_id)
    room = ctx.registry.get(room_id) if room_id else None
    if room is None:
        return None, error_response(
            error_code=ReasonCode.ROOM_NOT_FOUND.value,
            message="You are not in a room",
            request_id=ctx.message.request_id,
        )
    return room, None


def seated_elsewhere(ctx: HandlerContext, room_id: str) -> HandlerResult | None:
    """Refuse to move a connection that holds a seat in a different room.

    Turn actions resolve through the followed room, so a player who followed
    another room could never act in the game they sit in.
    """
    others = [
        room.room_id
        for room in ctx.registry.rooms_for_actor(ctx.connection_id)
        if room.room_id != room_id
    ]
    if not others:
        return None
    return error_response(
        error_code=ReasonCode.IN_OTHER_ROOM.value,
        message="Leave your current room first",
        request_id=ctx.message.request_id,
        details={"room_id": others[0]},
    )
