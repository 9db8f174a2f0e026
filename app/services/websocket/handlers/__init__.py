"""WebSocket message handler registry and dispatcher.

Each handler module registers itself with ``@handler(MessageType.X)`` on
import; ``dispatch`` looks the handler up by the client message type.
"""

import logging
from collections.abc import Awaitable, Callable

from app.schemas.ws import MessageType

from .base import HandlerContext, HandlerResult

logger = logging.getLogger(__name__)

HandlerFunc = Callable[[HandlerContext], Awaitable[HandlerResult]]

_handlers: dict[MessageType, HandlerFunc] = {}


def handler(message_type: MessageType) -> Callable[[HandlerFunc], HandlerFunc]:
    """Register a coroutine as the handler for ``message_type``.

    Usage:
        @handler(MessageType.MAKE_MOVE)
        async def handle_make_move(ctx: HandlerContext) -> HandlerResult:
            ...
    """

    def decorator(func: HandlerFunc) -> HandlerFunc:
        if message_type in _handlers:
            logger.warning("Overwriting existing handler for %s", message_type.value)
        _handlers[message_type] = func
        logger.debug("Registered handler for %s: %s", message_type.value, func.__name__)
        return func

    return decorator


def registered_types() -> set[MessageType]:
    return set(_handlers)


async def dispatch(ctx: HandlerContext) -> HandlerResult | None:
    """Run the handler registered for the message type.

    Returns:
        HandlerResult from the handler, or None if no handler is registered
        (server-only types such as ``pong`` sent by a confused client).
    """
    handler_func = _handlers.get(ctx.message.type)
    if handler_func is None:
        logger.debug(
            "No handler for message type %s from connection %s",
            ctx.message.type.value,
            ctx.connection_id,
        )
        return None

    return await handler_func(ctx)


# Import handlers to trigger registration
from . import create_room  # noqa: E402, F401
from . import game  # noqa: E402, F401
from . import join_room  # noqa: E402, F401
from . import leave  # noqa: E402, F401
from . import ping  # noqa: E402, F401
from . import verify_room  # noqa: E402, F401

__all__ = [
    "HandlerContext",
    "HandlerResult",
    "dispatch",
    "handler",
    "registered_types",
]
