from app.services.websocket.handlers import HandlerContext, HandlerResult, dispatch, handler
from app.services.websocket.handlers.leave import cancel_rooms_for
from app.services.websocket.manager import Connection, ConnectionManager

__all__ = [
    "Connection",
    "ConnectionManager",
    "HandlerContext",
    "HandlerResult",
    "cancel_rooms_for",
    "dispatch",
    "handler",
]
