"""Room service module.

Provides:
- Room: roster, draw-rule policy and turn gating over one game
- RoomRegistry: explicitly owned room_id -> Room collection
- Result types and reason codes returned by every room operation
"""

from .registry import RoomCheck, RoomRegistry
from .results import (
    CreateRoomResult,
    DrawResult,
    JoinResult,
    MaxPlayersResult,
    MoveResult,
    ReasonCode,
    RoomResult,
)
from .room import Room, clamp_max_players, normalize_draw_settings, parse_direction

__all__ = [
    "Room",
    "RoomRegistry",
    "RoomCheck",
    "RoomResult",
    "CreateRoomResult",
    "DrawResult",
    "JoinResult",
    "MaxPlayersResult",
    "MoveResult",
    "ReasonCode",
    "clamp_max_players",
    "normalize_draw_settings",
    "parse_direction",
]
