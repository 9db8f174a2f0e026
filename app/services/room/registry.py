"""In-memory collection of live rooms.

The registry is owned by whoever runs the transport (the FastAPI app keeps
one on ``app.state``) and passed to the code that needs it. Rooms live until
destroy() is called; there is no expiry.
"""

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from app.schemas.game_engine import DrawSettings

from .results import CreateRoomResult, ReasonCode
from .room import GameFactory, Room

logger = logging.getLogger(__name__)


@dataclass
class RoomCheck:
    """Answer to verify(): does the room exist, and is the actor seated."""

    exists: bool
    member: bool = False


class RoomRegistry:
    """Maps room ids to Room instances with explicit create/destroy.

    Args:
        game_factory: Passed to every Room this registry creates.
    """

    def __init__(self, game_factory: GameFactory | None = None) -> None:
        self._rooms: dict[str, Room] = {}
        self._game_factory = game_factory

    def create(
        self,
        room_id: str,
        max_players: Any,
        draw_settings: DrawSettings | Mapping[str, Any] | None = None,
        created_by: str | None = None,
    ) -> CreateRoomResult:
        """Create a room after validating the requested seat count.

        ``created_by`` records the owning connection so an empty room can be
        torn down when its creator goes away.
        """
        check = Room.validate_max_players(max_players)
        if not check.success:
            logger.warning(
                "Room creation rejected: room_id=%s, max_players=%r", room_id, max_players
            )
            return CreateRoomResult.failure(
                ReasonCode.INVALID_MAX_PLAYERS,
                min=check.min,
                max=check.max,
            )
        if room_id in self._rooms:
            logger.warning("Room creation rejected: room_id=%s already exists", room_id)
            return CreateRoomResult.failure(ReasonCode.ROOM_EXISTS)

        room = Room(
            room_id,
            check.max_players,
            draw_settings,
            game_factory=self._game_factory,
            created_by=created_by,
        )
        self._rooms[room_id] = room
        return CreateRoomResult(room=room)

    def get(self, room_id: str) -> Room | None:
        return self._rooms.get(room_id)

    def exists(self, room_id: str) -> bool:
        return room_id in self._rooms

    def verify(self, room_id: str, actor_id: str | None = None) -> RoomCheck:
        room = self._rooms.get(room_id)
        if room is None:
            return RoomCheck(exists=False)
        return RoomCheck(exists=True, member=actor_id is not None and room.is_member(actor_id))

    def destroy(self, room_id: str) -> Room | None:
        """Remove a room (disconnect/cancel). Returns the removed room."""
        room = self._rooms.pop(room_id, None)
        if room is not None:
            logger.info("Room destroyed: room_id=%s, players=%d", room_id, len(room.players))
        return room

    def rooms_for_actor(self, actor_id: str) -> list[Room]:
        return [room for room in self._rooms.values() if room.is_member(actor_id)]

    def empty_rooms_created_by(self, actor_id: str) -> list[Room]:
        """Rooms the actor created in which nobody has taken a seat yet."""
        return [
            room
            for room in self._rooms.values()
            if room.created_by == actor_id and not room.players
        ]

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)

    def __iter__(self) -> Iterator[Room]:
        return iter(list(self._rooms.values()))
