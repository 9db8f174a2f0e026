"""Result types for room operations.

Rule violations are ordinary outcomes, not exceptions: every room call
returns a result with ``success`` plus either data or an ``error_code``
from ReasonCode. ``to_dict()`` renders the ``{"ok": ...}`` boundary shape.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from app.schemas.game_engine import Tile, WinnerInfo
from app.services.game.engine import AnyGameEvent

if TYPE_CHECKING:
    from .room import Room


class ReasonCode(str, Enum):
    INVALID_MAX_PLAYERS = "invalid_max_players"
    GAME_STARTED = "game_started"
    FULL = "full"
    ALREADY_IN = "already_in"
    GAME_NOT_STARTED = "game_not_started"
    NOT_YOUR_TURN = "not_your_turn"
    INVALID_MOVE = "invalid_move"
    HAS_PLAYABLE = "has_playable"
    PILE_EMPTY = "pile_empty"
    MUST_PASS = "must_pass"
    MAX_DRAWS_REACHED = "max_draws_reached"
    GAME_OVER = "game_over"
    MUST_DRAW = "must_draw"
    ROOM_EXISTS = "room_exists"
    ROOM_NOT_FOUND = "room_not_found"
    IN_OTHER_ROOM = "in_other_room"


ERROR_MESSAGES: dict[ReasonCode, str] = {
    ReasonCode.INVALID_MAX_PLAYERS: "Max players must be between 2 and 4",
    ReasonCode.GAME_STARTED: "Game has already started",
    ReasonCode.FULL: "Room is full",
    ReasonCode.ALREADY_IN: "Player is already in the room",
    ReasonCode.GAME_NOT_STARTED: "Game has not started yet",
    ReasonCode.NOT_YOUR_TURN: "It's not your turn",
    ReasonCode.INVALID_MOVE: "Tile cannot be played",
    ReasonCode.HAS_PLAYABLE: "You already hold a playable tile",
    ReasonCode.PILE_EMPTY: "The pile is empty",
    ReasonCode.MUST_PASS: "Only one draw per turn - pass the turn",
    ReasonCode.MAX_DRAWS_REACHED: "Draw limit for this turn reached",
    ReasonCode.GAME_OVER: "Game has already finished",
    ReasonCode.MUST_DRAW: "Draw from the pile before passing",
    ReasonCode.ROOM_EXISTS: "A room with this id already exists",
    ReasonCode.ROOM_NOT_FOUND: "Room not found",
    ReasonCode.IN_OTHER_ROOM: "Player is already seated in another room",
}


def _export(value: Any) -> Any:
    if isinstance(value, Tile):
        return value.to_pair()
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return [_export(item) for item in value]
    return value


@dataclass
class RoomResult:
    """Base result of a room operation."""

    success: bool = True
    error_code: ReasonCode | None = None
    error_message: str | None = None
    events: list[AnyGameEvent] = field(default_factory=list)

    @classmethod
    def failure(cls, code: ReasonCode, message: str | None = None, **extra: Any):
        """Create a failure result with error details."""
        return cls(
            success=False,
            error_code=code,
            error_message=message or ERROR_MESSAGES[code],
            **extra,
        )

    @property
    def ok(self) -> bool:
        return self.success

    @property
    def reason(self) -> str | None:
        return self.error_code.value if self.error_code else None

    def to_dict(self) -> dict[str, Any]:
        """Render as ``{"ok": True, ...}`` or ``{"ok": False, "reason": ...}``."""
        if not self.success:
            data: dict[str, Any] = {
                "ok": False,
                "reason": self.reason,
                "message": self.error_message,
            }
            data.update(self._extra_failure_fields())
            return data

        data = {"ok": True}
        for f in fields(self):
            if f.name in ("success", "error_code", "error_message"):
                continue
            data[f.name] = _export(getattr(self, f.name))
        return data

    def _extra_failure_fields(self) -> dict[str, Any]:
        return {}


@dataclass
class MaxPlayersResult(RoomResult):
    """Result of validating a requested seat count."""

    max_players: int | None = None
    min: int | None = None
    max: int | None = None

    def _extra_failure_fields(self) -> dict[str, Any]:
        return {"min": self.min, "max": self.max}


@dataclass
class JoinResult(RoomResult):
    """Result of add_player."""

    started: bool = False


@dataclass
class MoveResult(RoomResult):
    """Result of make_move and pass_turn."""

    next_player_id: str | None = None
    game_over: bool = False
    winner: WinnerInfo | None = None


@dataclass
class DrawResult(RoomResult):
    """Result of ask_for_piece."""

    tile: Tile | None = None
    passed_turn: bool = False
    next_player_id: str | None = None
    remaining: int = 0
    game_over: bool = False
    winner: WinnerInfo | None = None


@dataclass
class CreateRoomResult(RoomResult):
    """Result of RoomRegistry.create."""

    room: "Room | None" = None
    min: int | None = None
    max: int | None = None

    def _extra_failure_fields(self) -> dict[str, Any]:
        if self.error_code == ReasonCode.INVALID_MAX_PLAYERS:
            return {"min": self.min, "max": self.max}
        return {}

    def to_dict(self) -> dict[str, Any]:
        if not self.success or self.room is None:
            return super().to_dict()
        return {
            "ok": True,
            "room_id": self.room.room_id,
            "max_players": self.room.max_players,
            "draw_rule": self.room.draw_rule.value,
            "max_draws_per_turn": self.room.max_draws_per_turn,
        }
