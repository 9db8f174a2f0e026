from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from app.schemas.game_engine import DrawRule, PlayerSummary, WinnerInfo


class MessageType(str, Enum):
    """WebSocket message types."""

    # Core
    PING = "ping"
    PONG = "pong"
    CONNECTED = "connected"
    ERROR = "error"

    # Rooms
    CREATE_ROOM = "create_room"
    ROOM_CREATED = "room_created"
    JOIN_ROOM = "join_room"
    ROOM_JOINED = "room_joined"
    ROOM_UPDATED = "room_updated"
    VERIFY_ROOM = "verify_room"
    ROOM_VERIFIED = "room_verified"
    LEAVE_ROOM = "leave_room"
    GAME_CANCELLED = "game_cancelled"

    # Game
    GAME_STARTED = "game_started"
    MAKE_MOVE = "make_move"
    MOVE_MADE = "move_made"
    ASK_FOR_PIECE = "ask_for_piece"
    PIECE_DRAWN = "piece_drawn"
    PASS_TURN = "pass_turn"
    TURN_PASSED = "turn_passed"
    PLAYERS_UPDATED = "players_updated"


class WSCloseCode:
    """WebSocket close codes (RFC 6455)."""

    NORMAL = 1000
    GOING_AWAY = 1001
    PROTOCOL_ERROR = 1002
    UNSUPPORTED_DATA = 1003
    INVALID_DATA = 1007
    POLICY_VIOLATION = 1008
    MESSAGE_TOO_BIG = 1009
    INTERNAL_ERROR = 1011


class WSClientMessage(BaseModel):
    """Message sent from client to server."""

    type: MessageType
    request_id: str | None = None
    payload: dict[str, Any] | None = None


class WSServerMessage(BaseModel):
    """Message sent from server to client."""

    type: MessageType
    request_id: str | None = None
    payload: dict[str, Any] | None = None


# --- Server payloads ---


class ConnectedPayload(BaseModel):
    """Payload for the 'connected' message. The connection id doubles as the player id."""

    connection_id: str
    server_id: str


class PongPayload(BaseModel):
    """Payload for the 'pong' message."""

    server_time: datetime = Field(default_factory=lambda: datetime.now())
    room_id: str | None = None


class ErrorPayload(BaseModel):
    """Payload for error messages."""

    error_code: str
    message: str
    details: dict[str, Any] | None = None


class RoomCreatedPayload(BaseModel):
    room_id: str
    max_players: int
    draw_rule: DrawRule
    max_draws_per_turn: int | None = None


class RoomJoinedPayload(BaseModel):
    room_id: str
    remaining: int
    started: bool


class RoomUpdatedPayload(BaseModel):
    room_id: str
    players: list[PlayerSummary]


class RoomVerifiedPayload(BaseModel):
    room_id: str
    exists: bool
    member: bool


class GameStartedPayload(BaseModel):
    """Private snapshot each seat receives when the game starts."""

    room_id: str
    hand: list[list[int]]
    players: list[PlayerSummary]
    board: list[list[int]] = Field(default_factory=list)
    current_player_id: str | None = None
    initial: bool = False
    remaining: int = 0


class MoveMadePayload(BaseModel):
    player_id: str
    tile: list[int]
    direction: str | None = None
    board: list[list[int]]
    players: list[PlayerSummary]
    next_player_id: str | None = None
    game_over: bool = False
    winner: WinnerInfo | None = None
    hand: list[list[int]] | None = None


class PieceDrawnPayload(BaseModel):
    tile: list[int]
    passed_turn: bool
    next_player_id: str | None = None
    remaining: int
    hand: list[list[int]] = Field(default_factory=list)
    game_over: bool = False
    winner: WinnerInfo | None = None


class PlayersUpdatedPayload(BaseModel):
    players: list[PlayerSummary]
    next_player_id: str | None = None
    remaining: int = 0
    game_over: bool = False
    winner: WinnerInfo | None = None


class TurnPassedPayload(BaseModel):
    player_id: str
    next_player_id: str | None = None
    game_over: bool = False
    winner: WinnerInfo | None = None


class GameCancelledPayload(BaseModel):
    """Payload sent when a member leaves and the room is torn down."""

    room_id: str
    reason: str = "player_left"
    player_id: str | None = None


# --- Client payloads ---


class CreateRoomPayload(BaseModel):
    """Payload for the 'create_room' message from client.

    Seat count and draw settings are kept loose here; the room layer
    validates and normalizes them and answers with a reason code.
    """

    room_id: str = Field(..., min_length=1, max_length=64)
    max_players: Any = None
    draw_rule: str | None = None
    max_draws_per_turn: Any = None


class JoinRoomPayload(BaseModel):
    """Payload for the 'join_room' message from client."""

    room_id: str = Field(..., min_length=1, max_length=64)
    name: str = Field("Player", max_length=32)


class VerifyRoomPayload(BaseModel):
    room_id: str = Field(..., min_length=1, max_length=64)
    player_id: str | None = None


class MakeMovePayload(BaseModel):
    """Payload for the 'make_move' message from client."""

    tile: list[Any] = Field(..., min_length=2, max_length=2)
    direction: str | None = Field(None, description="'top' or 'bottom'")
