"""Game event types - returned from every state transition.

Events describe what happened during a game action, enabling:
- Efficient WebSocket updates (only send what changed)
- Frontend animations (know exactly which tile moved where)
- Action replay / audit logging
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class GameEvent(BaseModel):
    """Base class for all game events."""

    event_type: str
    seq: int = 0  # Sequence number assigned by the engine


class GameStarted(GameEvent):
    """Hands were dealt and the first player was chosen."""

    event_type: Literal["game_started"] = "game_started"
    player_order: list[str] = Field(..., description="Player IDs in seat order")
    first_player_id: str


class TilePlayed(GameEvent):
    """A player placed a tile on the board."""

    event_type: Literal["tile_played"] = "tile_played"
    player_id: str
    tile: list[int] = Field(..., description="Tile as oriented on the board")
    position: Literal["start", "end"]


class TileDrawn(GameEvent):
    """A player pulled a tile from the pile.

    The tile itself is not part of the event so it can be shown to everyone.
    """

    event_type: Literal["tile_drawn"] = "tile_drawn"
    player_id: str
    remaining: int = Field(..., description="Tiles left in the pile")


class PlayerSkipped(GameEvent):
    """A player had no playable tile and lost the turn automatically."""

    event_type: Literal["player_skipped"] = "player_skipped"
    player_id: str


class TurnPassed(GameEvent):
    """A player gave up the turn after drawing (or with the pile empty)."""

    event_type: Literal["turn_passed"] = "turn_passed"
    player_id: str
    next_player_id: str | None = None


class GameEnded(GameEvent):
    """The game has finished."""

    event_type: Literal["game_ended"] = "game_ended"
    winner_id: str
    points: int
    reason: Literal["domino", "locked"] = Field(
        ..., description="'domino' when a hand emptied, 'locked' when nobody can play"
    )


# Union of all event types for type checking
AnyGameEvent = Annotated[
    GameStarted | TilePlayed | TileDrawn | PlayerSkipped | TurnPassed | GameEnded,
    Field(discriminator="event_type"),
]
