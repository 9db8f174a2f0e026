from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

MIN_PIP = 0
MAX_PIP = 6


# Game phases
class GamePhase(str, Enum):
    AWAITING_MOVE = "awaiting_move"
    OVER = "over"


# Draw (pile-pull) policy variants
class DrawRule(str, Enum):
    DRAW_UNTIL_PLAY = "draw_until_play"
    DRAW_ONCE_PASS = "draw_once_pass"


# External direction tokens for placing a tile
class Direction(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"


class Tile(BaseModel):
    """One domino piece.

    ``start``/``end`` carry the current orientation, but equality and hashing
    ignore it: ``Tile.of(2, 5) == Tile.of(5, 2)``.
    """

    model_config = ConfigDict(frozen=True)

    start: int = Field(..., ge=MIN_PIP, le=MAX_PIP)
    end: int = Field(..., ge=MIN_PIP, le=MAX_PIP)

    @classmethod
    def of(cls, start: int, end: int) -> "Tile":
        return cls(start=start, end=end)

    @classmethod
    def from_pair(cls, pair: Any) -> "Tile":
        """Parse an external ``[a, b]`` pair (or ``{"start", "end"}`` dict).

        Raises:
            ValueError: If the value is not a pair of pip values in range.
        """
        if isinstance(pair, Tile):
            return cls(start=pair.start, end=pair.end)
        if isinstance(pair, dict):
            return cls.model_validate(pair)
        if isinstance(pair, (str, bytes)) or not isinstance(pair, Sequence) or len(pair) != 2:
            raise ValueError(f"Tile must be a pair of pip values, got {pair!r}")
        return cls(start=pair[0], end=pair[1])

    @property
    def points(self) -> int:
        return self.start + self.end

    @property
    def is_double(self) -> bool:
        return self.start == self.end

    @property
    def key(self) -> tuple[int, int]:
        """Orientation-free identity, lowest pip first."""
        return (min(self.start, self.end), max(self.start, self.end))

    @property
    def label(self) -> str:
        return f"{self.start}:{self.end}"

    def matches(self, value: int | None) -> bool:
        return value is not None and value in (self.start, self.end)

    def flipped(self) -> "Tile":
        return self.model_copy(update={"start": self.end, "end": self.start})

    def to_pair(self) -> list[int]:
        return [self.start, self.end]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Tile):
            return self.key == other.key
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return self.label


class PlacedTile(Tile):
    """A tile laid on the board, oriented so ``start`` faces the head."""

    placed_by: str | None = None


# Data models for game entities
class PlayerAttributes(BaseModel):
    player_id: str
    name: str


class Player(PlayerAttributes):
    seat: int
    hand: list[Tile] = Field(default_factory=list)

    def add_to_hand(self, tiles: Tile | Iterable[Tile]) -> None:
        if isinstance(tiles, Tile):
            self.hand.append(tiles)
        else:
            self.hand.extend(tiles)

    def has_tile(self, tile: Tile) -> bool:
        return tile in self.hand

    def use_tile(self, tile: Tile) -> Tile:
        """Remove ``tile`` from the hand and return the held copy.

        Raises:
            ValueError: If the tile is not in the hand.
        """
        index = self.hand.index(tile)
        return self.hand.pop(index)

    @property
    def hand_points(self) -> int:
        return sum(tile.points for tile in self.hand)

    @property
    def hand_size(self) -> int:
        return len(self.hand)


class DrawSettings(BaseModel):
    draw_rule: DrawRule = DrawRule.DRAW_UNTIL_PLAY
    max_draws_per_turn: int | None = Field(None, ge=0)


# Read models handed to the transport layer
class PlayerSummary(BaseModel):
    player_id: str
    name: str
    total: int


class WinnerInfo(BaseModel):
    player_id: str
    name: str
    points: int
