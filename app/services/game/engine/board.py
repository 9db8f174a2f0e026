"""Placed-tile line and its two open ends."""

import logging
from collections.abc import Iterable
from enum import IntFlag

from app.schemas.game_engine import PlacedTile, Tile

from .errors import IllegalPlacementError

logger = logging.getLogger(__name__)


class BoardPosition(IntFlag):
    NONE = 0
    START = 1
    END = 2
    BOTH = 3

    @property
    def side(self) -> str:
        return "start" if self == BoardPosition.START else "end"


class Board:
    """Ordered line of placed tiles.

    ``open_start`` is the pip at the head of the line, ``open_end`` the pip
    at the tail. ``center`` is the index of the opening tile, which shifts
    right every time a tile is prepended.
    """

    def __init__(self) -> None:
        self._tiles: list[PlacedTile] = []
        self.center = 0

    @classmethod
    def from_tiles(cls, tiles: Iterable[Tile], center: int = 0) -> "Board":
        """Build a board from an already-oriented chain of tiles.

        Raises:
            ValueError: If two neighbouring tiles do not connect.
        """
        board = cls()
        placed = [PlacedTile(start=t.start, end=t.end) for t in tiles]
        for left, right in zip(placed, placed[1:]):
            if left.end != right.start:
                raise ValueError(f"Tiles {left} and {right} do not connect")
        board._tiles = placed
        board.center = center
        return board

    @property
    def tiles(self) -> tuple[PlacedTile, ...]:
        return tuple(self._tiles)

    def __len__(self) -> int:
        return len(self._tiles)

    def is_empty(self) -> bool:
        return not self._tiles

    @property
    def open_start(self) -> int | None:
        return self._tiles[0].start if self._tiles else None

    @property
    def open_end(self) -> int | None:
        return self._tiles[-1].end if self._tiles else None

    def can_place_tile(self, tile: Tile) -> BoardPosition:
        """Return which ends accept ``tile``. An empty board accepts both."""
        if not self._tiles:
            return BoardPosition.BOTH

        position = BoardPosition.NONE
        if tile.matches(self.open_start):
            position |= BoardPosition.START
        if tile.matches(self.open_end):
            position |= BoardPosition.END
        return position

    def place_tile(
        self,
        tile: Tile,
        position: BoardPosition | None = None,
        placed_by: str | None = None,
    ) -> tuple[PlacedTile, BoardPosition]:
        """Orient ``tile`` so its matching pip faces inward and attach it.

        When ``position`` is omitted the computed mask is used; a tile that
        fits both ends goes to the start. On an empty board any position is
        accepted and the tile keeps the orientation it came in with.

        Returns:
            The placed tile record and the end it was attached to.

        Raises:
            IllegalPlacementError: If the tile does not fit the requested end
                (or any end, when no position is given).
        """
        if position is not None:
            position = BoardPosition(position)
        if position in (BoardPosition.BOTH, BoardPosition.NONE):
            position = None

        if not self._tiles:
            placed = PlacedTile(start=tile.start, end=tile.end, placed_by=placed_by)
            self._tiles.append(placed)
            resolved = position or BoardPosition.END
            logger.debug("Opening tile placed: %s", placed)
            return placed, resolved

        allowed = self.can_place_tile(tile)
        if position is not None and not (allowed & position):
            raise IllegalPlacementError(
                f"Tile {tile} cannot be placed at the {position.side} of the board."
            )
        if position is None and not allowed:
            raise IllegalPlacementError(f"Tile {tile} does not match any open end.")

        if position is None:
            position = BoardPosition.END if allowed == BoardPosition.END else BoardPosition.START

        if position == BoardPosition.END:
            oriented = tile if tile.start == self.open_end else tile.flipped()
            placed = PlacedTile(start=oriented.start, end=oriented.end, placed_by=placed_by)
            self._tiles.append(placed)
        else:
            oriented = tile if tile.end == self.open_start else tile.flipped()
            placed = PlacedTile(start=oriented.start, end=oriented.end, placed_by=placed_by)
            self._tiles.insert(0, placed)
            self.center += 1

        logger.debug(
            "Tile placed: tile=%s, side=%s, open_ends=(%s, %s)",
            placed,
            position.side,
            self.open_start,
            self.open_end,
        )
        return placed, position

    def to_pairs(self) -> list[list[int]]:
        return [tile.to_pair() for tile in self._tiles]
