"""Face-down draw pile."""

import logging
import random
from collections.abc import Iterable

from app.schemas.game_engine import MAX_PIP, MIN_PIP, Tile

from .errors import PileExhaustedError

logger = logging.getLogger(__name__)

FULL_SET_SIZE = 28


def build_tile_set() -> list[Tile]:
    """Return the 28 unique tiles of a double-six set, (0,0) through (6,6)."""
    return [
        Tile.of(low, high)
        for low in range(MIN_PIP, MAX_PIP + 1)
        for high in range(low, MAX_PIP + 1)
    ]


class TilePile:
    """Shuffled stack of tiles that only shrinks.

    Args:
        rng: Random source used for the shuffle. Pass a seeded
            ``random.Random`` for deterministic deals.
        tiles: Preset pile order. When given, no shuffle is applied.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        tiles: Iterable[Tile] | None = None,
    ) -> None:
        if tiles is not None:
            self._tiles = list(tiles)
            logger.debug("Pile created from preset order: size=%d", len(self._tiles))
            return

        self._tiles = build_tile_set()
        # random.shuffle is a Fisher-Yates shuffle
        (rng or random.Random()).shuffle(self._tiles)
        logger.debug("Pile built and shuffled: size=%d", len(self._tiles))

    @property
    def tiles(self) -> tuple[Tile, ...]:
        return tuple(self._tiles)

    def size(self) -> int:
        return len(self._tiles)

    def __len__(self) -> int:
        return len(self._tiles)

    def is_empty(self) -> bool:
        return not self._tiles

    def pull(self, n: int = 1) -> list[Tile]:
        """Remove and return the first ``n`` tiles.

        Raises:
            PileExhaustedError: If fewer than ``n`` tiles remain.
        """
        if n > len(self._tiles):
            raise PileExhaustedError(f"Pile only has {len(self._tiles)} tiles left.")
        pulled, self._tiles = self._tiles[:n], self._tiles[n:]
        return pulled

    def pull_one(self) -> Tile:
        return self.pull(1)[0]
