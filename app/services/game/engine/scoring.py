"""End-of-game winner and score calculation."""

import logging
from collections.abc import Sequence

from app.schemas.game_engine import Player

logger = logging.getLogger(__name__)


def find_empty_hand_player(players: Sequence[Player]) -> Player | None:
    """Return the first seat that has played every tile, if any."""
    return next((p for p in players if not p.hand), None)


def find_locked_winner(players: Sequence[Player]) -> Player:
    """Pick the winner of a locked table by hand points.

    - 2 players: lower hand wins, ties go to seat 0.
    - 4 players: seats (0, 2) play against (1, 3); the lower pair total wins
      and seat 0 or seat 1 represents the pair, ties go to (0, 2).
    - 3 players: lowest hand wins, ties go to the earlier seat.
    """
    if len(players) == 2:
        first, second = players
        return first if first.hand_points <= second.hand_points else second

    if len(players) == 4:
        pair_one = players[0].hand_points + players[2].hand_points
        pair_two = players[1].hand_points + players[3].hand_points
        logger.debug("Locked table pair totals: (0,2)=%d, (1,3)=%d", pair_one, pair_two)
        return players[0] if pair_one <= pair_two else players[1]

    return sorted(players, key=lambda p: p.hand_points)[0]


def get_winner_points(players: Sequence[Player]) -> int:
    """Points awarded to the winner: every hand's pips over ten, floored."""
    return sum(p.hand_points for p in players) // 10
