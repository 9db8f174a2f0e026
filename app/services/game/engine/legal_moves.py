"""Playable-tile calculation against the board's open ends."""

from collections.abc import Iterable

from app.schemas.game_engine import Player, Tile

from .board import Board


def get_possible_tiles(hand: Iterable[Tile], board: Board) -> list[Tile]:
    """Return the tiles of ``hand`` the board accepts at either end."""
    return [tile for tile in hand if board.can_place_tile(tile)]


def has_playable_tile(hand: Iterable[Tile], board: Board) -> bool:
    """Quick check if any tile of ``hand`` fits the board.

    Cheaper than get_possible_tiles() when only existence matters.
    """
    return any(board.can_place_tile(tile) for tile in hand)


def is_board_locked(players: Iterable[Player], board: Board) -> bool:
    """True when no player holds a tile the board accepts.

    The pile is not considered: a stuck table is locked even if tiles remain
    face down.
    """
    return not any(has_playable_tile(player.hand, board) for player in players)
