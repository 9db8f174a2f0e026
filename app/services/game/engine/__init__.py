"""Game engine module - domino rules and turn state machine.

This module provides the core game engine with:
- Tile pile and board with open-end matching
- GameEngine turn pointer with automatic skips
- Event types returned from every transition
- Winner and score determination

Usage:
    from app.services.game.engine import BoardPosition, create_game

    game = create_game([("Ana", "sid-1"), ("Bruno", "sid-2")])
    tile = game.get_possible_tiles()[0]
    events = game.play(tile, BoardPosition.END)  # Broadcast these via WebSocket
"""

# Board
from .board import Board, BoardPosition

# Errors - contract violations
from .errors import (
    GameEngineError,
    GameOverError,
    IllegalMoveError,
    IllegalPlacementError,
    InvalidPlayerCountError,
    PileExhaustedError,
    TileNotInHandError,
)

# Events - for WebSocket broadcasts
from .events import (
    AnyGameEvent,
    GameEnded,
    GameEvent,
    GameStarted,
    PlayerSkipped,
    TileDrawn,
    TilePlayed,
    TurnPassed,
)

# Turn state machine
from .game import HAND_SIZE, MAX_PLAYERS, MIN_PLAYERS, GameEngine, create_game

# Legal moves
from .legal_moves import get_possible_tiles, has_playable_tile, is_board_locked

# Pile
from .pile import FULL_SET_SIZE, TilePile, build_tile_set

# Scoring
from .scoring import find_locked_winner, get_winner_points

__all__ = [
    # Board
    "Board",
    "BoardPosition",
    # Errors
    "GameEngineError",
    "GameOverError",
    "IllegalMoveError",
    "IllegalPlacementError",
    "InvalidPlayerCountError",
    "PileExhaustedError",
    "TileNotInHandError",
    # Events
    "GameEvent",
    "AnyGameEvent",
    "GameStarted",
    "TilePlayed",
    "TileDrawn",
    "PlayerSkipped",
    "TurnPassed",
    "GameEnded",
    # Game
    "GameEngine",
    "create_game",
    "HAND_SIZE",
    "MIN_PLAYERS",
    "MAX_PLAYERS",
    # Legal moves
    "get_possible_tiles",
    "has_playable_tile",
    "is_board_locked",
    # Pile
    "TilePile",
    "build_tile_set",
    "FULL_SET_SIZE",
    # Scoring
    "find_locked_winner",
    "get_winner_points",
]
