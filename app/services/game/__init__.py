"""Game service module.

Provides:
- Game engine (engine/): tiles, board, pile, turn state machine
"""

# Re-export from engine for convenience
from .engine import (
    AnyGameEvent,
    Board,
    BoardPosition,
    GameEngine,
    TilePile,
    create_game,
)

__all__ = [
    "AnyGameEvent",
    "Board",
    "BoardPosition",
    "GameEngine",
    "TilePile",
    "create_game",
]
