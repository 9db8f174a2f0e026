"""Contract violations raised by the game core.

Rule violations a well-behaved client can trigger (wrong turn, illegal tile)
are reported by the room layer as result codes instead. These exceptions
signal malformed construction input or internal misuse.
"""


class GameEngineError(ValueError):
    """Base class for game engine errors."""


class InvalidPlayerCountError(GameEngineError):
    """Raised when a game is created with fewer than 2 or more than 4 players."""


class PileExhaustedError(GameEngineError):
    """Raised when pulling more tiles than the pile holds."""


class IllegalMoveError(GameEngineError):
    """Base class for rejected plays."""


class TileNotInHandError(IllegalMoveError):
    """Raised when the current player does not hold the tile."""


class IllegalPlacementError(IllegalMoveError):
    """Raised when the board does not accept the tile at the requested end."""


class GameOverError(IllegalMoveError):
    """Raised when acting on a game that has already ended."""
