"""Shared fixtures for game engine and room tests."""

import random
from collections.abc import Iterable, Sequence

import pytest

from app.schemas.game_engine import DrawSettings, PlayerAttributes, Tile
from app.services.game.engine import Board, GameEngine, TilePile, build_tile_set, create_game
from app.services.room import Room

# Fixed ids for deterministic testing
PLAYER_IDS = ("p1", "p2", "p3", "p4")
PLAYER_NAMES = ("Ana", "Bruno", "Carla", "Diego")

Pair = tuple[int, int]


def tiles(*pairs: Pair) -> list[Tile]:
    """Helper to build a list of tiles from (a, b) pairs."""
    return [Tile.of(a, b) for a, b in pairs]


def unshuffled_pile() -> TilePile:
    """Pile in build order: (0,0), (0,1), ... (5,6), (6,6)."""
    return TilePile(tiles=build_tile_set())


def player_attributes(count: int) -> list[PlayerAttributes]:
    return [
        PlayerAttributes(player_id=PLAYER_IDS[i], name=PLAYER_NAMES[i]) for i in range(count)
    ]


def arrange(
    game: GameEngine,
    hands: Sequence[Iterable[Pair]],
    board: Iterable[Pair] = (),
    current: int = 0,
    pile: Iterable[Pair] | None = None,
) -> GameEngine:
    """Overwrite a dealt game with a hand-made position.

    When ``pile`` is omitted it holds every tile not in a hand or on the
    board, so the 28-tile total still holds.
    """
    hand_tiles = [tiles(*hand) for hand in hands]
    board_tiles = tiles(*board)

    for player, hand in zip(game.players, hand_tiles, strict=True):
        player.hand = list(hand)
    game.board = Board.from_tiles(board_tiles)

    if pile is None:
        used = {t for hand in hand_tiles for t in hand} | set(board_tiles)
        pile_tiles = [t for t in build_tile_set() if t not in used]
    else:
        pile_tiles = tiles(*pile)
    game.pile = TilePile(tiles=pile_tiles)
    game.current_index = current
    return game


def build_engine(
    hands: Sequence[Iterable[Pair]],
    board: Iterable[Pair] = (),
    current: int = 0,
    pile: Iterable[Pair] | None = None,
) -> GameEngine:
    game = create_game(player_attributes(len(hands)), pile=unshuffled_pile())
    return arrange(game, hands, board=board, current=current, pile=pile)


def build_room(
    hands: Sequence[Iterable[Pair]],
    board: Iterable[Pair] = (),
    current: int = 0,
    pile: Iterable[Pair] | None = None,
    draw_settings: DrawSettings | dict | None = None,
) -> Room:
    """A started room whose game is arranged into the given position."""

    def factory(players):
        game = create_game(players, pile=unshuffled_pile())
        return arrange(game, hands, board=board, current=current, pile=pile)

    room = Room("room-1", len(hands), draw_settings, game_factory=factory)
    for attrs in player_attributes(len(hands)):
        room.add_player(attrs.player_id, attrs.name)
    return room


@pytest.fixture
def make_engine():
    """Factory fixture: build_engine(hands, board=(), current=0, pile=None)."""
    return build_engine


@pytest.fixture
def make_room():
    """Factory fixture: build_room(hands, board=(), current=0, pile=None, draw_settings=None)."""
    return build_room


@pytest.fixture
def make_tiles():
    return tiles


@pytest.fixture
def two_player_game() -> GameEngine:
    """Unshuffled two-player deal: p1 holds (0,0)-(0,6) and starts, 6:6 stays in the pile."""
    return create_game(player_attributes(2), pile=unshuffled_pile())


@pytest.fixture
def four_player_game() -> GameEngine:
    """Unshuffled four-player deal: p4 holds the 6:6 and starts."""
    return create_game(player_attributes(4), pile=unshuffled_pile())


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(1234)
