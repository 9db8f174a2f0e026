"""Turn state machine for one domino game."""

import logging
import random
from collections.abc import Mapping, Sequence

from app.schemas.game_engine import GamePhase, Player, PlayerAttributes, Tile

from .board import Board, BoardPosition
from .errors import (
    GameOverError,
    IllegalPlacementError,
    InvalidPlayerCountError,
    PileExhaustedError,
    TileNotInHandError,
)
from .events import (
    AnyGameEvent,
    GameEnded,
    GameStarted,
    PlayerSkipped,
    TileDrawn,
    TilePlayed,
    TurnPassed,
)
from .legal_moves import get_possible_tiles, has_playable_tile, is_board_locked
from .pile import TilePile
from .scoring import find_empty_hand_player, find_locked_winner, get_winner_points

logger = logging.getLogger(__name__)

MIN_PLAYERS = 2
MAX_PLAYERS = 4
HAND_SIZE = 7
OPENING_TILE = Tile.of(6, 6)

PlayerInput = PlayerAttributes | Mapping[str, str] | tuple[str, str]


def _to_attributes(player: PlayerInput) -> PlayerAttributes:
    if isinstance(player, PlayerAttributes):
        return player
    if isinstance(player, Mapping):
        player_id = player["id"] if "id" in player else player["player_id"]
        return PlayerAttributes(player_id=player_id, name=player["name"])
    name, player_id = player
    return PlayerAttributes(player_id=player_id, name=name)


class GameEngine:
    """One live game: seats, board, pile and the turn pointer.

    States are ``AWAITING_MOVE`` (someone holds the turn) and ``OVER``. The
    engine never stops on a seat that cannot play: after each play or pass
    the turn pointer skips forward to the next seat holding a playable tile,
    or the game ends as locked.

    Args:
        players: 2-4 players in seat order, as PlayerAttributes, mappings with
            ``id``/``name`` keys, or ``(name, id)`` tuples.
        rng: Random source for the shuffle.
        pile: Preset pile, used instead of building and shuffling a new one.

    Raises:
        InvalidPlayerCountError: If fewer than 2 or more than 4 players.
    """

    def __init__(
        self,
        players: Sequence[PlayerInput],
        rng: random.Random | None = None,
        pile: TilePile | None = None,
    ) -> None:
        if not MIN_PLAYERS <= len(players) <= MAX_PLAYERS:
            raise InvalidPlayerCountError(
                f"Can only have between {MIN_PLAYERS} and {MAX_PLAYERS} players, "
                f"got {len(players)}."
            )

        self.players: list[Player] = [
            Player(player_id=attrs.player_id, name=attrs.name, seat=seat)
            for seat, attrs in enumerate(_to_attributes(p) for p in players)
        ]
        self.board = Board()
        self.pile = pile if pile is not None else TilePile(rng=rng)
        self.current_index = 0
        self._event_seq = 0

        for player in self.players:
            player.add_to_hand(self.pile.pull(HAND_SIZE))
            if player.has_tile(OPENING_TILE):
                self.current_index = player.seat

        logger.info(
            "Game created: players=%d, first_player=%s, pile=%d",
            len(self.players),
            self.current_player.player_id,
            self.pile.size(),
        )

    # --- state queries -----------------------------------------------------

    @property
    def current_player(self) -> Player:
        return self.players[self.current_index]

    @property
    def phase(self) -> GamePhase:
        return GamePhase.OVER if self.is_over() else GamePhase.AWAITING_MOVE

    def get_player_index_by_id(self, player_id: str) -> int | None:
        return next((p.seat for p in self.players if p.player_id == player_id), None)

    def get_player(self, player_id: str) -> Player | None:
        index = self.get_player_index_by_id(player_id)
        return self.players[index] if index is not None else None

    def get_possible_tiles(self) -> list[Tile]:
        """The current player's tiles that the board accepts."""
        return get_possible_tiles(self.current_player.hand, self.board)

    def is_locked(self) -> bool:
        return is_board_locked(self.players, self.board)

    def is_over(self) -> bool:
        return find_empty_hand_player(self.players) is not None or self.is_locked()

    def get_winner(self) -> Player | None:
        """Winner of a finished game, None while the game is still going."""
        empty_hand = find_empty_hand_player(self.players)
        if empty_hand is not None:
            return empty_hand
        if not self.is_locked():
            return None
        return find_locked_winner(self.players)

    def get_winner_points(self) -> int:
        return get_winner_points(self.players)

    def tile_count(self) -> int:
        """Tiles across pile, hands and board; always the full set."""
        return self.pile.size() + sum(p.hand_size for p in self.players) + len(self.board)

    # --- transitions -------------------------------------------------------

    def start_event(self) -> GameStarted:
        """Announce the deal. Called once by whoever created the game."""
        event = GameStarted(
            player_order=[p.player_id for p in self.players],
            first_player_id=self.current_player.player_id,
        )
        self._stamp([event])
        return event

    def play(self, tile: Tile, position: BoardPosition | None = None) -> list[AnyGameEvent]:
        """Play ``tile`` from the current player's hand.

        Returns:
            Events for the play, any automatic skips and the game end.

        Raises:
            GameOverError: If the game has already ended.
            TileNotInHandError: If the current player does not hold the tile.
            IllegalPlacementError: If the board rejects the tile at ``position``.
        """
        if self.is_over():
            raise GameOverError("The game is already over.")

        player = self.current_player
        if not player.has_tile(tile):
            raise TileNotInHandError(f"Player {player.name} doesn't have {tile}.")

        # Validate placement before touching the hand
        allowed = self.board.can_place_tile(tile)
        if position in (BoardPosition.START, BoardPosition.END):
            allowed &= position
        if not allowed:
            raise IllegalPlacementError(f"Tile {tile} cannot be placed there.")

        held = player.use_tile(tile)
        placed, side = self.board.place_tile(held, position, placed_by=player.player_id)
        events: list[AnyGameEvent] = [
            TilePlayed(player_id=player.player_id, tile=placed.to_pair(), position=side.side)
        ]
        logger.info(
            "Tile played: player=%s, tile=%s, side=%s, hand_left=%d",
            player.player_id,
            placed,
            side.side,
            player.hand_size,
        )

        if self.is_over():
            events.append(self._end_event())
            return self._stamp(events)

        self.current_index = self._next_index(self.current_index)
        events.extend(self._skip_stuck_players())
        return self._stamp(events)

    def draw_tile(self) -> tuple[Tile, list[AnyGameEvent]]:
        """Move one tile from the pile into the current player's hand.

        Raises:
            PileExhaustedError: If the pile is empty.
        """
        if self.pile.is_empty():
            raise PileExhaustedError("Pile is empty.")
        tile = self.pile.pull_one()
        player = self.current_player
        player.add_to_hand(tile)
        logger.debug(
            "Tile drawn: player=%s, tile=%s, remaining=%d",
            player.player_id,
            tile,
            self.pile.size(),
        )
        event = TileDrawn(player_id=player.player_id, remaining=self.pile.size())
        return tile, self._stamp([event])

    def pass_turn(self) -> list[AnyGameEvent]:
        """Give up the current turn and advance to the next seat that can play.

        Raises:
            GameOverError: If the game has already ended.
        """
        if self.is_over():
            raise GameOverError("The game is already over.")

        passing = self.current_player
        self.current_index = self._next_index(self.current_index)
        skipped = self._skip_stuck_players()

        next_id = None if self.is_over() else self.current_player.player_id
        events: list[AnyGameEvent] = [
            TurnPassed(player_id=passing.player_id, next_player_id=next_id),
            *skipped,
        ]
        logger.info("Turn passed: player=%s, next_player=%s", passing.player_id, next_id)
        return self._stamp(events)

    # --- internals ---------------------------------------------------------

    def _next_index(self, index: int) -> int:
        return (index + 1) % len(self.players)

    def _skip_stuck_players(self) -> list[AnyGameEvent]:
        """Advance past seats with no playable tile; ends the game if locked."""
        events: list[AnyGameEvent] = []
        while not self.is_over() and not has_playable_tile(self.current_player.hand, self.board):
            skipped = self.current_player
            logger.debug("Player skipped (no playable tile): player=%s", skipped.player_id)
            events.append(PlayerSkipped(player_id=skipped.player_id))
            self.current_index = self._next_index(self.current_index)

        if self.is_over():
            events.append(self._end_event())
        return events

    def _end_event(self) -> GameEnded:
        winner = self.get_winner()
        reason = "domino" if find_empty_hand_player(self.players) is not None else "locked"
        points = self.get_winner_points()
        logger.info(
            "Game ended: winner=%s, points=%d, reason=%s",
            winner.player_id,
            points,
            reason,
        )
        return GameEnded(winner_id=winner.player_id, points=points, reason=reason)

    def _stamp(self, events: list[AnyGameEvent]) -> list[AnyGameEvent]:
        for event in events:
            event.seq = self._event_seq
            self._event_seq += 1
        return events


def create_game(
    players: Sequence[PlayerInput],
    rng: random.Random | None = None,
    pile: TilePile | None = None,
) -> GameEngine:
    """Deal a new game. See GameEngine for arguments and errors."""
    return GameEngine(players, rng=rng, pile=pile)
