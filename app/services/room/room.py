"""Room: roster, draw-rule policy and turn gating over one GameEngine.

A room seats 2-4 actors (opaque ids, typically connection ids) and starts
its game the moment the roster fills. It is the only entry point the
transport layer uses; it never talks to the network itself and reports
every outcome as a RoomResult.
"""

import logging
import math
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from app.schemas.game_engine import (
    Direction,
    DrawRule,
    DrawSettings,
    PlayerAttributes,
    PlayerSummary,
    Tile,
    WinnerInfo,
)
from app.services.game.engine import (
    MAX_PLAYERS,
    MIN_PLAYERS,
    AnyGameEvent,
    BoardPosition,
    GameEngine,
    IllegalMoveError,
    PileExhaustedError,
    create_game,
)

from .results import DrawResult, JoinResult, MaxPlayersResult, MoveResult, ReasonCode

logger = logging.getLogger(__name__)

DEFAULT_PLAYER_NAME = "Player"

DIRECTION_TO_POSITION: dict[Direction, BoardPosition] = {
    Direction.TOP: BoardPosition.START,
    Direction.BOTTOM: BoardPosition.END,
}

GameFactory = Callable[[Sequence[PlayerAttributes]], GameEngine]


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def clamp_max_players(value: Any) -> int:
    """Force a requested seat count into [2, 4]; garbage becomes 2."""
    number = _as_number(value)
    if number is None or number < MIN_PLAYERS:
        return MIN_PLAYERS
    if number > MAX_PLAYERS:
        return MAX_PLAYERS
    return math.floor(number)


def normalize_draw_settings(options: DrawSettings | Mapping[str, Any] | None) -> DrawSettings:
    """Resolve draw options into a DrawSettings.

    Unknown rules fall back to draw_until_play, a cap is floored and never
    negative (unparseable caps become 0), and draw_once_pass without a cap
    gets a cap of 1.
    """
    if isinstance(options, DrawSettings):
        options = options.model_dump()
    options = options or {}

    raw_rule = options.get("draw_rule")
    if isinstance(raw_rule, DrawRule):
        raw_rule = raw_rule.value
    draw_rule = (
        DrawRule.DRAW_ONCE_PASS
        if raw_rule == DrawRule.DRAW_ONCE_PASS.value
        else DrawRule.DRAW_UNTIL_PLAY
    )

    max_draws = options.get("max_draws_per_turn")
    if max_draws is not None:
        number = _as_number(max_draws)
        if number is None or number == -math.inf:
            max_draws = 0
        elif number == math.inf:
            max_draws = None
        else:
            max_draws = max(0, math.floor(number))
    if draw_rule == DrawRule.DRAW_ONCE_PASS and max_draws is None:
        max_draws = 1

    return DrawSettings(draw_rule=draw_rule, max_draws_per_turn=max_draws)


def parse_direction(direction: Any) -> BoardPosition | None:
    """Map "top"/"bottom" to a board end; anything else means no hint."""
    try:
        return DIRECTION_TO_POSITION[Direction(direction)]
    except ValueError:
        return None


class Room:
    """One game room.

    Args:
        room_id: Identifier chosen by the creator.
        max_players: Seats; clamped into [2, 4]. Use validate_max_players()
            first to reject bad input instead of clamping it.
        draw_settings: Draw rule and optional per-turn draw cap.
        game_factory: Builds the game once the roster is full. Tests pass a
            factory with a seeded random source.
        created_by: Connection that created the room. It owns the room until
            someone takes a seat.
    """

    def __init__(
        self,
        room_id: str,
        max_players: Any,
        draw_settings: DrawSettings | Mapping[str, Any] | None = None,
        game_factory: GameFactory | None = None,
        created_by: str | None = None,
    ) -> None:
        self.room_id = room_id
        self.created_by = created_by
        self.max_players = clamp_max_players(max_players)
        self.draw_settings = normalize_draw_settings(draw_settings)
        self.players: list[PlayerAttributes] = []
        self.game: GameEngine | None = None
        self.draws_this_turn = 0
        self._game_factory = game_factory or create_game

        logger.info(
            "Room created: room_id=%s, max_players=%d, draw_rule=%s, max_draws=%s",
            room_id,
            self.max_players,
            self.draw_settings.draw_rule.value,
            self.draw_settings.max_draws_per_turn,
        )

    @property
    def draw_rule(self) -> DrawRule:
        return self.draw_settings.draw_rule

    @property
    def max_draws_per_turn(self) -> int | None:
        return self.draw_settings.max_draws_per_turn

    @staticmethod
    def validate_max_players(value: Any) -> MaxPlayersResult:
        """Check a requested seat count without clamping it."""
        number = _as_number(value)
        if number is None or number < MIN_PLAYERS or number > MAX_PLAYERS:
            return MaxPlayersResult.failure(
                ReasonCode.INVALID_MAX_PLAYERS,
                min=MIN_PLAYERS,
                max=MAX_PLAYERS,
            )
        return MaxPlayersResult(max_players=math.floor(number))

    @staticmethod
    def clamp_max_players(value: Any) -> int:
        """Force a requested seat count into range; used at construction."""
        return clamp_max_players(value)

    # --- roster ------------------------------------------------------------

    def add_player(self, actor_id: str, name: str | None = None) -> JoinResult:
        """Seat an actor; the game starts when the last seat is taken."""
        if self.game is not None:
            return JoinResult.failure(ReasonCode.GAME_STARTED)
        if len(self.players) >= self.max_players:
            return JoinResult.failure(ReasonCode.FULL)
        if self.is_member(actor_id):
            return JoinResult.failure(ReasonCode.ALREADY_IN)

        self.players.append(PlayerAttributes(player_id=actor_id, name=name or DEFAULT_PLAYER_NAME))
        logger.info(
            "Player joined: room_id=%s, player=%s, seats=%d/%d",
            self.room_id,
            actor_id,
            len(self.players),
            self.max_players,
        )

        if len(self.players) == self.max_players:
            event = self._start_game()
            return JoinResult(started=True, events=[event])
        return JoinResult(started=False)

    def _start_game(self) -> AnyGameEvent:
        self.game = self._game_factory(list(self.players))
        self.draws_this_turn = 0
        logger.info("Game started: room_id=%s, players=%d", self.room_id, len(self.players))
        return self.game.start_event()

    def is_started(self) -> bool:
        return self.game is not None

    def is_member(self, actor_id: str) -> bool:
        return any(p.player_id == actor_id for p in self.players)

    def get_player_index(self, actor_id: str) -> int | None:
        if self.game is not None:
            return self.game.get_player_index_by_id(actor_id)
        return next((i for i, p in enumerate(self.players) if p.player_id == actor_id), None)

    def is_current_player(self, actor_id: str) -> bool:
        return self.game is not None and self.get_current_player_id() == actor_id

    # --- turn actions ------------------------------------------------------

    def _gate(self, actor_id: str) -> ReasonCode | None:
        """Common checks for turn-gated actions."""
        if self.game is None:
            return ReasonCode.GAME_NOT_STARTED
        if self.game.is_over():
            return ReasonCode.GAME_OVER
        if not self.is_current_player(actor_id):
            return ReasonCode.NOT_YOUR_TURN
        return None

    def make_move(self, actor_id: str, move: Any, direction: Any = None) -> MoveResult:
        """Play a tile given as an ``[a, b]`` pair at "top" or "bottom"."""
        error = self._gate(actor_id)
        if error is not None:
            logger.warning(
                "Move rejected: room_id=%s, player=%s, reason=%s",
                self.room_id,
                actor_id,
                error.value,
            )
            return MoveResult.failure(error)

        try:
            tile = Tile.from_pair(move)
        except ValueError as e:
            logger.warning("Malformed tile from player %s: %r", actor_id, move)
            return MoveResult.failure(ReasonCode.INVALID_MOVE, str(e))

        try:
            events = self.game.play(tile, parse_direction(direction))
        except IllegalMoveError as e:
            logger.warning(
                "Invalid move: room_id=%s, player=%s, tile=%s, direction=%s",
                self.room_id,
                actor_id,
                tile,
                direction,
            )
            return MoveResult.failure(ReasonCode.INVALID_MOVE, str(e))

        self.draws_this_turn = 0
        return self._move_result(events)

    def ask_for_piece(self, actor_id: str) -> DrawResult:
        """Draw one tile for a current player who holds nothing playable."""
        error = self._gate(actor_id)
        if error is not None:
            return DrawResult.failure(error)
        game = self.game

        if game.get_possible_tiles():
            return DrawResult.failure(ReasonCode.HAS_PLAYABLE)

        limit = self.max_draws_per_turn
        if limit is not None and self.draws_this_turn >= limit:
            reason = (
                ReasonCode.MUST_PASS
                if self.draw_rule == DrawRule.DRAW_ONCE_PASS
                else ReasonCode.MAX_DRAWS_REACHED
            )
            logger.warning(
                "Draw refused: room_id=%s, player=%s, draws=%d, limit=%d",
                self.room_id,
                actor_id,
                self.draws_this_turn,
                limit,
            )
            return DrawResult.failure(reason)

        try:
            tile, events = game.draw_tile()
        except PileExhaustedError:
            return DrawResult.failure(ReasonCode.PILE_EMPTY)
        self.draws_this_turn += 1

        can_play = bool(game.get_possible_tiles())
        should_pass = not can_play and (
            self.draw_rule == DrawRule.DRAW_ONCE_PASS
            or game.pile.is_empty()
            or (limit is not None and self.draws_this_turn >= limit)
        )

        if should_pass:
            events.extend(game.pass_turn())
            self.draws_this_turn = 0

        logger.info(
            "Tile drawn: room_id=%s, player=%s, passed_turn=%s, remaining=%d",
            self.room_id,
            actor_id,
            should_pass,
            game.pile.size(),
        )
        return DrawResult(
            tile=tile,
            passed_turn=should_pass,
            next_player_id=self.get_current_player_id(),
            remaining=game.pile.size(),
            game_over=game.is_over(),
            winner=self.get_winner(),
            events=events,
        )

    def pass_turn(self, actor_id: str) -> MoveResult:
        """Give up the turn once drawing is no longer allowed."""
        error = self._gate(actor_id)
        if error is not None:
            return MoveResult.failure(error)
        game = self.game

        if game.get_possible_tiles():
            return MoveResult.failure(ReasonCode.HAS_PLAYABLE)
        limit = self.max_draws_per_turn
        cap_reached = limit is not None and self.draws_this_turn >= limit
        if not game.pile.is_empty() and not cap_reached:
            return MoveResult.failure(ReasonCode.MUST_DRAW)

        events = game.pass_turn()
        self.draws_this_turn = 0
        return self._move_result(events)

    def _move_result(self, events: list[AnyGameEvent]) -> MoveResult:
        return MoveResult(
            next_player_id=self.get_current_player_id(),
            game_over=self.is_over(),
            winner=self.get_winner(),
            events=events,
        )

    # --- read-only queries -------------------------------------------------

    def get_board_tiles(self) -> list[list[int]]:
        if self.game is None:
            return []
        return self.game.board.to_pairs()

    def get_hand(self, actor_id: str) -> list[list[int]] | None:
        if self.game is None:
            return None
        player = self.game.get_player(actor_id)
        if player is None:
            return None
        return [tile.to_pair() for tile in player.hand]

    def get_players_summary(self, exclude_id: str | None = None) -> list[PlayerSummary]:
        """Seat list with hand sizes, leaving out ``exclude_id``."""
        if self.game is None:
            return [
                PlayerSummary(player_id=p.player_id, name=p.name, total=0)
                for p in self.players
                if p.player_id != exclude_id
            ]
        return [
            PlayerSummary(player_id=p.player_id, name=p.name, total=p.hand_size)
            for p in self.game.players
            if p.player_id != exclude_id
        ]

    def get_current_player_id(self) -> str | None:
        """Who holds the turn; None before the start and after the end."""
        if self.game is None or self.game.is_over():
            return None
        return self.game.current_player.player_id

    def get_possible_tiles(self, actor_id: str) -> list[list[int]]:
        if self.game is None or not self.is_current_player(actor_id):
            return []
        return [tile.to_pair() for tile in self.game.get_possible_tiles()]

    def is_over(self) -> bool:
        return self.game.is_over() if self.game is not None else False

    def get_winner(self) -> WinnerInfo | None:
        if self.game is None or not self.game.is_over():
            return None
        winner = self.game.get_winner()
        if winner is None:
            return None
        return WinnerInfo(
            player_id=winner.player_id,
            name=winner.name,
            points=self.game.get_winner_points(),
        )

    def get_remaining_pile_count(self) -> int:
        return self.game.pile.size() if self.game is not None else 0

    def snapshot(self, actor_id: str | None = None) -> dict[str, Any]:
        """Everything one seat may see, for (re)rendering a client."""
        winner = self.get_winner()
        return {
            "room_id": self.room_id,
            "max_players": self.max_players,
            "draw_rule": self.draw_rule.value,
            "max_draws_per_turn": self.max_draws_per_turn,
            "started": self.is_started(),
            "board": self.get_board_tiles(),
            "hand": self.get_hand(actor_id) if actor_id else None,
            "players": [s.model_dump() for s in self.get_players_summary(exclude_id=actor_id)],
            "current_player_id": self.get_current_player_id(),
            "possible_tiles": self.get_possible_tiles(actor_id) if actor_id else [],
            "remaining": self.get_remaining_pile_count(),
            "game_over": self.is_over(),
            "winner": winner.model_dump() if winner else None,
        }
