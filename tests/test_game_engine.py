"""Tests for the GameEngine turn state machine.

Critical scenarios tested:
- Deal, seat order and who moves first
- Play validation and board updates
- Automatic skip of stuck seats
- Game end by empty hand and by locked board
- Event sequencing
"""

import random

import pytest

from app.schemas.game_engine import GamePhase, PlayerAttributes, Tile
from app.services.game.engine import (
    HAND_SIZE,
    BoardPosition,
    GameEnded,
    GameOverError,
    GameStarted,
    IllegalPlacementError,
    InvalidPlayerCountError,
    PileExhaustedError,
    PlayerSkipped,
    TileDrawn,
    TileNotInHandError,
    TilePlayed,
    TurnPassed,
    create_game,
)

from conftest import player_attributes, unshuffled_pile


class TestCreateGame:
    """Construction and dealing."""

    @pytest.mark.parametrize("count", [0, 1, 5])
    def test_invalid_player_count(self, count: int):
        """Fewer than 2 or more than 4 players is a contract violation."""
        players = [PlayerAttributes(player_id=f"id{i}", name=f"n{i}") for i in range(count)]
        with pytest.raises(InvalidPlayerCountError):
            create_game(players)

    @pytest.mark.parametrize("count", [2, 3, 4])
    def test_deals_seven_each(self, count: int):
        """Every seat gets 7 tiles and the rest stays in the pile."""
        game = create_game(player_attributes(count), rng=random.Random(3))
        assert all(p.hand_size == HAND_SIZE for p in game.players)
        assert game.pile.size() == 28 - HAND_SIZE * count
        assert game.tile_count() == 28

    def test_seats_follow_input_order(self):
        """Seat index is the position in the input list."""
        game = create_game(player_attributes(3), rng=random.Random(3))
        assert [p.player_id for p in game.players] == ["p1", "p2", "p3"]
        assert [p.seat for p in game.players] == [0, 1, 2]

    def test_accepts_name_id_tuples_and_mappings(self):
        """Players may be given as (name, id) tuples or id/name mappings."""
        game = create_game([("Ana", "sid-1"), {"id": "sid-2", "name": "Bruno"}])
        assert [(p.name, p.player_id) for p in game.players] == [
            ("Ana", "sid-1"),
            ("Bruno", "sid-2"),
        ]

    def test_double_six_holder_starts(self, four_player_game):
        """With an unshuffled four-player deal, seat 3 holds 6:6 and moves first."""
        assert four_player_game.players[3].has_tile(Tile.of(6, 6))
        assert four_player_game.current_index == 3
        assert four_player_game.current_player.player_id == "p4"

    def test_seat_zero_starts_when_nobody_holds_double_six(self, two_player_game):
        """6:6 left in the pile falls back to seat 0."""
        assert two_player_game.pile.tiles[-1] == Tile.of(6, 6)
        assert two_player_game.current_index == 0

    def test_same_seed_same_deal(self):
        """An injected seeded source makes hands and the first seat reproducible."""
        first = create_game(player_attributes(4), rng=random.Random(2024))
        second = create_game(player_attributes(4), rng=random.Random(2024))
        assert [p.hand for p in first.players] == [p.hand for p in second.players]
        assert first.current_index == second.current_index

    def test_dealt_in_seat_order(self):
        """Seat 0 gets the first seven pile tiles, seat 1 the next seven."""
        game = create_game(player_attributes(2), pile=unshuffled_pile())
        assert game.players[0].hand[0] == Tile.of(0, 0)
        assert game.players[0].hand[-1] == Tile.of(0, 6)
        assert game.players[1].hand[0] == Tile.of(1, 1)

    def test_start_event(self, four_player_game):
        """start_event names the seat order and the first player."""
        event = four_player_game.start_event()
        assert isinstance(event, GameStarted)
        assert event.player_order == ["p1", "p2", "p3", "p4"]
        assert event.first_player_id == "p4"


class TestPlay:
    """Playing tiles."""

    def test_play_updates_hand_board_and_turn(self, make_engine):
        """A legal play moves the tile to the board and passes the turn."""
        game = make_engine([[(6, 6), (0, 1)], [(6, 2), (3, 3)]])
        events = game.play(Tile.of(6, 6))
        assert game.board.to_pairs() == [[6, 6]]
        assert game.players[0].hand == [Tile.of(0, 1)]
        assert game.current_player.player_id == "p2"
        assert isinstance(events[0], TilePlayed)
        assert events[0].tile == [6, 6]

    def test_tile_not_in_hand(self, make_engine):
        """Playing a tile the current player does not hold raises."""
        game = make_engine([[(6, 6)], [(6, 2)]])
        with pytest.raises(TileNotInHandError):
            game.play(Tile.of(6, 2))

    def test_illegal_placement_leaves_hand_untouched(self, make_engine):
        """A rejected placement does not remove the tile from the hand."""
        game = make_engine([[(2, 3), (1, 1)], [(4, 6)]], board=[(6, 6)])
        with pytest.raises(IllegalPlacementError):
            game.play(Tile.of(2, 3))
        assert game.players[0].hand_size == 2
        assert game.tile_count() == 28

    def test_wrong_end_hint_is_rejected(self, make_engine):
        """A hint for an end the tile does not match is rejected."""
        game = make_engine([[(5, 1), (2, 2)], [(4, 4)]], board=[(5, 6)])
        with pytest.raises(IllegalPlacementError):
            game.play(Tile.of(5, 1), BoardPosition.END)

    def test_hint_picks_end(self, make_engine):
        """A hint chooses between two matching ends."""
        game = make_engine([[(5, 6), (0, 0)], [(5, 5)]], board=[(5, 3), (3, 6)])
        events = game.play(Tile.of(5, 6), BoardPosition.END)
        assert events[0].position == "end"
        assert game.board.to_pairs()[-1] == [6, 5]

    def test_play_after_game_over_raises(self, make_engine):
        """The engine refuses moves once over."""
        game = make_engine([[(6, 5)], [(1, 2)]], board=[(6, 6)])
        game.play(Tile.of(6, 5))
        assert game.is_over()
        with pytest.raises(GameOverError):
            game.play(Tile.of(1, 2))

    def test_get_possible_tiles(self, make_engine):
        """Only tiles matching an open end are offered."""
        game = make_engine([[(6, 1), (2, 3), (4, 6)], [(0, 0)]], board=[(6, 6)])
        assert set(game.get_possible_tiles()) == {Tile.of(6, 1), Tile.of(4, 6)}


class TestAutoSkip:
    """Seats without a playable tile are skipped."""

    def test_stuck_seat_is_skipped(self, make_engine):
        """After a play the pointer jumps over a seat that cannot play."""
        game = make_engine(
            [[(6, 1), (0, 0)], [(2, 3), (3, 3)], [(1, 4), (5, 5)]],
            board=[(6, 6)],
        )
        events = game.play(Tile.of(6, 1), BoardPosition.END)
        assert game.current_player.player_id == "p3"
        skipped = [e for e in events if isinstance(e, PlayerSkipped)]
        assert [e.player_id for e in skipped] == ["p2"]

    def test_pass_turn_skips_forward(self, make_engine):
        """pass_turn advances and applies the same skip logic."""
        game = make_engine(
            [[(0, 0)], [(2, 3)], [(6, 4)]],
            board=[(6, 6)],
            pile=[],
        )
        events = game.pass_turn()
        assert isinstance(events[0], TurnPassed)
        assert events[0].player_id == "p1"
        assert events[0].next_player_id == "p3"
        assert game.current_player.player_id == "p3"


class TestGameEnd:
    """Empty hand and locked board."""

    def test_empty_hand_wins(self, make_engine):
        """Playing the last tile ends the game with the player as winner."""
        game = make_engine([[(6, 5)], [(1, 2), (3, 4)]], board=[(6, 6)])
        events = game.play(Tile.of(6, 5))
        assert game.phase == GamePhase.OVER
        assert game.get_winner().player_id == "p1"
        end = events[-1]
        assert isinstance(end, GameEnded)
        assert end.reason == "domino"
        assert end.winner_id == "p1"
        assert end.points == 1

    def test_locked_board_ends_game(self, make_engine):
        """When no hand can play the game ends even with tiles in the pile."""
        game = make_engine(
            [[(6, 5), (0, 1)], [(1, 3), (2, 2)]],
            board=[(5, 6), (6, 6)],
            pile=[(4, 4)],
        )
        events = game.play(Tile.of(6, 5), BoardPosition.END)
        assert game.board.to_pairs() == [[5, 6], [6, 6], [6, 5]]
        assert game.is_locked()
        assert game.is_over()
        assert game.pile.size() == 1
        end = events[-1]
        assert isinstance(end, GameEnded)
        assert end.reason == "locked"
        assert end.winner_id == "p1"

    def test_game_in_progress_has_no_winner(self, two_player_game):
        """get_winner is None until the game is over."""
        assert two_player_game.phase == GamePhase.AWAITING_MOVE
        assert two_player_game.get_winner() is None


class TestDrawTile:
    """Engine-level draw."""

    def test_draw_moves_tile_to_current_hand(self, make_engine):
        """draw_tile pulls the top of the pile into the current hand."""
        game = make_engine([[(0, 0)], [(6, 1)]], board=[(6, 6)], pile=[(2, 6), (3, 3)])
        tile, events = game.draw_tile()
        assert tile == Tile.of(2, 6)
        assert game.players[0].has_tile(tile)
        assert isinstance(events[0], TileDrawn)
        assert events[0].remaining == 1

    def test_draw_from_empty_pile_raises(self, make_engine):
        """The engine surfaces pile exhaustion as an error."""
        game = make_engine([[(0, 0)], [(6, 1)]], board=[(6, 6)], pile=[])
        with pytest.raises(PileExhaustedError):
            game.draw_tile()


class TestEventSequencing:
    """Event seq numbers."""

    def test_seq_numbers_continue_across_actions(self, make_engine):
        """seq increases by one per event across calls."""
        game = make_engine([[(6, 1), (1, 2)], [(6, 3), (3, 4)]], board=[(6, 6)])
        first = game.play(Tile.of(6, 1), BoardPosition.END)
        second = game.play(Tile.of(6, 3), BoardPosition.START)
        seqs = [e.seq for e in first + second]
        assert seqs == list(range(len(seqs)))
