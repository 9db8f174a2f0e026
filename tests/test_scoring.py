"""Tests for locked-board winners and awarded points."""

from app.schemas.game_engine import Player, Tile
from app.services.game.engine import find_locked_winner, get_winner_points, is_board_locked
from app.services.game.engine.scoring import find_empty_hand_player


def make_player(seat: int, *pairs: tuple[int, int]) -> Player:
    """Helper to create a seated player holding the given tiles."""
    return Player(
        player_id=f"p{seat + 1}",
        name=f"Player {seat + 1}",
        seat=seat,
        hand=[Tile.of(a, b) for a, b in pairs],
    )


class TestTwoPlayerLock:
    """Individual play, lower hand wins."""

    def test_lower_hand_wins_and_points(self, make_engine):
        """Locked two-player table with hands of 5 and 9 points."""
        game = make_engine([[(0, 1), (1, 3)], [(2, 3), (0, 4)]], board=[(6, 6)])
        assert game.is_locked()
        assert game.is_over()
        winner = game.get_winner()
        assert winner.player_id == "p1"
        assert winner.hand_points == 5
        assert game.get_winner_points() == 1

    def test_second_seat_can_win(self):
        """The lower hand wins from either seat."""
        players = [make_player(0, (5, 5)), make_player(1, (1, 2))]
        assert find_locked_winner(players).player_id == "p2"

    def test_tie_goes_to_first_seat(self):
        """Equal hands favour seat 0."""
        players = [make_player(0, (2, 3)), make_player(1, (1, 4))]
        assert find_locked_winner(players).player_id == "p1"


class TestFourPlayerLock:
    """Partnered play, seats (0, 2) against (1, 3)."""

    def test_lower_pair_represented_by_seat_zero(self):
        """Pair (0, 2) wins even though seat 1 holds the lowest single hand."""
        players = [
            make_player(0, (2, 2)),
            make_player(1, (0, 0)),
            make_player(2, (1, 1)),
            make_player(3, (5, 6)),
        ]
        assert find_locked_winner(players).player_id == "p1"

    def test_lower_pair_represented_by_seat_one(self):
        """Pair (1, 3) wins and seat 1 stands for it, even if seat 3 is lower."""
        players = [
            make_player(0, (4, 4)),
            make_player(1, (2, 3)),
            make_player(2, (3, 3)),
            make_player(3, (0, 1)),
        ]
        assert find_locked_winner(players).player_id == "p2"

    def test_pair_tie_goes_to_seat_zero(self):
        """Equal pair totals favour (0, 2)."""
        players = [
            make_player(0, (1, 2)),
            make_player(1, (0, 1)),
            make_player(2, (0, 1)),
            make_player(3, (1, 2)),
        ]
        assert find_locked_winner(players).player_id == "p1"


class TestThreePlayerLock:
    """Generic lowest-hand rule."""

    def test_lowest_hand_wins(self):
        """Seat with the fewest points wins."""
        players = [make_player(0, (6, 6)), make_player(1, (3, 4)), make_player(2, (0, 2))]
        assert find_locked_winner(players).player_id == "p3"

    def test_tie_goes_to_earlier_seat(self):
        """Stable sort keeps seat order among equal hands."""
        players = [make_player(0, (6, 6)), make_player(1, (1, 1)), make_player(2, (0, 2))]
        assert find_locked_winner(players).player_id == "p2"


class TestWinnerPoints:
    """Points awarded to the winner."""

    def test_floor_of_all_hands_over_ten(self):
        """All remaining pips, divided by ten and floored."""
        players = [make_player(0), make_player(1, (6, 6), (5, 4)), make_player(2, (3, 3))]
        assert get_winner_points(players) == 2

    def test_empty_hand_player_found(self):
        """The first seat with no tiles is the outright winner."""
        players = [make_player(0, (1, 1)), make_player(1)]
        assert find_empty_hand_player(players).player_id == "p2"


class TestLockedDetection:
    """Board locking ignores the pile."""

    def test_not_locked_when_any_hand_matches(self, make_engine):
        """One playable tile anywhere keeps the board open."""
        game = make_engine([[(0, 1)], [(2, 6)]], board=[(6, 6)])
        assert not is_board_locked(game.players, game.board)

    def test_empty_board_is_never_locked(self, make_engine):
        """Every tile fits an empty board."""
        game = make_engine([[(0, 1)], [(2, 3)]])
        assert not game.is_locked()
