"""Tests for the in-memory room registry."""

import random

from app.services.game.engine import create_game
from app.services.room import ReasonCode, RoomRegistry


class TestCreate:
    """Room creation."""

    def test_create_and_get(self):
        """A created room can be looked up by id."""
        registry = RoomRegistry()
        result = registry.create("room-a", 3, {"draw_rule": "draw_once_pass"})
        assert result.ok
        room = registry.get("room-a")
        assert room is result.room
        assert room.max_players == 3
        assert room.max_draws_per_turn == 1
        assert "room-a" in registry
        assert len(registry) == 1

    def test_created_result_to_dict(self):
        """Success renders the room settings, not the room object."""
        registry = RoomRegistry()
        data = registry.create("room-a", 2).to_dict()
        assert data == {
            "ok": True,
            "room_id": "room-a",
            "max_players": 2,
            "draw_rule": "draw_until_play",
            "max_draws_per_turn": None,
        }

    def test_invalid_max_players(self):
        """Bad seat counts are rejected with bounds and no room is stored."""
        registry = RoomRegistry()
        result = registry.create("room-a", 7)
        assert result.error_code == ReasonCode.INVALID_MAX_PLAYERS
        assert result.to_dict()["min"] == 2
        assert result.to_dict()["max"] == 4
        assert not registry.exists("room-a")

    def test_duplicate_id(self):
        """Room ids are unique."""
        registry = RoomRegistry()
        registry.create("room-a", 2)
        result = registry.create("room-a", 4)
        assert result.error_code == ReasonCode.ROOM_EXISTS
        assert registry.get("room-a").max_players == 2

    def test_game_factory_is_passed_to_rooms(self):
        """Rooms build their game with the registry's factory."""
        calls = []

        def factory(players):
            calls.append([p.player_id for p in players])
            return create_game(players, rng=random.Random(5))

        registry = RoomRegistry(game_factory=factory)
        room = registry.create("room-a", 2).room
        room.add_player("a", "Ana")
        room.add_player("b", "Bruno")
        assert calls == [["a", "b"]]


class TestLookupAndLifecycle:
    """verify, rooms_for_actor and destroy."""

    def test_verify(self):
        """verify reports existence and membership."""
        registry = RoomRegistry()
        registry.create("room-a", 2).room.add_player("a", "Ana")

        assert not registry.verify("missing").exists
        check = registry.verify("room-a", "a")
        assert check.exists
        assert check.member
        assert not registry.verify("room-a", "b").member
        assert not registry.verify("room-a").member

    def test_rooms_for_actor(self):
        """Lists every room an actor is seated in."""
        registry = RoomRegistry()
        registry.create("room-a", 3).room.add_player("a", "Ana")
        registry.create("room-b", 3).room.add_player("a", "Ana")
        registry.create("room-c", 3).room.add_player("b", "Bruno")
        assert sorted(r.room_id for r in registry.rooms_for_actor("a")) == ["room-a", "room-b"]

    def test_empty_rooms_created_by(self):
        """Only rooms the actor created and nobody sits in are listed."""
        registry = RoomRegistry()
        registry.create("room-a", 2, created_by="a")
        registry.create("room-b", 2, created_by="a").room.add_player("b", "Bruno")
        registry.create("room-c", 2, created_by="c")
        registry.create("room-d", 2)

        assert registry.get("room-a").created_by == "a"
        assert [r.room_id for r in registry.empty_rooms_created_by("a")] == ["room-a"]
        assert registry.empty_rooms_created_by("b") == []

    def test_destroy(self):
        """destroy removes and returns the room; a second call is a no-op."""
        registry = RoomRegistry()
        registry.create("room-a", 2)
        removed = registry.destroy("room-a")
        assert removed.room_id == "room-a"
        assert registry.get("room-a") is None
        assert registry.destroy("room-a") is None
        assert len(registry) == 0

    def test_registries_are_independent(self):
        """No shared module state between registries."""
        first, second = RoomRegistry(), RoomRegistry()
        first.create("room-a", 2)
        assert not second.exists("room-a")
        assert [r.room_id for r in first] == ["room-a"]
