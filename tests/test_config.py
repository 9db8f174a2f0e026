"""Tests for settings loading and validation."""

import pytest
from pydantic import ValidationError

from app.config import Settings
from app.schemas.game_engine import DrawRule


class TestSettings:
    """Environment-driven configuration."""

    def test_defaults(self, monkeypatch):
        """Without overrides the room defaults are two seats, draw until play, no cap."""
        for name in ("DEFAULT_MAX_PLAYERS", "DEFAULT_DRAW_RULE", "DEFAULT_MAX_DRAWS_PER_TURN"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.DEFAULT_MAX_PLAYERS == 2
        assert settings.DEFAULT_DRAW_RULE == DrawRule.DRAW_UNTIL_PLAY
        assert settings.DEFAULT_MAX_DRAWS_PER_TURN is None
        assert settings.WS_HEARTBEAT_INTERVAL == 30
        assert settings.WS_CONNECTION_TIMEOUT == 120

    def test_reads_environment(self, monkeypatch):
        """Values come from environment variables."""
        monkeypatch.setenv("DEFAULT_MAX_PLAYERS", "4")
        monkeypatch.setenv("DEFAULT_DRAW_RULE", "draw_once_pass")
        monkeypatch.setenv("DEFAULT_MAX_DRAWS_PER_TURN", "2")
        settings = Settings(_env_file=None)
        assert settings.DEFAULT_MAX_PLAYERS == 4
        assert settings.DEFAULT_DRAW_RULE == DrawRule.DRAW_ONCE_PASS
        assert settings.DEFAULT_MAX_DRAWS_PER_TURN == 2

    @pytest.mark.parametrize("value", [1, 5])
    def test_rejects_max_players_out_of_range(self, value):
        """DEFAULT_MAX_PLAYERS must be within [2, 4]."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, DEFAULT_MAX_PLAYERS=value)

    def test_rejects_negative_draw_cap(self):
        """A negative cap is a configuration error."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, DEFAULT_MAX_DRAWS_PER_TURN=-1)

    def test_rejects_unknown_draw_rule(self):
        """Only the two known draw rules are accepted."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, DEFAULT_DRAW_RULE="draw_forever")

    def test_rejects_non_positive_timeout(self):
        """Heartbeat settings must be positive."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, WS_CONNECTION_TIMEOUT=0)
