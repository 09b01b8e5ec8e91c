"""Tests for config loading — file values, defaults and env overrides."""

from pathlib import Path

import pytest

from pokerclient.config import (
    API_URL_ENV,
    WS_URL_ENV,
    ClientConfig,
    DisplayConfig,
    ServerConfig,
    load_config,
)

EXAMPLE_CONFIG = Path(__file__).resolve().parent.parent / "client.yaml.example"


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    monkeypatch.delenv(WS_URL_ENV, raising=False)
    monkeypatch.delenv(API_URL_ENV, raising=False)


class TestDefaults:
    def test_no_file(self):
        config = load_config()
        assert config.server == ServerConfig()
        assert config.display == DisplayConfig()
        assert config.record_dir is None
        assert config.log_level == "WARNING"

    def test_dataclass_defaults(self):
        config = ClientConfig()
        assert config.server.ws_url == "ws://localhost:8080/ws"
        assert config.display.show_pot_odds is True


class TestLoadConfig:
    def test_example_config_loads(self):
        config = load_config(EXAMPLE_CONFIG)
        assert config.server.api_url == "http://localhost:8080"
        assert config.display.log_lines == 8
        assert config.name_file == Path("~/.config/pokerclient/player.json")

    def test_values_from_file(self, tmp_path):
        path = tmp_path / "client.yaml"
        path.write_text(
            "server:\n"
            "  ws_url: ws://poker.example:9000/ws\n"
            "  timeout_s: 3\n"
            "display:\n"
            "  chat_lines: 2\n"
            "  show_pot_odds: false\n"
            "record_dir: recs\n"
            "log_level: debug\n"
        )
        config = load_config(path)
        assert config.server.ws_url == "ws://poker.example:9000/ws"
        assert config.server.api_url == ServerConfig.api_url
        assert config.server.timeout_s == 3.0
        assert config.display.chat_lines == 2
        assert config.display.show_pot_odds is False
        assert config.record_dir == Path("recs")
        assert config.log_level == "DEBUG"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path).server == ServerConfig()


class TestEnvOverrides:
    def test_env_wins_over_file(self, monkeypatch):
        monkeypatch.setenv(WS_URL_ENV, "ws://override/ws")
        monkeypatch.setenv(API_URL_ENV, "http://override")
        config = load_config(EXAMPLE_CONFIG)
        assert config.server.ws_url == "ws://override/ws"
        assert config.server.api_url == "http://override"
