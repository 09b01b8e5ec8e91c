"""Client configuration loader."""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

WS_URL_ENV = "POKERCLIENT_WS_URL"
API_URL_ENV = "POKERCLIENT_API_URL"


@dataclass
class ServerConfig:
    ws_url: str = "ws://localhost:8080/ws"
    api_url: str = "http://localhost:8080"
    timeout_s: float = 10.0


@dataclass
class DisplayConfig:
    log_lines: int = 8
    chat_lines: int = 6
    show_pot_odds: bool = True


@dataclass
class ClientConfig:
    server: ServerConfig = field(default_factory=ServerConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    name_file: Path = field(
        default_factory=lambda: Path("~/.config/pokerclient/player.json")
    )
    record_dir: Path | None = None
    log_level: str = "WARNING"
    log_file: Path | None = None


def load_config(path: Path | None = None) -> ClientConfig:
    """Load client config from a YAML file, then apply environment overrides.

    With no path, defaults are used. ``POKERCLIENT_WS_URL`` and
    ``POKERCLIENT_API_URL`` always win over the file.
    """
    raw: dict = {}
    if path is not None:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}

    s = raw.get("server", {}) or {}
    d = raw.get("display", {}) or {}

    server = ServerConfig(
        ws_url=os.environ.get(WS_URL_ENV) or s.get("ws_url", ServerConfig.ws_url),
        api_url=os.environ.get(API_URL_ENV) or s.get("api_url", ServerConfig.api_url),
        timeout_s=float(s.get("timeout_s", ServerConfig.timeout_s)),
    )
    display = DisplayConfig(
        log_lines=int(d.get("log_lines", DisplayConfig.log_lines)),
        chat_lines=int(d.get("chat_lines", DisplayConfig.chat_lines)),
        show_pot_odds=bool(d.get("show_pot_odds", DisplayConfig.show_pot_odds)),
    )

    config = ClientConfig(server=server, display=display)
    if raw.get("name_file"):
        config.name_file = Path(raw["name_file"])
    if raw.get("record_dir"):
        config.record_dir = Path(raw["record_dir"])
    if raw.get("log_file"):
        config.log_file = Path(raw["log_file"])
    config.log_level = str(raw.get("log_level", config.log_level)).upper()
    return config
