"""Display-name persistence.

The only thing the client remembers between runs is the name last used to
join a table, stored as ``{"playerName": ...}`` in a small JSON file.
"""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

NAME_KEY = "playerName"


class NameStore:
    def __init__(self, path: Path):
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> str | None:
        try:
            with open(self._path) as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable name file %s: %s", self._path, exc)
            return None
        name = data.get(NAME_KEY) if isinstance(data, dict) else None
        if isinstance(name, str) and name.strip():
            return name.strip()
        return None

    def save(self, name: str) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w") as f:
                json.dump({NAME_KEY: name}, f)
        except OSError as exc:
            logger.warning("Failed to save display name to %s: %s", self._path, exc)
