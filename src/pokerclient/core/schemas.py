"""Schema loading utility."""

import json
from functools import lru_cache
from pathlib import Path

SCHEMAS_DIR = Path(__file__).resolve().parent.parent / "schemas"


def load_schema(path: Path) -> dict:
    """Load a JSON Schema file and return as dict."""
    with open(path) as f:
        return json.load(f)


@lru_cache(maxsize=None)
def schema_for(message_type: str) -> dict:
    """Return the payload schema for an inbound message type."""
    return load_schema(SCHEMAS_DIR / f"{message_type}.json")
