"""SessionRecorder — JSONL frame recording.

One recorder per session. Writes one JSONL line per inbound or outbound
frame. All entries include schema version and session ID. A recording can be
replayed through the parser and reconciler to rebuild the table.
"""

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

import pokerclient

logger = logging.getLogger(__name__)

_SCHEMA_VERSION = "1.0.0"

INBOUND = "in"
OUTBOUND = "out"


@dataclass
class FrameRecord:
    """One recorded frame."""

    direction: str
    frame: str


class SessionRecorder:
    """Appends frames for a single session to ``<output_dir>/<session_id>.jsonl``."""

    def __init__(self, output_dir: Path, session_id: str):
        self._output_dir = Path(output_dir)
        self._session_id = session_id
        self._output_dir.mkdir(parents=True, exist_ok=True)
        self._file_path = self._output_dir / f"{session_id}.jsonl"

    @property
    def file_path(self) -> Path:
        return self._file_path

    def record(self, direction: str, frame: str) -> None:
        entry = asdict(FrameRecord(direction=direction, frame=frame))
        entry["schema_version"] = _SCHEMA_VERSION
        entry["session_id"] = self._session_id
        entry["client_version"] = pokerclient.__version__
        entry["timestamp"] = datetime.now(timezone.utc).isoformat()
        try:
            self._append(entry)
        except OSError as exc:
            logger.warning("Failed to record frame: %s", exc)

    def _append(self, record: dict) -> None:
        with open(self._file_path, "a") as f:
            f.write(json.dumps(record, default=str) + "\n")


def read_recording(path: Path, direction: str | None = INBOUND) -> Iterator[str]:
    """Yield recorded frames, optionally filtered by direction."""
    with open(path) as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError:
                logger.warning("Skipping malformed JSON in %s: %s", path.name, line[:80])
                continue
            if direction is not None and record.get("direction") != direction:
                continue
            yield record.get("frame", "")
