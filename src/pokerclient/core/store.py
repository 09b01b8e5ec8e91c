"""StateStore — the single owned copy of client-side state.

Plain data. The Reconciler is the only writer; the controller and the view
read it. Snapshots are swapped by assignment so a reader never sees a
half-applied update.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pokerclient.core.models import (
    ChatMessage,
    ConnectionState,
    GameStateSnapshot,
    Identity,
    LogEntry,
    RoomSnapshot,
)


@dataclass
class StateStore:
    connection: ConnectionState = field(default_factory=ConnectionState)
    identity: Identity = field(default_factory=Identity)
    room: RoomSnapshot | None = None
    game: GameStateSnapshot | None = None
    chat: list[ChatMessage] = field(default_factory=list)
    log: list[LogEntry] = field(default_factory=list)

    def local_player(self):
        """The local player's view in the current game snapshot, if any."""
        if self.game is None:
            return None
        return self.game.find_player(self.identity.player_id)

    def clear_table(self) -> None:
        self.room = None
        self.game = None
