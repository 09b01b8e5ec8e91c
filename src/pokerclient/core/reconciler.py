"""Reconciler — apply inbound messages to the StateStore.

One handler per MessageKind. Each handler builds whatever new snapshot it
needs *before* touching the store, so a payload that fails conversion leaves
the previous state in place. Handlers never draw anything; they return
Directives and the session decides how to show them.

Membership policy: playerJoined / playerLeft only add log lines. The roster
changes when the next full room or game snapshot arrives.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from pokerclient.core.envelope import Envelope, MessageKind
from pokerclient.core.errors import MalformedMessage
from pokerclient.core.models import (
    ChatMessage,
    GameStateSnapshot,
    Identity,
    LogEntry,
    RoomSnapshot,
)
from pokerclient.core.sanitizer import single_line
from pokerclient.core.store import StateStore

logger = logging.getLogger(__name__)

CONNECTION_LOST_MESSAGE = "Connection lost. Please restart the client."


class DirectiveKind(Enum):
    NAVIGATE_ROOM = "navigate_room"
    NAVIGATE_LANDING = "navigate_landing"
    REFRESH = "refresh"
    SHOW_ERROR = "show_error"
    SHOW_FATAL = "show_fatal"


@dataclass(frozen=True)
class Directive:
    kind: DirectiveKind
    message: str | None = None


_REFRESH = Directive(DirectiveKind.REFRESH)


class Reconciler:
    """Translates envelopes into store writes plus UI directives."""

    def __init__(self, store: StateStore):
        self._store = store
        self._pending_name: str | None = None
        self._handlers: dict[MessageKind, Callable[[dict], list[Directive]]] = {
            MessageKind.WELCOME: self._on_welcome,
            MessageKind.JOINED_ROOM: self._on_joined_room,
            MessageKind.PLAYER_JOINED: self._on_player_joined,
            MessageKind.PLAYER_LEFT: self._on_player_left,
            MessageKind.GAME_UPDATE: self._on_game_update,
            MessageKind.CHAT: self._on_chat,
            MessageKind.ERROR: self._on_error,
            MessageKind.UNKNOWN: self._on_unknown,
        }
        missing = set(MessageKind) - set(self._handlers)
        if missing:
            raise TypeError(
                f"Reconciler has no handler for: {sorted(k.name for k in missing)}"
            )

    @property
    def store(self) -> StateStore:
        return self._store

    def apply(self, envelope: Envelope) -> list[Directive]:
        """Apply one envelope. Raises MalformedMessage with the store untouched."""
        if envelope.kind is MessageKind.UNKNOWN:
            logger.debug("Ignoring unknown message type %r", envelope.raw_type)
        return self._handlers[envelope.kind](envelope.payload)

    # ------------------------------------------------------------------
    # Connection and local lifecycle events
    # ------------------------------------------------------------------

    def connection_opened(self) -> list[Directive]:
        self._store.connection.connected = True
        return []

    def connection_closed(self) -> list[Directive]:
        was_in_room = self._store.identity.in_room
        self._store.connection.connected = False
        self._store.clear_table()
        if was_in_room:
            return [Directive(DirectiveKind.SHOW_FATAL, CONNECTION_LOST_MESSAGE)]
        return []

    def join_requested(self, player_name: str) -> None:
        """Remember the name we asked to join with until the server confirms."""
        self._pending_name = player_name

    def left_room(self) -> list[Directive]:
        identity = self._store.identity
        self._store.identity = Identity(
            client_id=identity.client_id, player_name=identity.player_name
        )
        self._store.clear_table()
        return [Directive(DirectiveKind.NAVIGATE_LANDING)]

    def add_log(self, text: str) -> None:
        self._store.log.append(LogEntry(text=text))

    # ------------------------------------------------------------------
    # Message handlers
    # ------------------------------------------------------------------

    def _on_welcome(self, data: dict) -> list[Directive]:
        self._store.identity.client_id = data["clientId"]
        logger.info("Connected with client ID: %s", data["clientId"])
        return []

    def _on_joined_room(self, data: dict) -> list[Directive]:
        room = _build(RoomSnapshot.from_dict, data["room"], "joinedRoom.room")
        player_id = data["playerId"]
        _check_room(room)

        self._store.identity = Identity(
            client_id=self._store.identity.client_id,
            room_id=data["roomId"],
            player_id=player_id,
            player_name=self._pending_name or self._store.identity.player_name,
            is_host=room.host_id == player_id,
        )
        self._store.room = room
        self.add_log(f"You joined room {room.code}")
        return [Directive(DirectiveKind.NAVIGATE_ROOM), _REFRESH]

    def _on_player_joined(self, data: dict) -> list[Directive]:
        name = single_line(data["player"]["name"], max_len=32)
        self.add_log(f"{name} joined the room")
        return [_REFRESH]

    def _on_player_left(self, data: dict) -> list[Directive]:
        self.add_log("Player left the room")
        return [_REFRESH]

    def _on_game_update(self, data: dict) -> list[Directive]:
        game = _build(GameStateSnapshot.from_dict, data["gameState"], "gameUpdate.gameState")
        _check_game(game)

        self._store.game = game

        action = data.get("action")
        if action:
            actor = game.find_player(data.get("playerId"))
            if actor is not None:
                self.add_log(f"{actor.name} {single_line(action, max_len=32)}")

        if game.hand_complete and game.winners:
            for winner in game.winners:
                player = game.find_player(winner.player_id)
                if player is not None:
                    self.add_log(
                        f"{player.name} wins {winner.amount} chips with {winner.description}"
                    )
        return [_REFRESH]

    def _on_chat(self, data: dict) -> list[Directive]:
        self._store.chat.append(
            ChatMessage(
                player_name=single_line(data["playerName"], max_len=32),
                text=single_line(data["text"], max_len=500),
            )
        )
        return [_REFRESH]

    def _on_error(self, data: dict) -> list[Directive]:
        return [Directive(DirectiveKind.SHOW_ERROR, single_line(data["error"]))]

    def _on_unknown(self, data: dict) -> list[Directive]:
        return []


def _build(factory, payload: dict, where: str):
    """Run a snapshot factory, converting conversion errors to MalformedMessage."""
    try:
        return factory(payload)
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedMessage(f"Cannot build {where}: {e!r}") from e


def _check_room(room: RoomSnapshot) -> None:
    seats = Counter(p.seat_position for p in room.players)
    dupes = sorted(seat for seat, n in seats.items() if n > 1)
    if dupes:
        logger.warning("Room %s has duplicate seat positions: %s", room.code, dupes)


def _check_game(game: GameStateSnapshot) -> None:
    if game.hand_complete or not game.current_player_id:
        return
    current = game.find_player(game.current_player_id)
    if current is None:
        logger.warning(
            "Current player %s is not in the game snapshot", game.current_player_id
        )
    elif current.is_folded:
        logger.warning("Current player %s has folded", game.current_player_id)
