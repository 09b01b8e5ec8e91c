"""Envelope codec — decode inbound frames, encode outbound ones.

Every frame on the wire is a JSON object ``{"type": str, "data": object}``.
Known types have their ``data`` validated against a per-type JSON Schema so
the reconciler only ever sees payloads of the expected shape. Unknown types
decode fine and come back as ``MessageKind.UNKNOWN``: a newer server may
send kinds this client has never heard of.
"""

import json
from dataclasses import dataclass, field
from enum import Enum

import jsonschema

from pokerclient.core.errors import MalformedMessage
from pokerclient.core.models import ActionRequest
from pokerclient.core.schemas import schema_for


class MessageKind(Enum):
    WELCOME = "welcome"
    JOINED_ROOM = "joinedRoom"
    PLAYER_JOINED = "playerJoined"
    PLAYER_LEFT = "playerLeft"
    GAME_UPDATE = "gameUpdate"
    CHAT = "chat"
    ERROR = "error"
    UNKNOWN = "__unknown__"

    @classmethod
    def from_type(cls, message_type: str) -> "MessageKind":
        try:
            kind = cls(message_type)
        except ValueError:
            return cls.UNKNOWN
        # The sentinel value is never a valid wire type
        return cls.UNKNOWN if kind is cls.UNKNOWN else kind


@dataclass(frozen=True)
class Envelope:
    """One decoded inbound message."""

    kind: MessageKind
    raw_type: str
    payload: dict = field(default_factory=dict)


def parse_frame(raw: str | bytes) -> Envelope:
    """Decode a raw text frame into an Envelope.

    Raises MalformedMessage for anything that is not a well-formed envelope,
    or whose payload fails its schema.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedMessage(f"Frame is not UTF-8: {e}") from e

    try:
        message = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedMessage(f"JSON parse error: {e}", raw=raw) from e

    if not isinstance(message, dict):
        raise MalformedMessage("Frame is not a JSON object", raw=raw)

    message_type = message.get("type")
    if not isinstance(message_type, str) or not message_type:
        raise MalformedMessage("Frame has no string 'type'", raw=raw)

    data = message.get("data")
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise MalformedMessage(f"'{message_type}' data is not an object", raw=raw)

    kind = MessageKind.from_type(message_type)
    if kind is not MessageKind.UNKNOWN:
        try:
            jsonschema.validate(data, schema_for(kind.value))
        except jsonschema.ValidationError as e:
            path = "/".join(str(p) for p in e.absolute_path) or "<root>"
            raise MalformedMessage(
                f"'{message_type}' schema validation at {path}: {e.message}",
                raw=raw,
            ) from e

    return Envelope(kind=kind, raw_type=message_type, payload=data)


def encode_frame(message_type: str, data: dict) -> str:
    """Encode an outbound message as JSON text."""
    return json.dumps({"type": message_type, "data": data}, ensure_ascii=False)


# ── Outbound builders ──────────────────────────────────────────────


def join_room(room_id: str, player_name: str) -> str:
    return encode_frame("joinRoom", {"roomId": room_id, "playerName": player_name})


def leave_room(room_id: str) -> str:
    return encode_frame("leaveRoom", {"roomId": room_id})


def start_game(room_id: str) -> str:
    return encode_frame("startGame", {"roomId": room_id})


def game_action(request: ActionRequest) -> str:
    return encode_frame("gameAction", request.to_dict())


def chat(text: str, player_name: str) -> str:
    return encode_frame("chat", {"text": text, "playerName": player_name})
