"""Wire-level data model.

Snapshots are frozen dataclasses built from the server's camelCase payloads.
``from_dict`` either returns a complete object or raises; callers rely on
that to keep replacements atomic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from pokerclient.core.sanitizer import single_line

SEAT_COUNT = 6
BOARD_SIZE = 5


class RoomStatus(Enum):
    WAITING = "waiting"
    READY = "ready"
    PLAYING = "playing"


class ActionKind(Enum):
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    BET = "bet"
    RAISE = "raise"
    ALLIN = "allin"


@dataclass
class ConnectionState:
    connected: bool = False


@dataclass
class Identity:
    """Who we are at the table. Fields stay None until the server confirms."""

    client_id: str | None = None
    room_id: str | None = None
    player_id: str | None = None
    player_name: str | None = None
    is_host: bool = False

    @property
    def in_room(self) -> bool:
        return self.room_id is not None and self.player_id is not None


@dataclass(frozen=True)
class Card:
    display: str
    suit: str
    rank: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> Card:
        return cls(
            display=str(d["display"]),
            suit=str(d["suit"]),
            rank=str(d.get("rank", "")),
        )


@dataclass(frozen=True)
class PlayerSummary:
    id: str
    name: str
    seat_position: int
    chips: int

    @classmethod
    def from_dict(cls, d: dict) -> PlayerSummary:
        return cls(
            id=str(d["id"]),
            name=single_line(str(d["name"]), max_len=32),
            seat_position=int(d["seatPosition"]),
            chips=int(d.get("chips", 0)),
        )


@dataclass(frozen=True)
class RoomSnapshot:
    code: str
    status: RoomStatus
    players: tuple[PlayerSummary, ...]
    min_players: int
    max_players: int
    host_id: str

    @classmethod
    def from_dict(cls, d: dict) -> RoomSnapshot:
        return cls(
            code=str(d["code"]),
            status=RoomStatus(d["status"]),
            players=tuple(PlayerSummary.from_dict(p) for p in d.get("players") or []),
            min_players=int(d.get("minPlayers", 2)),
            max_players=int(d.get("maxPlayers", SEAT_COUNT)),
            host_id=str(d.get("hostId", "")),
        )

    @property
    def missing_players(self) -> int:
        return max(0, self.min_players - len(self.players))


@dataclass(frozen=True)
class PlayerView:
    id: str
    name: str
    seat_position: int
    chips: int
    current_bet: int
    is_folded: bool
    is_all_in: bool = False

    @classmethod
    def from_dict(cls, d: dict) -> PlayerView:
        return cls(
            id=str(d["id"]),
            name=single_line(str(d["name"]), max_len=32),
            seat_position=int(d["seatPosition"]),
            chips=int(d["chips"]),
            current_bet=int(d.get("currentBet", 0)),
            is_folded=bool(d.get("isFolded", False)),
            is_all_in=bool(d.get("isAllIn", False)),
        )


@dataclass(frozen=True)
class WinnerInfo:
    player_id: str
    amount: int
    description: str

    @classmethod
    def from_dict(cls, d: dict) -> WinnerInfo:
        return cls(
            player_id=str(d["playerId"]),
            amount=int(d["amount"]),
            description=single_line(str(d.get("description", ""))),
        )


@dataclass(frozen=True)
class SidePot:
    amount: int
    eligible_players: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, d: dict) -> SidePot:
        return cls(
            amount=int(d["amount"]),
            eligible_players=tuple(str(p) for p in d.get("eligiblePlayers") or []),
        )


@dataclass(frozen=True)
class GameStateSnapshot:
    pot: int
    current_bet: int
    big_blind: int
    min_raise: int
    dealer_index: int
    current_player_id: str
    community_cards: tuple[Card, ...]
    players: tuple[PlayerView, ...]
    hand_complete: bool
    winners: tuple[WinnerInfo, ...] | None = None
    betting_round: str = ""
    hand_number: int = 0
    side_pots: tuple[SidePot, ...] = ()

    @classmethod
    def from_dict(cls, d: dict) -> GameStateSnapshot:
        winners_raw = d.get("winners")
        return cls(
            pot=int(d["pot"]),
            current_bet=int(d["currentBet"]),
            big_blind=int(d.get("bigBlind", 0)),
            min_raise=int(d.get("minRaise", 0)),
            dealer_index=int(d.get("dealerIndex", 0)),
            current_player_id=str(d.get("currentPlayerId") or ""),
            community_cards=tuple(
                Card.from_dict(c) for c in (d.get("communityCards") or [])[:BOARD_SIZE]
            ),
            players=tuple(PlayerView.from_dict(p) for p in d.get("players") or []),
            hand_complete=bool(d.get("handComplete", False)),
            winners=(
                tuple(WinnerInfo.from_dict(w) for w in winners_raw)
                if winners_raw is not None
                else None
            ),
            betting_round=str(d.get("bettingRound", "")),
            hand_number=int(d.get("handNumber", 0)),
            side_pots=tuple(SidePot.from_dict(s) for s in d.get("sidePots") or []),
        )

    def find_player(self, player_id: str | None) -> PlayerView | None:
        if player_id is None:
            return None
        for player in self.players:
            if player.id == player_id:
                return player
        return None


@dataclass(frozen=True)
class ActionRequest:
    action: ActionKind
    amount: int = 0

    def __post_init__(self):
        if self.amount < 0:
            raise ValueError(f"amount must be >= 0, got {self.amount}")

    def to_dict(self) -> dict:
        return {"action": self.action.value, "amount": self.amount}


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ChatMessage:
    player_name: str
    text: str
    received_at: datetime = field(default_factory=_now)


@dataclass(frozen=True)
class LogEntry:
    text: str
    logged_at: datetime = field(default_factory=_now)
