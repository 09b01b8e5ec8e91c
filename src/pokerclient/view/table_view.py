"""View model for the table screen.

``project`` is a pure function of the store, the action panel and the bet
entry. It never writes anything, and equal inputs give equal TableViews, so
re-rendering the same state shows the same thing.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from pokerclient.core.controller import ActionPanel, BetEntry
from pokerclient.core.models import BOARD_SIZE, SEAT_COUNT, RoomStatus
from pokerclient.core.store import StateStore

EMPTY_SEAT_NAME = "Empty Seat"


@dataclass(frozen=True)
class RoomHeader:
    code: str
    player_count: int
    max_players: int
    status: str
    missing_players: int
    is_host: bool
    start_enabled: bool
    start_label: str

    @property
    def count_label(self) -> str:
        return f"{self.player_count}/{self.max_players}"


@dataclass(frozen=True)
class SeatView:
    index: int
    occupied: bool
    name: str
    chips: str
    bet: str
    active: bool = False
    folded: bool = False
    all_in: bool = False
    dealer: bool = False
    is_me: bool = False


@dataclass(frozen=True)
class CardSlot:
    display: str = ""
    suit: str = ""

    @property
    def blank(self) -> bool:
        return not self.display


@dataclass(frozen=True)
class BetView:
    kind: str
    minimum: int
    maximum: int
    slider_value: int
    input_value: int


@dataclass(frozen=True)
class TableView:
    in_room: bool
    connected: bool
    player_name: str
    header: RoomHeader | None
    seats: tuple[SeatView, ...]
    board: tuple[CardSlot, ...]
    pot: int
    betting_round: str
    hand_number: int
    side_pots: tuple[int, ...]
    panel: ActionPanel
    bet: BetView | None
    log: tuple[str, ...]
    chat: tuple[tuple[str, str], ...]


def _header(store: StateStore) -> RoomHeader | None:
    room = store.room
    if room is None:
        return None
    is_host = store.identity.is_host
    if is_host and room.status is RoomStatus.READY:
        enabled, label = True, "Start Game"
    elif room.status is RoomStatus.WAITING:
        enabled, label = False, f"Need {room.missing_players} more players"
    elif room.status is RoomStatus.PLAYING:
        enabled, label = False, "Game in progress"
    else:
        enabled, label = False, "Waiting for host"
    return RoomHeader(
        code=room.code,
        player_count=len(room.players),
        max_players=room.max_players,
        status=room.status.value,
        missing_players=room.missing_players if room.status is RoomStatus.WAITING else 0,
        is_host=is_host,
        start_enabled=enabled,
        start_label=label,
    )


def _empty_seat(index: int) -> SeatView:
    return SeatView(index=index, occupied=False, name=EMPTY_SEAT_NAME, chips="-", bet="")


def _seats(store: StateStore) -> tuple[SeatView, ...]:
    seats = [_empty_seat(i) for i in range(SEAT_COUNT)]
    me = store.identity.player_id

    if store.room is not None:
        for player in store.room.players:
            if 0 <= player.seat_position < SEAT_COUNT:
                seats[player.seat_position] = SeatView(
                    index=player.seat_position,
                    occupied=True,
                    name=player.name,
                    chips=f"{player.chips} chips",
                    bet="",
                    is_me=player.id == me,
                )

    game = store.game
    if game is not None:
        for player in game.players:
            if not 0 <= player.seat_position < SEAT_COUNT:
                continue
            seats[player.seat_position] = SeatView(
                index=player.seat_position,
                occupied=True,
                name=player.name,
                chips=f"{player.chips} chips",
                bet=str(player.current_bet) if player.current_bet > 0 else "",
                active=player.id == game.current_player_id,
                folded=player.is_folded,
                all_in=player.is_all_in,
                is_me=player.id == me,
            )
        if 0 <= game.dealer_index < SEAT_COUNT:
            seats[game.dealer_index] = replace(seats[game.dealer_index], dealer=True)

    return tuple(seats)


def _board(store: StateStore) -> tuple[CardSlot, ...]:
    cards = store.game.community_cards if store.game is not None else ()
    slots = [CardSlot(display=c.display, suit=c.suit) for c in cards[:BOARD_SIZE]]
    slots.extend(CardSlot() for _ in range(BOARD_SIZE - len(slots)))
    return tuple(slots)


def _bet(entry: BetEntry | None, panel: ActionPanel) -> BetView | None:
    if entry is None or not entry.visible or not panel.offers(entry.kind):
        return None
    return BetView(
        kind=entry.kind.value,
        minimum=entry.bounds.minimum,
        maximum=entry.bounds.maximum,
        slider_value=entry.slider_value,
        input_value=entry.input_value,
    )


def project(
    store: StateStore,
    panel: ActionPanel,
    entry: BetEntry | None = None,
    log_lines: int = 8,
    chat_lines: int = 6,
) -> TableView:
    game = store.game
    log = tuple(
        f"[{e.logged_at.astimezone().strftime('%H:%M:%S')}] {e.text}"
        for e in store.log[-log_lines:]
    ) if log_lines > 0 else ()
    chat = tuple(
        (m.player_name, m.text) for m in store.chat[-chat_lines:]
    ) if chat_lines > 0 else ()

    return TableView(
        in_room=store.identity.in_room,
        connected=store.connection.connected,
        player_name=store.identity.player_name or "",
        header=_header(store),
        seats=_seats(store),
        board=_board(store),
        pot=game.pot if game else 0,
        betting_round=game.betting_round if game else "",
        hand_number=game.hand_number if game else 0,
        side_pots=tuple(p.amount for p in game.side_pots) if game else (),
        panel=panel,
        bet=_bet(entry, panel),
        log=log,
        chat=chat,
    )
