"""ActionController — what the local player may do right now.

Everything here is derived from (GameStateSnapshot, Identity). Nothing is
cached between updates: a new snapshot means a new panel. The checks are
advisory. The server has the final word on every action.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from pokerclient.core.errors import ValidationError
from pokerclient.core.models import (
    ActionKind,
    ActionRequest,
    GameStateSnapshot,
    Identity,
    PlayerView,
)
from pokerclient.core.store import StateStore

logger = logging.getLogger(__name__)

_SIZED_ACTIONS = (ActionKind.BET, ActionKind.RAISE)


@dataclass(frozen=True)
class ActionPanel:
    """Visible action set for the local player."""

    visible: bool
    options: tuple[ActionKind, ...] = ()
    current_bet: int = 0
    call_amount: int = 0
    call_affordable: bool = True
    pot: int = 0
    pot_odds: float = 0.0

    def offers(self, kind: ActionKind) -> bool:
        return self.visible and kind in self.options


HIDDEN_PANEL = ActionPanel(visible=False)


def pot_odds(call_amount: int, pot: int) -> float:
    """Percentage of the final pot the call costs. 0 when nothing to call."""
    if call_amount <= 0:
        return 0.0
    return call_amount / (pot + call_amount) * 100


def derive_panel(game: GameStateSnapshot | None, identity: Identity) -> ActionPanel:
    if game is None:
        return HIDDEN_PANEL
    me = game.find_player(identity.player_id)
    if me is None or me.is_folded or game.hand_complete:
        return HIDDEN_PANEL
    if game.current_player_id != identity.player_id:
        return HIDDEN_PANEL

    call_amount = game.current_bet - me.current_bet

    options = [ActionKind.FOLD]
    if game.current_bet == me.current_bet:
        options.append(ActionKind.CHECK)
    if call_amount > 0:
        options.append(ActionKind.CALL)
    if game.current_bet == 0:
        options.append(ActionKind.BET)
    else:
        options.append(ActionKind.RAISE)
    options.append(ActionKind.ALLIN)

    return ActionPanel(
        visible=True,
        options=tuple(options),
        current_bet=game.current_bet,
        call_amount=call_amount,
        call_affordable=call_amount <= me.chips,
        pot=game.pot,
        pot_odds=pot_odds(call_amount, game.pot),
    )


@dataclass(frozen=True)
class BetBounds:
    minimum: int
    maximum: int

    def valid(self, amount: int) -> bool:
        return self.minimum <= amount <= self.maximum

    def clamp(self, amount: int) -> int:
        # When the minimum is out of reach the minimum wins; the server decides.
        return max(self.minimum, min(amount, self.maximum))


def bet_bounds(kind: ActionKind, game: GameStateSnapshot, me: PlayerView) -> BetBounds:
    if kind is ActionKind.BET:
        minimum = game.big_blind
    elif kind is ActionKind.RAISE:
        minimum = game.current_bet + game.min_raise
    else:
        raise ValueError(f"{kind.value} has no size")
    return BetBounds(minimum=minimum, maximum=me.chips)


class BetEntry:
    """Slider and numeric input bound to the same value.

    Either side can be edited; after every edit both hold the same clamped
    value.
    """

    def __init__(self) -> None:
        self.visible = False
        self.kind: ActionKind | None = None
        self.bounds = BetBounds(0, 0)
        self.slider_value = 0
        self.input_value = 0

    def open(self, kind: ActionKind, bounds: BetBounds) -> None:
        self.visible = True
        self.kind = kind
        self.bounds = bounds
        self.slider_value = bounds.minimum
        self.input_value = bounds.minimum

    def set_slider(self, value: int) -> int:
        value = self.bounds.clamp(int(value))
        self.slider_value = value
        self.input_value = value
        return value

    def set_input(self, text: str | int) -> int:
        try:
            value = int(str(text).strip())
        except ValueError:
            raise ValidationError(f"Bet amount must be a whole number, got {text!r}") from None
        value = self.bounds.clamp(value)
        self.input_value = value
        self.slider_value = value
        return value

    def rebound(self, bounds: BetBounds) -> None:
        """Move to new bounds, clamping the current value into them."""
        self.bounds = bounds
        self.set_slider(self.input_value)

    def close(self) -> None:
        self.visible = False
        self.kind = None


class ActionController:
    """Validates and sends the local player's actions."""

    def __init__(self, store: StateStore, send: Callable[[ActionRequest], Awaitable[None]]):
        self._store = store
        self._send = send
        self.bet_entry = BetEntry()

    def panel(self) -> ActionPanel:
        return derive_panel(self._store.game, self._store.identity)

    def open_bet_entry(self, kind: ActionKind) -> BetBounds:
        if kind not in _SIZED_ACTIONS:
            raise ValidationError(f"{kind.value} does not take an amount")
        panel = self.panel()
        if not panel.offers(kind):
            raise ValidationError(f"{kind.value.capitalize()} is not available right now")
        me = self._store.local_player()
        bounds = bet_bounds(kind, self._store.game, me)
        self.bet_entry.open(kind, bounds)
        return bounds

    def cancel_bet(self) -> None:
        self.bet_entry.close()

    def sync_bet_entry(self) -> None:
        """Re-check an open bet entry against the current snapshot.

        Closed when the turn or the option is gone, re-bounded when the
        limits moved.
        """
        entry = self.bet_entry
        if not entry.visible or entry.kind is None:
            return
        if not self.panel().offers(entry.kind):
            logger.info("Closing %s entry: no longer offered", entry.kind.value)
            entry.close()
            return
        bounds = bet_bounds(entry.kind, self._store.game, self._store.local_player())
        if bounds != entry.bounds:
            entry.rebound(bounds)

    async def submit_action(self, kind: ActionKind) -> ActionRequest:
        """Send an unsized action (fold, check, call, allin)."""
        if kind in _SIZED_ACTIONS:
            raise ValidationError(f"Use the bet entry to {kind.value}")
        panel = self.panel()
        if not panel.offers(kind):
            self.bet_entry.close()
            raise ValidationError(f"{kind.value.capitalize()} is not available right now")
        if kind is ActionKind.CALL and not panel.call_affordable:
            self.bet_entry.close()
            raise ValidationError("Not enough chips to call, go all in instead")
        return await self._dispatch(ActionRequest(kind, 0))

    async def confirm_bet(self) -> ActionRequest:
        entry = self.bet_entry
        if not entry.visible or entry.kind is None:
            raise ValidationError("No bet in progress")
        kind = entry.kind
        if not self.panel().offers(kind):
            entry.close()
            raise ValidationError(f"{kind.value.capitalize()} is not available right now")
        bounds = bet_bounds(kind, self._store.game, self._store.local_player())
        if bounds != entry.bounds:
            entry.close()
            raise ValidationError("Bet limits changed, open the bet again")
        if not entry.bounds.valid(entry.input_value):
            logger.info(
                "Sending %s of %s outside advisory bounds %s",
                entry.kind.value, entry.input_value, entry.bounds,
            )
        return await self._dispatch(ActionRequest(entry.kind, entry.input_value))

    async def _dispatch(self, request: ActionRequest) -> ActionRequest:
        try:
            await self._send(request)
        finally:
            # The panel comes back only when a new snapshot grants the turn
            self.bet_entry.close()
        return request
