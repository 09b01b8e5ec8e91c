"""Rich rendering of a TableView.

Every builder takes the view model and returns a renderable; nothing here
reads the store or keeps state between calls.
"""

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from pokerclient.core.models import ActionKind
from pokerclient.view.table_view import CardSlot, SeatView, TableView

SUIT_SYMBOLS = {"hearts": "\u2665", "diamonds": "\u2666", "clubs": "\u2663", "spades": "\u2660"}
SUIT_COLORS = {"hearts": "red", "diamonds": "red", "clubs": "white", "spades": "white"}
BAR_WIDTH = 24

ACTION_LABELS = {
    ActionKind.FOLD: "Fold",
    ActionKind.CHECK: "Check",
    ActionKind.CALL: "Call",
    ActionKind.BET: "Bet",
    ActionKind.RAISE: "Raise",
    ActionKind.ALLIN: "All In",
}

ACTION_STYLES = {
    ActionKind.FOLD: "bold red",
    ActionKind.CHECK: "bold cyan",
    ActionKind.CALL: "bold green",
    ActionKind.BET: "bold yellow",
    ActionKind.RAISE: "bold yellow",
    ActionKind.ALLIN: "bold magenta",
}


def format_card(slot: CardSlot) -> Text:
    """One board slot: the server's display token coloured by suit, or a blank."""
    if slot.blank:
        return Text("[  ]", style="dim")
    color = SUIT_COLORS.get(slot.suit, "white")
    text = Text("[", style="dim")
    text.append(slot.display, style=f"bold {color}")
    symbol = SUIT_SYMBOLS.get(slot.suit)
    if symbol and not slot.display.endswith(symbol):
        text.append(symbol, style=color)
    text.append("]", style="dim")
    return text


def make_slider(minimum: int, maximum: int, value: int) -> Text:
    """Render a range control as a proportional bar."""
    span = maximum - minimum
    fraction = (value - minimum) / span if span > 0 else 1.0
    fraction = max(0.0, min(1.0, fraction))
    filled = int(fraction * BAR_WIDTH)

    bar = Text()
    bar.append(f"{minimum} ", style="dim")
    bar.append("\u2588" * filled, style="bold yellow")
    bar.append("\u2591" * (BAR_WIDTH - filled), style="dim")
    bar.append(f" {maximum}", style="dim")
    return bar


def build_landing(view: TableView) -> Panel:
    text = Text()
    text.append("Not in a room.\n\n", style="bold")
    if view.player_name:
        text.append(f"Name: {view.player_name}\n\n", style="cyan")
    text.append("  name <name>            ", style="bold green")
    text.append("set your display name\n", style="dim")
    text.append("  create                 ", style="bold green")
    text.append("create a room and join it\n", style="dim")
    text.append("  join <code>            ", style="bold green")
    text.append("join an existing room\n", style="dim")
    text.append("  quit                   ", style="bold green")
    text.append("exit\n", style="dim")
    return Panel(text, title="[bold]Texas Hold'em[/bold]", border_style="cyan", padding=(0, 1))


def build_header(view: TableView) -> Panel:
    header = view.header
    text = Text()
    if header is None:
        text.append("Joining...", style="dim italic")
        return Panel(text, border_style="cyan")

    text.append(f"Room {header.code}", style="bold cyan")
    text.append("  |  ", style="dim")
    text.append(f"Players {header.count_label}", style="bold")
    text.append("  |  ", style="dim")
    text.append(header.status.upper(), style="yellow" if header.status == "waiting" else "green")
    if header.missing_players:
        text.append(f"  (need {header.missing_players} more)", style="dim")
    if header.is_host:
        text.append("  |  ", style="dim")
        text.append(
            f"[{header.start_label}]",
            style="bold white on green" if header.start_enabled else "dim",
        )
    if not view.connected:
        text.append("  OFFLINE", style="bold white on red")
    return Panel(text, border_style="cyan", padding=(0, 1))


def _seat_label(seat: SeatView) -> Text:
    label = Text()
    label.append("D " if seat.dealer else "  ", style="bold yellow")
    if not seat.occupied:
        label.append(seat.name, style="dim italic")
        return label
    style = "bold"
    if seat.folded:
        style = "dim strike"
    elif seat.active:
        style = "bold reverse"
    if seat.is_me:
        style += " cyan"
    label.append(seat.name[:16], style=style)
    return label


def _seat_status(seat: SeatView) -> Text:
    if seat.folded:
        return Text("FOLDED", style="red")
    if seat.all_in:
        return Text("ALL IN", style="bold magenta")
    if seat.active:
        return Text("TO ACT", style="bold cyan")
    return Text("")


def build_seats_panel(view: TableView) -> Panel:
    table = Table(show_header=True, show_edge=False, pad_edge=False, expand=True)
    table.add_column("#", width=2, no_wrap=True, style="dim")
    table.add_column("Player", width=20, no_wrap=True)
    table.add_column("Chips", width=12, no_wrap=True)
    table.add_column("Bet", width=6, no_wrap=True, style="yellow")
    table.add_column("", width=8, no_wrap=True)

    for seat in view.seats:
        table.add_row(
            str(seat.index),
            _seat_label(seat),
            Text(seat.chips, style="" if seat.occupied else "dim"),
            seat.bet,
            _seat_status(seat),
        )
    return Panel(table, title="[bold]Seats[/bold]", border_style="green", padding=(0, 1))


def build_board_panel(view: TableView) -> Panel:
    board = Text("  ")
    for i, slot in enumerate(view.board):
        if i > 0:
            board.append(" ")
        board.append_text(format_card(slot))

    info = Text("\n  ")
    info.append(f"Pot: {view.pot}", style="bold green")
    if view.side_pots:
        info.append(f"  Side pots: {', '.join(str(p) for p in view.side_pots)}", style="green")
    if view.betting_round:
        info.append(f"  |  {view.betting_round.upper()}", style="yellow")
    if view.hand_number:
        info.append(f"  |  Hand {view.hand_number}", style="dim")

    return Panel(Group(board, info), title="[bold]Board[/bold]", border_style="green", padding=(0, 1))


def build_action_panel(view: TableView, show_pot_odds: bool = True) -> Panel | None:
    panel = view.panel
    if not panel.visible:
        return None

    text = Text()
    text.append(f"Current bet: {panel.current_bet}", style="bold")
    text.append("  |  ", style="dim")
    text.append(f"To call: {panel.call_amount}", style="bold")
    if show_pot_odds and panel.call_amount > 0:
        text.append(f"  |  Pot odds: {panel.pot_odds:.1f}%", style="dim")
    text.append("\n\n")

    for kind in panel.options:
        label = ACTION_LABELS[kind]
        if kind is ActionKind.CALL:
            label = f"{label} {panel.call_amount}"
        if kind is ActionKind.CALL and not panel.call_affordable:
            text.append(f"[{label}]", style="dim strike")
        else:
            text.append(f"[{label}]", style=ACTION_STYLES[kind])
        text.append("  ")

    parts = [text]
    if view.bet is not None:
        bet = view.bet
        entry = Text("\n")
        entry.append(f"{bet.kind.capitalize()} amount: ", style="bold")
        entry.append(str(bet.input_value), style="bold yellow")
        entry.append("\n")
        entry.append_text(make_slider(bet.minimum, bet.maximum, bet.slider_value))
        entry.append("\n  amount <n> | slide <n> | confirm | cancel", style="dim")
        parts.append(entry)

    return Panel(
        Group(*parts),
        title="[bold white on blue] YOUR TURN [/bold white on blue]",
        border_style="blue",
        padding=(0, 1),
    )


def build_log_panel(view: TableView) -> Panel:
    lines = [Text(line, style="dim") for line in view.log]
    if not lines:
        lines = [Text("No events yet", style="dim italic")]
    return Panel(Group(*lines), title="[bold]Game Log[/bold]", border_style="yellow", padding=(0, 1))


def build_chat_panel(view: TableView) -> Panel:
    lines: list[Text] = []
    for name, message in view.chat:
        line = Text()
        line.append(f"{name}: ", style="bold cyan")
        line.append(message)
        lines.append(line)
    if not lines:
        lines = [Text("No messages", style="dim italic")]
    return Panel(Group(*lines), title="[bold]Chat[/bold]", border_style="magenta", padding=(0, 1))


def build_footer(view: TableView) -> Text:
    footer = Text()
    if view.connected:
        footer.append(" LIVE ", style="bold white on green")
    else:
        footer.append(" OFFLINE ", style="bold white on red")
    footer.append(
        "  fold | check | call | bet | raise | allin | say <text> | start | leave | quit",
        style="dim",
    )
    return footer


def render(view: TableView, show_pot_odds: bool = True) -> Group:
    """Build the full display."""
    if not view.in_room:
        return Group(build_landing(view), build_footer(view))

    parts = [
        build_header(view),
        build_seats_panel(view),
        build_board_panel(view),
    ]
    action = build_action_panel(view, show_pot_odds=show_pot_odds)
    if action is not None:
        parts.append(action)
    parts.append(build_log_panel(view))
    parts.append(build_chat_panel(view))
    parts.append(build_footer(view))
    return Group(*parts)
