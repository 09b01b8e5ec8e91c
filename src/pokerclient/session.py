"""TableSession — wires transport, reconciler, controller and renderer.

Everything runs on one asyncio loop. Inbound frames are applied one at a
time, each to completion, in the order the transport delivers them. User
commands run between frames. The only awaits are at the transport boundary
and the console prompt, so the store needs no locking.
"""

from __future__ import annotations

import asyncio
import logging
import shlex
import threading
import uuid
from typing import Iterable

from rich.console import Console
from rich.text import Text

from pokerclient.config import ClientConfig
from pokerclient.core import envelope
from pokerclient.core.controller import ActionController
from pokerclient.core.envelope import parse_frame
from pokerclient.core.errors import (
    ClientError,
    ConnectionLost,
    MalformedMessage,
    ValidationError,
)
from pokerclient.core.models import ActionKind, ActionRequest
from pokerclient.core.name_store import NameStore
from pokerclient.core.reconciler import (
    CONNECTION_LOST_MESSAGE,
    Directive,
    DirectiveKind,
    Reconciler,
)
from pokerclient.core.recorder import INBOUND, OUTBOUND, SessionRecorder
from pokerclient.core.store import StateStore
from pokerclient.core.transport import Transport
from pokerclient.view.render import render
from pokerclient.view.table_view import TableView, project

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "name <name> | create | join <code> | leave | start | say <text> | "
    "fold | check | call | allin | bet | raise | amount <n> | slide <n> | "
    "confirm | cancel | quit"
)

_UNSIZED = {
    "fold": ActionKind.FOLD,
    "check": ActionKind.CHECK,
    "call": ActionKind.CALL,
    "allin": ActionKind.ALLIN,
}
_SIZED = {"bet": ActionKind.BET, "raise": ActionKind.RAISE}


class TableSession:
    """One client session against one server."""

    def __init__(
        self,
        transport: Transport,
        config: ClientConfig | None = None,
        *,
        name_store: NameStore | None = None,
        recorder: SessionRecorder | None = None,
        console: Console | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        self.transport = transport
        self.store = StateStore()
        self.reconciler = Reconciler(self.store)
        self.controller = ActionController(self.store, self._send_action)
        self._name_store = name_store
        self._recorder = recorder
        self._console = console
        self._reader: asyncio.Task | None = None
        self._closing = False
        self._lost = asyncio.Event()

        self.notices: list[str] = []
        self.fatal = False
        if name_store is not None:
            self.store.identity.player_name = name_store.load()

    # ------------------------------------------------------------------
    # Rendering and notices
    # ------------------------------------------------------------------

    def view(self) -> TableView:
        return project(
            self.store,
            self.controller.panel(),
            self.controller.bet_entry,
            log_lines=self.config.display.log_lines,
            chat_lines=self.config.display.chat_lines,
        )

    def refresh(self) -> None:
        if self._console is None:
            return
        self._console.clear()
        self._console.print(render(self.view(), show_pot_odds=self.config.display.show_pot_odds))

    def notify(self, message: str, fatal: bool = False) -> None:
        """The single user-notification primitive."""
        self.notices.append(message)
        if fatal:
            self.fatal = True
            self._lost.set()
            logger.error("Fatal: %s", message)
        if self._console is not None:
            style = "bold white on red" if fatal else "bold red"
            self._console.print(Text(f"Error: {message}", style=style))

    def _handle_directives(self, directives: Iterable[Directive]) -> None:
        redraw = False
        for directive in directives:
            if directive.kind is DirectiveKind.SHOW_ERROR:
                self.notify(directive.message or "Unknown error")
            elif directive.kind is DirectiveKind.SHOW_FATAL:
                self.notify(directive.message or "Connection lost", fatal=True)
            else:
                redraw = True
        if redraw:
            self.refresh()

    # ------------------------------------------------------------------
    # Transport boundary
    # ------------------------------------------------------------------

    async def _send(self, text: str) -> None:
        if self.fatal:
            raise ConnectionLost(CONNECTION_LOST_MESSAGE)
        await self.transport.send(text)
        if self._recorder is not None:
            self._recorder.record(OUTBOUND, text)

    async def _send_action(self, request: ActionRequest) -> None:
        await self._send(envelope.game_action(request))

    async def _ensure_connected(self) -> None:
        if self.store.connection.connected:
            return
        await self.transport.connect()
        self._closing = False
        self._handle_directives(self.reconciler.connection_opened())
        self._reader = asyncio.create_task(self._read_loop(), name="pokerclient-reader")

    async def _read_loop(self) -> None:
        try:
            async for frame in self.transport.frames():
                self.handle_frame(frame)
        finally:
            directives = self.reconciler.connection_closed()
            self.controller.sync_bet_entry()
            # A close we asked for is not a lost connection
            if not self._closing:
                self._handle_directives(directives)

    def handle_frame(self, raw: str) -> None:
        """Parse and apply one inbound frame. Malformed frames are dropped."""
        if self._recorder is not None:
            self._recorder.record(INBOUND, raw)
        try:
            directives = self.reconciler.apply(parse_frame(raw))
        except MalformedMessage as exc:
            logger.warning("Dropping malformed frame: %s", exc.reason)
            return
        self.controller.sync_bet_entry()
        self._handle_directives(directives)

    async def close(self) -> None:
        self._closing = True
        await self.transport.close()
        if self._reader is not None:
            await self._reader
            self._reader = None

    # ------------------------------------------------------------------
    # User operations
    # ------------------------------------------------------------------

    def _require_name(self, name: str | None = None) -> str:
        name = (name if name is not None else self.store.identity.player_name or "").strip()
        if not name:
            raise ValidationError("Please enter your name")
        return name

    def _require_room(self) -> str:
        if not self.store.identity.in_room:
            raise ValidationError("You are not in a room")
        return self.store.identity.room_id

    async def _join(self, room_id: str, name: str) -> None:
        if self._name_store is not None:
            self._name_store.save(name)
        self.store.identity.player_name = name
        self.reconciler.join_requested(name)
        await self._send(envelope.join_room(room_id, name))

    async def create_room(self, name: str | None = None) -> None:
        name = self._require_name(name)
        room_id = await self.transport.create_room()
        await self._ensure_connected()
        await self._join(room_id, name)

    async def join_room(self, name: str | None, code: str) -> None:
        name = self._require_name(name)
        code = code.strip().upper()
        if not code:
            raise ValidationError("Please enter room code")
        await self._ensure_connected()
        await self._join(code, name)

    async def leave_room(self) -> None:
        room_id = self._require_room()
        await self._send(envelope.leave_room(room_id))
        self._handle_directives(self.reconciler.left_room())
        await self.close()

    async def start_game(self) -> None:
        room_id = self._require_room()
        if not self.store.identity.is_host:
            raise ValidationError("Only the host can start the game")
        await self._send(envelope.start_game(room_id))

    async def send_chat(self, text: str) -> None:
        text = text.strip()
        if not text:
            return
        self._require_room()
        await self._send(envelope.chat(text, self.store.identity.player_name or ""))

    async def act(self, kind: ActionKind) -> None:
        try:
            await self.controller.submit_action(kind)
        finally:
            self.refresh()

    def open_bet(self, kind: ActionKind) -> None:
        self.controller.open_bet_entry(kind)
        self.refresh()

    def set_bet_input(self, text: str) -> None:
        self.controller.bet_entry.set_input(text)
        self.refresh()

    def set_bet_slider(self, value: int) -> None:
        self.controller.bet_entry.set_slider(value)
        self.refresh()

    async def confirm_bet(self) -> None:
        try:
            await self.controller.confirm_bet()
        finally:
            self.refresh()

    def cancel_bet(self) -> None:
        self.controller.cancel_bet()
        self.refresh()

    # ------------------------------------------------------------------
    # Command line
    # ------------------------------------------------------------------

    async def command(self, line: str) -> bool:
        """Run one command line. Returns False when the session should end.

        Every ClientError is caught here and shown through ``notify``.
        """
        try:
            return await self._dispatch(line)
        except ClientError as exc:
            self.notify(str(exc))
            return not self.fatal

    async def _dispatch(self, line: str) -> bool:
        try:
            parts = shlex.split(line)
        except ValueError:
            parts = line.split()
        if not parts:
            return True
        cmd, args = parts[0].lower(), parts[1:]

        if cmd in ("quit", "exit"):
            return False
        if cmd == "help":
            if self._console is not None:
                self._console.print(HELP_TEXT, style="dim", highlight=False)
        elif cmd == "name":
            if self.store.identity.in_room:
                raise ValidationError("Leave the room before changing your name")
            self.store.identity.player_name = " ".join(args) or None
            self.refresh()
        elif cmd == "create":
            await self.create_room(" ".join(args) if args else None)
        elif cmd == "join":
            if not args:
                raise ValidationError("Please enter room code")
            await self.join_room(None, args[0])
        elif cmd == "leave":
            await self.leave_room()
        elif cmd == "start":
            await self.start_game()
        elif cmd in ("say", "chat"):
            await self.send_chat(line.split(None, 1)[1] if len(parts) > 1 else "")
        elif cmd in _UNSIZED:
            await self.act(_UNSIZED[cmd])
        elif cmd in _SIZED:
            self.open_bet(_SIZED[cmd])
        elif cmd == "amount":
            self.set_bet_input(args[0] if args else "")
        elif cmd == "slide":
            if not args:
                raise ValidationError("Usage: slide <n>")
            self.set_bet_slider(_parse_int(args[0]))
        elif cmd == "confirm":
            await self.confirm_bet()
        elif cmd == "cancel":
            self.cancel_bet()
        else:
            raise ValidationError(f"Unknown command {cmd!r}. Try 'help'.")
        return not self.fatal

    def _read_line(self, prompt: str) -> asyncio.Future:
        """Read one console line on a daemon thread."""
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def _settle(line: str | None, error: BaseException | None) -> None:
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(line)

        def _worker() -> None:
            try:
                line, error = input(prompt), None
            except EOFError as exc:
                line, error = None, exc
            try:
                loop.call_soon_threadsafe(_settle, line, error)
            except RuntimeError:
                logger.debug("Console line arrived after the loop closed")

        threading.Thread(target=_worker, name="pokerclient-prompt", daemon=True).start()
        return future

    async def run(self) -> None:
        """Interactive prompt loop until quit or a fatal notice.

        A fatal notice from the reader ends the loop even while the prompt
        is still waiting for input.
        """
        self.refresh()
        lost = asyncio.ensure_future(self._lost.wait())
        try:
            while not self.fatal:
                pending = self._read_line("> ")
                await asyncio.wait({pending, lost}, return_when=asyncio.FIRST_COMPLETED)
                if not pending.done():
                    pending.cancel()
                    break
                if not await self.command(pending.result()):
                    break
        except (EOFError, KeyboardInterrupt):
            pass
        finally:
            lost.cancel()
            await self.close()


def _parse_int(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise ValidationError(f"Expected a whole number, got {text!r}") from None


def new_session_id() -> str:
    return f"session-{uuid.uuid4().hex[:12]}"


def replay_frames(frames: Iterable[str]) -> StateStore:
    """Feed recorded inbound frames through parser and reconciler."""
    store = StateStore()
    reconciler = Reconciler(store)
    reconciler.connection_opened()
    for raw in frames:
        try:
            reconciler.apply(parse_frame(raw))
        except MalformedMessage as exc:
            logger.warning("Skipping malformed recorded frame: %s", exc.reason)
    return store
