"""End-to-end tests for TableSession over a MockTransport."""

import asyncio
import json

from rich.console import Console

from helpers import frame, game_dict, game_frame, game_player, joined_frame, welcome_frame
from pokerclient.core.name_store import NameStore
from pokerclient.core.reconciler import CONNECTION_LOST_MESSAGE
from pokerclient.core.recorder import SessionRecorder, read_recording
from pokerclient.core.transport import MockTransport
from pokerclient.session import TableSession, replay_frames


async def _drain():
    for _ in range(5):
        await asyncio.sleep(0)


def _make_session(name_file=None, **transport_kwargs):
    transport = MockTransport(**transport_kwargs)
    name_store = NameStore(name_file) if name_file is not None else None
    return TableSession(transport, name_store=name_store), transport


def _sent(transport):
    return [json.loads(raw) for raw in transport.sent]


class TestJoinAndCreate:
    def test_join_room_sends_upper_cased_code(self, name_file):
        async def scenario():
            session, transport = _make_session(name_file)
            await session.join_room("Alice", "abcd")
            transport.push(welcome_frame(), joined_frame())
            await _drain()
            await session.close()
            return session, transport

        session, transport = asyncio.run(scenario())
        assert _sent(transport)[0] == {
            "type": "joinRoom", "data": {"roomId": "ABCD", "playerName": "Alice"},
        }
        assert session.store.identity.client_id == "c-1"
        assert NameStore(name_file).load() == "Alice"
        assert session.notices == []

    def test_create_room_then_join(self):
        async def scenario():
            session, transport = _make_session(room_id="WXYZ")
            await session.create_room("Bob")
            await session.close()
            return transport

        transport = asyncio.run(scenario())
        assert _sent(transport)[0]["data"] == {"roomId": "WXYZ", "playerName": "Bob"}

    def test_blank_name_rejected_before_network(self):
        async def scenario():
            session, transport = _make_session()
            keep_going = await session.command("join ABCD")
            return session, transport, keep_going

        session, transport, keep_going = asyncio.run(scenario())
        assert keep_going
        assert session.notices == ["Please enter your name"]
        assert transport.connected is False

    def test_blank_code_rejected(self):
        async def scenario():
            session, transport = _make_session()
            await session.command("name Alice")
            await session.command("join")
            return session, transport

        session, transport = asyncio.run(scenario())
        assert session.notices == ["Please enter room code"]
        assert transport.sent == []

    def test_create_rejection_is_notified(self):
        async def scenario():
            session, _ = _make_session(create_error="Server full")
            await session.command("create Alice")
            return session

        session = asyncio.run(scenario())
        assert session.notices == ["Server full"]
        assert not session.fatal

    def test_saved_name_prefills(self, name_file):
        NameStore(name_file).save("Carol")

        async def scenario():
            session, transport = _make_session(name_file)
            await session.command("join abcd")
            await session.close()
            return transport

        transport = asyncio.run(scenario())
        assert _sent(transport)[0]["data"]["playerName"] == "Carol"


class TestTableCommands:
    def _seated(self, session):
        session.handle_frame(joined_frame())

    def test_fold_on_turn(self):
        async def scenario():
            session, transport = _make_session()
            await session.join_room("Alice", "ABCD")
            self._seated(session)
            session.handle_frame(game_frame(game_dict(current="p1")))
            await session.command("fold")
            await session.close()
            return transport

        assert _sent(asyncio.run(scenario()))[-1] == {
            "type": "gameAction", "data": {"action": "fold", "amount": 0},
        }

    def test_action_out_of_turn_is_notified(self):
        async def scenario():
            session, transport = _make_session()
            await session.join_room("Alice", "ABCD")
            self._seated(session)
            session.handle_frame(game_frame(game_dict(current="p2")))
            await session.command("call")
            await session.close()
            return session, transport

        session, transport = asyncio.run(scenario())
        assert session.notices == ["Call is not available right now"]
        assert len(transport.sent) == 1

    def test_raise_with_slider(self):
        async def scenario():
            session, transport = _make_session()
            await session.join_room("Alice", "ABCD")
            self._seated(session)
            session.handle_frame(game_frame(game_dict(current="p1")))
            await session.command("raise")
            await session.command("slide 5000")
            await session.command("confirm")
            await session.close()
            return transport

        assert _sent(asyncio.run(scenario()))[-1]["data"] == {"action": "raise", "amount": 990}

    def test_bad_amount_is_notified(self):
        async def scenario():
            session, _ = _make_session()
            await session.join_room("Alice", "ABCD")
            self._seated(session)
            session.handle_frame(game_frame(game_dict(current="p1")))
            await session.command("raise")
            await session.command("amount lots")
            await session.close()
            return session

        session = asyncio.run(scenario())
        assert len(session.notices) == 1
        assert "whole number" in session.notices[0]

    def test_start_game_host_only(self):
        async def scenario():
            session, transport = _make_session()
            await session.join_room("Alice", "ABCD")
            session.handle_frame(joined_frame(player_id="p1"))
            await session.command("start")
            await session.close()
            return transport

        assert _sent(asyncio.run(scenario()))[-1] == {
            "type": "startGame", "data": {"roomId": "ABCD"},
        }

    def test_chat_blank_ignored(self):
        async def scenario():
            session, transport = _make_session()
            await session.join_room("Alice", "ABCD")
            self._seated(session)
            await session.send_chat("   ")
            await session.command("say good luck")
            await session.close()
            return transport

        sent = _sent(asyncio.run(scenario()))
        assert len(sent) == 2
        assert sent[-1]["data"] == {"text": "good luck", "playerName": "Alice"}

    def test_server_error_is_notified(self):
        session, _ = _make_session()
        session.handle_frame(frame("error", {"error": "Not your turn"}))
        assert session.notices == ["Not your turn"]
        assert not session.fatal

    def test_malformed_frame_dropped(self):
        session, _ = _make_session()
        session.handle_frame(joined_frame())
        room = session.store.room
        session.handle_frame("{not json")
        assert session.store.room is room
        assert session.notices == []

    def test_unknown_command(self):
        session, _ = _make_session()
        assert asyncio.run(session.command("dance")) is True
        assert "Unknown command" in session.notices[0]

    def test_quit(self):
        session, _ = _make_session()
        assert asyncio.run(session.command("quit")) is False

    def test_stale_raise_not_sent_after_turn_passes(self):
        async def scenario():
            session, transport = _make_session()
            await session.join_room("Alice", "ABCD")
            self._seated(session)
            session.handle_frame(game_frame(game_dict(current="p1")))
            await session.command("raise")
            await session.command("amount 120")
            session.handle_frame(game_frame(game_dict(current="p2")))
            await session.command("confirm")
            await session.close()
            return session, transport

        session, transport = asyncio.run(scenario())
        assert [f["type"] for f in _sent(transport)] == ["joinRoom"]
        assert session.notices == ["No bet in progress"]
        assert not session.controller.bet_entry.visible

    def test_open_raise_follows_new_limits(self):
        async def scenario():
            session, transport = _make_session()
            await session.join_room("Alice", "ABCD")
            self._seated(session)
            session.handle_frame(game_frame(game_dict(current="p1")))
            await session.command("raise")
            session.handle_frame(game_frame(game_dict(current_bet=200, min_raise=200)))
            minimum = session.view().bet.minimum
            await session.command("confirm")
            await session.close()
            return transport, minimum

        transport, minimum = asyncio.run(scenario())
        assert minimum == 400
        assert _sent(transport)[-1]["data"] == {"action": "raise", "amount": 400}


class TestConnectionLifecycle:
    def test_server_close_in_room_is_fatal(self):
        async def scenario():
            session, transport = _make_session()
            await session.join_room("Alice", "ABCD")
            transport.push(joined_frame())
            await _drain()
            transport.finish()
            await _drain()
            keep_going = await session.command("say anyone there?")
            return session, keep_going

        session, keep_going = asyncio.run(scenario())
        assert session.fatal
        # Once on close, once more for the refused send
        assert session.notices.count(CONNECTION_LOST_MESSAGE) == 2
        assert session.store.room is None
        assert keep_going is False

    def test_leave_room_is_not_fatal(self):
        async def scenario():
            session, transport = _make_session()
            await session.join_room("Alice", "ABCD")
            transport.push(joined_frame())
            await _drain()
            await session.command("leave")
            return session, transport

        session, transport = asyncio.run(scenario())
        assert _sent(transport)[-1] == {"type": "leaveRoom", "data": {"roomId": "ABCD"}}
        assert not session.fatal
        assert not session.store.identity.in_room
        assert session.store.identity.player_name == "Alice"
        assert session.store.connection.connected is False

    def test_rejoin_after_leave(self):
        async def scenario():
            session, transport = _make_session()
            await session.join_room("Alice", "ABCD")
            session.handle_frame(joined_frame())
            await session.leave_room()
            await session.join_room(None, "EFGH")
            await session.close()
            return transport

        sent = _sent(asyncio.run(scenario()))
        assert sent[-1]["data"] == {"roomId": "EFGH", "playerName": "Alice"}


class TestRecording:
    def test_frames_recorded_and_replayed(self, tmp_path):
        recorder = SessionRecorder(tmp_path, "session-test")

        async def scenario():
            transport = MockTransport()
            session = TableSession(transport, recorder=recorder)
            await session.join_room("Alice", "ABCD")
            transport.push(
                joined_frame(),
                game_frame(
                    game_dict(players=[game_player("p1", "Alice", 0), game_player("p2", "Bob", 1)]),
                    player_id="p2",
                    action="call",
                ),
            )
            await _drain()
            await session.close()

        asyncio.run(scenario())
        outbound = list(read_recording(recorder.file_path, direction="out"))
        assert json.loads(outbound[0])["type"] == "joinRoom"

        store = replay_frames(read_recording(recorder.file_path))
        assert store.room.code == "ABCD"
        assert [e.text for e in store.log][-1] == "Bob call"


def _console():
    return Console(width=100, record=True, color_system=None)


class TestNotices:
    def test_brackets_in_error_are_shown_verbatim(self):
        console = _console()
        session = TableSession(MockTransport(), console=console)
        session.handle_frame(frame("error", {"error": "Bet must be in [min 40]"}))
        assert "Error: Bet must be in [min 40]" in console.export_text()

    def test_closing_tag_in_error_keeps_connection(self):
        async def scenario():
            transport = MockTransport()
            session = TableSession(transport, console=_console())
            await session.join_room("Alice", "ABCD")
            transport.push(joined_frame(), frame("error", {"error": "bad tag [/b] here"}))
            await _drain()
            connected = session.store.connection.connected
            await session.close()
            return session, connected

        session, connected = asyncio.run(scenario())
        assert connected
        assert not session.fatal
        assert session.notices == ["bad tag [/b] here"]

    def test_markup_like_command_is_notified(self):
        console = _console()
        session = TableSession(MockTransport(), console=console)
        assert asyncio.run(session.command("[/x]")) is True
        assert "Unknown command '[/x]'" in console.export_text()


class TestPrompt:
    def test_lost_connection_ends_waiting_prompt(self):
        async def scenario():
            session, transport = _make_session()
            # Never answers, like a user who has not typed anything yet
            session._read_line = lambda prompt: asyncio.get_running_loop().create_future()
            await session.join_room("Alice", "ABCD")
            transport.push(joined_frame())
            await _drain()
            runner = asyncio.create_task(session.run())
            await _drain()
            transport.finish()
            await asyncio.wait_for(runner, 1)
            return session

        session = asyncio.run(scenario())
        assert session.fatal
        assert session.notices == [CONNECTION_LOST_MESSAGE]

    def test_quit_from_prompt(self):
        async def scenario():
            session, _ = _make_session()
            lines = iter(["help", "quit"])

            def read_line(prompt):
                future = asyncio.get_running_loop().create_future()
                future.set_result(next(lines))
                return future

            session._read_line = read_line
            await asyncio.wait_for(session.run(), 1)
            return session

        session = asyncio.run(scenario())
        assert not session.fatal
        assert session.notices == []
