"""CLI entry point: python -m pokerclient {play,replay}"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console

from pokerclient.config import ClientConfig, load_config
from pokerclient.core.controller import HIDDEN_PANEL
from pokerclient.core.name_store import NameStore
from pokerclient.core.recorder import SessionRecorder, read_recording
from pokerclient.core.transport import AiohttpTransport
from pokerclient.session import TableSession, new_session_id, replay_frames
from pokerclient.view.render import render
from pokerclient.view.table_view import project


def _setup_logging(config: ClientConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.log_level, logging.WARNING)
    handlers: list[logging.Handler] = []
    if config.log_file is not None:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(config.log_file))
    else:
        handlers.append(logging.StreamHandler(sys.stderr))
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
    )


def _play(config: ClientConfig, args) -> None:
    transport = AiohttpTransport.from_config(config.server)
    record_dir = args.record or config.record_dir
    recorder = SessionRecorder(record_dir, new_session_id()) if record_dir else None

    session = TableSession(
        transport,
        config,
        name_store=NameStore(config.name_file),
        recorder=recorder,
        console=Console(),
    )

    async def _main() -> None:
        if args.name:
            session.store.identity.player_name = args.name
        if args.room:
            await session.command(f"join {args.room}")
        await session.run()

    asyncio.run(_main())
    if recorder is not None:
        print(f"Recording: {recorder.file_path}")


def _replay(config: ClientConfig, args) -> None:
    if not args.recording.exists():
        print(f"Error: recording not found: {args.recording}", file=sys.stderr)
        sys.exit(1)
    store = replay_frames(read_recording(args.recording))
    view = project(
        store,
        HIDDEN_PANEL,
        log_lines=config.display.log_lines,
        chat_lines=config.display.chat_lines,
    )
    Console().print(render(view, show_pot_odds=config.display.show_pot_odds))
    print(f"Replayed {len(store.log)} log entries, {len(store.chat)} chat messages")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="pokerclient",
        description="Terminal client for the multiplayer Texas Hold'em server",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to client YAML config file",
    )
    common.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Log at DEBUG level",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    play = sub.add_parser("play", parents=[common], help="Connect to a server and play")
    play.add_argument("--name", default=None, help="Display name (overrides the saved one)")
    play.add_argument("--room", default=None, help="Room code to join on start")
    play.add_argument(
        "--record",
        type=Path,
        default=None,
        help="Directory to record frames into (JSONL)",
    )

    replay = sub.add_parser("replay", parents=[common], help="Rebuild the table from a recording")
    replay.add_argument("recording", type=Path, help="Path to a .jsonl recording")

    args = parser.parse_args()

    load_dotenv()
    if args.config is not None and not args.config.exists():
        print(f"Error: config file not found: {args.config}", file=sys.stderr)
        sys.exit(1)
    config = load_config(args.config)
    _setup_logging(config, args.verbose)

    if args.command == "replay":
        _replay(config, args)
    else:
        _play(config, args)


if __name__ == "__main__":
    main()
