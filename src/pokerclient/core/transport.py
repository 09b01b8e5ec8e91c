"""Transport — uniform interface to the table server.

Provides ABC and concrete implementations:
- MockTransport: scripted, offline, for testing and demos
- AiohttpTransport: WebSocket message channel plus the HTTP room-creation call
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import AsyncIterator

import aiohttp

from pokerclient.config import ServerConfig
from pokerclient.core.errors import ServerRejection, TransportError

logger = logging.getLogger(__name__)

_CREATE_ROOM_PATH = "/api/rooms/create"


class Transport(ABC):
    """Abstract duplex frame channel plus the room-creation side channel."""

    @abstractmethod
    async def connect(self) -> None:
        """Open the message channel."""

    @abstractmethod
    async def send(self, text: str) -> None:
        """Send one text frame."""

    @abstractmethod
    def frames(self) -> AsyncIterator[str]:
        """Yield inbound text frames in delivery order until the channel closes."""

    @abstractmethod
    async def close(self) -> None:
        """Close the channel. Safe to call more than once."""

    @abstractmethod
    async def create_room(self) -> str:
        """Ask the server for a new room and return its id."""


class MockTransport(Transport):
    """Deterministic transport for offline testing.

    Inbound frames are fed with ``push``; ``finish`` ends the stream as if the
    server had closed the socket. Outbound frames are collected in ``sent``.
    """

    def __init__(self, room_id: str = "ABCD", create_error: str | None = None):
        self._room_id = room_id
        self._create_error = create_error
        self._inbox: asyncio.Queue = asyncio.Queue()
        self.sent: list[str] = []
        self.connected = False
        self.closed = False

    def push(self, *frames: str) -> None:
        for frame in frames:
            self._inbox.put_nowait(frame)

    def finish(self) -> None:
        self._inbox.put_nowait(None)

    async def connect(self) -> None:
        self.connected = True
        self.closed = False

    async def send(self, text: str) -> None:
        if not self.connected or self.closed:
            raise TransportError("Not connected")
        self.sent.append(text)

    async def frames(self) -> AsyncIterator[str]:
        while True:
            frame = await self._inbox.get()
            if frame is None:
                return
            yield frame

    async def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._inbox.put_nowait(None)

    async def create_room(self) -> str:
        if self._create_error:
            raise ServerRejection(self._create_error)
        return self._room_id


class AiohttpTransport(Transport):
    """WebSocket + HTTP transport over a single aiohttp.ClientSession."""

    def __init__(self, ws_url: str, api_url: str, timeout_s: float = 10.0):
        self._ws_url = ws_url
        self._api_url = api_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout_s)
        self._session: aiohttp.ClientSession | None = None
        self._ws: aiohttp.ClientWebSocketResponse | None = None

    @classmethod
    def from_config(cls, server: ServerConfig) -> AiohttpTransport:
        return cls(server.ws_url, server.api_url, timeout_s=server.timeout_s)

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def connect(self) -> None:
        if self._ws is not None and not self._ws.closed:
            return
        session = self._ensure_session()
        try:
            self._ws = await session.ws_connect(self._ws_url, heartbeat=30.0)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"Cannot connect to {self._ws_url}: {e}") from e
        logger.info("WebSocket connected to %s", self._ws_url)

    async def send(self, text: str) -> None:
        if self._ws is None or self._ws.closed:
            raise TransportError("Not connected")
        try:
            await self._ws.send_str(text)
        except (aiohttp.ClientError, ConnectionResetError) as e:
            raise TransportError(f"Send failed: {e}") from e

    async def frames(self) -> AsyncIterator[str]:
        if self._ws is None:
            return
        async for msg in self._ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                yield msg.data
            elif msg.type == aiohttp.WSMsgType.BINARY:
                yield msg.data.decode("utf-8", errors="replace")
            elif msg.type == aiohttp.WSMsgType.ERROR:
                logger.warning("WebSocket error: %s", self._ws.exception())
                break
        logger.info("WebSocket disconnected")

    async def close(self) -> None:
        if self._ws is not None and not self._ws.closed:
            await self._ws.close()
        if self._session is not None and not self._session.closed:
            await self._session.close()

    async def create_room(self) -> str:
        session = self._ensure_session()
        url = self._api_url + _CREATE_ROOM_PATH
        try:
            async with session.post(url) as resp:
                try:
                    data = await resp.json(content_type=None)
                except ValueError:
                    text = await resp.text()
                    raise ServerRejection(
                        f"Failed to create room: non-JSON response: {text[:256]}"
                    ) from None
                if resp.status >= 400:
                    error = data.get("error") if isinstance(data, dict) else None
                    raise ServerRejection(error or "Failed to create room")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"Cannot reach {url}: {e}") from e

        room_id = data.get("roomId") if isinstance(data, dict) else None
        if not room_id:
            raise ServerRejection("Failed to create room")
        return str(room_id)
