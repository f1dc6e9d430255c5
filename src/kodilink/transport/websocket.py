import asyncio
import logging
import time
from collections.abc import AsyncIterator
from typing import Any

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from kodilink.shared.message_parser import parse_json_message, serialize_message
from kodilink.transport.base import Transport, TransportMessage

logger = logging.getLogger(__name__)


class WebSocketTransport(Transport):
    """WebSocket channel to the player's JSON-RPC endpoint.

    One instance per connection attempt. Text frames carry one JSON-RPC
    message each.
    """

    def __init__(self, open_timeout: float | None = 10.0) -> None:
        self.open_timeout = open_timeout
        self._websocket = None
        self._url: str | None = None

    @classmethod
    def is_supported(cls) -> bool:
        """Always True: `websockets` is a required dependency.

        Subclasses for restricted environments override this to report a
        missing channel capability.
        """
        return True

    @property
    def is_open(self) -> bool:
        return self._websocket is not None

    @property
    def url(self) -> str | None:
        return self._url

    async def open(self, url: str) -> None:
        if self._websocket is not None:
            raise ConnectionError(f"Transport is already open to {self._url}")

        self._url = url
        try:
            self._websocket = await websockets.connect(
                url, open_timeout=self.open_timeout
            )
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            raise ConnectionError(f"Failed to open {url}: {e}") from e
        logger.debug(f"WebSocket open: {url}")

    async def send(self, payload: dict[str, Any]) -> None:
        if self._websocket is None:
            raise ConnectionError("Cannot send: transport is not open")

        frame = serialize_message(payload)
        try:
            await self._websocket.send(frame)
        except ConnectionClosed as e:
            raise ConnectionError(f"Connection to {self._url} closed: {e}") from e
        logger.debug(f"Sent to {self._url}: {frame}")

    async def messages(self) -> AsyncIterator[TransportMessage]:
        websocket = self._websocket
        if websocket is None:
            return

        try:
            async for raw in websocket:
                message = parse_json_message(raw)
                if message is None:
                    logger.warning(f"Invalid JSON from {self._url}: {raw!r}")
                    continue

                logger.debug(f"Received from {self._url}: {raw!r}")
                yield TransportMessage(
                    payload=message,
                    metadata={"url": self._url, "timestamp": time.time()},
                )
        except ConnectionClosed as e:
            raise ConnectionError(f"Connection to {self._url} failed: {e}") from e

    async def close(self) -> None:
        websocket = self._websocket
        if websocket is None:
            return

        self._websocket = None
        await websocket.close()
        logger.debug(f"WebSocket closed: {self._url}")
