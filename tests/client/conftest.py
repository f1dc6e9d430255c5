import asyncio
import time
from collections.abc import AsyncIterator
from typing import Any

import pytest

from kodilink.client.config import MemoryAddressStore
from kodilink.client.session import PlayerClient
from kodilink.transport.base import Transport, TransportMessage

_CLOSED = object()


class MockTransport(Transport):
    """Mock channel for testing the client without a network."""

    instances: list["MockTransport"] = []
    supported = True
    auto_open = True

    def __init__(self):
        self.url: str | None = None
        self.sent_messages: list[dict[str, Any]] = []
        self.closed = False
        self._opened = False
        self._open_gate = asyncio.Event()
        self._open_error: Exception | None = None
        self._incoming: asyncio.Queue[Any] = asyncio.Queue()
        type(self).instances.append(self)

    @classmethod
    def is_supported(cls) -> bool:
        return cls.supported

    @property
    def is_open(self) -> bool:
        return self._opened and not self.closed

    async def open(self, url: str) -> None:
        self.url = url
        if not self.auto_open:
            await self._open_gate.wait()
        if self._open_error is not None:
            raise self._open_error
        self._opened = True

    async def send(self, payload: dict[str, Any]) -> None:
        if self.closed:
            raise ConnectionError("Transport closed")
        self.sent_messages.append(payload)

    async def messages(self) -> AsyncIterator[TransportMessage]:
        while True:
            item = await self._incoming.get()
            if item is _CLOSED:
                return
            if isinstance(item, Exception):
                raise item
            yield TransportMessage(
                payload=item, metadata={"url": self.url, "timestamp": time.time()}
            )

    async def close(self) -> None:
        self.closed = True
        self._incoming.put_nowait(_CLOSED)

    # Test helpers
    def accept(self) -> None:
        """Let a held open() complete."""
        self._open_gate.set()

    def refuse(self) -> None:
        """Make a held open() fail."""
        self._open_error = ConnectionError("Connection refused")
        self._open_gate.set()

    def receive(self, payload: dict[str, Any]) -> None:
        """Simulate a message from the player."""
        self._incoming.put_nowait(payload)

    def simulate_close(self) -> None:
        """Simulate the player closing the channel."""
        self._incoming.put_nowait(_CLOSED)

    def simulate_error(self) -> None:
        """Simulate the channel failing."""
        self._incoming.put_nowait(ConnectionError("Network down"))

    def sent_methods(self) -> list[str]:
        return [message["method"] for message in self.sent_messages]


async def yield_to_event_loop(seconds: float = 0.01) -> None:
    """Let the event loop process pending tasks and callbacks.

    Args:
        seconds: Small delay to ensure async operations settle.
                Defaults to 10ms - enough for most async operations.
    """
    await asyncio.sleep(seconds)


@pytest.fixture
def yield_loop():
    """Helper to yield to event loop in tests."""
    return yield_to_event_loop


@pytest.fixture
def transport_class():
    """Fresh MockTransport subclass so instance tracking is per test."""

    class TestTransport(MockTransport):
        instances: list[MockTransport] = []

    return TestTransport


@pytest.fixture
def store():
    return MemoryAddressStore({"kodiAddress": "192.168.0.20"})


@pytest.fixture
async def client(store, transport_class):
    """PlayerClient on a mock transport with automatic cleanup."""
    player_client = PlayerClient(store, transport_class=transport_class)
    yield player_client
    await player_client.disconnect()


@pytest.fixture
async def connected_client(client, transport_class, yield_loop):
    """PlayerClient with an open connection."""
    await client.connect()
    await yield_loop()
    return client


class Recorder:
    """Result callback that remembers every signal it gets."""

    def __init__(self, name: str = "callback", log: list | None = None):
        self.name = name
        self.signals: list[str] = []
        self.log = log

    def __call__(self, signal) -> None:
        self.signals.append(signal)
        if self.log is not None:
            self.log.append((self.name, signal))


def on_play(player_id: int) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "method": "Player.OnPlay",
        "params": {
            "data": {
                "item": {"type": "song", "id": 12},
                "player": {"playerid": player_id, "speed": 1},
            },
            "sender": "xbmc",
        },
    }


def on_stop() -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "method": "Player.OnStop",
        "params": {"data": {"end": False, "item": {"type": "song"}}, "sender": "xbmc"},
    }


def reply(result: Any, request_id: int = 1) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}
