"""Connection lifecycle for the player channel.

Owns the single transport, tracks which phase it is in, and turns what
happens on the channel into calls on a ChannelEvents sink (the request
correlator). Channel events are handled one at a time by a reader task,
so everything downstream runs in arrival order.
"""

import asyncio
import logging
from enum import Enum
from typing import Protocol

from kodilink.client.callbacks import CallbackManager
from kodilink.client.config import AddressStore, ClientConfig, resolve_connection_url
from kodilink.shared.request_tracker import ResultCallback
from kodilink.transport.base import Transport


class ConnectionPhase(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ChannelEvent(Enum):
    OPEN = "open"
    MESSAGE = "message"
    CLOSE = "close"
    ERROR = "error"


class ChannelEvents(Protocol):
    async def on_open(self) -> None: ...

    async def on_message(self, payload: dict) -> None: ...

    def on_channel_lost(self) -> list[ResultCallback]: ...

    async def on_channel_down(
        self, event: ChannelEvent, waiting: list[ResultCallback]
    ) -> None: ...

    def on_reset(self) -> None: ...


class Connection:
    """State machine around one transport to the player.

    DISCONNECTED -> CONNECTING on connect(), CONNECTING -> CONNECTED when
    the channel opens, and back to DISCONNECTED when it closes, fails, or
    disconnect() is called. At most one transport exists at a time.
    """

    def __init__(
        self,
        transport_class: type[Transport],
        store: AddressStore,
        config: ClientConfig,
        callbacks: CallbackManager,
    ):
        self.transport_class = transport_class
        self.store = store
        self.config = config
        self.callbacks = callbacks
        self.events: ChannelEvents | None = None

        self._transport: Transport | None = None
        self._url: str | None = None
        self._phase = ConnectionPhase.DISCONNECTED
        self._reader_task: asyncio.Task[None] | None = None
        self.logger = logging.getLogger("kodilink.client.connection")

    def attach(self, events: ChannelEvents) -> None:
        """Route channel events to the given sink."""
        self.events = events

    # ================================
    # State
    # ================================

    @property
    def phase(self) -> ConnectionPhase:
        return self._phase

    @property
    def url(self) -> str | None:
        """URL the current transport was opened with."""
        return self._url

    @property
    def transport(self) -> Transport | None:
        return self._transport

    @property
    def has_transport(self) -> bool:
        return self._transport is not None

    def resolve_url(self) -> str | None:
        """URL for the address currently in the store."""
        return resolve_connection_url(self.store, self.config)

    def needs_reconnect(self) -> bool:
        """True if there is no transport or the configured address changed."""
        return self._transport is None or self._url != self.resolve_url()

    # ================================
    # Lifecycle
    # ================================

    async def connect(self) -> bool:
        """Open a channel to the configured address.

        Replaces an existing channel if the address changed. Does nothing
        if a channel to the same address already exists.

        Returns:
            True if a channel exists or is being opened, False if the attempt
            was abandoned (unsupported transport or no address configured).
        """
        if not self.transport_class.is_supported():
            self.logger.error(
                f"{self.transport_class.__name__} is not supported in this environment"
            )
            await self.callbacks.call_unsupported(
                "WebSocket connections are not supported in this environment"
            )
            return False

        url = self.resolve_url()
        if self._transport is not None and url == self._url:
            return True

        if self._transport is not None:
            self.logger.info(f"Address changed, resetting connection to {self._url}")
            await self.disconnect()

        if url is None:
            self.logger.warning(
                f"No player address configured under '{self.config.address_key}'"
            )
            return False

        transport = self.transport_class()
        self._transport = transport
        self._url = url
        self._phase = ConnectionPhase.CONNECTING
        self.logger.info(f"Connecting to {url}")

        self._reader_task = asyncio.create_task(
            self._run_channel(transport, url), name=f"channel_{url}"
        )
        return True

    async def disconnect(self) -> None:
        """Close the channel on purpose and reset all request state.

        No close or error event is raised for an intentional disconnect.
        Safe to call multiple times.
        """
        transport = self._transport
        if transport is None:
            return

        url = self._url
        task = self._detach()
        # Reset before awaiting so a connect() made meanwhile keeps its state.
        if self.events is not None:
            self.events.on_reset()

        await self._stop_reader(task)
        await self._close_quietly(transport)
        self.logger.info(f"Disconnected from {url}")

    async def send(self, payload: dict) -> None:
        """Send on the current transport. No-op without one.

        Raises:
            ConnectionError: If the transport failed to send
        """
        if self._transport is None:
            return
        await self._transport.send(payload)

    async def fail(self, error: Exception) -> None:
        """Treat the current channel as failed."""
        if self._transport is None:
            return
        await self._channel_down(self._transport, ChannelEvent.ERROR, error)

    # ================================
    # Channel events
    # ================================

    async def _run_channel(self, transport: Transport, url: str) -> None:
        """Open the channel and feed its events to the sink until it ends."""
        try:
            await transport.open(url)
        except ConnectionError as e:
            await self._channel_down(transport, ChannelEvent.ERROR, e)
            return

        if transport is not self._transport:
            return

        self._phase = ConnectionPhase.CONNECTED
        self.logger.info(f"Connected to {url}")
        await self.callbacks.call_connected(url)
        if self.events is not None:
            await self.events.on_open()
        if transport is not self._transport:
            return

        try:
            async for message in transport.messages():
                if transport is not self._transport:
                    return
                try:
                    if self.events is not None:
                        await self.events.on_message(message.payload)
                except Exception as e:
                    self.logger.warning(f"Error handling message from {url}: {e}")
                    continue
        except ConnectionError as e:
            await self._channel_down(transport, ChannelEvent.ERROR, e)
            return

        await self._channel_down(transport, ChannelEvent.CLOSE)

    async def _channel_down(
        self,
        transport: Transport,
        event: ChannelEvent,
        error: Exception | None = None,
    ) -> None:
        """Tear down after the channel closed or failed, then notify the sink.

        Whoever was waiting on this channel is captured together with the
        detach. Anything registered later, such as a reconnect from the
        disconnected handler, belongs to the next channel.
        """
        if transport is not self._transport:
            return

        url = self._url
        if error is not None:
            self.logger.warning(f"Connection to {url} failed: {error}")
        else:
            self.logger.info(f"Connection to {url} closed")

        task = self._detach()
        waiting = self.events.on_channel_lost() if self.events is not None else []

        await self._stop_reader(task)
        await self._close_quietly(transport)

        await self.callbacks.call_disconnected(url)
        if self.events is not None:
            await self.events.on_channel_down(event, waiting)

    # ================================
    # Helpers
    # ================================

    def _detach(self) -> asyncio.Task[None] | None:
        """Forget the current transport so its late events are ignored."""
        task = self._reader_task
        self._transport = None
        self._url = None
        self._reader_task = None
        self._phase = ConnectionPhase.DISCONNECTED
        return task

    async def _stop_reader(self, task: asyncio.Task[None] | None) -> None:
        # The reader may be the one tearing down (from inside a callback).
        if task is None or task is asyncio.current_task() or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _close_quietly(self, transport: Transport) -> None:
        try:
            await transport.close()
        except (ConnectionError, OSError) as e:
            self.logger.debug(f"Error closing transport: {e}")
