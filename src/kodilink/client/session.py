"""Client session for a JSON-RPC media player.

Key components:
- Connection: channel lifecycle, reconnects when the configured address changes
- Correlator: the one request in flight and the player state it implies
- Callbacks: connection lifecycle notifications for the embedding app

Every action takes an optional result callback that is told "ok" or "error"
once the player confirms the action or the connection drops. Actions issued
while the connection is still opening are dropped; their callbacks are told
"connected" once it is up. Actions return False when there is no connection
to send on (no address configured, unsupported transport); their callbacks
never run.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from kodilink.client.callbacks import CallbackManager
from kodilink.client.config import AddressStore, ClientConfig
from kodilink.client.connection import Connection, ConnectionPhase
from kodilink.client.correlator import RequestCorrelator
from kodilink.protocol.gui import (
    DEFAULT_DISPLAY_TIME_MS,
    NotificationImage,
    ShowNotificationRequest,
)
from kodilink.protocol.player import (
    GetActivePlayersRequest,
    PlayerOpenRequest,
    PlayerRotateRequest,
    PlayerStopRequest,
    player_ids,
)
from kodilink.shared.request_tracker import ResultCallback, Signal
from kodilink.transport.base import Transport
from kodilink.transport.websocket import WebSocketTransport


class PlayerClient:
    def __init__(
        self,
        store: AddressStore,
        config: ClientConfig | None = None,
        transport_class: type[Transport] = WebSocketTransport,
    ):
        self.config = config or ClientConfig()
        self.callbacks = CallbackManager()
        self.connection = Connection(
            transport_class, store, self.config, self.callbacks
        )
        self.correlator = RequestCorrelator(self.connection)
        self.logger = logging.getLogger("kodilink.client.session")

    # ================================
    # State
    # ================================

    @property
    def phase(self) -> ConnectionPhase:
        return self.connection.phase

    @property
    def player_id(self) -> int | None:
        """Player started by the last confirmed open, if it hasn't stopped."""
        return self.correlator.player_id

    @property
    def active_players(self) -> list[Any]:
        """Result of the last `Player.GetActivePlayers` call."""
        return self.correlator.active_players

    # ================================
    # Lifecycle
    # ================================

    async def connect(self, callback: ResultCallback | None = None) -> bool:
        """Connect to the configured player.

        Args:
            callback: Told "connected" once the channel is open, or "error"
                if it fails first.

        Returns:
            False if the attempt was abandoned (unsupported transport or no
            address configured), True otherwise.
        """
        if not await self.connection.connect():
            return False
        if callback is not None:
            await self.correlator.when_ready(callback)
        return True

    async def disconnect(self) -> None:
        """Close the connection. Pending callbacks are dropped silently."""
        await self.connection.disconnect()

    async def _check_reconnect(self) -> None:
        if self.connection.needs_reconnect():
            await self.connect()

    # ================================
    # Actions
    # ================================

    async def send_media(
        self, url: str, callback: ResultCallback | None = None
    ) -> bool:
        """Play a file or stream URL. Completes when the player starts."""
        await self._check_reconnect()
        return await self.correlator.send_request(
            PlayerOpenRequest.for_url(url), callback
        )

    async def send_message(
        self,
        title: str,
        message: str,
        image: NotificationImage | str = NotificationImage.INFO,
        display_time: int = DEFAULT_DISPLAY_TIME_MS,
        callback: ResultCallback | None = None,
    ) -> bool:
        """Show a notification on the player's screen."""
        await self._check_reconnect()
        request = ShowNotificationRequest(
            title=title, message=message, image=image, display_time=display_time
        )
        return await self.correlator.send_request(request, callback)

    async def send_stop(
        self, player_id: int | None = None, callback: ResultCallback | None = None
    ) -> bool:
        """Stop a player. Completes when the player reports it stopped.

        Without a player id, stops the player we last started. If we don't
        know of one, stops every active player instead.
        """
        await self._check_reconnect()
        if player_id is None:
            if self.correlator.player_id is None:
                return await self.stop_all_active_players(callback)
            player_id = self.correlator.player_id

        return await self.correlator.send_request(
            PlayerStopRequest(player_id=player_id), callback
        )

    async def send_rotate(
        self, player_id: int, callback: ResultCallback | None = None
    ) -> bool:
        await self._check_reconnect()
        return await self.correlator.send_request(
            PlayerRotateRequest(player_id=player_id), callback
        )

    async def get_all_active_players(
        self, callback: ResultCallback | None = None
    ) -> bool:
        """Refresh `active_players` from the player."""
        await self._check_reconnect()
        return await self.correlator.send_request(GetActivePlayersRequest(), callback)

    async def stop_all_active_players(
        self, callback: ResultCallback | None = None
    ) -> bool:
        """Stop every player that is currently active.

        Stops go out in list order without waiting on each other. Only the
        last one carries the callback. If listing the players fails, the
        callback is never called, so bound `call()` with a timeout.
        """

        async def on_players_listed(signal: Signal) -> None:
            if signal != Signal.OK:
                self.logger.error(f"Listing active players failed: {signal.value}")
                return

            ids = player_ids(self.correlator.active_players)
            if not ids:
                if callback is not None:
                    await self.correlator.deliver(callback, signal)
                return

            for index, player_id in enumerate(ids):
                is_last = index == len(ids) - 1
                await self.send_stop(player_id, callback if is_last else None)

        return await self.get_all_active_players(on_players_listed)

    # ================================
    # Awaiting results
    # ================================

    async def call(
        self,
        action: Callable[..., Awaitable[bool]],
        *args: Any,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> Signal:
        """Run an action and wait for the signal its callback receives.

        signal = await client.call(client.send_media, "http://host/a.mp3")

        Args:
            action: One of the client's action methods
            timeout: Give up waiting after this many seconds. The request
                itself stays in flight.

        Returns:
            The delivered signal, or Signal.ERROR at once if the action was
            abandoned (no address configured, unsupported transport).

        Raises:
            TimeoutError: If no signal arrived within the timeout
        """
        future: asyncio.Future[Signal] = asyncio.get_running_loop().create_future()

        def resolve(signal: Signal) -> None:
            if not future.done():
                future.set_result(Signal(signal))

        accepted = await action(*args, callback=resolve, **kwargs)
        if accepted is False:
            resolve(Signal.ERROR)
        return await asyncio.wait_for(future, timeout)
