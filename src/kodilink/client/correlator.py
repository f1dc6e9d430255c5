"""Matches what the player sends back to the request we're waiting on.

Only one request is ever in flight. The correlator remembers its method and
callback, runs each incoming message through `interpret`, and delivers the
completion signal exactly once.
"""

import inspect
import logging
from typing import Any

from kodilink.client.connection import ChannelEvent, Connection, ConnectionPhase
from kodilink.client.interpreter import Outcome, OutcomeKind, interpret
from kodilink.protocol.base import Request
from kodilink.protocol.jsonrpc import JSONRPCRequest
from kodilink.shared.request_tracker import RequestTracker, ResultCallback, Signal


class RequestCorrelator:
    """Tracks the request in flight and the player state it implies."""

    def __init__(self, connection: Connection, tracker: RequestTracker | None = None):
        self.connection = connection
        self.tracker = tracker or RequestTracker()
        self.player_id: int | None = None
        self.active_players: list[Any] = []
        self.logger = logging.getLogger("kodilink.client.correlator")
        connection.attach(self)

    @property
    def last_action(self) -> str | None:
        return self.tracker.last_action

    # ================================
    # Send requests
    # ================================

    async def send_request(
        self, request: Request, callback: ResultCallback | None = None
    ) -> bool:
        """Send a request, or park its callback until the connection is open.

        - No transport: nothing happens.
        - Transport still opening: the request is dropped. The callback is
          queued and will only hear "connected" (or "error").
        - Open: the request goes out and becomes the one in flight.

        Returns:
            False if there was no transport, so the callback will never run.
        """
        if not self.connection.has_transport:
            return False

        if self.connection.phase is not ConnectionPhase.CONNECTED:
            self.logger.debug(
                f"Connection not ready, dropping {request.method} request"
            )
            if callback is not None:
                self.tracker.enqueue_ready(callback)
            return True

        self.tracker.track_request(request.method, callback)
        wire = JSONRPCRequest.from_request(request).to_wire()
        try:
            await self.connection.send(wire)
        except ConnectionError as e:
            self.logger.warning(f"Failed to send {request.method}: {e}")
            await self.connection.fail(e)
        return True

    async def when_ready(self, callback: ResultCallback) -> None:
        """Run callback with "connected" once the connection is open."""
        if self.connection.phase is ConnectionPhase.CONNECTED:
            await self.deliver(callback, Signal.CONNECTED)
            return
        self.tracker.enqueue_ready(callback)

    # ================================
    # Channel events
    # ================================

    async def on_open(self) -> None:
        await self.complete(Signal.CONNECTED)

    async def on_message(self, payload: dict[str, Any]) -> None:
        outcome = interpret(
            self.connection.phase, self.tracker.last_action, payload, self.player_id
        )
        if not outcome.completes:
            self.logger.debug(
                f"Ignoring {payload.get('method') or 'reply'} "
                f"while waiting on {self.tracker.last_action}"
            )
            return

        self._apply(outcome)
        signal = Signal.OK if outcome.kind is OutcomeKind.COMPLETE_OK else Signal.ERROR
        await self.complete(signal)

    def on_channel_lost(self) -> list[ResultCallback]:
        """Reset everything and return whoever was waiting on the channel."""
        targets = self.tracker.take_delivery_targets()
        self.on_reset()
        return targets

    async def on_channel_down(
        self, event: ChannelEvent, waiting: list[ResultCallback]
    ) -> None:
        """Tell whoever was waiting on the lost channel that it failed."""
        self.logger.debug(f"Channel {event.value}, failing {len(waiting)} callback(s)")
        for callback in waiting:
            await self.deliver(callback, Signal.ERROR)

    def on_reset(self) -> None:
        self.tracker.clear()
        self.player_id = None
        self.active_players = []

    # ================================
    # Completion
    # ================================

    async def complete(self, signal: Signal) -> None:
        """Deliver a completion.

        Goes to the pending request's callback if one is set, otherwise to
        every queued ready callback in order.
        """
        for callback in self.tracker.take_delivery_targets():
            await self.deliver(callback, signal)

    def _apply(self, outcome: Outcome) -> None:
        if outcome.player_id is not None:
            self.player_id = outcome.player_id
        if outcome.clear_player_id:
            self.player_id = None
        if outcome.active_players is not None:
            self.active_players = outcome.active_players

    async def deliver(self, callback: ResultCallback, signal: Signal) -> None:
        try:
            result = callback(signal)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            self.logger.error(f"Result callback failed on '{signal.value}': {e}")
