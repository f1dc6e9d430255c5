from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any


class Signal(str, Enum):
    """What a result callback is told."""

    OK = "ok"
    ERROR = "error"
    CONNECTED = "connected"


ResultCallback = Callable[[Signal], Awaitable[Any] | Any]


@dataclass
class PendingRequest:
    """The one request the player hasn't answered yet."""

    method: str
    callback: ResultCallback | None = None


class RequestTracker:
    """Tracks who gets told when something completes.

    There are two kinds of waiters:
    - the pending request, set when a request goes out on an open connection
    - the ready queue, callbacks of requests issued before the connection
      was open. Those requests were never sent; the callbacks only learn
      that the connection is up (or that it failed).

    A completion goes to the pending request's callback if there is one,
    otherwise to everything in the ready queue, in registration order.
    """

    def __init__(self) -> None:
        self._pending: PendingRequest | None = None
        self._ready: deque[ResultCallback] = deque()

    @property
    def pending(self) -> PendingRequest | None:
        return self._pending

    @property
    def last_action(self) -> str | None:
        """Method of the request waiting for completion, if any."""
        return self._pending.method if self._pending is not None else None

    @property
    def ready_callbacks(self) -> tuple[ResultCallback, ...]:
        return tuple(self._ready)

    def track_request(
        self, method: str, callback: ResultCallback | None = None
    ) -> None:
        """Record a request that was just sent, replacing any previous one."""
        self._pending = PendingRequest(method=method, callback=callback)

    def enqueue_ready(self, callback: ResultCallback) -> None:
        """Queue a callback to run once the connection is open."""
        self._ready.append(callback)

    def take_delivery_targets(self) -> list[ResultCallback]:
        """Clear the pending request and return the callbacks to notify.

        The pending callback wins when set; otherwise the ready queue is
        drained. Either way nothing is left tracked afterwards, so a
        callback that issues a new request starts from a clean slate.
        """
        pending = self._pending
        self._pending = None

        if pending is not None and pending.callback is not None:
            return [pending.callback]

        targets = list(self._ready)
        self._ready.clear()
        return targets

    def clear(self) -> None:
        """Forget everything without notifying anyone."""
        self._pending = None
        self._ready.clear()
