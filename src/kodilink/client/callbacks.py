import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class CallbackManager:
    """Manages callbacks for connection lifecycle changes.

    These are for whoever embeds the client (a UI, a service) and are
    separate from the per-request result callbacks.
    """

    def __init__(self):
        # Direct callback assignment
        self.unsupported_handler: Callable[[str], Awaitable[None]] | None = None
        self.connected_handler: Callable[[str], Awaitable[None]] | None = None
        self.disconnected_handler: Callable[[str], Awaitable[None]] | None = None

    async def call_unsupported(self, message: str) -> None:
        """Tell the user the channel type can't be used here."""
        if self.unsupported_handler:
            try:
                await self.unsupported_handler(message)
            except Exception as e:
                logger.error(f"Unsupported callback failed: {e}")

    async def call_connected(self, url: str) -> None:
        """Invoke connected callback with the player URL."""
        if self.connected_handler:
            try:
                await self.connected_handler(url)
            except Exception as e:
                logger.error(f"Connected callback failed: {e}")

    async def call_disconnected(self, url: str) -> None:
        """Invoke disconnected callback with the URL of the lost connection."""
        if self.disconnected_handler:
            try:
                await self.disconnected_handler(url)
            except Exception as e:
                logger.error(f"Disconnected callback failed: {e}")
