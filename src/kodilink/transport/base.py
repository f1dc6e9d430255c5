from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any


@dataclass
class TransportMessage:
    """Container for messages with transport-specific metadata.

    Separates the JSON-RPC payload from transport details like the
    remote address and receive time.
    """

    payload: dict[str, Any]
    metadata: dict[str, Any]


class Transport(ABC):
    """Abstract duplex channel to the player.

    Handles the mechanics of opening a channel, sending and receiving
    JSON messages, and closing it, without knowledge of protocol semantics
    or request correlation.

    A transport instance carries one channel for its whole life:
    - Open it with open()
    - Send messages via send()
    - Receive messages by iterating over messages()

    The message iterator ends when the peer closes the channel cleanly and
    raises ConnectionError when the channel fails.
    """

    @classmethod
    def is_supported(cls) -> bool:
        """True if this kind of channel can be used in the current environment."""
        return True

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """True if the channel is open and ready to send."""

    @abstractmethod
    async def open(self, url: str) -> None:
        """Establish the channel.

        Args:
            url: Full address including scheme, e.g. "ws://10.0.0.5:9090"

        Raises:
            ConnectionError: If the channel cannot be established
        """

    @abstractmethod
    async def send(self, payload: dict[str, Any]) -> None:
        """Send one message.

        Args:
            payload: The JSON-RPC message to send

        Raises:
            ConnectionError: If the channel is closed or the send failed
        """

    @abstractmethod
    def messages(self) -> AsyncIterator[TransportMessage]:
        """Stream of incoming messages with transport-specific metadata.

        Yields messages as they arrive. Iterator ends when the channel closes.

        Yields:
            TransportMessage: Each incoming message with metadata

        Raises:
            ConnectionError: When the channel fails
            asyncio.CancelledError: When iteration is cancelled
        """

    @abstractmethod
    async def close(self) -> None:
        """Close the channel and stop message iteration."""
