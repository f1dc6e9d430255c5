"""
Where the client finds the player.

The player's address lives in a key-value store owned by whoever embeds the
client (a settings page, environment variables, a test). It is read on every
action, so changing it in the store is enough to make the client reconnect.

Usage:
    store = MemoryAddressStore({"kodiAddress": "192.168.0.20"})
    config = ClientConfig()
    build_connection_url(store.get(config.address_key))  # "ws://192.168.0.20:9090"
"""

import os
import re
from dataclasses import dataclass
from typing import Protocol

DEFAULT_ADDRESS_KEY = "kodiAddress"
DEFAULT_PORT = "9090"
DEFAULT_SCHEME = "ws://"


@dataclass
class ClientConfig:
    address_key: str = DEFAULT_ADDRESS_KEY
    default_port: str = DEFAULT_PORT
    scheme: str = DEFAULT_SCHEME


class AddressStore(Protocol):
    def get(self, key: str) -> str | None: ...


class MemoryAddressStore:
    """Dict-backed store, for embedding and tests."""

    def __init__(self, values: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(values or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str | None) -> None:
        if value is None:
            self._values.pop(key, None)
        else:
            self._values[key] = value


class EnvironmentAddressStore:
    """Reads values from environment variables.

    Keys are mapped to upper snake case: "kodiAddress" -> KODI_ADDRESS.
    Call dotenv's load_dotenv() first to pick up a .env file.
    """

    def __init__(self, prefix: str = "") -> None:
        self.prefix = prefix

    def variable_name(self, key: str) -> str:
        snake = re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", key)
        return f"{self.prefix}{snake.upper()}"

    def get(self, key: str) -> str | None:
        return os.getenv(self.variable_name(key))


def build_connection_url(
    address: str, default_port: str = DEFAULT_PORT, scheme: str = DEFAULT_SCHEME
) -> str:
    """Turn a stored address into the URL to connect to.

    build_connection_url("10.0.0.5")       -> "ws://10.0.0.5:9090"
    build_connection_url("10.0.0.5:8080")  -> "ws://10.0.0.5:8080"
    """
    if ":" not in address:
        return f"{scheme}{address}:{default_port}"
    return f"{scheme}{address}"


def resolve_connection_url(store: AddressStore, config: ClientConfig) -> str | None:
    """Read the address from the store and build the URL.

    Returns None if no address is configured.
    """
    address = store.get(config.address_key)
    if not address:
        return None
    return build_connection_url(address, config.default_port, config.scheme)
