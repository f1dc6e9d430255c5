"""Decides what an incoming message means for the request in flight.

The player doesn't tie its push notifications to the request that caused
them, and every request goes out with the same id. What a message means
therefore depends on what we last asked for:

- after `Player.Open`, the request is done once `Player.OnPlay` arrives
- after `Player.Stop`, the request is done once `Player.OnStop` arrives
- after anything else, the plain JSON-RPC reply completes it

Everything that doesn't fit is ignored. It's usually an event for something
else, or a reply we're not waiting on. Failures only ever come from the
connection dropping, never from a message.

`interpret` is a pure function so every combination can be checked without
a connection.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import ValidationError

from kodilink.client.connection import ConnectionPhase
from kodilink.protocol.player import (
    PLAYER_GET_ACTIVE_PLAYERS,
    PLAYER_ON_PLAY,
    PLAYER_ON_STOP,
    PLAYER_OPEN,
    PLAYER_STOP,
    PlayerOnPlayNotification,
    PlayerOnStopNotification,
)
from kodilink.shared.message_parser import MessageParser

_parser = MessageParser()


class OutcomeKind(Enum):
    IGNORE = "ignore"
    COMPLETE_OK = "complete_ok"
    COMPLETE_ERROR = "complete_error"


@dataclass(frozen=True)
class Outcome:
    """What to do with a message, and the state it carries."""

    kind: OutcomeKind
    player_id: int | None = None
    """Player that just started, to remember as the current one."""

    clear_player_id: bool = False
    """The current player stopped."""

    active_players: list[Any] | None = None
    """Raw `Player.GetActivePlayers` result."""

    @classmethod
    def ignore(cls) -> "Outcome":
        return cls(kind=OutcomeKind.IGNORE)

    @classmethod
    def ok(cls, **data: Any) -> "Outcome":
        return cls(kind=OutcomeKind.COMPLETE_OK, **data)

    @classmethod
    def error(cls) -> "Outcome":
        return cls(kind=OutcomeKind.COMPLETE_ERROR)

    @property
    def completes(self) -> bool:
        return self.kind is not OutcomeKind.IGNORE


def interpret(
    phase: ConnectionPhase,
    last_action: str | None,
    payload: dict[str, Any],
    current_player_id: int | None = None,
) -> Outcome:
    """Interpret one incoming message.

    Args:
        phase: Connection phase when the message arrived
        last_action: Method of the request in flight, or None
        payload: Decoded JSON-RPC message
        current_player_id: Player the client last saw start, if any

    Returns:
        The outcome. Never raises.
    """
    if phase is not ConnectionPhase.CONNECTED or last_action is None:
        return Outcome.ignore()

    method = None
    if _parser.is_valid_notification(payload):
        method = payload["method"]

    if last_action == PLAYER_OPEN:
        if method == PLAYER_ON_STOP:
            # The previous item stopping shows up before our OnPlay. It only
            # settles the request if we already know which player is ours.
            if current_player_id is not None and _is_on_stop(payload):
                return Outcome.ok()
            return Outcome.ignore()
        if method != PLAYER_ON_PLAY:
            return Outcome.ignore()
        try:
            notification = PlayerOnPlayNotification.from_protocol(payload)
        except ValidationError:
            return Outcome.ignore()
        return Outcome.ok(player_id=notification.player_id)

    if last_action == PLAYER_STOP:
        if method != PLAYER_ON_STOP or not _is_on_stop(payload):
            return Outcome.ignore()
        return Outcome.ok(clear_player_id=True)

    if not _parser.is_reply_to_request(payload):
        return Outcome.ignore()

    result = payload["result"]
    if last_action == PLAYER_GET_ACTIVE_PLAYERS:
        if not isinstance(result, list):
            return Outcome.ignore()
        return Outcome.ok(active_players=list(result))

    if result is True or result == "OK":
        return Outcome.ok()
    return Outcome.ignore()


def _is_on_stop(payload: dict[str, Any]) -> bool:
    try:
        PlayerOnStopNotification.from_protocol(payload)
    except ValidationError:
        return False
    return True
