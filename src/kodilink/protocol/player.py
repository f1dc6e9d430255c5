"""
Playback control on the player.

## Lifecycle of a playback session

1. **Client opens media** - `Player.Open` with a file or stream URL
2. **Player starts** - pushes `Player.OnPlay` carrying the new player id
3. **Client stops it** - `Player.Stop` with that player id
4. **Player confirms** - pushes `Player.OnStop`

The direct JSON-RPC reply to `Player.Open` and `Player.Stop` only says the
call was accepted. The push notifications are what tell us playback actually
started or stopped, so they are what completes those requests.

When the client doesn't know which player is running, it asks with
`Player.GetActivePlayers` and stops each one in turn.
"""

from typing import Any, Literal

from pydantic import Field

from kodilink.protocol.base import Notification, ProtocolModel, Request

PLAYER_OPEN = "Player.Open"
PLAYER_STOP = "Player.Stop"
PLAYER_ROTATE = "Player.Rotate"
PLAYER_GET_ACTIVE_PLAYERS = "Player.GetActivePlayers"
PLAYER_ON_PLAY = "Player.OnPlay"
PLAYER_ON_STOP = "Player.OnStop"


class MediaItem(ProtocolModel):
    """
    Something the player can open.
    """

    file: str
    """
    Path or URL of the media, passed to the player untouched.
    """


class ActivePlayer(ProtocolModel):
    """
    One entry of the `Player.GetActivePlayers` result.
    """

    player_id: int = Field(alias="playerid")
    type: str | None = None
    """
    "audio", "video" or "picture".
    """

    player_type: str | None = Field(default=None, alias="playertype")


class PlayerOpenRequest(Request):
    """
    Start playing a media item.
    """

    method: Literal["Player.Open"] = PLAYER_OPEN
    item: MediaItem

    @classmethod
    def for_url(cls, url: str) -> "PlayerOpenRequest":
        return cls(item=MediaItem(file=url))


class PlayerStopRequest(Request):
    method: Literal["Player.Stop"] = PLAYER_STOP
    player_id: int = Field(alias="playerid")


class PlayerRotateRequest(Request):
    """
    Rotate the picture shown by a picture player.
    """

    method: Literal["Player.Rotate"] = PLAYER_ROTATE
    player_id: int = Field(alias="playerid")


class GetActivePlayersRequest(Request):
    method: Literal["Player.GetActivePlayers"] = PLAYER_GET_ACTIVE_PLAYERS


class PlayerRef(ProtocolModel):
    player_id: int = Field(alias="playerid")
    speed: float | None = None


class PlayerEventData(ProtocolModel):
    player: PlayerRef
    item: dict[str, Any] | None = None


class PlayerOnPlayNotification(Notification):
    """
    Pushed when a player starts playback.

    Wire format: {"method": "Player.OnPlay",
                  "params": {"data": {"player": {"playerid": 1}, ...}, ...}}
    """

    method: Literal["Player.OnPlay"] = PLAYER_ON_PLAY
    data: PlayerEventData
    sender: str | None = None

    @property
    def player_id(self) -> int:
        return self.data.player.player_id


class PlayerOnStopNotification(Notification):
    """
    Pushed when playback stops.

    The payload doesn't reliably name the player, so only the method matters.
    """

    method: Literal["Player.OnStop"] = PLAYER_ON_STOP
    data: dict[str, Any] | None = None
    sender: str | None = None


def player_ids(active_players: list[Any]) -> list[int]:
    """Pull player ids out of a raw `Player.GetActivePlayers` result.

    The player answers with objects ({"playerid": 1, "type": "video"}); bare
    ids are accepted too.
    """
    ids = []
    for entry in active_players:
        if isinstance(entry, dict):
            ids.append(ActivePlayer.from_protocol(entry).player_id)
        else:
            ids.append(entry)
    return ids
