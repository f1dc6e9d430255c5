"""
Base types for the player's JSON-RPC protocol.

Every message we exchange with the player is either a request we send
(`Player.Open`, `GUI.ShowNotification`, ...) or a notification the player
pushes at us (`Player.OnPlay`, `Player.OnStop`). Both carry a method name and
a `params` object; the models here keep the Python side snake_case and
translate to the player's field names on the wire.
"""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict

JSONRPC_VERSION = "2.0"

REQUEST_ID = 1
"""
Identifier attached to every outgoing request.

The client only ever has one request in flight, so replies are matched by
the last method sent rather than by id.
"""


class ProtocolModel(BaseModel):
    """Shared configuration for all protocol models."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        use_enum_values=True,
    )

    def to_protocol(self) -> dict[str, Any]:
        """Convert to the player's wire representation."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    @classmethod
    def from_protocol(cls, data: dict[str, Any]) -> Self:
        """Build from the player's wire representation."""
        return cls.model_validate(data)


class _MethodMessage(ProtocolModel):
    method: str

    def to_protocol(self) -> dict[str, Any]:
        params = self.model_dump(
            by_alias=True, exclude_none=True, exclude={"method"}, mode="json"
        )
        return {"method": self.method, "params": params}

    @classmethod
    def from_protocol(cls, data: dict[str, Any]) -> Self:
        params = data.get("params") or {}
        if not isinstance(params, dict):
            # Let pydantic reject it with a ValidationError.
            return cls.model_validate(params)
        return cls.model_validate({**params, "method": data["method"]})


class Request(_MethodMessage):
    """
    A call we make on the player.

    Subclasses pin `method` with a Literal default and declare their params
    as regular fields.
    """


class Notification(_MethodMessage):
    """
    An event the player pushes without being asked.
    """
