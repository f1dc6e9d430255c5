from dataclasses import dataclass
from typing import Any

from kodilink.protocol.base import JSONRPC_VERSION, REQUEST_ID, Request


@dataclass
class JSONRPCRequest:
    """A request wrapped in the JSON-RPC 2.0 envelope."""

    request: Request
    id: int | str = REQUEST_ID
    jsonrpc: str = JSONRPC_VERSION

    @classmethod
    def from_request(
        cls, request: Request, request_id: int | str = REQUEST_ID
    ) -> "JSONRPCRequest":
        return cls(request=request, id=request_id)

    @property
    def method(self) -> str:
        return self.request.method

    def to_wire(self) -> dict[str, Any]:
        """Full message ready for serialization.

        Wire format: {"jsonrpc": "2.0", "id": 1, "method": ..., "params": {...}}
        """
        return {"jsonrpc": self.jsonrpc, "id": self.id, **self.request.to_protocol()}
