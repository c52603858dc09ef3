"""Wire format for JSON-RPC 2.0 text frames.

Each inbound object is turned into one of four tagged variants by
``parse_message``. Routing then matches on the variant type instead of
probing optional fields.

https://www.jsonrpc.org/specification
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from wsrpc.error import RpcError

JSONRPC_VERSION = "2.0"

# Code used in error responses sent when a local handler fails
INTERNAL_ERROR = -32603


@dataclass(frozen=True)
class WireRequest:
    """Request: {"jsonrpc": "2.0", "method": ..., "params": ..., "id": ...}"""

    method: str
    params: Any = None
    id: Any = None

    def to_json(self) -> dict[str, Any]:
        """Convert to a JSON object."""
        result: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": self.method}
        if self.params is not None:
            result["params"] = self.params
        result["id"] = self.id
        return result

    @staticmethod
    def from_json(obj: dict[str, Any]) -> WireRequest:
        """Parse from a JSON object that has an ``id`` member."""
        return WireRequest(_method_of(obj), obj.get("params"), obj["id"])


@dataclass(frozen=True)
class WireNotification:
    """Notification: a request without an ``id`` member."""

    method: str
    params: Any = None

    def to_json(self) -> dict[str, Any]:
        """Convert to a JSON object."""
        result: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": self.method}
        if self.params is not None:
            result["params"] = self.params
        return result

    @staticmethod
    def from_json(obj: dict[str, Any]) -> WireNotification:
        """Parse from a JSON object."""
        return WireNotification(_method_of(obj), obj.get("params"))


@dataclass(frozen=True)
class WireResponse:
    """Response: {"jsonrpc": "2.0", "result": ..., "id": ...}"""

    result: Any
    id: Any = None

    def to_json(self) -> dict[str, Any]:
        """Convert to a JSON object."""
        return {"jsonrpc": JSONRPC_VERSION, "result": self.result, "id": self.id}

    @staticmethod
    def from_json(obj: dict[str, Any]) -> WireResponse:
        """Parse from a JSON object."""
        return WireResponse(obj["result"], obj.get("id"))


@dataclass(frozen=True)
class WireErrorResponse:
    """Error response: {"jsonrpc": "2.0", "error": ..., "id": ...}

    ``raw`` keeps the object exactly as received so listeners see every
    member the peer sent.
    """

    error: Any
    id: Any = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False)

    def to_json(self) -> dict[str, Any]:
        """Convert to a JSON object."""
        return {"jsonrpc": JSONRPC_VERSION, "error": self.error, "id": self.id}

    @staticmethod
    def from_json(obj: dict[str, Any]) -> WireErrorResponse:
        """Parse from a JSON object."""
        return WireErrorResponse(obj["error"], obj.get("id"), obj)


WireMessage = WireRequest | WireNotification | WireResponse | WireErrorResponse


def _method_of(obj: dict[str, Any]) -> str:
    method = obj["method"]
    if not isinstance(method, str):
        msg = f"Method name must be a string, got {type(method).__name__}"
        raise RpcError.invalid_message(msg, obj)
    return method


def decode_frame(data: str | bytes) -> list[Any]:
    """Decode one transport frame into the list of objects it carries.

    A batch frame yields its elements in order. Any other JSON value yields
    a single-element list.

    Raises:
        RpcError: PARSE_ERROR if the frame is not valid JSON
    """
    try:
        value = json.loads(data)
    except ValueError as e:
        msg = f"Parse error: {e}"
        raise RpcError.parse_error(msg, data) from e

    if isinstance(value, list):
        return value
    return [value]


def parse_message(obj: Any) -> WireMessage:
    """Classify a decoded object by the members it carries.

    Precedence is ``result``, then ``method``, then ``error``.

    Raises:
        RpcError: INVALID_MESSAGE if the object matches no message shape
    """
    if isinstance(obj, dict):
        if "result" in obj:
            return WireResponse.from_json(obj)
        if "method" in obj:
            if "id" in obj:
                return WireRequest.from_json(obj)
            return WireNotification.from_json(obj)
        if "error" in obj:
            return WireErrorResponse.from_json(obj)

    msg = "Invalid message received."
    raise RpcError.invalid_message(msg, obj)


def serialize_message(message: WireMessage) -> str:
    """Serialize a message to compact JSON text."""
    return json.dumps(message.to_json(), separators=(",", ":"))
