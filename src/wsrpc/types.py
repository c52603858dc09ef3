"""Core type definitions for the JSON-RPC client."""

from __future__ import annotations

from abc import ABC
from collections.abc import Callable, Mapping
from typing import Any, Protocol, runtime_checkable

MethodTable = Mapping[str, Callable[[Any], Any]]


class RpcTarget(ABC):
    """Base class for objects whose methods the peer may invoke.

    Public methods defined on subclasses become local methods, keyed by
    their Python name. Methods starting with underscore are not exposed.

    Example:
        class Editor(RpcTarget):
            def highlight(self, params):
                return {"ok": True}

        client = JsonRpcClient(transport, Editor())
    """

    def method_table(self) -> dict[str, Callable[[Any], Any]]:
        """Collect the public callables of this instance.

        Returns:
            Mapping of method name to bound method
        """
        table: dict[str, Callable[[Any], Any]] = {}
        for name in dir(self):
            if name.startswith("_") or name == "method_table":
                continue
            value = getattr(self, name)
            if callable(value):
                table[name] = value
        return table


@runtime_checkable
class Transport(Protocol):
    """Protocol for message-oriented transports carrying text frames."""

    async def send(self, data: str) -> None:
        """Send one frame.

        Args:
            data: The frame text

        Raises:
            Exception: If sending fails
        """
        ...

    async def receive(self) -> str | bytes:
        """Receive one frame.

        Returns:
            The frame text, or bytes holding UTF-8 encoded text

        Raises:
            ConnectionError: If the connection is closed
        """
        ...

    async def close(self) -> None:
        """Close the transport connection."""
        ...
