"""Test support: in-memory transport and loop helpers."""

from __future__ import annotations

import asyncio
import json
from typing import Any


class RecordingTransport:
    """In-memory transport that records sent frames.

    Frames pushed with ``feed`` are returned by ``receive``; feeding None
    makes ``receive`` raise ConnectionError and feeding an exception makes
    it raise that exception.
    """

    def __init__(self) -> None:
        self.sent: list[str] = []
        self.closed = False
        self.fail_with: Exception | None = None
        self._inbound: asyncio.Queue[str | bytes | Exception | None] = (
            asyncio.Queue()
        )

    async def send(self, data: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(data)

    async def receive(self) -> str | bytes:
        data = await self._inbound.get()
        if data is None:
            msg = "closed"
            raise ConnectionError(msg)
        if isinstance(data, Exception):
            raise data
        return data

    async def close(self) -> None:
        self.closed = True

    def feed(self, data: str | bytes | Exception | None) -> None:
        self._inbound.put_nowait(data)

    def sent_json(self) -> list[Any]:
        return [json.loads(frame) for frame in self.sent]


async def settle() -> None:
    """Let scheduled send and handler tasks run to completion."""
    for _ in range(10):
        await asyncio.sleep(0)
