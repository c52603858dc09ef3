"""Pending-call table for outstanding outbound calls."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from wsrpc.error import RpcError


@dataclass
class PendingCall:
    """Entry in the pending-call table."""

    call_id: int
    on_success: Callable[[Any], None]
    on_failure: Callable[[BaseException], None]


_UNMATCHABLE = object()


def _key(call_id: Any) -> Any:
    # True == 1 in Python; keep boolean ids from matching integer ids
    if isinstance(call_id, bool):
        return (bool, call_id)
    try:
        hash(call_id)
    except TypeError:
        return _UNMATCHABLE
    return call_id


class PendingCallTable:
    """Tracks calls that are waiting for a response, keyed by call id.

    Entries have no expiry. They leave the table when resolved, rejected,
    discarded by their caller, or rejected wholesale at teardown.
    """

    def __init__(self) -> None:
        self._entries: dict[Any, PendingCall] = {}

    def add(
        self,
        call_id: int,
        on_success: Callable[[Any], None],
        on_failure: Callable[[BaseException], None],
    ) -> None:
        """Register a new pending call."""
        if _key(call_id) in self._entries:
            msg = f"Call id {call_id} is already pending"
            raise ValueError(msg)
        self._entries[_key(call_id)] = PendingCall(call_id, on_success, on_failure)

    def resolve(self, call_id: Any, result: Any) -> None:
        """Complete a pending call with its result.

        Raises:
            RpcError: UNKNOWN_RESPONSE_ID if no call with this id is pending
        """
        entry = self._entries.pop(_key(call_id), None)
        if entry is None:
            msg = f"Unknown response id: {call_id}."
            raise RpcError.unknown_response_id(msg, call_id)
        entry.on_success(result)

    def reject(self, call_id: Any, error: BaseException) -> bool:
        """Fail a pending call. Returns True if a call was pending."""
        entry = self._entries.pop(_key(call_id), None)
        if entry is None:
            return False
        entry.on_failure(error)
        return True

    def discard(self, call_id: Any) -> bool:
        """Drop a pending call without completing it."""
        return self._entries.pop(_key(call_id), None) is not None

    def reject_all(self, error: BaseException) -> int:
        """Fail every pending call. Returns how many were rejected."""
        entries = list(self._entries.values())
        self._entries.clear()
        for entry in entries:
            entry.on_failure(error)
        return len(entries)

    def ids(self) -> list[int]:
        """Return the pending call ids in registration order."""
        return [entry.call_id for entry in self._entries.values()]

    def __len__(self) -> int:
        return len(self._entries)
