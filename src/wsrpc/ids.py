"""Call id allocation.

Every outbound call gets the next integer from a per-client counter that
starts at 0. Ids are never reused or decremented.
"""

from __future__ import annotations

import threading
from typing import Final


class IdAllocator:
    """Thread-safe allocator for outbound call ids."""

    def __init__(self, start: int = 0) -> None:
        self._next: int = start
        self._lock: Final = threading.Lock()

    def allocate(self) -> int:
        """Allocate the next call id."""
        with self._lock:
            call_id = self._next
            self._next += 1
            return call_id
