"""Cancellation token for order requests.

A caller hands one to the fulfillment engine; the engine checks it
before opening a transaction and again right before commit.  Thread-safe:
``cancel()`` may be called from any thread.
"""

from __future__ import annotations

import threading
import time

from cafe.domain.exceptions import OperationCancelledError


class CancelToken:

    def __init__(self, timeout: float | None = None) -> None:
        self._event = threading.Event()
        self._reason: str | None = None
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    @property
    def is_cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def reason(self) -> str | None:
        if self._event.is_set():
            return self._reason
        if self.is_cancelled:
            return "deadline exceeded"
        return None

    def cancel(self, reason: str = "cancelled by caller") -> None:
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self.is_cancelled:
            raise OperationCancelledError(f"Request cancelled: {self.reason}")
