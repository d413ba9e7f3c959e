"""Per-key call coalescing for concurrent identical requests."""

from __future__ import annotations

import threading
from typing import Callable, Dict, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


class _Call(Generic[T]):
    def __init__(self) -> None:
        self.done = threading.Event()
        self.result: Optional[T] = None
        self.error: Optional[BaseException] = None


class SingleFlight(Generic[T]):
    """
    Run at most one ``fn`` per key at a time.

    Callers arriving while a call for the same key is in flight block until it
    finishes and receive the same result (or the same exception). The key is
    forgotten as soon as the call completes, so later callers run ``fn`` again.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._calls: Dict[str, _Call[T]] = {}

    def do(self, key: str, fn: Callable[[], T], *, timeout: Optional[float] = None) -> Tuple[T, bool]:
        """Return ``(result, shared)``; ``shared`` is True for callers that waited."""
        with self._lock:
            call = self._calls.get(key)
            if call is not None:
                leader = False
            else:
                call = _Call()
                self._calls[key] = call
                leader = True

        if not leader:
            if not call.done.wait(timeout):
                raise TimeoutError(f"Timed out waiting for in-flight call {key!r}")
            if call.error is not None:
                raise call.error
            return call.result, True  # type: ignore[return-value]

        try:
            call.result = fn()
        except BaseException as exc:
            call.error = exc
            raise
        finally:
            with self._lock:
                self._calls.pop(key, None)
            call.done.set()
        return call.result, False

    def in_flight(self, key: str) -> bool:
        with self._lock:
            return key in self._calls
