"""
Request coalescing for concurrent identical upstream calls.

Two requests for the same player or game arriving together share one set
of Steam calls instead of issuing duplicates.
"""
import threading
import time
import logging
from typing import Dict, Optional, Callable, Any
from dataclasses import dataclass, field

logger = logging.getLogger("cache.coalescer")


@dataclass
class InFlightRequest:
    """An upstream call in progress and the callers waiting on it."""
    done: threading.Event = field(default_factory=threading.Event)
    result: Optional[Any] = None
    error: Optional[Exception] = None
    started_at: float = field(default_factory=time.monotonic)
    waiters: int = 0


class RequestCoalescer:
    """
    The first caller for a key runs ``fetch_fn``; later callers for the same
    key block on its completion and receive the same result or exception.
    """

    def __init__(self, timeout: float = 30.0):
        self._in_flight: Dict[str, InFlightRequest] = {}
        self._lock = threading.Lock()
        self._timeout = timeout
        self._coalesced = 0

    def get_or_fetch(self, cache_key: str, fetch_fn: Callable[[], Any]) -> Any:
        """
        Join an in-flight call for ``cache_key`` or start one.

        Raises:
            TimeoutError: Waited longer than the coalescer timeout
            Exception: Whatever ``fetch_fn`` raised
        """
        with self._lock:
            request = self._in_flight.get(cache_key)
            owner = request is None
            if owner:
                request = InFlightRequest()
                self._in_flight[cache_key] = request
            else:
                request.waiters += 1
                self._coalesced += 1

        if owner:
            try:
                request.result = fetch_fn()
            except Exception as e:
                request.error = e
                logger.warning(f"Fetch failed for {cache_key}: {e}")
            finally:
                request.done.set()
                with self._lock:
                    self._in_flight.pop(cache_key, None)
        else:
            logger.debug(f"Joined in-flight fetch for {cache_key} (waiters: {request.waiters})")
            if not request.done.wait(timeout=self._timeout):
                logger.error(f"Timeout waiting for coalesced request: {cache_key}")
                raise TimeoutError(f"Request for {cache_key} timed out after {self._timeout}s")

        if request.error is not None:
            raise request.error
        return request.result

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "active_requests": len(self._in_flight),
                "coalesced_total": self._coalesced,
            }
