"""
Per-request deadline and cancellation token.

A Deadline is created once per request and threaded through every outbound
call. Callers ask it for the timeout to hand to their client library; the
value is the service's own cap or whatever is left of the request budget,
whichever is smaller.
"""

import logging
import threading
import time
from typing import Callable

from docqa.core.errors import RequestCancelledError, UpstreamTimeoutError

logger = logging.getLogger(__name__)


class CancellationToken:
    """Thread-safe flag a caller can set to abandon an in-flight request."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class Deadline:
    def __init__(
        self,
        seconds: float,
        token: CancellationToken | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._clock = clock
        self._expires_at = clock() + seconds
        self.token = token or CancellationToken()

    def remaining(self) -> float:
        return max(0.0, self._expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0.0

    def check(self, service: str) -> None:
        """Raise if the request was cancelled or its budget is spent."""
        if self.token.cancelled:
            raise RequestCancelledError(service, "request cancelled")
        if self.expired:
            logger.warning("[deadline] expired before calling %s", service)
            raise UpstreamTimeoutError(service, "request deadline exceeded")

    def timeout_for(self, service: str, cap: float) -> float:
        """Timeout (seconds) for the next call to `service`, never above `cap`."""
        self.check(service)
        return min(cap, self.remaining())
