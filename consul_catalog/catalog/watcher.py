"""
Blocking watch loop for catalog endpoints.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterator, Optional

from consul_catalog.catalog.models import CatalogResult, QueryOptions
from consul_catalog.common.catalog_protocol import CatalogEndpoint
from consul_catalog.common.exceptions import CatalogError

if TYPE_CHECKING:
    from consul_catalog.catalog.client import CatalogClient

logger = logging.getLogger(__name__)


class WatchEventType(str, Enum):
    """Kind of watch event."""

    CHANGE = "change"
    ERROR = "error"


@dataclass(frozen=True)
class WatchEvent:
    """A change notification or a failed iteration of the watch loop."""

    type: WatchEventType
    result: Optional[CatalogResult] = None
    error: Optional[CatalogError] = None
    # Consecutive failed iterations, including this one
    attempt: int = 0


class ExponentialBackoff:
    """Delay before the next query after consecutive failures."""

    def __init__(
        self,
        initial_delay: float = 1.0,
        max_delay: float = 60.0,
        backoff_factor: float = 2.0,
    ):
        """
        Args:
            initial_delay: Delay after the first failure (seconds)
            max_delay: Upper bound on the delay (seconds)
            backoff_factor: Multiplier applied per additional failure
        """
        if initial_delay < 0 or max_delay < 0:
            raise ValueError("Backoff delays must be >= 0")
        if backoff_factor < 1:
            raise ValueError("backoff_factor must be >= 1")
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.backoff_factor = backoff_factor

    def __call__(self, attempt: int) -> float:
        delay = self.initial_delay
        for _ in range(max(attempt - 1, 0)):
            # Stop growing once the delay is capped or can no longer change
            if delay >= self.max_delay or delay == 0 or self.backoff_factor == 1:
                break
            delay = min(delay * self.backoff_factor, self.max_delay)
        return min(delay, self.max_delay)


class CatalogWatcher:
    """
    Observe one catalog endpoint through blocking queries.

    Each query carries the last observed modify index, so the server holds
    it open until the endpoint changes or the wait time runs out. A result
    whose index equals the last one is a timeout without change and is
    re-issued straight away. Failures are reported once per iteration and
    followed by a pause taken from the backoff policy; whether to keep going
    is up to the caller.

    Watchers share nothing but the client's HTTP session, so several of them
    may run concurrently against one client.
    """

    def __init__(
        self,
        client: "CatalogClient",
        endpoint: CatalogEndpoint,
        name: Optional[str] = None,
        *,
        datacenter: Optional[str] = None,
        wait_time: Optional[float] = None,
        backoff: Optional[Callable[[int], float]] = None,
        stop_event: Optional[threading.Event] = None,
    ):
        """
        Initialize watcher.

        Args:
            client: Client issuing the queries
            endpoint: Catalog endpoint to watch
            name: Resource name for endpoints addressed by name
            datacenter: Datacenter override for every query
            wait_time: Blocking wait per query in seconds (client default if unset)
            backoff: Maps the consecutive failure count to a pause in seconds
            stop_event: Event used for cooperative cancellation
        """
        self.client = client
        self.endpoint = CatalogEndpoint(endpoint)
        self.name = name
        self.datacenter = datacenter
        self.wait_time = wait_time
        self.backoff = backoff or ExponentialBackoff()
        self._stop_event = stop_event or threading.Event()
        self._last_index = 0
        self._primed = False
        self.thread: Optional[threading.Thread] = None

    @property
    def last_index(self) -> int:
        """Modify index of the last change observed (0 before the first one)."""
        return self._last_index

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def _next_wait_index(self) -> int:
        # An index of 0 would turn every later query into a non-blocking one
        if self._primed and self._last_index == 0:
            return 1
        return self._last_index

    def poll(self) -> Optional[CatalogResult]:
        """
        Run one blocking query.

        Returns:
            Optional[CatalogResult]: The result if it is the first one or its
            index moved, None if the query timed out without change

        Raises:
            CatalogError: If the query fails
        """
        options = QueryOptions(
            datacenter=self.datacenter,
            wait_index=self._next_wait_index(),
            wait_time=self.wait_time,
        )
        result = self.client.query(self.endpoint, self.name, options)
        new_index = result.meta.modify_index

        if self._primed and new_index == self._last_index:
            logger.debug(f"No change on {self.endpoint.value} (index {new_index})")
            return None

        if new_index < self._last_index:
            logger.info(
                f"Index of {self.endpoint.value} went back from {self._last_index} to {new_index}"
            )

        self._primed = True
        self._last_index = new_index
        return result

    def events(self) -> Iterator[WatchEvent]:
        """
        Yield change and error events until stopped.

        Cancellation is checked before each query; a query already sent is
        allowed to complete.
        """
        failures = 0
        while not self._stop_event.is_set():
            try:
                result = self.poll()
            except CatalogError as e:
                failures += 1
                logger.warning(
                    f"Watch of {self.endpoint.value} failed (attempt {failures}): {e}"
                )
                yield WatchEvent(type=WatchEventType.ERROR, error=e, attempt=failures)

                delay = self.backoff(failures)
                if delay > 0:
                    logger.debug(f"Retrying in {delay:.1f}s...")
                if self._stop_event.wait(delay):
                    break
                continue

            failures = 0
            if result is not None:
                logger.info(
                    f"Change on {self.endpoint.value} observed at index {result.modify_index}"
                )
                yield WatchEvent(type=WatchEventType.CHANGE, result=result)

        logger.debug(f"Watch of {self.endpoint.value} stopped")

    def run(
        self,
        on_change: Callable[[CatalogResult], None],
        on_error: Optional[Callable[[CatalogError, int], bool]] = None,
    ) -> None:
        """
        Watch until stopped, dispatching events to callbacks.

        Args:
            on_change: Called with every changed result
            on_error: Called with the error and the consecutive failure count;
                a falsy return value stops the watch
        """
        for event in self.events():
            if event.type == WatchEventType.CHANGE:
                on_change(event.result)
            elif on_error is not None and not on_error(event.error, event.attempt):
                logger.info(f"Watch of {self.endpoint.value} abandoned after {event.attempt} failure(s)")
                self.stop()

    def start(
        self,
        on_change: Callable[[CatalogResult], None],
        on_error: Optional[Callable[[CatalogError, int], bool]] = None,
    ) -> threading.Thread:
        """
        Run the watch in a background thread.

        A watcher stopped earlier is restarted from its last index.
        """
        if self.thread and self.thread.is_alive():
            logger.warning("Watch thread already running")
            return self.thread

        self._stop_event.clear()
        self.thread = threading.Thread(
            target=self.run,
            args=(on_change, on_error),
            daemon=True,
            name=f"CatalogWatch-{self.endpoint.value}",
        )
        self.thread.start()
        logger.info(f"Started watching {self.endpoint.value}")
        return self.thread

    def stop(self) -> None:
        """Ask the watch to stop before its next query."""
        self._stop_event.set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the background thread to finish.

        Returns:
            bool: True if the thread is no longer running
        """
        if not self.thread:
            return True
        self.thread.join(timeout=timeout)
        if self.thread.is_alive():
            logger.warning("Watch thread did not stop within timeout")
            return False
        self.thread = None
        return True
