"""Admission-controlled fetch queue.

Entries move from queued to dispatched to completed. Enqueueing schedules a
single drain for the next loop turn; the drain re-consolidates pending
entries when new ones arrived and starts batches while fewer than
``max_connections`` invocations are active. A batch frees its slot, and
schedules another drain, before the first of its callbacks runs.
"""

import asyncio
import sys
from typing import Any

from curlmux._internal.transfer.consolidate import consolidate
from curlmux._internal.transfer.dispatcher import Callback, Dispatcher, Transfer
from curlmux._internal.transfer.models import Batch, FetchRequest, build_request


class FetchQueue:
    """Queue of pending fetches served by at most ``max_connections`` invocations."""

    def __init__(self, dispatcher: Dispatcher, *, max_connections: int | None = None) -> None:
        """Initialize the queue.

        Args:
            dispatcher: Dispatcher that launches the invocations.
            max_connections: Active invocation ceiling; defaults to the
                dispatcher's configured value.
        """
        self._dispatcher = dispatcher
        self._max_connections = max_connections or dispatcher.config.max_connections
        self._pending: list[FetchRequest] = []
        self._batches: list[Batch] = []
        self._dirty = False
        self._active = 0
        self._drain_handle: asyncio.Handle | None = None
        self._transfers: list[Transfer] = []

    @property
    def max_connections(self) -> int:
        return self._max_connections

    @property
    def active(self) -> int:
        """Number of invocations currently running."""
        return self._active

    @property
    def pending(self) -> int:
        """Number of URLs queued but not yet dispatched."""
        return sum(len(request.urls) for request in self._pending)

    def _log_debug(self, message: str) -> None:
        """Log a debug message to stderr if debug mode is enabled."""
        if self._dispatcher.config.debug:
            print(f"[curlmux:queue] {message}", file=sys.stderr)

    def enqueue(self, target: Any, callback: Any, headers: Any = None) -> None:
        """Queue one URL or a list of URLs.

        Must be called from a running event loop.

        Raises:
            CurlmuxValidationError: If target, callback or headers are malformed.
                Nothing is queued in that case.
        """
        request = build_request(target, callback, headers)
        self._pending.append(request)
        self._dirty = True
        self._schedule_drain()

    def _schedule_drain(self) -> None:
        if self._drain_handle is None:
            self._drain_handle = asyncio.get_running_loop().call_soon(self._drain)

    def _drain(self) -> None:
        self._drain_handle = None
        if self._dirty:
            self._batches = consolidate(self._pending)
            self._dirty = False

        while self._active < self._max_connections and self._batches:
            batch = self._batches.pop(0)
            self._pending = [
                request
                for request in self._pending
                if not any(request is member for member in batch.requests)
            ]
            self._active += 1
            self._start(batch)

    def _start(self, batch: Batch) -> None:
        released = False

        def release_slot() -> None:
            nonlocal released
            if not released:
                released = True
                self._active -= 1
                self._schedule_drain()

        def wrap(callback: Callback) -> Callback:
            def wrapped(ok: bool, result: Any) -> Any:
                release_slot()
                return callback(ok, result)

            return wrapped

        self._log_debug(
            f"Dispatching {len(batch.urls)} url(s) for {batch.key[0]}://{batch.key[1]} "
            f"({self._active}/{self._max_connections} active)"
        )
        transfer = self._dispatcher.dispatch(
            batch.urls, [wrap(cb) for cb in batch.callbacks], batch.headers
        )
        self._transfers.append(transfer)

    async def join(self) -> None:
        """Wait until nothing is queued, running or awaiting delivery."""
        while True:
            self._transfers = [t for t in self._transfers if not t.done]
            if self._transfers:
                await asyncio.gather(*(t.wait() for t in self._transfers))
            elif self._pending or self._drain_handle is not None:
                await asyncio.sleep(0)
            else:
                return
