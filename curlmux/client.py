"""User-facing curlmux client.

Example usage:
    import asyncio
    from curlmux import CurlmuxClient

    client = CurlmuxClient.from_env()

    # Blocking, one URL
    result = client.fetch("https://example.com/feed.xml")
    if result.ok:
        print(result.status, result.text[:80])

    # Batched and throttled
    async def main():
        def on_done(ok, result):
            print(result.url, ok, result.error)

        for url in urls:
            client.enqueue(url, on_done, {"Accept": "application/rss+xml"})
        await client.join()

    asyncio.run(main())
"""

from typing import Any

from curlmux._internal.transfer.buffer import FetchResult
from curlmux._internal.transfer.dispatcher import Dispatcher, Runner, SyncRunner, Transfer
from curlmux._internal.transfer.models import FetchConfig
from curlmux._internal.transfer.queue import FetchQueue


class CurlmuxClient:
    """Fetches URLs through an external transfer tool.

    ``fetch`` blocks on a single URL. ``fetch_async`` starts one invocation
    immediately. ``enqueue`` goes through the queue, which groups compatible
    requests into shared invocations and caps how many run at once.
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        *,
        runner: Runner | None = None,
        sync_runner: SyncRunner | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Tool path, concurrency ceiling, timeout and debug settings.
            runner: Override for launching background invocations.
            sync_runner: Override for blocking invocations.
        """
        self._config = config or FetchConfig()
        self._dispatcher = Dispatcher(self._config, runner=runner, sync_runner=sync_runner)
        self._queue = FetchQueue(self._dispatcher)

    @classmethod
    def from_env(cls) -> "CurlmuxClient":
        """Create a client configured from CURLMUX_* environment variables."""
        return cls(FetchConfig.from_env())

    @property
    def config(self) -> FetchConfig:
        return self._config

    @property
    def active(self) -> int:
        """Invocations started through the queue and still running."""
        return self._queue.active

    @property
    def pending(self) -> int:
        """URLs queued but not yet dispatched."""
        return self._queue.pending

    def fetch(self, url: str, headers: Any = None) -> FetchResult:
        """Fetch one URL synchronously. See Dispatcher.fetch_sync."""
        return self._dispatcher.fetch_sync(url, headers)

    def fetch_async(self, target: Any, callback: Any, headers: Any = None) -> Transfer:
        """Start one invocation now, bypassing the queue. See Dispatcher.fetch_async."""
        return self._dispatcher.fetch_async(target, callback, headers)

    def enqueue(self, target: Any, callback: Any, headers: Any = None) -> None:
        """Queue a fetch subject to consolidation and the concurrency ceiling."""
        self._queue.enqueue(target, callback, headers)

    async def join(self) -> None:
        """Wait for every queued fetch to be delivered."""
        await self._queue.join()


def get_client() -> CurlmuxClient:
    """Get a client configured from environment variables.

    Returns:
        A CurlmuxClient instance.
    """
    return CurlmuxClient.from_env()
