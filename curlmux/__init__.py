"""curlmux: batched HTTP fetching through an external transfer tool.

Many logical requests are multiplexed onto few tool invocations, and the
concatenated output is split back into per-request results.

Public API:
    CurlmuxClient - Synchronous, background and queued fetching
    FetchConfig - Tool path, concurrency ceiling and timeout
    FetchResult - Per-URL outcome delivered to callbacks
"""

from curlmux._version import __version__
from curlmux.exceptions import (
    CurlmuxConfigError,
    CurlmuxError,
    CurlmuxParseError,
    CurlmuxTransferError,
    CurlmuxValidationError,
)
from curlmux._internal.transfer import FetchConfig, FetchResult, Transfer
from curlmux.client import CurlmuxClient, get_client

__all__ = [
    "__version__",
    "CurlmuxClient",
    "get_client",
    "FetchConfig",
    "FetchResult",
    "Transfer",
    "CurlmuxError",
    "CurlmuxConfigError",
    "CurlmuxParseError",
    "CurlmuxTransferError",
    "CurlmuxValidationError",
]
