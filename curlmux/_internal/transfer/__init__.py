"""Batching, dispatch and demultiplexing of transfer tool invocations.

WARNING: This is a system-level module used by CurlmuxClient.
Do not call directly from user code.
"""

from curlmux._internal.transfer.buffer import FetchResult, ResultBuffer
from curlmux._internal.transfer.dispatcher import Dispatcher, Transfer
from curlmux._internal.transfer.models import (
    Batch,
    FetchConfig,
    FetchRequest,
    Region,
    ResponseMeta,
    build_request,
)
from curlmux._internal.transfer.queue import FetchQueue

__all__ = [
    "Dispatcher",
    "Transfer",
    "FetchQueue",
    "FetchResult",
    "ResultBuffer",
    "FetchConfig",
    "FetchRequest",
    "Batch",
    "Region",
    "ResponseMeta",
    "build_request",
]
