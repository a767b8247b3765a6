"""Grouping pending requests into batches that can share one invocation."""

from collections.abc import Iterable
from typing import Any

from curlmux._internal.http import origin
from curlmux._internal.transfer.models import Batch, FetchRequest


def compatibility_key(request: FetchRequest) -> tuple[Any, ...]:
    """Return (scheme, host, port, headers) for a request.

    Headers are compared as a set with case-folded names; the batch still
    sends them in the first request's order. A multi-URL request is keyed
    by its first URL and never split.
    """
    scheme, host, port = origin(request.urls[0])
    headers = tuple(sorted((name.lower(), value) for name, value in request.headers))
    return (scheme, host, port, headers)


def consolidate(requests: Iterable[FetchRequest]) -> list[Batch]:
    """Group requests with identical keys, keeping submission order.

    Batches come out in the order their key was first seen.
    """
    groups: dict[tuple[Any, ...], list[FetchRequest]] = {}
    for request in requests:
        groups.setdefault(compatibility_key(request), []).append(request)
    return [Batch(key=key, requests=members) for key, members in groups.items()]
