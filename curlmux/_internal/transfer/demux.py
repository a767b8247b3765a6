"""Splitting one invocation's concatenated output back into per-request regions.

Every transfer is followed by a ``(<token> . <header bytes>)`` marker. The
output is scanned from the end: each marker closes the content of its request,
the marker before it (or the start of the buffer) opens its header block, and
the reported header size separates headers from content. No Content-Length or
connection-close framing is needed.
"""

import re

from curlmux._internal.transfer.models import Region
from curlmux.exceptions import CurlmuxParseError

_HEADER_SIZE_RE = re.compile(rb"(\d+)\)")


def marker_prefix(token: str) -> bytes:
    return f"({token} . ".encode("ascii")


def demultiplex(data: bytes, token: str, expected: int | None = None) -> list[Region]:
    """Recover the regions of every request in submission order.

    Args:
        data: Complete output of one invocation.
        token: The batch token embedded in the write-out format.
        expected: Number of requests in the batch, checked when given.

    Returns:
        One Region per request, oldest first.

    Raises:
        CurlmuxParseError: If a marker is missing or malformed, if data trails
            the last marker, or if the marker count differs from ``expected``.
    """
    prefix = marker_prefix(token)
    regions: list[Region] = []
    # (content end, header size) of the request whose header start is not known yet
    pending: tuple[int, int] | None = None
    end = len(data)

    while True:
        start = data.rfind(prefix, 0, end)
        if start < 0:
            break
        match = _HEADER_SIZE_RE.match(data, start + len(prefix))
        if match is None:
            raise CurlmuxParseError(f"malformed boundary marker at offset {start}")
        if pending is None:
            if match.end() != len(data):
                raise CurlmuxParseError(
                    f"{len(data) - match.end()} bytes trail the last boundary marker"
                )
        else:
            regions.append(_region(match.end(), *pending))
        pending = (start, int(match.group(1)))
        end = start

    if pending is None:
        raise CurlmuxParseError("no boundary marker found in output")
    regions.append(_region(0, *pending))
    regions.reverse()

    if expected is not None and len(regions) != expected:
        raise CurlmuxParseError(f"expected {expected} responses, found {len(regions)}")
    return regions


def _region(header_start: int, content_end: int, header_size: int) -> Region:
    content_start = header_start + header_size
    if content_start > content_end:
        raise CurlmuxParseError(
            f"header size {header_size} overruns response ending at offset {content_end}"
        )
    return Region(
        header_start=header_start,
        header_end=content_start,
        content_start=content_start,
        content_end=content_end,
    )
