"""Shared URL and header helpers."""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import httpx

from curlmux.exceptions import CurlmuxValidationError

DEFAULT_PORTS = {"http": 80, "https": 443, "ftp": 21, "ftps": 990}

HeaderPairs = tuple[tuple[str, str], ...]


def origin(url: str) -> tuple[str, str, int | None]:
    """Return the (scheme, host, port) triple a URL connects to.

    Default ports are filled in so that ``http://a`` and ``http://a:80``
    compare equal. Unparseable URLs map to an empty origin.
    """
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        return ("", "", None)
    scheme = parsed.scheme.lower()
    return (scheme, parsed.host.lower(), parsed.port or DEFAULT_PORTS.get(scheme))


def resolve_location(base: str, location: str) -> str:
    """Resolve a Location header value against the URL it was served from.

    Absolute locations replace the base, relative ones are joined to it.
    """
    location = location.strip()
    try:
        return str(httpx.URL(base).join(location))
    except httpx.InvalidURL:
        return location


def final_location(url: str, locations: Iterable[str]) -> str:
    """Fold every Location header, oldest first, starting from ``url``."""
    current = url
    for location in locations:
        if location.strip():
            current = resolve_location(current, location)
    return current


def normalize_headers(headers: Mapping[str, str] | Sequence[Any] | None) -> HeaderPairs:
    """Turn a mapping or a sequence of pairs into an ordered tuple of pairs.

    Raises:
        CurlmuxValidationError: If a name is empty or contains ':' or a newline,
            or if an item is not a (name, value) pair.
    """
    if headers is None:
        return ()
    if isinstance(headers, Mapping):
        items: Iterable[Any] = headers.items()
    elif isinstance(headers, (str, bytes)):
        raise CurlmuxValidationError(f"headers must be a mapping or pairs, got {headers!r}")
    else:
        items = headers

    pairs: list[tuple[str, str]] = []
    for item in items:
        if not isinstance(item, (tuple, list)) or len(item) != 2:
            raise CurlmuxValidationError(f"header must be a (name, value) pair, got {item!r}")
        name, value = str(item[0]).strip(), str(item[1])
        if not name or ":" in name or "\n" in name or "\r" in name:
            raise CurlmuxValidationError(f"invalid header name: {item[0]!r}")
        if "\n" in value or "\r" in value:
            raise CurlmuxValidationError(f"invalid header value for {name}")
        pairs.append((name, value))
    return tuple(pairs)
