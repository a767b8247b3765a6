"""Status line and header parsing, plus content decoding."""

import codecs
import re

from curlmux._internal.http import final_location, origin
from curlmux._internal.transfer.models import ResponseMeta
from curlmux.exceptions import CurlmuxParseError

DEFAULT_ENCODING = "utf-8"
HTTP_SCHEMES = frozenset({"http", "https"})

_STATUS_RE = re.compile(r"^HTTP/\d+(?:\.\d+)?\s+(\d{3})\b")
_CHARSET_RE = re.compile(r"charset\s*=\s*[\"']?([^\"';\s]+)", re.IGNORECASE)


def parse_header_block(raw: bytes) -> tuple[int | None, list[tuple[str, str]]]:
    """Parse every hop's header lines from a dumped header block.

    The last status line wins; earlier ones belong to redirects.

    Returns:
        The final status code (None if there was no status line) and all
        ``(lower-cased name, value)`` pairs in the order they appeared.
    """
    status: int | None = None
    headers: list[tuple[str, str]] = []
    for line in raw.decode("iso-8859-1").splitlines():
        if not line.strip():
            continue
        match = _STATUS_RE.match(line)
        if match:
            status = int(match.group(1))
            continue
        if line[0] in " \t" and headers:
            name, value = headers[-1]
            headers[-1] = (name, f"{value} {line.strip()}")
            continue
        name, sep, value = line.partition(":")
        if sep and name.strip():
            headers.append((name.strip().lower(), value.strip()))
    return status, headers


def content_charset(headers: list[tuple[str, str]]) -> str | None:
    """Return the charset of the last Content-Type header, if it is a text codec.

    Codecs that ``bytes.decode`` refuses (base64, hex, zlib, rot13) are
    treated as unknown.
    """
    content_types = [value for name, value in headers if name == "content-type"]
    if not content_types:
        return None
    match = _CHARSET_RE.search(content_types[-1])
    if not match:
        return None
    try:
        name = codecs.lookup(match.group(1)).name
        b"".decode(name)
    except LookupError:
        return None
    return name


def decode_content(raw: bytes, encoding: str) -> str:
    """Decode content, replacing undecodable bytes.

    Falls back to UTF-8 when ``encoding`` is not a usable text codec.
    """
    try:
        return raw.decode(encoding, "replace")
    except LookupError:
        return raw.decode(DEFAULT_ENCODING, "replace")


def classify_status(status: int | None) -> str | None:
    """Return an error message for 4xx/5xx statuses, None otherwise."""
    if status is not None and 400 <= status <= 599:
        return f"HTTP {status}"
    return None


def parse_response(url: str, raw_headers: bytes) -> ResponseMeta:
    """Build the response metadata for one request's header block.

    Raises:
        CurlmuxParseError: If an HTTP(S) transfer has no status line.
    """
    status, headers = parse_header_block(raw_headers)
    if status is None and origin(url)[0] in HTTP_SCHEMES:
        raise CurlmuxParseError(f"no HTTP status line in response for {url}")
    return ResponseMeta(
        status=status,
        headers=headers,
        location=final_location(url, (value for name, value in headers if name == "location")),
        encoding=content_charset(headers) or DEFAULT_ENCODING,
        error=classify_status(status),
    )
