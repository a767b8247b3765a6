"""Shared result buffers and the per-request results narrowed from them."""

from collections.abc import Callable

import httpx

from curlmux._internal.transfer.headers import decode_content, parse_response
from curlmux._internal.transfer.models import Region, ResponseMeta
from curlmux.exceptions import CurlmuxError, CurlmuxTransferError


class ResultBuffer:
    """Raw output of one invocation, shared by every callback of its batch.

    The buffer starts with one reference per request. Each delivered callback
    releases one; the buffer is destroyed when the last one is released.
    Consumers only ever see read-only views.
    """

    def __init__(self, refs: int, *, on_destroy: Callable[[], None] | None = None) -> None:
        if refs < 1:
            raise CurlmuxError("a result buffer needs at least one reference")
        self._data: bytes | None = b""
        self._refs = refs
        self._shared = refs
        self._on_destroy = on_destroy

    @property
    def refs(self) -> int:
        return self._refs

    @property
    def destroyed(self) -> bool:
        return self._data is None

    @property
    def data(self) -> bytes:
        if self._data is None:
            raise CurlmuxError("result buffer has been destroyed")
        return self._data

    def fill(self, data: bytes) -> None:
        """Store the completed output. Only valid before any release.

        Raises:
            CurlmuxError: If a reference has already been released.
        """
        if self._data is None:
            raise CurlmuxError("result buffer has been destroyed")
        if self._refs < self._shared:
            raise CurlmuxError("result buffer filled after a reference was released")
        self._data = bytes(data)

    def view(self, start: int, end: int) -> memoryview:
        """Return a read-only view of ``data[start:end]``."""
        return memoryview(self.data)[start:end]

    def release(self) -> bool:
        """Drop one reference.

        Returns:
            True if this release destroyed the buffer.

        Raises:
            CurlmuxError: If every reference was already released.
        """
        if self._refs <= 0:
            raise CurlmuxError("result buffer released more times than it was shared")
        self._refs -= 1
        if self._refs:
            return False
        self._data = None
        if self._on_destroy is not None:
            self._on_destroy()
        return True


class FetchResult:
    """Outcome of one URL, as delivered to its callback.

    ``text`` is a best-effort decoding: bytes that are invalid in the
    declared (or default UTF-8) encoding are replaced. The raw bytes stay
    available through ``content`` and ``content_view``.
    """

    def __init__(
        self,
        url: str,
        *,
        meta: ResponseMeta | None = None,
        header_view: memoryview | None = None,
        content_view: memoryview | None = None,
        error: str | None = None,
        exit_code: int | None = None,
    ) -> None:
        self.url = url
        self.meta = meta or ResponseMeta(location=url)
        self.header_view = header_view if header_view is not None else memoryview(b"")
        self.content_view = content_view if content_view is not None else memoryview(b"")
        self.error = error if error is not None else self.meta.error
        self.exit_code = exit_code
        self._text: str | None = None

    @classmethod
    def from_region(cls, url: str, buffer: ResultBuffer, region: Region) -> "FetchResult":
        """Parse and narrow one request's slice of a shared buffer.

        Raises:
            CurlmuxParseError: If the header block cannot be parsed.
        """
        header_view = buffer.view(region.header_start, region.header_end)
        meta = parse_response(url, bytes(header_view))
        result = cls(
            url,
            meta=meta,
            header_view=header_view,
            content_view=buffer.view(region.content_start, region.content_end),
        )
        result._text = decode_content(result.content, meta.encoding)
        return result

    @classmethod
    def failure(cls, url: str, error: str, exit_code: int | None = None) -> "FetchResult":
        return cls(url, error=error, exit_code=exit_code)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status(self) -> int | None:
        return self.meta.status

    @property
    def headers(self) -> httpx.Headers:
        return httpx.Headers(self.meta.headers)

    @property
    def location(self) -> str:
        return self.meta.location

    @property
    def encoding(self) -> str:
        return self.meta.encoding

    @property
    def content(self) -> bytes:
        return bytes(self.content_view)

    @property
    def text(self) -> str:
        if self._text is None:
            self._text = decode_content(self.content, self.encoding)
        return self._text

    def raise_for_error(self) -> None:
        """Raise CurlmuxTransferError if the fetch failed."""
        if self.error is not None:
            raise CurlmuxTransferError(self.error, exit_code=self.exit_code)

    def __repr__(self) -> str:
        return f"<FetchResult {self.url!r} ok={self.ok} status={self.status}>"
