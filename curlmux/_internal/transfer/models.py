"""Pydantic models for transfer configuration, requests and parsed responses."""

import os
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from curlmux._internal.http import normalize_headers
from curlmux.exceptions import CurlmuxConfigError, CurlmuxValidationError

# =============================================================================
# Constants
# =============================================================================

DEFAULT_PROGRAM = "curl"
DEFAULT_MAX_CONNECTIONS = 16
DEFAULT_TIMEOUT = 30.0

# =============================================================================
# Configuration
# =============================================================================


class FetchConfig(BaseModel):
    """Settings shared by every transfer tool invocation.

    Fields:
        program: Path or name of the transfer tool.
        max_connections: Ceiling on concurrently running invocations.
        timeout: Per-transfer timeout in seconds, passed to the tool.
        tool_version: Known tool version; detected lazily when None.
        debug: Enable debug logging to stderr.
    """

    program: str = Field(default=DEFAULT_PROGRAM, min_length=1)
    max_connections: int = Field(default=DEFAULT_MAX_CONNECTIONS, ge=1)
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    tool_version: tuple[int, int, int] | None = None
    debug: bool = False

    model_config = {"frozen": True}

    @classmethod
    def from_env(cls) -> "FetchConfig":
        """Create a config from environment variables.

        Optional environment variables:
            CURLMUX_PROGRAM: Transfer tool path (default: "curl").
            CURLMUX_MAX_CONNECTIONS: Concurrent invocation ceiling (default: 16).
            CURLMUX_TIMEOUT: Per-transfer timeout in seconds (default: 30).
            CURLMUX_DEBUG: Set to "1" to enable debug logging.

        Raises:
            CurlmuxConfigError: If a variable is malformed or out of range.
        """
        try:
            return cls(
                program=os.environ.get("CURLMUX_PROGRAM", DEFAULT_PROGRAM),
                max_connections=int(
                    os.environ.get("CURLMUX_MAX_CONNECTIONS", str(DEFAULT_MAX_CONNECTIONS))
                ),
                timeout=float(os.environ.get("CURLMUX_TIMEOUT", str(DEFAULT_TIMEOUT))),
                debug=os.environ.get("CURLMUX_DEBUG", "") == "1",
            )
        except ValueError as e:
            raise CurlmuxConfigError(f"invalid CURLMUX_* environment: {e}") from e


# =============================================================================
# Requests and Batches
# =============================================================================


class FetchRequest(BaseModel):
    """One submitted fetch: URLs, their callbacks and the shared extra headers."""

    urls: list[str] = Field(min_length=1)
    callbacks: list[Callable[..., Any]] = Field(min_length=1)
    headers: tuple[tuple[str, str], ...] = ()

    model_config = {"frozen": True}

    @field_validator("urls")
    @classmethod
    def urls_well_formed(cls, v: list[str]) -> list[str]:
        for url in v:
            if not url or not url.strip():
                raise ValueError("URL must not be empty")
            if url.startswith("-"):
                raise ValueError(f"URL must not start with '-': {url!r}")
        return v

    @model_validator(mode="after")
    def one_callback_per_url(self) -> "FetchRequest":
        if len(self.callbacks) != len(self.urls):
            raise ValueError(
                f"got {len(self.callbacks)} callbacks for {len(self.urls)} URLs"
            )
        return self


class Batch(BaseModel):
    """Compatible pending requests served by a single invocation."""

    key: tuple[Any, ...]
    requests: list[FetchRequest] = Field(min_length=1)

    @property
    def urls(self) -> list[str]:
        return [url for request in self.requests for url in request.urls]

    @property
    def callbacks(self) -> list[Callable[..., Any]]:
        return [cb for request in self.requests for cb in request.callbacks]

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        return self.requests[0].headers


# =============================================================================
# Output Regions and Response Metadata
# =============================================================================


class Region(BaseModel):
    """Offsets of one request's header block and content in a result buffer."""

    header_start: int = Field(ge=0)
    header_end: int = Field(ge=0)
    content_start: int = Field(ge=0)
    content_end: int = Field(ge=0)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def offsets_ordered(self) -> "Region":
        if not (
            self.header_start <= self.header_end <= self.content_start <= self.content_end
        ):
            raise ValueError(
                "region offsets out of order: "
                f"{self.header_start}, {self.header_end}, {self.content_start}, {self.content_end}"
            )
        return self


class ResponseMeta(BaseModel):
    """Parsed per-request state delivered alongside the content.

    Fields:
        status: Final HTTP status code, None for non-HTTP transfers.
        headers: All header lines as (lower-cased name, value), in order.
        location: URL after following every redirect.
        encoding: Character encoding used to decode the content.
        error: Failure message, None on success.
    """

    status: int | None = None
    headers: list[tuple[str, str]] = Field(default_factory=list)
    location: str
    encoding: str = "utf-8"
    error: str | None = None


# =============================================================================
# Request Construction
# =============================================================================


def build_request(target: Any, callback: Any, headers: Any = None) -> FetchRequest:
    """Validate caller input and build a FetchRequest.

    Args:
        target: One URL or a list of URLs.
        callback: One callable for every URL, or a list with one per URL.
        headers: Mapping or sequence of (name, value) pairs, shared by all URLs.

    Raises:
        CurlmuxValidationError: If any argument is malformed.
    """
    if isinstance(target, str):
        urls = [target]
    elif isinstance(target, (list, tuple)) and target and all(isinstance(u, str) for u in target):
        urls = list(target)
    else:
        raise CurlmuxValidationError(f"target must be a URL or a list of URLs, got {target!r}")

    if callable(callback):
        callbacks = [callback] * len(urls)
    elif isinstance(callback, (list, tuple)):
        callbacks = list(callback)
    else:
        raise CurlmuxValidationError(
            f"callback must be callable or a list of callables, got {callback!r}"
        )

    try:
        return FetchRequest(urls=urls, callbacks=callbacks, headers=normalize_headers(headers))
    except ValidationError as e:
        raise CurlmuxValidationError(str(e)) from e
