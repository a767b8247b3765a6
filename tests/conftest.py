"""Shared fixtures: synthetic transfer tool output and fake runners."""

import asyncio
import re
from collections.abc import Callable, Sequence

import pytest

from curlmux._internal.transfer.models import FetchConfig

_TOKEN_RE = re.compile(r"^\((\w+) \. %\{size_header\}\)$")
_VALUE_FLAGS = frozenset({"-w", "-m", "-D", "-H"})

Response = tuple[bytes, bytes]


def http_response(
    body: bytes = b"",
    *,
    status: int = 200,
    headers: Sequence[tuple[str, str]] = (("Content-Type", "text/plain"),),
    redirects: Sequence[tuple[int, str]] = (),
) -> Response:
    """Return (header block, body) the way the tool dumps them with -D-.

    ``redirects`` are (status, location) hops dumped before the final response.
    """
    head = b""
    for hop_status, location in redirects:
        head += f"HTTP/1.1 {hop_status} Moved\r\nLocation: {location}\r\n\r\n".encode()
    head += f"HTTP/1.1 {status} Whatever\r\n".encode()
    for name, value in headers:
        head += f"{name}: {value}\r\n".encode("iso-8859-1")
    head += b"\r\n"
    return head, body


def render_output(token: str, responses: Sequence[Response]) -> bytes:
    """Concatenate responses, each followed by its boundary marker."""
    out = b""
    for head, body in responses:
        out += head + body + f"({token} . {len(head)})".encode()
    return out


def parse_invocation(args: Sequence[str]) -> tuple[str, list[str], list[str]]:
    """Return (token, header lines, urls) from an argument list."""
    token = ""
    header_lines: list[str] = []
    urls: list[str] = []
    it = iter(args[1:])
    for arg in it:
        if arg in _VALUE_FLAGS:
            value = next(it)
            if arg == "-w":
                token = _TOKEN_RE.match(value).group(1)
            elif arg == "-H":
                header_lines.append(value)
        elif arg.startswith("--"):
            continue
        else:
            urls.append(arg)
    return token, header_lines, urls


class FakeTool:
    """Stands in for the transfer tool, as both async and sync runner."""

    def __init__(self) -> None:
        self.responder: Callable[[str], Response] = lambda url: http_response(url.encode())
        self.exit_code = 0
        self.raw_output: bytes | None = None
        self.delay = 0.0
        self.calls: list[list[str]] = []
        self.running = 0
        self.max_running = 0

    def output_for(self, args: Sequence[str]) -> bytes:
        token, _headers, urls = parse_invocation(args)
        if self.raw_output is not None:
            return self.raw_output
        return render_output(token, [self.responder(url) for url in urls])

    async def __call__(self, args: list[str], timeout: float) -> tuple[int, bytes]:
        self.calls.append(list(args))
        self.running += 1
        self.max_running = max(self.max_running, self.running)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.running -= 1
        if self.exit_code:
            return self.exit_code, b""
        return 0, self.output_for(args)

    def sync(self, args: list[str], timeout: float) -> tuple[int, bytes]:
        self.calls.append(list(args))
        if self.exit_code:
            return self.exit_code, b""
        return 0, self.output_for(args)


@pytest.fixture
def fake_tool() -> FakeTool:
    return FakeTool()


@pytest.fixture
def config() -> FetchConfig:
    return FetchConfig(tool_version=(8, 5, 0))


@pytest.fixture
def make_response() -> Callable[..., Response]:
    return http_response


@pytest.fixture
def make_output() -> Callable[[str, Sequence[Response]], bytes]:
    return render_output
