"""Building transfer tool command lines."""

import asyncio
import re
import subprocess
from collections.abc import Sequence

# --http1.1 is only reliable from this release on.
HTTP11_MIN_VERSION = (7, 33, 0)

_VERSION_RE = re.compile(r"^curl\s+(\d+)\.(\d+)(?:\.(\d+))?", re.MULTILINE)


def write_out_format(token: str) -> str:
    """Return the marker format the tool prints after each transfer."""
    return f"({token} . %{{size_header}})"


def build_args(
    program: str,
    urls: str | Sequence[str],
    token: str,
    *,
    timeout: float,
    headers: Sequence[tuple[str, str]] = (),
    tool_version: tuple[int, int, int] = HTTP11_MIN_VERSION,
) -> list[str]:
    """Build the full argument list for one invocation.

    URLs are appended after the flags, in order.
    """
    args = [program]
    if tool_version >= HTTP11_MIN_VERSION:
        args.append("--http1.1")
    args += [
        "--compressed",
        "--silent",
        "--location",
        "-w",
        write_out_format(token),
        "-m",
        _format_timeout(timeout),
        "-D",
        "-",
    ]
    for name, value in headers:
        args += ["-H", f"{name}: {value}"]

    if isinstance(urls, str):
        args.append(urls)
    else:
        args.extend(urls)
    return args


def _format_timeout(timeout: float) -> str:
    if float(timeout).is_integer():
        return str(int(timeout))
    return str(timeout)


def parse_tool_version(output: str) -> tuple[int, int, int] | None:
    """Extract ``(major, minor, patch)`` from ``--version`` output."""
    match = _VERSION_RE.search(output)
    if not match:
        return None
    major, minor, patch = match.groups()
    return (int(major), int(minor), int(patch or 0))


def detect_tool_version(program: str, *, timeout: float = 10.0) -> tuple[int, int, int] | None:
    """Run ``<program> --version`` and parse the reported version.

    Returns:
        The version, or None if the tool could not be run or parsed.
    """
    try:
        completed = subprocess.run(
            [program, "--version"],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            timeout=timeout,
            check=False,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    return parse_tool_version(completed.stdout.decode("utf-8", "replace"))


async def detect_tool_version_async(
    program: str, *, timeout: float = 10.0
) -> tuple[int, int, int] | None:
    """Same as ``detect_tool_version`` without blocking the event loop."""
    try:
        proc = await asyncio.create_subprocess_exec(
            program,
            "--version",
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError:
        return None
    try:
        stdout, _ = await asyncio.wait_for(proc.communicate(), timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        return None
    return parse_tool_version(stdout.decode("utf-8", "replace"))
