"""Launching transfer tool invocations and delivering their results."""

import asyncio
import subprocess
import sys
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from curlmux._internal.transfer.args import (
    build_args,
    detect_tool_version,
    detect_tool_version_async,
)
from curlmux._internal.transfer.buffer import FetchResult, ResultBuffer
from curlmux._internal.transfer.demux import demultiplex
from curlmux._internal.transfer.errors import OK, OPERATION_TIMEOUT, describe_exit
from curlmux._internal.transfer.models import FetchConfig, Region, build_request
from curlmux._internal.transfer.redaction import redact_args
from curlmux._internal.transfer.token import generate_token
from curlmux.exceptions import CurlmuxParseError, CurlmuxValidationError

Callback = Callable[[bool, FetchResult], Any]
Runner = Callable[[list[str], float], Awaitable[tuple[int, bytes]]]
SyncRunner = Callable[[list[str], float], tuple[int, bytes]]

# Extra seconds granted on top of the tool's own timeout before the process is killed.
WATCHDOG_GRACE = 5.0


async def run_process(args: list[str], timeout: float) -> tuple[int, bytes]:
    """Run the tool in the background and collect its stdout."""
    proc = await asyncio.create_subprocess_exec(
        *args,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.DEVNULL,
    )
    try:
        stdout, _ = await asyncio.wait_for(proc.communicate(), timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        return OPERATION_TIMEOUT, b""
    return proc.returncode, stdout


def run_process_sync(args: list[str], timeout: float) -> tuple[int, bytes]:
    """Run the tool to completion on the calling thread."""
    try:
        completed = subprocess.run(
            args,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return OPERATION_TIMEOUT, b""
    return completed.returncode, completed.stdout


class Transfer:
    """Handle for one background invocation and the callbacks it serves.

    ``token`` and ``args`` are filled in once the invocation starts.
    ``wait()`` returns once every callback has been delivered and the shared
    result buffer has been destroyed.
    """

    def __init__(
        self,
        urls: list[str],
        callbacks: list[Callback],
        headers: Sequence[tuple[str, str]] = (),
    ) -> None:
        self.urls = urls
        self.callbacks = callbacks
        self.headers = tuple(headers)
        self.token = ""
        self.args: list[str] = []
        self.returncode: int | None = None
        self.task: asyncio.Task[None] | None = None
        self._finished = asyncio.Event()
        self.buffer = ResultBuffer(len(urls), on_destroy=self._finished.set)

    @property
    def done(self) -> bool:
        return self._finished.is_set()

    async def wait(self) -> None:
        await self._finished.wait()

    def __repr__(self) -> str:
        return f"<Transfer {len(self.urls)} url(s) returncode={self.returncode} done={self.done}>"


class Dispatcher:
    """Runs the transfer tool for one or many URLs and fans results out.

    Every failure is delivered to callbacks as ``(False, result)`` with
    ``result.error`` set; nothing raises past the dispatcher except caller
    misuse, which is rejected before anything is started.
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        *,
        runner: Runner | None = None,
        sync_runner: SyncRunner | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            config: Tool path, timeout and debug settings.
            runner: Coroutine running one invocation, ``(args, timeout) -> (code, stdout)``.
            sync_runner: Blocking equivalent used by ``fetch_sync``.
        """
        self._config = config or FetchConfig()
        self._runner = runner or run_process
        self._sync_runner = sync_runner or run_process_sync
        self._tool_version = self._config.tool_version
        self._version_check: asyncio.Task[tuple[int, int, int] | None] | None = None

    @property
    def config(self) -> FetchConfig:
        return self._config

    def _log_debug(self, message: str) -> None:
        """Log a debug message to stderr if debug mode is enabled."""
        if self._config.debug:
            print(f"[curlmux] {message}", file=sys.stderr)

    def _settle_version(self, version: tuple[int, int, int] | None) -> tuple[int, int, int]:
        if version is None:
            self._log_debug(f"Could not determine {self._config.program} version")
            version = (0, 0, 0)
        self._tool_version = version
        return version

    @property
    def tool_version(self) -> tuple[int, int, int]:
        """Version of the configured tool, detected on the calling thread on first use."""
        if self._tool_version is None:
            return self._settle_version(detect_tool_version(self._config.program))
        return self._tool_version

    async def resolve_tool_version(self) -> tuple[int, int, int]:
        """Version of the configured tool, detected without blocking the loop.

        Concurrent first dispatches on one loop share a single check.
        """
        if self._tool_version is not None:
            return self._tool_version
        loop = asyncio.get_running_loop()
        check = self._version_check
        if check is None or check.get_loop() is not loop:
            check = loop.create_task(detect_tool_version_async(self._config.program))
            self._version_check = check
        version = await check
        if self._tool_version is None:
            return self._settle_version(version)
        return self._tool_version

    def build_invocation(
        self,
        urls: Sequence[str],
        headers: Sequence[tuple[str, str]] = (),
        *,
        tool_version: tuple[int, int, int] | None = None,
    ) -> tuple[str, list[str]]:
        """Pick a fresh token and build the argument list for ``urls``.

        Runs the tool on the calling thread unless ``tool_version`` is given
        or already known.
        """
        if tool_version is None:
            tool_version = self.tool_version
        token = generate_token()
        args = build_args(
            self._config.program,
            urls,
            token,
            timeout=self._config.timeout,
            headers=headers,
            tool_version=tool_version,
        )
        self._log_debug(f"Running: {' '.join(redact_args(args))}")
        return token, args

    def _watchdog_timeout(self, count: int) -> float:
        return self._config.timeout * count + WATCHDOG_GRACE

    def _spawn_error(self, error: Exception) -> str:
        return f"Could not run {self._config.program}: {error}"

    # =========================================================================
    # Synchronous Mode
    # =========================================================================

    def fetch_sync(self, url: str, headers: Any = None) -> FetchResult:
        """Fetch one URL, blocking until the tool exits.

        Returns:
            The result; check ``result.ok`` / ``result.error``.

        Raises:
            CurlmuxValidationError: If ``url`` is not a single URL or headers are malformed.
        """
        if not isinstance(url, str):
            raise CurlmuxValidationError(f"fetch_sync takes a single URL, got {url!r}")
        request = build_request(url, _ignore_result, headers)
        token, args = self.build_invocation(request.urls, request.headers)

        try:
            code, data = self._sync_runner(args, self._watchdog_timeout(1))
        except OSError as e:
            return FetchResult.failure(url, self._spawn_error(e))
        if code != OK:
            self._log_debug(f"{url} failed with exit code {code}")
            return FetchResult.failure(url, describe_exit(code), exit_code=code)

        buffer = ResultBuffer(1)
        buffer.fill(data)
        try:
            region = demultiplex(data, token, expected=1)[0]
            return FetchResult.from_region(url, buffer, region)
        except CurlmuxParseError as e:
            return FetchResult.failure(url, f"Parse error: {e}")
        except Exception as e:
            self._log_debug(f"Could not prepare result for {url}: {e!r}")
            return FetchResult.failure(url, f"Could not prepare result: {e}")

    # =========================================================================
    # Asynchronous Mode
    # =========================================================================

    def fetch_async(self, target: Any, callback: Any, headers: Any = None) -> Transfer:
        """Start fetching one URL or a list of URLs in the background.

        Must be called from a running event loop. Each callback is invoked as
        ``callback(ok, result)`` once the invocation completes.

        Raises:
            CurlmuxValidationError: If target, callback or headers are malformed.
        """
        request = build_request(target, callback, headers)
        return self.dispatch(request.urls, request.callbacks, request.headers)

    def dispatch(
        self,
        urls: Sequence[str],
        callbacks: Sequence[Callback],
        headers: Sequence[tuple[str, str]] = (),
    ) -> Transfer:
        """Launch one invocation for already validated URLs and callbacks.

        Never blocks: the tool version, if unknown, is detected inside the task.
        """
        loop = asyncio.get_running_loop()
        transfer = Transfer(list(urls), list(callbacks), headers)
        transfer.task = loop.create_task(self._run(transfer))
        return transfer

    async def _run(self, transfer: Transfer) -> None:
        try:
            version = await self.resolve_tool_version()
            transfer.token, transfer.args = self.build_invocation(
                transfer.urls, transfer.headers, tool_version=version
            )
            code, data = await self._runner(
                transfer.args, self._watchdog_timeout(len(transfer.urls))
            )
        except OSError as e:
            self._fail(transfer, self._spawn_error(e))
            return
        except Exception as e:
            self._fail(transfer, f"Transfer failed: {e}")
            return

        transfer.returncode = code
        if code != OK:
            self._log_debug(f"Invocation for {len(transfer.urls)} url(s) exited with {code}")
            self._fail(transfer, describe_exit(code), code)
            return

        transfer.buffer.fill(data)
        try:
            regions = demultiplex(data, transfer.token, expected=len(transfer.urls))
        except CurlmuxParseError as e:
            self._log_debug(f"Could not split output: {e}")
            self._fail(transfer, f"Parse error: {e}")
            return

        loop = asyncio.get_running_loop()
        for index, region in enumerate(regions):
            loop.call_soon(self._deliver, transfer, index, region, None, None)

    def _fail(self, transfer: Transfer, error: str, exit_code: int | None = None) -> None:
        loop = asyncio.get_running_loop()
        for index in range(len(transfer.urls)):
            loop.call_soon(self._deliver, transfer, index, None, error, exit_code)

    def _deliver(
        self,
        transfer: Transfer,
        index: int,
        region: Region | None,
        error: str | None,
        exit_code: int | None,
    ) -> None:
        """Invoke one callback in its own turn, then release its buffer reference."""
        url = transfer.urls[index]
        try:
            if region is None:
                result = FetchResult.failure(url, error or "Unknown error", exit_code)
            else:
                try:
                    result = FetchResult.from_region(url, transfer.buffer, region)
                except CurlmuxParseError as e:
                    result = FetchResult.failure(url, f"Parse error: {e}")
                except Exception as e:
                    self._log_debug(f"Could not prepare result for {url}: {e!r}")
                    result = FetchResult.failure(url, f"Could not prepare result: {e}")
            try:
                transfer.callbacks[index](result.ok, result)
            except Exception as e:
                self._log_debug(f"Callback for {url} raised: {e!r}")
        finally:
            transfer.buffer.release()


def _ignore_result(ok: bool, result: FetchResult) -> None:
    """Placeholder callback used to validate synchronous requests."""
