"""Public exceptions for curlmux."""


class CurlmuxError(Exception):
    """Base exception for all curlmux errors."""


class CurlmuxTransferError(CurlmuxError):
    """A fetch failed, either in the transfer tool or at the HTTP level."""

    def __init__(self, message: str, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class CurlmuxConfigError(CurlmuxError):
    """Configuration error (bad env vars, unusable program path)."""


class CurlmuxValidationError(CurlmuxError):
    """Malformed fetch target, callback or headers passed by the caller."""


class CurlmuxParseError(CurlmuxError):
    """Transfer tool output could not be split or parsed."""
