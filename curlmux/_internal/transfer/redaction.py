"""Redaction of sensitive header values in logged command lines."""

from collections.abc import Sequence

REDACT_HEADERS: frozenset[str] = frozenset({
    "authorization",
    "proxy-authorization",
    "cookie",
    "set-cookie",
    "x-api-key",
    "api-key",
    "x-auth-token",
    "x-access-token",
    "x-csrf-token",
})

REDACTED_VALUE = "[REDACTED]"


def redact_args(args: Sequence[str]) -> list[str]:
    """Return a copy of ``args`` with sensitive ``-H`` values replaced.

    The original sequence is never mutated.
    """
    result: list[str] = []
    after_header_flag = False
    for arg in args:
        if after_header_flag:
            result.append(redact_header_line(arg))
        else:
            result.append(arg)
        after_header_flag = arg == "-H"
    return result


def redact_header_line(line: str) -> str:
    """Redact the value of a ``Name: Value`` line if the name is sensitive."""
    name, sep, _value = line.partition(":")
    if sep and name.strip().lower() in REDACT_HEADERS:
        return f"{name}: {REDACTED_VALUE}"
    return line
