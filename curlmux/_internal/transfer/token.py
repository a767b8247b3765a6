"""Per-batch boundary tokens."""

import secrets
import string

# No '%' (write-out directive), no whitespace, no parentheses or dots (marker syntax).
TOKEN_ALPHABET = string.ascii_letters + string.digits
# 62 ** 24 is about 1e43 distinct tokens.
TOKEN_LENGTH = 24


def generate_token(length: int = TOKEN_LENGTH) -> str:
    """Return a random token that is safe to embed in a write-out format."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))
