"""Numeric one-time passcode generation."""

from __future__ import annotations

import secrets

CODE_LENGTH = 6


def generate_code(length: int = CODE_LENGTH) -> str:
    """Return a uniformly random numeric code of *length* digits.

    Leading zeros are kept, so every value in ``[0, 10**length)`` is possible.
    """
    return f"{secrets.randbelow(10 ** length):0{length}d}"
