"""Advisory document numbering.

The suggested number is not reserved. Two callers may receive the same
suggestion; the unique constraint on document numbers rejects the second
insert with a retryable conflict.
"""

import re

MIN_DIGITS = 3


def format_number(prefix: str, sequence: int) -> str:
    return f"{prefix}-{sequence:0{MIN_DIGITS}d}"


def next_number(prefix: str, last_issued: str | None) -> str:
    """Suggest the number following ``last_issued``.

    >>> next_number("INV", None)
    'INV-001'
    >>> next_number("INV", "INV-999")
    'INV-1000'
    """
    if not last_issued:
        return format_number(prefix, 1)

    match = re.fullmatch(rf"{re.escape(prefix)}-(\d+)", last_issued.strip())
    if match is None:
        return format_number(prefix, 1)
    return format_number(prefix, int(match.group(1)) + 1)


__all__ = ["format_number", "next_number"]
