"""Text helpers shared by the retrieval pipeline."""

import re

ELLIPSIS = "…"


def is_blank(value: object) -> bool:
    """
    Check whether a value is missing or a whitespace-only string.

    Non-string values count as blank, so optional request fields can be tested
    without caring whether they arrived as None or "".
    """
    return not isinstance(value, str) or not value.strip()


def truncate(text: str | None, max_chars: int) -> str:
    """
    Cut text to at most `max_chars` characters.

    When the text is cut, a single ellipsis character is appended, so the result
    is `max_chars + 1` characters long. The cut is a pure character count; no
    attempt is made to respect word boundaries.

    Args:
        text: The text to shorten. None is treated as an empty string.
        max_chars: The character budget.

    Returns:
        The original text if it fits, otherwise the cut text plus the ellipsis.
    """
    text = "" if text is None else str(text)
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + ELLIPSIS


def clean_host(host: str) -> str:
    """Strip an http(s) scheme and trailing slashes from an index host."""
    host = re.sub(r"^https?://", "", host.strip(), flags=re.IGNORECASE)
    return re.sub(r"/+$", "", host)
