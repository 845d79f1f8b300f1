"""Turn search hits into bounded prompt snippets."""

import math
from typing import Any

from ..core.text import truncate
from ..schemas.retrieval import SearchHit, Snippet

DEFAULT_SNIPPET_MAX_CHARS = 1800

# Payload keys holding the main text of a hit, highest priority first.
SNIPPET_TEXT_KEYS = ("chunk_text", "text", "content")


def extract_snippet_text(payload: dict[str, Any] | None) -> str:
    """
    Return the main text of a hit payload.

    Keys are tried in the order of SNIPPET_TEXT_KEYS; the first one holding a
    non-empty value wins. Returns "" when none of them is present.
    """
    if not payload:
        return ""
    for key in SNIPPET_TEXT_KEYS:
        value = payload.get(key)
        if value is not None and str(value) != "":
            return str(value)
    return ""


def display_score(score: Any) -> float:
    """Scores that are not finite numbers are shown as 0."""
    try:
        score = float(score)
    except (TypeError, ValueError):
        return 0.0
    return score if math.isfinite(score) else 0.0


def format_snippet(hit: SearchHit, max_chars: int = DEFAULT_SNIPPET_MAX_CHARS) -> Snippet:
    """
    Format a hit as `[#<id> score=<score:.3f>]` followed by its text on the next line.

    The combined string is cut to `max_chars` characters. The score is shown as
    the backend reported it, with no normalization.
    """
    score = display_score(hit.score)
    header = f"[#{hit.id} score={score:.3f}]"
    text = truncate(f"{header}\n{extract_snippet_text(hit.fields)}", max_chars)
    return Snippet(id=hit.id, score=score, text=text)
