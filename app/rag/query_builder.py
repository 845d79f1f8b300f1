"""Builds the vector-search query and metadata filter for a coaching request."""

import logging

from ..core.text import is_blank, truncate
from ..schemas.retrieval import RetrievalQuery, RetrievalRequest

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 8
DEFAULT_QUERY_MAX_CHARS = 4000


def build_query_text(request: RetrievalRequest, max_chars: int = DEFAULT_QUERY_MAX_CHARS) -> str:
    """
    Concatenate the labeled request fields and the transcript into one query string.

    Order is fixed: conversation type, subtype (if set), goal (if set), then the
    raw transcript on its own line. The result is cut to `max_chars`.
    """
    parts = [f"conversationType: {request.conversation_type}"]
    if not is_blank(request.conversation_sub_type):
        parts.append(f"conversationSubType: {request.conversation_sub_type}")
    if not is_blank(request.goal):
        parts.append(f"goal: {request.goal}")
    parts.append(request.transcript_text)

    return truncate("\n".join(parts), max_chars)


def build_filter(request: RetrievalRequest) -> dict[str, str]:
    """
    Build the exact-match metadata filter.

    Only `conversation_type` and `jurisdiction` are filterable; jurisdiction is
    included only when it is set and non-blank.
    """
    search_filter = {"conversation_type": request.conversation_type}
    if not is_blank(request.jurisdiction):
        search_filter["jurisdiction"] = request.jurisdiction
    return search_filter


def build_query(
    request: RetrievalRequest,
    top_k: int = DEFAULT_TOP_K,
    max_chars: int = DEFAULT_QUERY_MAX_CHARS,
) -> RetrievalQuery:
    """
    Derive the retrieval query for a request.

    Args:
        request: The coaching request.
        top_k: Number of hits to ask for.
        max_chars: Character budget for the query text.

    Returns:
        A RetrievalQuery with text, top_k, filter and the optional language hint.
    """
    query = RetrievalQuery(
        text=build_query_text(request, max_chars),
        top_k=top_k,
        filter=build_filter(request),
        lang=None if is_blank(request.lang) else request.lang.strip(),
    )
    logger.debug(f"Built retrieval query ({len(query.text)} chars) with filter={query.filter}, lang={query.lang}")
    return query
