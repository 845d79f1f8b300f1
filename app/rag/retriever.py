"""Best-effort retrieval of coaching snippets with a language fallback."""

import logging

from ..core.config import Settings
from ..core.text import is_blank
from ..schemas.retrieval import RawSearchResult, RetrievalOutcome, RetrievalQuery, RetrievalRequest
from .query_builder import DEFAULT_QUERY_MAX_CHARS, DEFAULT_TOP_K, build_query
from .search_client import VectorSearchClient
from .snippets import DEFAULT_SNIPPET_MAX_CHARS, format_snippet

logger = logging.getLogger(__name__)


class RetrievalOrchestrator:
    """
    Runs the retrieval step of a coaching request.

    Retrieval is optional enrichment: any failure of the search backend is turned
    into an empty RetrievalOutcome with `error` set, and never raised.
    """

    def __init__(
        self,
        search_client: VectorSearchClient,
        top_k: int = DEFAULT_TOP_K,
        query_max_chars: int = DEFAULT_QUERY_MAX_CHARS,
        snippet_max_chars: int = DEFAULT_SNIPPET_MAX_CHARS,
    ):
        self.search_client = search_client
        self.top_k = top_k
        self.query_max_chars = query_max_chars
        self.snippet_max_chars = snippet_max_chars

    @classmethod
    def from_settings(cls, settings: Settings, search_client: VectorSearchClient) -> "RetrievalOrchestrator":
        return cls(
            search_client,
            top_k=settings.RAG_TOP_K,
            query_max_chars=settings.RAG_QUERY_MAX_CHARS,
            snippet_max_chars=settings.RAG_SNIPPET_MAX_CHARS,
        )

    async def search_with_fallback(self, query: RetrievalQuery) -> RawSearchResult:
        """
        Search with the query's language, then once more without it if nothing matched.

        The second call is made only when a language was set and the first call
        returned exactly zero hits. Its result is used as is, whatever it holds.
        """
        first = await self.search_client.search(
            query.text, query.top_k, language=query.lang, search_filter=query.filter
        )
        if is_blank(query.lang) or first.count != 0:
            return first

        logger.info(f"No hits for lang='{query.lang}', retrying without the language filter")
        return await self.search_client.search(query.text, query.top_k, language=None, search_filter=query.filter)

    async def retrieve(self, request: RetrievalRequest) -> RetrievalOutcome:
        """
        Retrieve snippets for a coaching request.

        Args:
            request: The coaching request.

        Returns:
            The snippets in backend order, capped at top_k. On any search failure,
            an empty outcome carrying the error message.
        """
        query = build_query(request, top_k=self.top_k, max_chars=self.query_max_chars)

        try:
            result = await self.search_with_fallback(query)
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.warning(f"Retrieval failed, continuing without context: {message}")
            return RetrievalOutcome(snippets=[], error=message)

        snippets = [format_snippet(hit, self.snippet_max_chars) for hit in result.hits[: query.top_k]]
        logger.debug(f"Retrieved {len(snippets)} snippets from {result.count} hits")
        return RetrievalOutcome(snippets=snippets)
