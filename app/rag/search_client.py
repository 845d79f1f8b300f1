"""Text-based similarity search against a Pinecone index over its REST API.

The index embeds the query text itself ("integrated embedding"), so the client
only sends text. Endpoint:

    POST https://{index_host}/records/namespaces/{namespace}/search
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from ..core.config import Settings
from ..core.text import clean_host, is_blank
from ..schemas.retrieval import RawSearchResult, SearchHit

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "__default__"
DEFAULT_API_VERSION = "2025-10"
MAX_ERROR_BODY_CHARS = 800

# Payload fields requested for every hit.
DEFAULT_FIELDS = (
    "chunk_text",
    "title",
    "card_group_id",
    "card_type",
    "card_version",
    "version",
    "dataset_version",
    "status",
    "lang",
    "conversation_type",
    "conversation_types",
    "skill",
    "skills",
    "competency_ids",
    "competency_primary",
    "competency_secondary",
    "seniority",
    "jurisdiction",
    "workplace_context",
    "level_min",
    "level_max",
    "source_id",
    "source_ref",
    "created_at",
    "updated_at",
)


class SearchBackendError(Exception):
    """Raised when the vector backend cannot be reached or answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None, response_text: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_text = response_text


class VectorSearchClient:
    """
    Stateless client for the vector index.

    Credentials and host are checked when a search is issued, not at construction,
    so a misconfigured index degrades retrieval instead of failing startup.
    """

    def __init__(
        self,
        api_key: str,
        index_host: str,
        namespace: str = DEFAULT_NAMESPACE,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = 10.0,
        fields: tuple[str, ...] = DEFAULT_FIELDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.index_host = clean_host(index_host or "")
        self.namespace = (namespace or "").strip() or DEFAULT_NAMESPACE
        self.api_version = api_version
        self.timeout = timeout
        self.fields = list(fields)
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> "VectorSearchClient":
        return cls(
            api_key=settings.PINECONE_API_KEY,
            index_host=settings.PINECONE_INDEX_HOST,
            namespace=settings.PINECONE_NAMESPACE,
            api_version=settings.PINECONE_API_VERSION,
            timeout=settings.SEARCH_TIMEOUT_SECONDS,
            transport=transport,
        )

    @property
    def search_url(self) -> str:
        if not self.api_key:
            raise SearchBackendError("Missing environment variable: PINECONE_API_KEY")
        if not self.index_host:
            raise SearchBackendError("Missing environment variable: PINECONE_INDEX_HOST")
        return f"https://{self.index_host}/records/namespaces/{quote(self.namespace, safe='')}/search"

    def build_body(
        self,
        query: str,
        top_k: int,
        language: str | None = None,
        search_filter: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Build the JSON body for a search call.

        The language, when given, is merged into the filter as `lang` unless the
        filter already pins one. An empty filter is left out of the body.
        """
        merged = dict(search_filter) if search_filter else {}
        if not is_blank(language) and "lang" not in merged:
            merged["lang"] = language.strip()

        body: dict[str, Any] = {
            "query": {"inputs": {"text": query}, "top_k": top_k},
            "fields": self.fields,
        }
        if merged:
            body["query"]["filter"] = merged
        return body

    async def search(
        self,
        query: str,
        top_k: int,
        language: str | None = None,
        search_filter: dict[str, Any] | None = None,
    ) -> RawSearchResult:
        """
        Run a single similarity search.

        Args:
            query: The query text. The backend embeds it.
            top_k: Maximum number of hits to ask for.
            language: Optional language, merged into the filter.
            search_filter: Optional exact-match filter over payload fields.

        Returns:
            The backend's hits, in backend order with backend scores.

        Raises:
            ValueError: If the query text is blank.
            SearchBackendError: On missing configuration, transport failure, timeout,
                a non-2xx response, or an undecodable response body.
        """
        if is_blank(query):
            raise ValueError("Missing search text.")

        url = self.search_url
        body = self.build_body(query.strip(), top_k, language, search_filter)
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Api-Key": self.api_key,
            "X-Pinecone-Api-Version": self.api_version,
        }

        logger.debug(
            f"Searching namespace '{self.namespace}' with top_k={top_k}, filter={body['query'].get('filter')}"
        )

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=body, headers=headers)
        except httpx.TimeoutException as e:
            raise SearchBackendError(f"Vector search timed out after {self.timeout}s: {e}") from e
        except httpx.HTTPError as e:
            raise SearchBackendError(f"Vector search request failed: {e}") from e

        if not response.is_success:
            text = response.text[:MAX_ERROR_BODY_CHARS]
            logger.warning(f"Vector search returned {response.status_code}: {text}")
            raise SearchBackendError(
                f"Vector search failed ({response.status_code} {response.reason_phrase}): {text}",
                status_code=response.status_code,
                response_text=text,
            )

        try:
            raw = response.json()
        except ValueError as e:
            raise SearchBackendError(
                f"Vector search returned an invalid JSON body: {e}",
                status_code=response.status_code,
                response_text=response.text[:MAX_ERROR_BODY_CHARS],
            ) from e

        hits = parse_hits(raw)
        logger.debug(f"Vector search returned {len(hits)} hits")
        return RawSearchResult(hits=hits, raw=raw if isinstance(raw, dict) else None)


def parse_hits(raw: Any) -> list[SearchHit]:
    """
    Convert the backend's `result.hits` list into SearchHits.

    Order and scores are kept as the backend sent them. A missing score becomes
    0.0; a score that is not a number becomes NaN so callers can tell it apart.
    """
    result = raw.get("result") if isinstance(raw, dict) else None
    raw_hits = result.get("hits") if isinstance(result, dict) else None
    if not isinstance(raw_hits, list):
        return []

    hits = []
    for item in raw_hits:
        if not isinstance(item, dict):
            continue
        payload = item.get("fields")
        hits.append(
            SearchHit(
                id=str(item.get("_id") or ""),
                score=_coerce_score(item.get("_score")),
                fields=payload if isinstance(payload, dict) else {},
            )
        )
    return hits


def _coerce_score(value: Any) -> float:
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return float("nan")
