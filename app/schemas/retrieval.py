"""Data schemas for the retrieval pipeline."""

from dataclasses import dataclass, field
from typing import Any, NamedTuple


class RetrievalRequest(NamedTuple):
    """A coaching request as seen by the retrieval pipeline. Built once per request."""

    conversation_type: str
    transcript_text: str
    conversation_sub_type: str | None = None
    goal: str | None = None
    lang: str | None = None
    jurisdiction: str | None = None
    leader_label: str | None = None
    employee_label: str | None = None


class RetrievalQuery(NamedTuple):
    """The query sent to the vector index for one request."""

    text: str
    top_k: int
    filter: dict[str, str]
    lang: str | None = None


class SearchHit(NamedTuple):
    """Represents a search hit as returned by the vector backend."""

    id: str
    score: float
    fields: dict[str, Any]


class RawSearchResult(NamedTuple):
    """Hits from one search call, in backend order."""

    hits: list[SearchHit]
    raw: dict[str, Any] | None = None

    @property
    def count(self) -> int:
        return len(self.hits)


class Snippet(NamedTuple):
    """A bounded unit of retrieved text, ready for prompt inclusion."""

    id: str
    score: float
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "score": self.score, "text": self.text}


@dataclass(frozen=True)
class RetrievalOutcome:
    """Result of the retrieval step. A failed retrieval is an empty outcome with `error` set."""

    snippets: list[Snippet] = field(default_factory=list)
    error: str | None = None

    @property
    def count(self) -> int:
        return len(self.snippets)
