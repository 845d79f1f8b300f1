import logging
from typing import Any
from uuid import UUID

from app.core.config import Settings
from app.core.text import is_blank
from app.models import AnalysisRun
from app.schemas.run import RunSaveRequest

logger = logging.getLogger(__name__)

# Result keys per analysis field, highest priority first.
ANALYSIS_LIST_KEYS = {
    "strengths": ("strengths",),
    "improvements": ("improvements",),
    "rewrites": ("rewrites",),
    "risk_flags": ("risk_flags", "riskFlags"),
    "competency_ratings": ("competency_ratings", "competencyRatings"),
}


def _first_present(result: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if result.get(key) is not None:
            return result[key]
    return None


def _clean(value: Any) -> str | None:
    return None if is_blank(value) else value.strip()


def normalize_analysis(result: dict[str, Any]) -> dict[str, Any]:
    """
    Reduce a composed result to the stable analysis document stored with a run.

    Lists default to empty and scores to an empty mapping. A blank summary and a
    missing competency_error are stored as None.
    """
    analysis: dict[str, Any] = {"summary": _clean(result.get("summary"))}
    for name, keys in ANALYSIS_LIST_KEYS.items():
        value = _first_present(result, keys)
        analysis[name] = value if isinstance(value, list) else []
    scores = result.get("scores")
    analysis["scores"] = scores if isinstance(scores, dict) else {}
    error = _first_present(result, ("competency_error", "competencyError"))
    analysis["competency_error"] = error if isinstance(error, str) else None
    return analysis


def normalize_rag_context(result: dict[str, Any]) -> dict[str, Any]:
    cards = result.get("rag_context_cards")
    count = result.get("rag_context_count")
    error = result.get("rag_error")
    return {
        "cards": cards if isinstance(cards, list) else [],
        "count": count if isinstance(count, int) and not isinstance(count, bool) else None,
        "error": error if isinstance(error, str) else None,
    }


def overall_score(analysis: dict[str, Any]) -> float | None:
    value = analysis["scores"].get("overall")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return None


class RunService:
    """
    Service for persisting coaching runs, grouped by a client-supplied session id.
    """

    def __init__(self, settings: Settings | None = None):
        self.list_limit = settings.RUNS_LIST_LIMIT if settings else 50

    async def save_run(self, payload: RunSaveRequest) -> UUID:
        """
        Store a composed result together with the request it came from.

        The transcript is stored only if the client opted in; without an explicit
        option, it is stored whenever one was sent.

        Returns:
            The ID of the new run.
        """
        request = payload.request
        transcript = _clean(request.transcript_text) or _clean(payload.transcript_text)
        store_transcript = payload.options.store_transcript
        if store_transcript is None:
            store_transcript = transcript is not None

        analysis = normalize_analysis(payload.result)

        run = await AnalysisRun.create(
            session_id=payload.session_id,
            conversation_type=request.conversation_type,
            conversation_sub_type=request.conversation_sub_type,
            goal=request.goal,
            lang=request.lang,
            jurisdiction=request.jurisdiction,
            transcript_text=transcript if store_transcript else None,
            analysis=analysis,
            rag_context=normalize_rag_context(payload.result),
            summary=analysis["summary"],
            score_overall=overall_score(analysis),
        )
        logger.info(f"Saved run {run.id} for session {payload.session_id} (transcript stored: {store_transcript})")
        return run.id

    async def list_runs(self, session_id: str) -> list[AnalysisRun]:
        """Return the newest runs of a session, newest first."""
        return await AnalysisRun.filter(session_id=session_id).order_by("-created_at").limit(self.list_limit)

    async def get_run(self, session_id: str, run_id: UUID) -> AnalysisRun | None:
        """Return a run, or None if it does not exist in this session."""
        return await AnalysisRun.get_or_none(id=run_id, session_id=session_id)
