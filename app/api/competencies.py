import anyio
from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_competency_scorer
from app.rag.generator import CompetencyScorer, GenerationError
from app.schemas.competency import CompetencyRequest, CompetencyResponse, CompetencyResult

router = APIRouter()


@router.post("/competencies", response_model=CompetencyResponse)
async def score_competencies(
    payload: CompetencyRequest, scorer: CompetencyScorer = Depends(get_competency_scorer)
) -> CompetencyResponse:
    """Rates the leader of a conversation on the competencies C1 to C10."""
    try:
        # The DSPy call is blocking
        ratings = await anyio.to_thread.run_sync(scorer.score, payload)
        return CompetencyResponse(result=CompetencyResult(competencies=ratings))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except GenerationError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {e}") from e
