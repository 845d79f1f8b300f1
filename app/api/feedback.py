from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_composer
from app.rag.generator import GenerationError
from app.schemas.feedback import FeedbackRequest, FeedbackResponse
from app.services.feedback_service import FeedbackComposer

router = APIRouter()


@router.post("/feedback", response_model=FeedbackResponse)
async def feedback(payload: FeedbackRequest, composer: FeedbackComposer = Depends(get_composer)) -> FeedbackResponse:
    """
    Generates coaching feedback for a conversation transcript.

    Reference snippets are retrieved from the vector index and handed to the
    model as guidance. If retrieval fails, feedback is still generated and the
    reason is returned in `rag_error`; if generation fails, the request fails.
    """
    try:
        result = await composer.compose_feedback(payload.to_retrieval_request())
        return FeedbackResponse(result=result)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except GenerationError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {e}") from e
