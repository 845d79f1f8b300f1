from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.deps import get_search_client
from app.rag.search_client import SearchBackendError, VectorSearchClient

router = APIRouter()


@router.get("/search/smoke")
async def search_smoke(
    text: str = Query("", description="Query text."),
    lang: str | None = Query(None, description="Optional language filter."),
    top_k: int = Query(5, ge=1, le=100, description="Number of hits."),
    debug: bool = Query(False, description="Include the raw backend response."),
    client: VectorSearchClient = Depends(get_search_client),
) -> dict[str, Any]:
    """
    Runs a direct vector search to check the index configuration.

    Unlike the feedback endpoint, backend failures are reported as errors here.
    """
    query = {"text": text, "lang": lang, "top_k": top_k}
    try:
        result = await client.search(text, top_k, language=lang)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except SearchBackendError as e:
        raise HTTPException(status_code=502, detail={"error": str(e), "query": query}) from e

    return {
        "ok": True,
        "query": query,
        "count": result.count,
        "results": [{"id": hit.id, "score": hit.score, "metadata": hit.fields} for hit in result.hits],
        "raw": result.raw if debug else None,
    }
