"""FastAPI dependencies resolving the services built at startup."""

from fastapi import Request

from app.rag.generator import CompetencyScorer
from app.rag.search_client import VectorSearchClient
from app.services.feedback_service import FeedbackComposer
from app.services.run_service import RunService


def get_composer(request: Request) -> FeedbackComposer:
    return request.app.state.composer


def get_search_client(request: Request) -> VectorSearchClient:
    return request.app.state.search_client


def get_run_service(request: Request) -> RunService:
    return request.app.state.run_service


def get_competency_scorer(request: Request) -> CompetencyScorer:
    return request.app.state.competency_scorer
