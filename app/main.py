import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from tortoise import Tortoise

from app.api import competencies, feedback, runs, search
from app.core.config import Settings, get_settings
from app.rag.generator import CompetencyScorer
from app.services.feedback_service import FeedbackComposer
from app.services.run_service import RunService

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    logger.info("Starting up the application...")
    settings: Settings = app.state.settings

    # Initialize Tortoise ORM
    await Tortoise.init(
        db_url=settings.DATABASE_URL,
        modules={"models": ["app.models", "aerich.models"]},
    )
    logger.info("Database initialized successfully")

    yield

    logger.info("Shutting down the application...")
    # Close database connections
    await Tortoise.close_connections()
    logger.info("Database connections closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Conversation Coach",
        description="Coaching feedback on conversation transcripts, enriched with retrieved guidance.",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Services are built once here and resolved per request via app.api.deps
    app.state.settings = settings
    app.state.composer = FeedbackComposer.from_settings(settings)
    app.state.search_client = app.state.composer.retriever.search_client
    app.state.competency_scorer = CompetencyScorer.from_settings(settings)
    app.state.run_service = RunService(settings)

    # Include API routers
    app.include_router(feedback.router, prefix="/api/v1", tags=["Feedback"])
    app.include_router(competencies.router, prefix="/api/v1", tags=["Competencies"])
    app.include_router(search.router, prefix="/api/v1", tags=["Search"])
    app.include_router(runs.router, prefix="/api/v1", tags=["Runs"])

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Perform a health check."""
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""
    settings = get_settings()
    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.PORT, reload=settings.APP_ENV == "dev")


if __name__ == "__main__":
    run()
