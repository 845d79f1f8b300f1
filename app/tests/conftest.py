import pytest
from tortoise import Tortoise

from app.schemas.feedback import FeedbackOutput
from app.schemas.retrieval import RetrievalRequest


@pytest.fixture
async def db():
    await Tortoise.init(db_url="sqlite://:memory:", modules={"models": ["app.models"]})
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


@pytest.fixture
def sample_request():
    return RetrievalRequest(conversation_type="feedback", transcript_text="FK: Hallo\nMA: Hallo")


@pytest.fixture
def sample_feedback():
    return FeedbackOutput(
        summary="Klares Gespräch mit gutem Einstieg.",
        strengths=["Freundliche Begrüßung"],
        improvements=["Konkrete Beispiele nennen"],
        rewrites=["Mir ist aufgefallen, dass ..."],
        risk_flags=[],
        scores={"overall": 7.5, "clarity": 8.0},
    )
