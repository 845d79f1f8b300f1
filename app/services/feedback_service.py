import logging

from app.core.config import Settings
from app.core.text import is_blank
from app.rag.generator import FeedbackGenerator
from app.rag.graph import build_graph
from app.rag.retriever import RetrievalOrchestrator
from app.rag.search_client import VectorSearchClient
from app.schemas.feedback import ComposedResult
from app.schemas.retrieval import RetrievalRequest

logger = logging.getLogger(__name__)


class FeedbackComposer:
    """
    Service for composing coaching feedback using the LangGraph pipeline.

    Retrieval failures degrade to feedback without guidance; generation
    failures are raised to the caller.
    """

    def __init__(self, retriever: RetrievalOrchestrator, generator: FeedbackGenerator):
        self.retriever = retriever
        self.generator = generator
        self.compiled_graph = build_graph(retriever, generator)

    @classmethod
    def from_settings(cls, settings: Settings) -> "FeedbackComposer":
        search_client = VectorSearchClient.from_settings(settings)
        retriever = RetrievalOrchestrator.from_settings(settings, search_client)
        return cls(retriever, FeedbackGenerator.from_settings(settings))

    async def compose_feedback(self, request: RetrievalRequest) -> ComposedResult:
        """
        Generates coaching feedback for a transcript, enriched with retrieved guidance.

        Args:
            request: The coaching request.

        Returns:
            The generated feedback merged with rag_context_cards, rag_context_count and rag_error.

        Raises:
            ValueError: If the conversation type or transcript is blank.
            GenerationError: If the language model fails.
        """
        if is_blank(request.conversation_type):
            raise ValueError("Missing conversationType.")
        if is_blank(request.transcript_text):
            raise ValueError("Missing transcriptText.")

        logger.info(f"Composing feedback for conversation_type='{request.conversation_type}', lang={request.lang}")

        final_state = await self.compiled_graph.ainvoke({"request": request})
        result = final_state["response"]

        logger.info(f"Feedback composed with {result.rag_context_count} snippets, rag_error={result.rag_error is not None}")
        return result
