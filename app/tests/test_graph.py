"""
Tests for the LangGraph orchestration module.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.rag.generator import FeedbackGenerator, GenerationError
from app.rag.graph import DEFAULT_GOAL, assemble_node, build_graph, resolve_goal
from app.rag.retriever import RetrievalOrchestrator
from app.schemas.retrieval import RetrievalOutcome, Snippet

SNIPPETS = [
    Snippet(id="card-1", score=0.9, text="[#card-1 score=0.900]\nGuidance 1"),
    Snippet(id="card-2", score=0.8, text="[#card-2 score=0.800]\nGuidance 2"),
]


def make_graph(outcome: RetrievalOutcome, feedback=None, error: Exception | None = None):
    retriever = MagicMock(spec=RetrievalOrchestrator)
    retriever.retrieve = AsyncMock(return_value=outcome)
    generator = MagicMock(spec=FeedbackGenerator)
    if error is not None:
        generator.generate.side_effect = error
    else:
        generator.generate.return_value = feedback
    return build_graph(retriever, generator), retriever, generator


class TestResolveGoal:
    def test_blank_goal_uses_default(self):
        assert resolve_goal(None) == DEFAULT_GOAL
        assert resolve_goal("  ") == DEFAULT_GOAL

    def test_goal_kept(self):
        assert resolve_goal("Kritik ansprechen") == "Kritik ansprechen"


class TestAssembleNode:
    def test_merges_feedback_and_diagnostics(self, sample_feedback):
        state = {"feedback": sample_feedback, "outcome": RetrievalOutcome(snippets=SNIPPETS)}
        response = assemble_node(state)["response"]

        assert response.summary == sample_feedback.summary
        assert response.scores == {"overall": 7.5, "clarity": 8.0}
        assert response.rag_context_count == 2
        assert [card.id for card in response.rag_context_cards] == ["card-1", "card-2"]
        assert response.rag_error is None

    def test_degraded_outcome(self, sample_feedback):
        state = {"feedback": sample_feedback, "outcome": RetrievalOutcome(error="boom")}
        response = assemble_node(state)["response"]

        assert response.rag_context_cards == []
        assert response.rag_context_count == 0
        assert response.rag_error == "boom"


class TestFeedbackGraph:
    async def test_snippets_are_passed_as_guidance(self, sample_request, sample_feedback):
        graph, retriever, generator = make_graph(RetrievalOutcome(snippets=SNIPPETS), feedback=sample_feedback)

        final_state = await graph.ainvoke({"request": sample_request})

        retriever.retrieve.assert_awaited_once_with(sample_request)
        generator.generate.assert_called_once_with(sample_request, DEFAULT_GOAL, [s.text for s in SNIPPETS])
        assert final_state["response"].rag_context_count == 2

    async def test_no_snippets_means_no_guidance(self, sample_request, sample_feedback):
        graph, _, generator = make_graph(RetrievalOutcome(), feedback=sample_feedback)

        await graph.ainvoke({"request": sample_request._replace(goal="Ziel")})

        assert generator.generate.call_args.args[1:] == ("Ziel", None)

    async def test_generation_error_propagates(self, sample_request):
        graph, _, _ = make_graph(RetrievalOutcome(snippets=SNIPPETS), error=GenerationError("model down"))

        with pytest.raises(GenerationError, match="model down"):
            await graph.ainvoke({"request": sample_request})
