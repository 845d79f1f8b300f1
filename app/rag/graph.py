"""LangGraph orchestration for the coaching feedback pipeline.

This module implements the stateful graph that turns a coaching request into
feedback: retrieve → generate → assemble.
"""

import logging
from typing import TypedDict

import anyio
from langgraph.graph import END, StateGraph

from ..core.text import is_blank
from ..schemas.feedback import ComposedResult, FeedbackOutput, SnippetCard
from ..schemas.retrieval import RetrievalOutcome, RetrievalRequest
from .generator import FeedbackGenerator
from .retriever import RetrievalOrchestrator

logger = logging.getLogger(__name__)

DEFAULT_GOAL = "Provide clear, constructive coaching feedback."


class GraphState(TypedDict, total=False):
    """State dictionary that flows through the LangGraph nodes."""

    # Input
    request: RetrievalRequest

    # Intermediate state
    outcome: RetrievalOutcome
    feedback: FeedbackOutput

    # Output
    response: ComposedResult


def resolve_goal(goal: str | None) -> str:
    return DEFAULT_GOAL if is_blank(goal) else goal


def assemble_node(state: GraphState) -> GraphState:
    """
    Merge the generated feedback with the retrieval diagnostics.

    Args:
        state: Current graph state with feedback and retrieval outcome

    Returns:
        Updated state with the composed response
    """
    outcome = state.get("outcome") or RetrievalOutcome()
    feedback = state["feedback"]

    response = ComposedResult(
        **feedback.model_dump(),
        rag_context_cards=[SnippetCard(**snippet.to_dict()) for snippet in outcome.snippets],
        rag_context_count=outcome.count,
        rag_error=outcome.error,
    )

    return {**state, "response": response}


def build_graph(retriever: RetrievalOrchestrator, generator: FeedbackGenerator):
    """
    Build and compile the LangGraph for coaching feedback.

    Args:
        retriever: Retrieval step; never raises.
        generator: Generation step; its errors propagate out of the graph.

    Returns:
        Compiled LangGraph instance ready for execution
    """

    async def retrieve_node(state: GraphState) -> GraphState:
        outcome = await retriever.retrieve(state["request"])
        if outcome.error:
            logger.warning(f"Retrieval degraded: {outcome.error}")
        return {**state, "outcome": outcome}

    async def generate_node(state: GraphState) -> GraphState:
        request = state["request"]
        outcome = state["outcome"]
        guidance = [snippet.text for snippet in outcome.snippets]

        # The DSPy call is blocking
        feedback = await anyio.to_thread.run_sync(
            generator.generate, request, resolve_goal(request.goal), guidance or None
        )
        return {**state, "feedback": feedback}

    graph = StateGraph(GraphState)

    graph.add_node("retrieve", retrieve_node)
    graph.add_node("generate", generate_node)
    graph.add_node("assemble", assemble_node)

    graph.set_entry_point("retrieve")

    graph.add_edge("retrieve", "generate")
    graph.add_edge("generate", "assemble")
    graph.add_edge("assemble", END)

    compiled_graph = graph.compile()

    logger.info("Feedback graph compiled successfully")

    return compiled_graph
