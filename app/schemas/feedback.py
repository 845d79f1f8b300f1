from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .retrieval import RetrievalRequest


class FeedbackRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    conversation_type: str = Field(..., min_length=1, description="Type of conversation, e.g. 'feedback'.")
    transcript_text: str = Field(..., min_length=1, description="The conversation transcript.")
    conversation_sub_type: str | None = Field(None, description="Optional subtype, e.g. 'kritisch'.")
    goal: str | None = Field(None, description="What the leader wanted to achieve.")
    lang: str | None = Field(None, description="Output and retrieval language, e.g. 'de'.")
    jurisdiction: str | None = Field(None, description="Jurisdiction context, e.g. 'de_eu'.")
    leader_label: str | None = Field(None, description="Speaker label of the leader in the transcript, e.g. 'FK'.")
    employee_label: str | None = Field(None, description="Speaker label of the employee, e.g. 'MA'.")

    def to_retrieval_request(self) -> RetrievalRequest:
        return RetrievalRequest(
            conversation_type=self.conversation_type,
            transcript_text=self.transcript_text,
            conversation_sub_type=self.conversation_sub_type,
            goal=self.goal,
            lang=self.lang,
            jurisdiction=self.jurisdiction,
            leader_label=self.leader_label,
            employee_label=self.employee_label,
        )


class FeedbackOutput(BaseModel):
    """Structured coaching feedback produced by the language model."""

    summary: str = Field(..., description="A short summary of the feedback.")
    strengths: list[str] = Field(default_factory=list, description="What the leader did well.")
    improvements: list[str] = Field(default_factory=list, description="Areas for improvement.")
    rewrites: list[str] = Field(default_factory=list, description="Better phrasings for weak statements.")
    risk_flags: list[str] = Field(default_factory=list, description="Potential risks in the conversation.")
    scores: dict[str, float] = Field(
        default_factory=dict,
        description="Scores per aspect on a 0-10 scale, including 'overall'.",
    )


class SnippetCard(BaseModel):
    id: str = Field(..., description="Identifier of the retrieved card.")
    score: float = Field(..., description="Backend similarity score.")
    text: str = Field(..., description="The snippet as passed to the model.")


class ComposedResult(FeedbackOutput):
    """Generated feedback plus retrieval diagnostics."""

    rag_context_cards: list[SnippetCard] = Field(default_factory=list)
    rag_context_count: int = Field(0, ge=0)
    rag_error: str | None = Field(None, description="Why retrieval degraded, if it did.")


class FeedbackResponse(BaseModel):
    ok: bool = True
    result: ComposedResult
