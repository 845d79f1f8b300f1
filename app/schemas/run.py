from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SESSION_ID_PATTERN = r"^[A-Za-z0-9_-]+$"


class RunRequest(BaseModel):
    """The coaching request a run was produced from."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    conversation_type: str = Field(..., min_length=1)
    conversation_sub_type: str | None = None
    goal: str | None = None
    transcript_text: str | None = None
    lang: str | None = None
    jurisdiction: str | None = None
    leader_label: str | None = None
    employee_label: str | None = None


class RunOptions(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    store_transcript: bool | None = Field(
        None, description="Store the transcript with the run. Defaults to true when a transcript is sent."
    )


class RunSaveRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    session_id: str = Field(..., min_length=8, max_length=128, pattern=SESSION_ID_PATTERN)
    request: RunRequest
    result: dict[str, Any] = Field(..., description="The composed feedback result to store.")
    options: RunOptions = Field(default_factory=RunOptions)
    transcript_text: str | None = Field(None, description="Transcript sent next to, not inside, the request.")


class RunSaveResponse(BaseModel):
    ok: bool = True
    run_id: UUID


class RunSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime | None = None
    conversation_type: str
    conversation_sub_type: str | None = None
    goal: str | None = None
    lang: str | None = None
    jurisdiction: str | None = None
    score_overall: float | None = None
    summary: str | None = None
    has_transcript: bool = False


class RunDetail(RunSummary):
    transcript_text: str | None = None
    analysis: dict[str, Any] = Field(default_factory=dict)
    rag_context: dict[str, Any] = Field(default_factory=dict)


class RunListResponse(BaseModel):
    ok: bool = True
    runs: list[RunSummary]


class RunDetailResponse(BaseModel):
    ok: bool = True
    run: RunDetail
