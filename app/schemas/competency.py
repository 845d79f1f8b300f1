from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CompetencyRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    transcript_text: str = Field(..., min_length=1, description="The conversation transcript.")
    lang: str | None = Field(None, description="Output language, e.g. 'de'.")
    leader_label: str | None = Field(None, description="Speaker label of the leader in the transcript, e.g. 'FK'.")
    employee_label: str | None = Field(None, description="Speaker label of the employee, e.g. 'MA'.")


class CompetencyRating(BaseModel):
    """Rating of one leadership competency (C1 to C10)."""

    id: str = Field(..., description="Competency id, e.g. 'C3'.")
    name: str = Field(..., description="Competency name.")
    score: int | None = Field(..., ge=1, le=4, description="1 to 4, or null when not observable.")
    confidence: float | None = Field(None, ge=0, le=1)
    why: str = Field(..., description="Short reason; 'nicht ausreichend beobachtbar' when score is null.")
    evidence: list[str] = Field(default_factory=list, max_length=3, description="Anonymized quotes.")


class CompetencyResult(BaseModel):
    competencies: list[CompetencyRating]


class CompetencyResponse(BaseModel):
    ok: bool = True
    result: CompetencyResult
