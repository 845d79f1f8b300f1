from tortoise import fields

from .base import TimestampedModel


class AnalysisRun(TimestampedModel):
    session_id = fields.CharField(max_length=128, db_index=True)

    # Request
    conversation_type = fields.CharField(max_length=255)
    conversation_sub_type = fields.CharField(max_length=255, null=True)
    goal = fields.TextField(null=True)
    lang = fields.CharField(max_length=16, null=True)
    jurisdiction = fields.CharField(max_length=64, null=True)
    transcript_text = fields.TextField(null=True, description="Stored only when the client opts in")

    # Result
    analysis = fields.JSONField(description="Normalized feedback: summary, strengths, improvements, ...")
    rag_context = fields.JSONField(description="Retrieval diagnostics: cards, count, error")
    summary = fields.TextField(null=True)
    score_overall = fields.FloatField(null=True)

    @property
    def has_transcript(self) -> bool:
        return bool(self.transcript_text and self.transcript_text.strip())

    class Meta:
        table = "analysis_runs"
        table_description = "Coaching feedback runs"
