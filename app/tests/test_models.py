import importlib

from app.core.config import Settings
from app.models import AnalysisRun


async def test_has_transcript(db):
    run = await AnalysisRun.create(
        session_id="session_1234",
        conversation_type="feedback",
        transcript_text="  ",
        analysis={},
        rag_context={},
    )
    assert run.has_transcript is False

    run.transcript_text = "FK: Hallo"
    await run.save()
    fetched = await AnalysisRun.get(id=run.id)
    assert fetched.has_transcript is True
    assert fetched.created_at is not None


async def test_default_database_matches_migration_dialect(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    migration = importlib.import_module("migrations.models.0_20251012093000_init")

    sql = await migration.upgrade(None)

    assert Settings(_env_file=None).DATABASE_URL.startswith("postgres://")
    assert "JSONB" in sql
    assert 'CREATE TABLE IF NOT EXISTS "analysis_runs"' in sql
