from tortoise import BaseDBAsyncClient


async def upgrade(db: BaseDBAsyncClient) -> str:
    return """
        CREATE TABLE IF NOT EXISTS "analysis_runs" (
            "id" UUID NOT NULL PRIMARY KEY,
            "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
            "session_id" VARCHAR(128) NOT NULL,
            "conversation_type" VARCHAR(255) NOT NULL,
            "conversation_sub_type" VARCHAR(255),
            "goal" TEXT,
            "lang" VARCHAR(16),
            "jurisdiction" VARCHAR(64),
            "transcript_text" TEXT,
            "analysis" JSONB NOT NULL,
            "rag_context" JSONB NOT NULL,
            "summary" TEXT,
            "score_overall" DOUBLE PRECISION
        );
        CREATE INDEX IF NOT EXISTS "idx_analysis_ru_session_5d1c2a" ON "analysis_runs" ("session_id");
        COMMENT ON COLUMN "analysis_runs"."transcript_text" IS 'Stored only when the client opts in';
        COMMENT ON COLUMN "analysis_runs"."analysis" IS 'Normalized feedback: summary, strengths, improvements, ...';
        COMMENT ON COLUMN "analysis_runs"."rag_context" IS 'Retrieval diagnostics: cards, count, error';
        COMMENT ON TABLE "analysis_runs" IS 'Coaching feedback runs';
        CREATE TABLE IF NOT EXISTS "aerich" (
            "id" SERIAL NOT NULL PRIMARY KEY,
            "version" VARCHAR(255) NOT NULL,
            "app" VARCHAR(100) NOT NULL,
            "content" JSONB NOT NULL
        );
    """


async def downgrade(db: BaseDBAsyncClient) -> str:
    return """
        DROP TABLE IF EXISTS "analysis_runs";"""
