"""
End-to-end tests against a real SQL Server and LLM provider.

Skipped unless explicitly run:
    pytest tests/integration --run-integration

Requires DB_* and LLM_* settings for a reachable server and a valid key.
"""

import pytest

from generative_db.config import get_settings
from generative_db.pipeline.orchestrator import GenerativeDBPipeline

pytestmark = pytest.mark.integration


@pytest.fixture
def settings(monkeypatch):
    monkeypatch.setenv("GENERATIVE_DB_ENV_SOURCE", "dotenv")
    return get_settings()


@pytest.mark.asyncio
async def test_schema_and_tables(settings):
    async with await GenerativeDBPipeline.create(settings) as pipeline:
        listing = await pipeline.run_tool("list-tables-sql")
        assert listing.success

        text = await pipeline.schema_text()
        if pipeline.database.selected_tables():
            assert "CREATE TABLE [" in text


@pytest.mark.asyncio
async def test_answers_simple_question(settings):
    async with await GenerativeDBPipeline.create(settings) as pipeline:
        result = await pipeline.run("How many tables are there in the database?")

    assert result.success, result.error
    assert result.answer
    assert result.steps
