"""
Unit tests for GenerativeDBPipeline.

Builds the pipeline around a fake connector and a scripted LLM and checks
construction order, request handling and cleanup.
"""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from generative_db.config import Settings
from generative_db.models.agent import Message
from generative_db.pipeline.orchestrator import GenerativeDBPipeline, PipelineResult
from generative_db.schema.models import TableNotFoundError


@pytest.fixture
def settings():
    settings = Settings()
    settings.schema_selection.sample_rows = 2
    settings.agent.max_iterations = 3
    return settings


@pytest_asyncio.fixture
async def pipeline(settings, fake_connector, mock_llm_provider):
    pipeline = await GenerativeDBPipeline.create(
        settings, connector=fake_connector, llm=mock_llm_provider
    )
    pipeline.agent._sleep = AsyncMock()
    return pipeline


class TestCreate:
    @pytest.mark.asyncio
    async def test_builds_agent_from_settings(self, pipeline, fake_connector):
        assert fake_connector.is_connected
        assert pipeline.agent.max_iterations == 3
        assert pipeline.agent.top_k == 10
        assert pipeline.database.sample_rows == 2
        assert sorted(pipeline.tools.names()) == [
            "info-sql",
            "list-tables-sql",
            "query-checker",
            "query-sql",
        ]

    @pytest.mark.asyncio
    async def test_missing_api_key_fails_before_database(self, settings, fake_connector):
        settings.llm = settings.llm.model_copy(update={"openai_api_key": None})

        with pytest.raises(ValueError, match="OpenAI API key is required"):
            await GenerativeDBPipeline.create(settings, connector=fake_connector)

        assert not fake_connector.is_connected
        assert fake_connector.executed == []

    @pytest.mark.asyncio
    async def test_bad_table_selection_closes_connector(
        self, settings, fake_connector, mock_llm_provider
    ):
        settings.schema_selection.include_tables = ["Prodcts"]

        with pytest.raises(TableNotFoundError):
            await GenerativeDBPipeline.create(
                settings, connector=fake_connector, llm=mock_llm_provider
            )

        assert fake_connector.closed


class TestRun:
    @pytest.mark.asyncio
    async def test_successful_request(self, pipeline, mock_llm_provider, fake_connector):
        fake_connector.add_response("COUNT(*)", [{"total": 2}])
        mock_llm_provider.queue(
            mock_llm_provider.tool_call("query-sql", "SELECT COUNT(*) AS total FROM dbo.Products"),
            mock_llm_provider.answer("There are 2 products."),
        )

        result = await pipeline.run("How many products?", request_id="r-1")

        assert isinstance(result, PipelineResult)
        assert result.success
        assert result.answer == "There are 2 products."
        assert result.generated_sql == "SELECT COUNT(*) AS total FROM dbo.Products"
        assert len(result.steps) == 1
        assert result.llm_calls == 2
        assert result.error is None

    @pytest.mark.asyncio
    async def test_conversation_history_forwarded(self, pipeline, mock_llm_provider):
        mock_llm_provider.queue(mock_llm_provider.answer("Same as before."))

        await pipeline.run(
            "And yesterday?",
            conversation_history=[Message(role="user", content="Orders today?")],
        )

        request = mock_llm_provider.generate.await_args.args[0]
        assert [m.content for m in request.messages[1:]] == ["Orders today?", "And yesterday?"]

    @pytest.mark.asyncio
    async def test_exhaustion_reported_not_raised(self, pipeline, mock_llm_provider):
        mock_llm_provider.queue(
            *[mock_llm_provider.tool_call("list-tables-sql") for _ in range(3)]
        )

        result = await pipeline.run("Keep going")

        assert not result.success
        assert result.answer is None
        assert "after 3 iterations" in result.error
        assert len(result.steps) == 3
        assert result.llm_calls == 3

    @pytest.mark.asyncio
    async def test_llm_failure_reported(self, pipeline, mock_llm_provider):
        mock_llm_provider.generate.side_effect = RuntimeError("invalid api key")

        result = await pipeline.run("Anything")

        assert not result.success
        assert "invalid api key" in result.error
        assert mock_llm_provider.generate.await_count == 2

    @pytest.mark.asyncio
    async def test_llm_failure_keeps_steps(self, pipeline, mock_llm_provider):
        mock_llm_provider.generate.side_effect = [
            mock_llm_provider.tool_call("list-tables-sql"),
            RuntimeError("503"),
            RuntimeError("503"),
        ]

        result = await pipeline.run("Which tables?")

        assert not result.success
        assert [step.tool for step in result.steps] == ["list-tables-sql"]
        assert result.steps[0].output == "dbo.Products\nsales.Orders -- Customer orders"


class TestDirectAccess:
    @pytest.mark.asyncio
    async def test_run_tool(self, pipeline):
        result = await pipeline.run_tool("list-tables-sql")
        assert result.output == "dbo.Products\nsales.Orders -- Customer orders"

    @pytest.mark.asyncio
    async def test_run_unknown_tool(self, pipeline):
        result = await pipeline.run_tool("nope")
        assert not result.success

    @pytest.mark.asyncio
    async def test_schema_text(self, pipeline):
        text = await pipeline.schema_text()
        assert "CREATE TABLE [dbo].[Products] (" in text
        assert "CREATE TABLE [sales].[Orders] (" in text

    @pytest.mark.asyncio
    async def test_context_manager_closes(self, pipeline, fake_connector):
        async with pipeline as active:
            assert active is pipeline
        assert fake_connector.closed
