"""
Pytest configuration and shared fixtures.

This module provides fixtures and configuration used across all tests.
"""

import logging
from typing import Any
from unittest.mock import AsyncMock

import pytest

from generative_db.connectors.base import BaseConnector, QueryError, QueryResult
from generative_db.llm.models import LLMResponse, LLMToolCall, LLMUsage
from generative_db.schema.models import (
    Column,
    Constraint,
    ConstraintType,
    SchemaSnapshot,
    Table,
)

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests (requires a SQL Server instance and API keys)",
    )


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (may require external services)"
    )
    config.addinivalue_line("markers", "slow: mark test as slow (takes more than 1 second)")
    config.addinivalue_line("markers", "unit: mark test as unit test (default)")


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless explicitly enabled."""
    if config.getoption("--run-integration"):
        return
    skip_integration = pytest.mark.skip(
        reason="Integration tests disabled (use --run-integration to enable)."
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(autouse=True)
def configure_test_logging(caplog):
    """Capture everything down to DEBUG for all tests."""
    caplog.set_level(logging.DEBUG)
    yield


# ============================================================================
# Environment and Configuration
# ============================================================================


@pytest.fixture(autouse=True)
def mock_openai_api_key(monkeypatch):
    """
    Provide an OpenAI API key so settings validate.

    Runs automatically for all tests; the settings cache is cleared before
    and after so each test sees its own environment.
    """
    from generative_db.config import get_settings

    get_settings.cache_clear()
    monkeypatch.setenv("GENERATIVE_DB_ENV_SOURCE", "environment")

    test_key = "sk-test-key-1234567890-abcdefghijklmnop"  # 20+ chars
    monkeypatch.setenv("LLM_OPENAI_API_KEY", test_key)
    yield test_key

    get_settings.cache_clear()


# ============================================================================
# Fake SQL Server connector
# ============================================================================


class FakeConnector(BaseConnector):
    """
    In-memory connector.

    Responses are matched by substring against the executed statement; the
    first registered match wins. Every executed statement is recorded.
    """

    dialect = "mssql"

    def __init__(self, snapshot: SchemaSnapshot | None = None):
        super().__init__(host="fake", port=1433, database="TestDb", user="sa", password="")
        self.snapshot = snapshot or SchemaSnapshot(database="TestDb")
        self.responses: list[tuple[str, list[dict[str, Any]] | Exception]] = []
        self.executed: list[str] = []
        self.closed = False

    def add_response(self, fragment: str, rows: list[dict[str, Any]] | Exception) -> None:
        self.responses.append((fragment, rows))

    async def connect(self) -> None:
        self._connected = True

    async def execute(self, query, params=None, timeout=None) -> QueryResult:
        self.executed.append(query)
        for fragment, rows in self.responses:
            if fragment in query:
                if isinstance(rows, Exception):
                    raise rows
                return QueryResult(
                    rows=rows,
                    row_count=len(rows),
                    columns=list(rows[0].keys()) if rows else [],
                    execution_time_ms=1.0,
                )
        raise QueryError(f"Query execution failed: no fake response for {query[:60]}")

    async def get_schema(self, schema_name=None) -> SchemaSnapshot:
        return self.snapshot

    async def close(self) -> None:
        self.closed = True
        self._connected = False


@pytest.fixture
def products_table() -> Table:
    """dbo.Products(Id int NOT NULL PK pk_products, Name nvarchar NULL)."""
    return Table(
        table_name="Products",
        table_schema="dbo",
        columns=[
            Column(column_name="Id", data_type="int", is_nullable=False),
            Column(column_name="Name", data_type="nvarchar", is_nullable=True),
        ],
        constraints=[
            Constraint(
                constraint_name="pk_products",
                constraint_type=ConstraintType.PRIMARY_KEY,
                column_name="Id",
            )
        ],
    )


@pytest.fixture
def orders_table() -> Table:
    return Table(
        table_name="Orders",
        table_schema="sales",
        table_description="Customer orders",
        columns=[
            Column(column_name="OrderId", data_type="int", is_nullable=False),
            Column(column_name="ProductId", data_type="int", is_nullable=False),
            Column(column_name="Receipt", data_type="image"),
        ],
        constraints=[
            Constraint(
                constraint_name="fk_orders_products",
                constraint_type=ConstraintType.FOREIGN_KEY,
                column_name="ProductId",
                referenced_schema="dbo",
                referenced_table="Products",
                referenced_column="Id",
            )
        ],
    )


@pytest.fixture
def snapshot(products_table, orders_table) -> SchemaSnapshot:
    return SchemaSnapshot(tables=(products_table, orders_table), database="TestDb")


@pytest.fixture
def fake_connector(snapshot) -> FakeConnector:
    connector = FakeConnector(snapshot)
    connector.add_response(
        "FROM [dbo].[Products]",
        [{"Id": 1, "Name": "Widget"}, {"Id": 2, "Name": None}],
    )
    connector.add_response("FROM [sales].[Orders]", [{"OrderId": 10, "ProductId": 1}])
    return connector


# ============================================================================
# Mock LLM Provider
# ============================================================================


def _usage() -> LLMUsage:
    return LLMUsage(prompt_tokens=1, completion_tokens=1, total_tokens=2)


@pytest.fixture
def mock_llm_provider():
    """
    Mock LLM provider for testing agents and tools.

    Usage:
        def test_agent(mock_llm_provider):
            mock_llm_provider.queue(
                mock_llm_provider.tool_call("list-tables-sql"),
                mock_llm_provider.answer("done"),
            )
    """

    class MockLLMProvider:
        provider_name = "mock"
        model = "mock-model"

        def __init__(self):
            self.generate = AsyncMock()
            self._call_ids = 0

        def set_response(self, response: str):
            """Set the text response that generate() will always return."""
            self.generate.return_value = self.answer(response)

        def queue(self, *responses: LLMResponse):
            self.generate.side_effect = list(responses)

        def answer(self, content: str) -> LLMResponse:
            return LLMResponse(
                content=content,
                model=self.model,
                usage=_usage(),
                finish_reason="stop",
                provider="mock",
            )

        def tool_call(self, name: str, tool_input: str = "") -> LLMResponse:
            self._call_ids += 1
            return LLMResponse(
                content="",
                tool_calls=[
                    LLMToolCall(
                        id=f"call_{self._call_ids}",
                        name=name,
                        arguments={"input": tool_input},
                    )
                ],
                model=self.model,
                usage=_usage(),
                finish_reason="tool_calls",
                provider="mock",
            )

    return MockLLMProvider()


@pytest.fixture
def fake_connector_factory():
    """Build a FakeConnector around any snapshot."""
    return FakeConnector
