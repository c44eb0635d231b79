"""
Base Agent Framework

Abstract base class for agents. Provides a consistent call interface with
timing, logging, retry of recoverable errors and error wrapping.

Usage:
    class MyAgent(BaseAgent):
        def __init__(self):
            super().__init__(name="MyAgent")

        async def execute(self, input: AgentInput) -> AgentOutput:
            return AgentOutput(success=True, metadata=self._create_metadata())
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TypeVar

from generative_db.models.agent import (
    AgentError,
    AgentInput,
    AgentMetadata,
    AgentOutput,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseAgent(ABC):
    """
    Abstract base class for agents.

    Attributes:
        name: Unique identifier for this agent
        max_retries: Retry attempts for errors marked recoverable
    """

    def __init__(self, name: str, max_retries: int = 1):
        self.name = name
        self.max_retries = max_retries
        self._metadata = self._create_metadata()

        logger.info(
            f"Initialized {self.name}",
            extra={"agent": self.name, "max_retries": max_retries},
        )

    @abstractmethod
    async def execute(self, input: AgentInput) -> AgentOutput:
        """
        Execute the agent's core logic.

        Raises:
            AgentError: On execution failures (recoverable or not)
        """
        pass  # pragma: no cover - abstract method

    async def __call__(self, input: AgentInput) -> AgentOutput:
        """
        Run execute() once with timing and logging.

        AgentErrors propagate unchanged. Any other exception is wrapped in a
        non-recoverable AgentError. Retrying individual operations inside
        execute() is done with _with_retries().
        """
        start_time = time.perf_counter()
        self._metadata = self._create_metadata()

        logger.info(
            f"Starting {self.name}",
            extra={"agent": self.name, "query": input.query[:100]},
        )

        try:
            output = await self.execute(input)
        except AgentError as e:
            self._finish(start_time, error=str(e))
            logger.error(
                f"Failed {self.name}",
                extra={
                    "agent": self.name,
                    "error": str(e),
                    "recoverable": e.recoverable,
                    "context": e.context,
                },
            )
            raise
        except Exception as e:
            self._finish(start_time, error=str(e))
            logger.error(
                f"Unexpected error in {self.name}",
                extra={"agent": self.name, "error_type": type(e).__name__},
                exc_info=True,
            )
            raise AgentError(
                agent=self.name,
                message=f"Unexpected error: {e}",
                recoverable=False,
                context={"error_type": type(e).__name__},
            ) from e

        output.metadata = self._finish(start_time)
        logger.info(
            f"Completed {self.name}",
            extra={
                "agent": self.name,
                "success": output.success,
                "duration_ms": output.metadata.duration_ms,
                "llm_calls": output.metadata.llm_calls,
                "tool_calls": output.metadata.tool_calls,
            },
        )
        return output

    async def _with_retries(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Await operation(), retrying recoverable AgentErrors.

        Only the failed operation is repeated, never the whole execute(), so
        work already done by the agent is kept. Backoff is exponential
        (1s, 2s, ...) for up to max_retries further attempts.
        """
        attempt = 0
        while True:
            try:
                return await operation()
            except AgentError as e:
                attempt += 1
                logger.warning(
                    f"Agent error in {self.name}",
                    extra={
                        "agent": self.name,
                        "error": str(e),
                        "recoverable": e.recoverable,
                        "attempt": attempt,
                        "context": e.context,
                    },
                )
                if not e.recoverable or attempt > self.max_retries:
                    raise
                wait_time = 2 ** (attempt - 1)
                logger.info(f"Retrying {self.name} in {wait_time}s")
                await self._sleep(wait_time)

    def _finish(self, start_time: float, error: str | None = None) -> AgentMetadata:
        self._metadata.mark_complete()
        self._metadata.duration_ms = (time.perf_counter() - start_time) * 1000
        self._metadata.error = error
        return self._metadata

    def _create_metadata(self) -> AgentMetadata:
        return AgentMetadata(agent_name=self.name)

    def _track_llm_call(self, tokens: int | None = None) -> None:
        """Record one LLM request in the execution metadata."""
        self._metadata.llm_calls += 1
        if tokens:
            self._metadata.tokens_used = (self._metadata.tokens_used or 0) + tokens

    def _track_tool_call(self) -> None:
        self._metadata.tool_calls += 1

    async def _sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)
