"""Agents."""

from generative_db.agents.base import BaseAgent
from generative_db.agents.sql import DEFAULT_MAX_ITERATIONS, SQLAgent, extract_sql_block

__all__ = ["BaseAgent", "DEFAULT_MAX_ITERATIONS", "SQLAgent", "extract_sql_block"]
