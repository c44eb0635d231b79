"""Prompt templates."""

from generative_db.prompts.loader import PromptLoader

__all__ = ["PromptLoader"]
