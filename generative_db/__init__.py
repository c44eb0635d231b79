"""Generative DB: natural-language to T-SQL generation for SQL Server."""

__version__ = "0.1.0"
