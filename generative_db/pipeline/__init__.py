"""Request pipeline."""

from generative_db.pipeline.orchestrator import GenerativeDBPipeline, PipelineResult

__all__ = ["GenerativeDBPipeline", "PipelineResult"]
