"""Source-transformation pipeline assembly."""

from .assembler import Pipeline, assemble_pipeline
from .registry import DEFAULT_RULES, PatternRegistry, PatternRule
from .types import LoaderSpec, PipelineStage, StageKind

__all__ = (
    "DEFAULT_RULES",
    "LoaderSpec",
    "PatternRegistry",
    "PatternRule",
    "Pipeline",
    "PipelineStage",
    "StageKind",
    "assemble_pipeline",
)
