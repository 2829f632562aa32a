"""Revision tracking and spatial diffing for paginated documents."""

from __future__ import annotations

from .core import (
    Annotation,
    AnnotationKey,
    BoundingBox,
    DiffHighlight,
    DiffOperation,
    PositionedTextRun,
    Revision,
    RevisionStore,
    diff_annotations,
    diff_texts,
)
from .engine import Engine
from .orchestrator import (
    ComparisonOrchestrator,
    ComparisonResult,
    ComparisonState,
    ComparisonStatus,
    EngineState,
)
from .presets import ColorScheme, EngineConfig, get_preset, iter_presets

__all__ = [
    "Annotation",
    "AnnotationKey",
    "BoundingBox",
    "ColorScheme",
    "ComparisonOrchestrator",
    "ComparisonResult",
    "ComparisonState",
    "ComparisonStatus",
    "DiffHighlight",
    "DiffOperation",
    "Engine",
    "EngineConfig",
    "EngineState",
    "PositionedTextRun",
    "Revision",
    "RevisionStore",
    "diff_annotations",
    "diff_texts",
    "get_preset",
    "iter_presets",
]

__version__ = "0.1.0"
