"""Revision store, text indexing and diff primitives."""

from .annotations import AnnotationKey, diff_annotations
from .diff import diff_texts
from .extraction import SpanExtractor
from .index import SpanRangeIndex, build_ranges, join_runs
from .projection import project, project_operations
from .store import RevisionStore
from .types import (
    Annotation,
    BoundingBox,
    DiffHighlight,
    DiffOperation,
    PositionedTextRun,
    Revision,
    SpanRange,
)

__all__ = [
    "Annotation",
    "AnnotationKey",
    "BoundingBox",
    "DiffHighlight",
    "DiffOperation",
    "PositionedTextRun",
    "Revision",
    "RevisionStore",
    "SpanExtractor",
    "SpanRange",
    "SpanRangeIndex",
    "build_ranges",
    "diff_annotations",
    "diff_texts",
    "join_runs",
    "project",
    "project_operations",
]
