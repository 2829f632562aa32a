"""Tolerant matching of annotations across two revisions."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from ..errors import AmbiguousAnnotationError
from .types import Annotation, DiffHighlight, HighlightKind

logger = logging.getLogger(__name__)

DEFAULT_STEP = 10.0


def _quantize(value: float, step: float) -> float:
    # half-up, so 105 -> 110 regardless of float parity rules
    return math.floor(value / step + 0.5) * step


@dataclass(frozen=True)
class AnnotationKey:
    """Coarse identity of an annotation: kind, page and snapped position.

    Two keys are equal when kind and page match and both coordinates fall
    into the same ``step``-sized cell.  Width, height, colour and text are
    deliberately not part of the key; they decide *modified* vs unchanged.
    """

    kind: str
    page: int
    x: float
    y: float

    @classmethod
    def of(cls, annotation: Annotation, step: float = DEFAULT_STEP) -> "AnnotationKey":
        if step <= 0:
            raise ValueError("Quantization step must be positive")
        return cls(
            kind=annotation.kind,
            page=annotation.page,
            x=_quantize(annotation.x, step),
            y=_quantize(annotation.y, step),
        )


def key_map(annotations: Iterable[Annotation], step: float = DEFAULT_STEP) -> Dict[AnnotationKey, Annotation]:
    """Index ``annotations`` by key, failing on collisions."""

    mapping: Dict[AnnotationKey, Annotation] = {}
    for annotation in annotations:
        key = AnnotationKey.of(annotation, step)
        existing = mapping.get(key)
        if existing is not None:
            raise AmbiguousAnnotationError(
                f"Annotations '{existing.id}' and '{annotation.id}' both map to "
                f"{key.kind} on page {key.page} at ({key.x:g}, {key.y:g})"
            )
        mapping[key] = annotation
    return mapping


def is_modified(before: Annotation, after: Annotation) -> bool:
    return before.text != after.text or before.width != after.width or before.height != after.height


def diff_annotations(
    set_a: Sequence[Annotation],
    set_b: Sequence[Annotation],
    *,
    step: float = DEFAULT_STEP,
) -> List[DiffHighlight]:
    """Classify annotations of B against A as added, modified or deleted.

    Added and modified highlights come first, in B order, followed by the
    deleted ones in A order.  A modified highlight carries the text and box
    of the B annotation, so swapping the sides keeps the kind but reports
    the other payload.
    """

    map_a = key_map(set_a, step)
    map_b = key_map(set_b, step)
    highlights: List[DiffHighlight] = []

    for annotation in set_b:
        match = map_a.get(AnnotationKey.of(annotation, step))
        if match is None:
            highlights.append(_highlight("added", annotation))
        elif is_modified(match, annotation):
            highlights.append(_highlight("modified", annotation))

    for annotation in set_a:
        if AnnotationKey.of(annotation, step) not in map_b:
            highlights.append(_highlight("deleted", annotation))

    logger.debug("annotation diff: %d vs %d -> %d highlights", len(set_a), len(set_b), len(highlights))
    return highlights


def _highlight(kind: HighlightKind, annotation: Annotation) -> DiffHighlight:
    return DiffHighlight(
        kind=kind,
        text=annotation.text or f"{annotation.kind} annotation",
        x=annotation.x,
        y=annotation.y,
        width=annotation.width,
        height=annotation.height,
        page=annotation.page,
        is_annotation_diff=True,
    )
