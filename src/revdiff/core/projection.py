"""Map diff operations back onto page geometry.

The renderer does not promise identical run boundaries each time a document
is loaded, so an exact offset lookup is only the first of several resolver
strategies.  Each strategy is a pure function::

    resolver(operation, cursor, index) -> BoundingBox | None

and :func:`project` tries them in order until one returns a box:

1. :func:`resolve_by_range` - runs whose offsets intersect the operation.
2. :func:`resolve_by_content` - case-insensitive search of the trimmed text
   in the joined run text.
3. :func:`resolve_nearest` - the run at (or just after) the cursor.

When the index holds no ranges at all nothing is returned and the operation
is dropped; geometry is never invented.
"""
from __future__ import annotations

import logging
from functools import partial
from typing import Callable, List, Optional, Sequence

from .index import SEPARATOR, SpanRangeIndex
from .types import BoundingBox, DiffHighlight, DiffOperation, PositionedTextRun

logger = logging.getLogger(__name__)

FALLBACK_WIDTH = 100.0

Resolver = Callable[[DiffOperation, int, SpanRangeIndex], Optional[BoundingBox]]


def resolve_by_range(operation: DiffOperation, cursor: int, index: SpanRangeIndex) -> Optional[BoundingBox]:
    covering = index.overlapping(cursor, cursor + len(operation.text))
    return BoundingBox.merge(r.run for r in covering)


def resolve_by_content(operation: DiffOperation, cursor: int, index: SpanRangeIndex) -> Optional[BoundingBox]:
    needle = operation.text.strip().lower()
    if not needle:
        return None
    return BoundingBox.merge(_runs_matching(index, needle))


def resolve_nearest(
    operation: DiffOperation,
    cursor: int,
    index: SpanRangeIndex,
    *,
    fallback_width: float = FALLBACK_WIDTH,
) -> Optional[BoundingBox]:
    span_range = index.nearest(cursor)
    if span_range is None:
        return None
    run = span_range.run
    return BoundingBox(run.x, run.y, run.width or fallback_width, run.height)


def resolver_chain(fallback_width: float = FALLBACK_WIDTH) -> List[Resolver]:
    return [
        resolve_by_range,
        resolve_by_content,
        partial(resolve_nearest, fallback_width=fallback_width),
    ]


def _runs_matching(index: SpanRangeIndex, needle: str) -> List[PositionedTextRun]:
    # lower() may change a run's length, so offsets are rebuilt on the lowered runs
    lowered = [span_range.run.text.lower() for span_range in index.ranges]
    found = SEPARATOR.join(lowered).find(needle)
    if found < 0:
        return []
    end = found + len(needle)
    matched: List[PositionedTextRun] = []
    start = 0
    for span_range, text in zip(index.ranges, lowered):
        if start >= end:
            break
        if start + len(text) > found:
            matched.append(span_range.run)
        start += len(text) + len(SEPARATOR)
    return matched


def project(
    operation: DiffOperation,
    cursor_a: int,
    cursor_b: int,
    index_a: SpanRangeIndex,
    index_b: SpanRangeIndex,
    *,
    resolvers: Optional[Sequence[Resolver]] = None,
    fallback_width: float = FALLBACK_WIDTH,
) -> Optional[BoundingBox]:
    """Return the box covering ``operation`` on the side it belongs to.

    Deletions are located in revision A, insertions in revision B; equal
    operations have no box.
    """

    if operation.kind == "equal":
        return None
    if operation.kind == "delete":
        cursor, index = cursor_a, index_a
    else:
        cursor, index = cursor_b, index_b

    if not index:
        return None

    for resolver in resolvers if resolvers is not None else resolver_chain(fallback_width):
        box = resolver(operation, cursor, index)
        if box is not None:
            return box
    return None


def project_operations(
    operations: Sequence[DiffOperation],
    index_a: SpanRangeIndex,
    index_b: SpanRangeIndex,
    *,
    fallback_width: float = FALLBACK_WIDTH,
    min_highlight_chars: int = 1,
    resolvers: Optional[Sequence[Resolver]] = None,
) -> List[DiffHighlight]:
    """Walk ``operations`` and produce one text highlight per located edit.

    Both cursors advance for every operation, including the ones that are
    too small to highlight or that cannot be located.
    """

    chain = list(resolvers) if resolvers is not None else resolver_chain(fallback_width)
    highlights: List[DiffHighlight] = []
    cursor_a = 0
    cursor_b = 0
    dropped = 0

    for operation in operations:
        length = len(operation.text)
        if operation.kind == "equal":
            cursor_a += length
            cursor_b += length
            continue

        trimmed = operation.text.strip()
        if len(trimmed) >= min_highlight_chars:
            box = project(operation, cursor_a, cursor_b, index_a, index_b, resolvers=chain)
            if box is None:
                dropped += 1
                logger.debug(
                    "no geometry for %s %r at a=%d b=%d", operation.kind, trimmed[:40], cursor_a, cursor_b
                )
            else:
                highlights.append(
                    DiffHighlight(
                        kind="deleted" if operation.kind == "delete" else "added",
                        text=trimmed or operation.text,
                        x=box.x,
                        y=box.y,
                        width=box.width,
                        height=box.height,
                    )
                )

        if operation.kind == "delete":
            cursor_a += length
        else:
            cursor_b += length

    if dropped:
        logger.info("%d diff operations could not be located and were skipped", dropped)
    return highlights
