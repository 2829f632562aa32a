"""Paint annotations, text edits and diff highlights into document pages.

Geometry handed to these helpers is in display units, i.e. the coordinate
space of the rendered page at ``scale``.  It is converted to document units
before reaching the :class:`~revdiff.backend.interfaces.DocumentMutator`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from .backend.interfaces import DocumentMutator
from .core.types import Annotation, BoundingBox, DiffHighlight
from .presets import Color, ColorScheme

NOTE_WIDTH = 100.0
NOTE_HEIGHT = 20.0
NOTE_FONT_SIZE = 10.0
TEXTBOX_FONT_SIZE = 12.0


@dataclass(frozen=True)
class HighlightStyle:
    fill_color: Color
    fill_opacity: float = 0.3


def _clamp(value: float, minimum: float = 0.0, maximum: float = 1.0) -> float:
    return max(minimum, min(value, maximum))


def tint_color(color: Color, *, blend: float = 0.6) -> Color:
    """Blend an RGB colour with white to create a softer highlight fill."""

    blend = _clamp(blend)
    return tuple(_clamp(channel + (1.0 - channel) * blend) for channel in color)  # type: ignore[return-value]


def make_highlight_style(base_color: Color, *, fill_opacity: float, fill_tint: float = 0.3) -> HighlightStyle:
    return HighlightStyle(fill_color=tint_color(base_color, blend=fill_tint), fill_opacity=_clamp(fill_opacity))


def to_document_box(box: BoundingBox, scale: float) -> BoundingBox:
    if scale <= 0:
        raise ValueError("Scale must be positive")
    return BoundingBox(box.x / scale, box.y / scale, box.width / scale, box.height / scale)


def paint_annotation(
    mutator: DocumentMutator,
    handle: Any,
    annotation: Annotation,
    *,
    scale: float = 1.0,
    colors: Optional[ColorScheme] = None,
) -> None:
    """Draw ``annotation`` the way its kind is shown on the page."""

    colors = colors or ColorScheme()
    box = to_document_box(annotation.box, scale)

    if annotation.kind == "highlight":
        mutator.draw_rectangle(handle, annotation.page, box, colors.highlight, 0.3)
    elif annotation.kind == "redaction":
        mutator.draw_rectangle(handle, annotation.page, box, colors.redaction, 1.0)
    elif annotation.kind == "textbox":
        if annotation.text:
            # baseline on the bottom edge of the drawn box
            mutator.draw_text(
                handle,
                annotation.page,
                annotation.text,
                (box.x, box.y + box.height),
                size=TEXTBOX_FONT_SIZE,
                color=colors.text,
            )
    elif annotation.kind == "note":
        if annotation.text:
            note_box = to_document_box(
                BoundingBox(annotation.x, annotation.y, NOTE_WIDTH, NOTE_HEIGHT), scale
            )
            mutator.draw_rectangle(handle, annotation.page, note_box, colors.note, 0.9)
            mutator.draw_text(
                handle,
                annotation.page,
                annotation.text,
                (note_box.x + 2, note_box.y + 15 / scale),
                size=NOTE_FONT_SIZE,
                color=colors.text,
            )
    else:
        raise ValueError(f"Unknown annotation kind '{annotation.kind}'")


def paint_text_edit(
    mutator: DocumentMutator,
    handle: Any,
    page: int,
    box: BoundingBox,
    text: str,
    *,
    scale: float = 1.0,
    font_size: float = 12.0,
    color: Color = (0.0, 0.0, 0.0),
) -> None:
    """Cover ``box`` with white and write ``text`` in its place."""

    doc_box = to_document_box(box, scale)
    size = font_size / scale
    padding = size * 0.2
    cover = BoundingBox(
        doc_box.x - padding,
        doc_box.y - padding,
        doc_box.width + padding * 2,
        size + padding * 2,
    )
    mutator.draw_rectangle(handle, page, cover, (1.0, 1.0, 1.0), 1.0)
    mutator.draw_text(handle, page, text, (doc_box.x, doc_box.y + size), size=size, color=color)


def paint_highlights(
    mutator: DocumentMutator,
    handle: Any,
    highlights: Iterable[DiffHighlight],
    *,
    page: int,
    scale: float = 1.0,
    colors: Optional[ColorScheme] = None,
    fill_opacity: float = 0.3,
) -> int:
    """Draw each highlight as a translucent box; returns how many were drawn.

    Text highlights go on ``page``; annotation highlights carry their own.
    """

    colors = colors or ColorScheme()
    count = 0
    for highlight in highlights:
        style = make_highlight_style(colors.for_highlight(highlight.kind), fill_opacity=fill_opacity)
        target_page = highlight.page if highlight.page is not None else page
        mutator.draw_rectangle(
            handle,
            target_page,
            to_document_box(highlight.box, scale),
            style.fill_color,
            style.fill_opacity,
        )
        count += 1
    return count


def render_highlights(
    mutator: DocumentMutator,
    document_bytes: bytes,
    highlights: Iterable[DiffHighlight],
    *,
    page: int,
    scale: float = 1.0,
    colors: Optional[ColorScheme] = None,
    fill_opacity: float = 0.3,
) -> bytes:
    """Return a copy of ``document_bytes`` with ``highlights`` painted on it."""

    handle = mutator.load_document(document_bytes)
    paint_highlights(
        mutator,
        handle,
        highlights,
        page=page,
        scale=scale,
        colors=colors,
        fill_opacity=fill_opacity,
    )
    return mutator.save_document(handle)
