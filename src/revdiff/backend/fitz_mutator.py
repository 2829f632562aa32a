"""Document mutation primitives backed by PyMuPDF."""
from __future__ import annotations

from typing import Tuple

import fitz  # PyMuPDF

from ..core.types import BoundingBox

Color = Tuple[float, float, float]


class FitzMutator:
    """Edit PDF pages in place; coordinates are PDF points from the top-left."""

    def load_document(self, data: bytes) -> fitz.Document:
        return fitz.open(stream=bytes(data), filetype="pdf")

    def save_document(self, handle: fitz.Document) -> bytes:
        return handle.tobytes(garbage=3, deflate=True)

    def draw_rectangle(
        self,
        handle: fitz.Document,
        page: int,
        box: BoundingBox,
        color: Color,
        opacity: float,
    ) -> None:
        rect = fitz.Rect(box.x, box.y, box.x + box.width, box.y + box.height)
        _page(handle, page).draw_rect(rect, color=None, fill=color, fill_opacity=opacity, width=0)

    def draw_text(
        self,
        handle: fitz.Document,
        page: int,
        text: str,
        position: Tuple[float, float],
        *,
        font: str = "helv",
        size: float = 12.0,
        color: Color = (0.0, 0.0, 0.0),
    ) -> None:
        _page(handle, page).insert_text(fitz.Point(*position), text, fontname=font, fontsize=size, color=color)


def _page(handle: fitz.Document, page: int) -> fitz.Page:
    if not 1 <= page <= len(handle):
        raise IndexError(f"Page {page} outside document of {len(handle)} pages")
    return handle[page - 1]
