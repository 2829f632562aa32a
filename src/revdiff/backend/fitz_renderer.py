"""Renderer backed by PyMuPDF text extraction."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import fitz  # PyMuPDF

from ..core.types import PositionedTextRun

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedPage:
    page_number: int
    scale: float
    width: float
    height: float
    runs: Tuple[PositionedTextRun, ...]


class FitzRenderer:
    """Lay out a page with PyMuPDF and expose its text spans.

    PyMuPDF renders synchronously, so a handle is ready as soon as it
    exists.  Pages past the end of the document render as blank pages;
    documents with different page counts are aligned by index only.
    """

    def render(self, document_bytes: bytes, page_number: int, scale: float) -> RenderedPage:
        with fitz.open(stream=document_bytes, filetype="pdf") as doc:
            if not 1 <= page_number <= len(doc):
                logger.warning("page %d outside document of %d pages", page_number, len(doc))
                return RenderedPage(page_number, scale, 0.0, 0.0, ())
            page = doc[page_number - 1]
            return RenderedPage(
                page_number=page_number,
                scale=scale,
                width=page.rect.width * scale,
                height=page.rect.height * scale,
                runs=tuple(extract_page_runs(page, scale)),
            )

    def is_ready(self, handle: Optional[RenderedPage]) -> bool:
        return handle is not None

    def get_text_runs(self, handle: Optional[RenderedPage]) -> Tuple[PositionedTextRun, ...]:
        if handle is None:
            return ()
        return handle.runs


def extract_page_runs(page: fitz.Page, scale: float = 1.0) -> List[PositionedTextRun]:
    """Return one run per text span of ``page``, in reading order."""

    origin = page.rect
    runs: List[PositionedTextRun] = []
    for block in page.get_text("dict", sort=True).get("blocks", []):
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                text = span.get("text", "")
                if not text:
                    continue
                x0, y0, x1, y1 = span["bbox"]
                runs.append(
                    PositionedTextRun(
                        text=text,
                        x=(x0 - origin.x0) * scale,
                        y=(y0 - origin.y0) * scale,
                        width=(x1 - x0) * scale,
                        height=(y1 - y0) * scale,
                    )
                )
    return runs
