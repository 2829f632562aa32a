"""Boundaries of the collaborators the engine consumes but does not implement."""
from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence, Tuple

from ..core.types import BoundingBox, PositionedTextRun

Color = Tuple[float, float, float]


class Renderer(Protocol):
    """Renders one page of a document and exposes its text runs.

    Rendering may complete asynchronously; callers poll :meth:`is_ready`
    before reading runs.
    """

    def render(self, document_bytes: bytes, page_number: int, scale: float) -> Any:
        ...

    def is_ready(self, handle: Any) -> bool:
        ...

    def get_text_runs(self, handle: Any) -> Optional[Sequence[PositionedTextRun]]:
        ...


class DocumentMutator(Protocol):
    """Loads, edits and serialises document bytes.

    Geometry passed to the drawing primitives is in document units (PDF
    points, top-left origin); page numbers are 1-based.
    """

    def load_document(self, data: bytes) -> Any:
        ...

    def save_document(self, handle: Any) -> bytes:
        ...

    def draw_rectangle(
        self,
        handle: Any,
        page: int,
        box: BoundingBox,
        color: Color,
        opacity: float,
    ) -> None:
        ...

    def draw_text(
        self,
        handle: Any,
        page: int,
        text: str,
        position: Tuple[float, float],
        *,
        font: str = "helv",
        size: float = 12.0,
        color: Color = (0.0, 0.0, 0.0),
    ) -> None:
        ...
