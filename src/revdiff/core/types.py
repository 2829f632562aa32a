from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, Iterable, Literal, Optional, Tuple

OpKind = Literal["equal", "insert", "delete"]
HighlightKind = Literal["added", "deleted", "modified"]
AnnotationKind = Literal["highlight", "note", "textbox", "redaction"]

ANNOTATION_KINDS: Tuple[str, ...] = ("highlight", "note", "textbox", "redaction")


@dataclass(frozen=True)
class PositionedTextRun:
    text: str
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class SpanRange:
    run: PositionedTextRun
    start_char: int
    end_char: int  # exclusive

    def contains(self, offset: int) -> bool:
        return self.start_char <= offset < self.end_char

    def overlaps(self, start: int, end: int) -> bool:
        return start < self.end_char and end > self.start_char


@dataclass(frozen=True)
class DiffOperation:
    kind: OpKind
    text: str

    @property
    def touches_source(self) -> bool:
        return self.kind != "insert"

    @property
    def touches_target(self) -> bool:
        return self.kind != "delete"


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def of_run(cls, run: PositionedTextRun) -> "BoundingBox":
        return cls(run.x, run.y, run.width, run.height)

    @classmethod
    def merge(cls, runs: Iterable[PositionedTextRun]) -> Optional["BoundingBox"]:
        """Return the union box of ``runs`` or ``None`` when empty."""

        runs = list(runs)
        if not runs:
            return None
        if len(runs) == 1:
            return cls.of_run(runs[0])
        x0 = min(r.x for r in runs)
        y0 = min(r.y for r in runs)
        x1 = max(r.x + r.width for r in runs)
        y1 = max(r.y + r.height for r in runs)
        return cls(x0, y0, x1 - x0, y1 - y0)


@dataclass(frozen=True)
class DiffHighlight:
    kind: HighlightKind
    text: str
    x: float
    y: float
    width: float
    height: float
    page: Optional[int] = None
    is_annotation_diff: bool = False

    @property
    def box(self) -> BoundingBox:
        return BoundingBox(self.x, self.y, self.width, self.height)

    def to_dict(self) -> Dict[str, object]:
        data: Dict[str, object] = {
            "type": self.kind,
            "text": self.text,
            "bbox": [float(self.x), float(self.y), float(self.width), float(self.height)],
            "is_annotation": self.is_annotation_diff,
        }
        if self.page is not None:
            data["page"] = self.page
        return data


@dataclass(frozen=True)
class Annotation:
    id: str
    kind: AnnotationKind
    page: int
    x: float
    y: float
    width: float
    height: float
    color: Optional[str] = None
    text: Optional[str] = None

    @property
    def box(self) -> BoundingBox:
        return BoundingBox(self.x, self.y, self.width, self.height)

    def with_text(self, text: Optional[str]) -> "Annotation":
        return replace(self, text=text)

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "type": self.kind,
            "page": self.page,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "color": self.color,
            "text": self.text,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "Annotation":
        kind = str(data.get("type") or data.get("kind"))
        if kind == "redact":
            kind = "redaction"
        if kind not in ANNOTATION_KINDS:
            raise ValueError(f"Unknown annotation type '{kind}'")
        return cls(
            id=str(data["id"]),
            kind=kind,  # type: ignore[arg-type]
            page=int(data["page"]),  # type: ignore[arg-type]
            x=float(data["x"]),  # type: ignore[arg-type]
            y=float(data["y"]),  # type: ignore[arg-type]
            width=float(data["width"]),  # type: ignore[arg-type]
            height=float(data["height"]),  # type: ignore[arg-type]
            color=data.get("color"),  # type: ignore[arg-type]
            text=data.get("text"),  # type: ignore[arg-type]
        )


@dataclass(frozen=True)
class Revision:
    id: str
    sequence_number: int
    message: str
    created_at: datetime
    document_bytes: bytes = field(repr=False)
    annotations: Tuple[Annotation, ...] = ()

    def summary(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "version": self.sequence_number,
            "message": self.message,
            "created_at": self.created_at.isoformat(timespec="seconds"),
            "size": len(self.document_bytes),
            "annotations": len(self.annotations),
        }
