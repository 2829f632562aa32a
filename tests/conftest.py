"""In-memory stand-ins for the renderer and the document mutator.

A fake document is UTF-8 text; every line becomes one text run laid out on
a simple grid so tests can predict the geometry of each run.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import pytest

from revdiff.core.types import BoundingBox, PositionedTextRun
from revdiff.presets import EngineConfig

CHAR_WIDTH = 6.0
LINE_HEIGHT = 20.0
RUN_HEIGHT = 12.0
MARGIN = 10.0


def runs_for_lines(lines, scale: float = 1.0) -> List[PositionedTextRun]:
    return [
        PositionedTextRun(
            text=line,
            x=MARGIN * scale,
            y=(MARGIN + i * LINE_HEIGHT) * scale,
            width=len(line) * CHAR_WIDTH * scale,
            height=RUN_HEIGHT * scale,
        )
        for i, line in enumerate(lines)
    ]


@dataclass
class FakeHandle:
    runs: List[PositionedTextRun]
    polls_needed: Optional[int]
    empty_extractions: int
    polls: int = 0
    extractions: int = 0


class FakeRenderer:
    """Renderer whose readiness and extraction hiccups are scripted.

    ``ready_after`` is the number of polls before the page reports ready
    (``None`` means never); ``empty_extractions`` is how many extraction
    calls return nothing before the real runs appear.
    """

    def __init__(self, ready_after: Optional[int] = 0, empty_extractions: int = 0, runs_when_stalled: bool = False):
        self.ready_after = ready_after
        self.empty_extractions = empty_extractions
        self.runs_when_stalled = runs_when_stalled
        self.rendered: List[Tuple[bytes, int, float]] = []
        self.handles: List[FakeHandle] = []

    def render(self, document_bytes: bytes, page_number: int, scale: float) -> FakeHandle:
        self.rendered.append((document_bytes, page_number, scale))
        lines = document_bytes.decode("utf-8").split("\n")
        handle = FakeHandle(runs_for_lines(lines, scale), self.ready_after, self.empty_extractions)
        self.handles.append(handle)
        return handle

    def is_ready(self, handle: FakeHandle) -> bool:
        handle.polls += 1
        return handle.polls_needed is not None and handle.polls > handle.polls_needed

    def get_text_runs(self, handle: FakeHandle) -> List[PositionedTextRun]:
        handle.extractions += 1
        if handle.polls_needed is None and not self.runs_when_stalled:
            return []
        if handle.extractions <= handle.empty_extractions:
            return []
        return list(handle.runs)


@dataclass
class FakeDocument:
    lines: List[str]
    calls: List[tuple] = field(default_factory=list)


class FakeMutator:
    """Text documents; ``draw_text`` appends a line, rectangles are recorded."""

    def load_document(self, data: bytes) -> FakeDocument:
        return FakeDocument(lines=bytes(data).decode("utf-8").split("\n"))

    def save_document(self, handle: FakeDocument) -> bytes:
        return "\n".join(handle.lines).encode("utf-8")

    def draw_rectangle(self, handle: FakeDocument, page: int, box: BoundingBox, color, opacity: float) -> None:
        handle.calls.append(("rect", page, box, tuple(color), opacity))

    def draw_text(self, handle: FakeDocument, page: int, text: str, position, *, font="helv", size=12.0, color=(0, 0, 0)) -> None:
        handle.calls.append(("text", page, text, tuple(position), size))
        handle.lines.append(text)


@pytest.fixture
def quick_config() -> EngineConfig:
    return EngineConfig(
        poll_interval=0.0,
        max_poll_attempts=3,
        extraction_retries=2,
        extraction_backoff=0.0,
    )


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def mutator() -> FakeMutator:
    return FakeMutator()
