"""Comparison state machine driving render, extraction and diffing.

A comparison walks::

    IDLE -> LOADING_A -> EXTRACTING_A -> LOADING_B -> EXTRACTING_B -> DIFFING -> READY

and ends in FAILED when an :class:`~revdiff.errors.EngineError` surfaces.
All mutation of :class:`EngineState` happens here.  Every run is tagged with
a generation number; :meth:`ComparisonOrchestrator.invalidate` bumps it, and
a run that finds its tag outdated after a suspension point stops and reports
``CANCELLED`` without touching the state.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .backend.interfaces import Renderer
from .core.annotations import diff_annotations
from .core.diff import diff_texts
from .core.extraction import SpanExtractor
from .core.index import SpanRangeIndex
from .core.projection import project_operations
from .core.types import DiffHighlight, PositionedTextRun, Revision
from .errors import (
    ComparisonInProgressError,
    EngineError,
    ExtractionEmptyError,
    NothingToCompareError,
    RenderTimeoutError,
)
from .presets import EngineConfig
from .utils.polling import poll_until

logger = logging.getLogger(__name__)


class ComparisonState(str, Enum):
    IDLE = "idle"
    LOADING_A = "loading_a"
    EXTRACTING_A = "extracting_a"
    LOADING_B = "loading_b"
    EXTRACTING_B = "extracting_b"
    DIFFING = "diffing"
    READY = "ready"
    FAILED = "failed"


class ComparisonStatus(str, Enum):
    READY = "ready"
    FAILED = "failed"
    CANCELLED = "cancelled"


_RESTARTABLE = {ComparisonState.IDLE, ComparisonState.READY, ComparisonState.FAILED}


@dataclass(frozen=True)
class ComparisonTag:
    generation: int
    revision_pair: Tuple[int, int]


@dataclass
class EngineState:
    """Mutable engine state owned by the orchestrator."""

    state: ComparisonState = ComparisonState.IDLE
    tag: Optional[ComparisonTag] = None
    highlights: Tuple[DiffHighlight, ...] = ()
    error: Optional[EngineError] = None
    failed_at: Optional[ComparisonState] = None
    displayed_revision: Optional[int] = None
    generation: int = 0

    @property
    def busy(self) -> bool:
        return self.state not in _RESTARTABLE

    @property
    def revision_pair(self) -> Optional[Tuple[int, int]]:
        return self.tag.revision_pair if self.tag else None


@dataclass(frozen=True)
class ComparisonResult:
    status: ComparisonStatus
    revision_pair: Tuple[int, int]
    highlights: Tuple[DiffHighlight, ...] = ()
    reason: Optional[EngineError] = None
    failed_at: Optional[ComparisonState] = None
    warnings: Tuple[EngineError, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.status is ComparisonStatus.READY

    def raise_for_status(self) -> "ComparisonResult":
        if self.reason is not None and self.status is ComparisonStatus.FAILED:
            raise self.reason
        return self

    def text_highlights(self) -> List[DiffHighlight]:
        return [h for h in self.highlights if not h.is_annotation_diff]

    def annotation_highlights(self) -> List[DiffHighlight]:
        return [h for h in self.highlights if h.is_annotation_diff]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "status": self.status.value,
            "revisions": list(self.revision_pair),
            "highlights": [h.to_dict() for h in self.highlights],
            "warnings": [str(w) for w in self.warnings],
        }
        if self.reason is not None:
            data["reason"] = {"error": type(self.reason).__name__, "message": str(self.reason)}
        if self.failed_at is not None:
            data["failed_at"] = self.failed_at.value
        return data


class _Superseded(Exception):
    """Internal signal: the running comparison is no longer current."""


class ComparisonOrchestrator:
    def __init__(
        self,
        renderer: Renderer,
        config: Optional[EngineConfig] = None,
        *,
        state: Optional[EngineState] = None,
    ) -> None:
        self.renderer = renderer
        self.extractor = SpanExtractor(renderer)
        self.config = config or EngineConfig()
        self.state = state if state is not None else EngineState()

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------

    def invalidate(self) -> None:
        """Discard the current comparison, running or finished, and return to IDLE."""

        self.state.generation += 1
        if self.state.busy:
            logger.info("comparison %s invalidated", self.state.revision_pair)
        self.state.state = ComparisonState.IDLE
        self.state.tag = None
        self.state.highlights = ()
        self.state.error = None
        self.state.failed_at = None

    async def compare(self, revision_a: Revision, revision_b: Revision) -> ComparisonResult:
        pair = (revision_a.sequence_number, revision_b.sequence_number)
        if self.state.busy:
            raise ComparisonInProgressError(
                f"Comparison {self.state.revision_pair} still running",
                revision_pair=pair,
                state=self.state.state.value,
            )

        self.state.generation += 1
        tag = ComparisonTag(self.state.generation, pair)
        self.state.tag = tag
        self.state.state = ComparisonState.IDLE
        self.state.highlights = ()
        self.state.error = None
        self.state.failed_at = None
        logger.info("comparing V%d vs V%d", *pair)

        try:
            runs_a = await self._load_and_extract(
                tag, revision_a, ComparisonState.LOADING_A, ComparisonState.EXTRACTING_A
            )
            runs_b = await self._load_and_extract(
                tag, revision_b, ComparisonState.LOADING_B, ComparisonState.EXTRACTING_B
            )
            self._transition(tag, ComparisonState.DIFFING)
            highlights, warnings = self._diff(revision_a, revision_b, runs_a, runs_b)
        except _Superseded:
            logger.info("discarding result of superseded comparison V%d vs V%d", *pair)
            return ComparisonResult(status=ComparisonStatus.CANCELLED, revision_pair=pair)
        except EngineError as exc:
            return self._fail(tag, exc)
        except Exception:
            if self._is_current(tag):
                self.state.failed_at = self.state.state
                self.state.state = ComparisonState.FAILED
            raise

        return self._finish(tag, highlights, warnings)

    # ------------------------------------------------------------------
    # stages
    # ------------------------------------------------------------------

    async def _load_and_extract(
        self,
        tag: ComparisonTag,
        revision: Revision,
        loading: ComparisonState,
        extracting: ComparisonState,
    ) -> Tuple[PositionedTextRun, ...]:
        cfg = self.config
        self._transition(tag, loading)
        handle = self.renderer.render(revision.document_bytes, cfg.page_number, cfg.scale)

        ready = await poll_until(
            lambda: self.renderer.is_ready(handle),
            interval=cfg.poll_interval,
            max_attempts=cfg.max_poll_attempts,
        )
        self._ensure_current(tag)

        if not ready:
            logger.warning(
                "V%d not ready after %d polls, attempting extraction anyway",
                revision.sequence_number,
                cfg.max_poll_attempts,
            )
            runs = self.extractor.extract(handle)
            if not runs:
                raise RenderTimeoutError(f"Renderer never became ready for V{revision.sequence_number}")
            self._transition(tag, extracting)
            return runs

        self._transition(tag, extracting)
        runs = self.extractor.extract(handle)
        attempt = 0
        while not runs and attempt < cfg.extraction_retries:
            attempt += 1
            logger.warning(
                "no text runs for V%d, retrying extraction (%d/%d)",
                revision.sequence_number,
                attempt,
                cfg.extraction_retries,
            )
            await asyncio.sleep(cfg.extraction_backoff * attempt)
            self._ensure_current(tag)
            runs = self.extractor.extract(handle)

        logger.info("V%d: %d text runs", revision.sequence_number, len(runs))
        return runs

    def _diff(
        self,
        revision_a: Revision,
        revision_b: Revision,
        runs_a: Sequence[PositionedTextRun],
        runs_b: Sequence[PositionedTextRun],
    ) -> Tuple[List[DiffHighlight], List[EngineError]]:
        cfg = self.config
        warnings: List[EngineError] = []
        no_text = not runs_a and not runs_b
        if no_text and not revision_a.annotations and not revision_b.annotations:
            raise NothingToCompareError("Neither revision has text or annotations")
        if no_text:
            warnings.append(ExtractionEmptyError("No text could be extracted from either revision"))
        elif not runs_a or not runs_b:
            logger.warning("one side has no text; comparing against empty")

        index_a = SpanRangeIndex.from_runs(runs_a)
        index_b = SpanRangeIndex.from_runs(runs_b)
        operations = diff_texts(index_a.text, index_b.text, timeout=cfg.diff_timeout, edit_cost=cfg.diff_edit_cost)
        highlights = project_operations(
            operations,
            index_a,
            index_b,
            fallback_width=cfg.fallback_width,
            min_highlight_chars=cfg.min_highlight_chars,
        )
        highlights.extend(
            diff_annotations(revision_a.annotations, revision_b.annotations, step=cfg.quantization_step)
        )
        return highlights, warnings

    # ------------------------------------------------------------------
    # state bookkeeping
    # ------------------------------------------------------------------

    def _is_current(self, tag: ComparisonTag) -> bool:
        return self.state.tag == tag

    def _ensure_current(self, tag: ComparisonTag) -> None:
        if not self._is_current(tag):
            raise _Superseded()

    def _transition(self, tag: ComparisonTag, new_state: ComparisonState) -> None:
        self._ensure_current(tag)
        logger.debug("comparison %s: %s -> %s", tag.revision_pair, self.state.state.value, new_state.value)
        self.state.state = new_state

    def _finish(
        self,
        tag: ComparisonTag,
        highlights: List[DiffHighlight],
        warnings: List[EngineError],
    ) -> ComparisonResult:
        for warning in warnings:
            warning.revision_pair = tag.revision_pair
            warning.state = ComparisonState.DIFFING.value
        if not self._is_current(tag):
            return ComparisonResult(status=ComparisonStatus.CANCELLED, revision_pair=tag.revision_pair)

        self.state.state = ComparisonState.READY
        self.state.highlights = tuple(highlights)
        self.state.displayed_revision = tag.revision_pair[1]
        logger.info("comparison V%d vs V%d ready: %d highlights", *tag.revision_pair, len(highlights))
        return ComparisonResult(
            status=ComparisonStatus.READY,
            revision_pair=tag.revision_pair,
            highlights=tuple(highlights),
            warnings=tuple(warnings),
        )

    def _fail(self, tag: ComparisonTag, exc: EngineError) -> ComparisonResult:
        if not self._is_current(tag):
            return ComparisonResult(status=ComparisonStatus.CANCELLED, revision_pair=tag.revision_pair)

        failed_at = self.state.state
        exc.revision_pair = tag.revision_pair
        exc.state = failed_at.value
        self.state.state = ComparisonState.FAILED
        self.state.error = exc
        self.state.failed_at = failed_at
        logger.error("comparison failed: %s", exc.describe())
        return ComparisonResult(
            status=ComparisonStatus.FAILED,
            revision_pair=tag.revision_pair,
            reason=exc,
            failed_at=failed_at,
        )
