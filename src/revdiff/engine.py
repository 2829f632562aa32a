"""Session facade: live document, revision history and comparisons."""
from __future__ import annotations

import logging
import uuid
from typing import Any, Iterable, List, Optional, Tuple

from .backend.interfaces import Color, DocumentMutator, Renderer
from .core.annotations import AnnotationKey, diff_annotations, key_map
from .core.store import RevisionStore
from .core.types import ANNOTATION_KINDS, Annotation, BoundingBox, DiffHighlight, Revision
from .errors import AmbiguousAnnotationError, AnnotationNotFoundError, EmptyDocumentError
from .orchestrator import ComparisonOrchestrator, ComparisonResult, EngineState
from .overlay import paint_annotation, paint_text_edit
from .presets import ColorScheme, EngineConfig

logger = logging.getLogger(__name__)


class Engine:
    """Track revisions of one document and compare any two of them.

    The engine owns a live document (a mutator handle) plus the live
    annotation list.  :meth:`commit` freezes both into the revision store;
    :meth:`switch_revision` brings an older snapshot back as the live
    document.  Comparisons run through a :class:`ComparisonOrchestrator`
    sharing this engine's :class:`EngineState`.
    """

    def __init__(
        self,
        renderer: Renderer,
        mutator: DocumentMutator,
        config: Optional[EngineConfig] = None,
        *,
        colors: Optional[ColorScheme] = None,
    ) -> None:
        self.renderer = renderer
        self.mutator = mutator
        self.config = config or EngineConfig()
        self.colors = colors or ColorScheme()
        self.store = RevisionStore(self.config.quantization_step)
        self._state = EngineState()
        self.orchestrator = ComparisonOrchestrator(renderer, self.config, state=self._state)
        self._document: Optional[Any] = None
        self._annotations: List[Annotation] = []

    # ------------------------------------------------------------------
    # accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def revisions(self) -> List[Revision]:
        return self.store.revisions()

    @property
    def annotations(self) -> Tuple[Annotation, ...]:
        return tuple(self._annotations)

    @property
    def current_revision(self) -> Optional[int]:
        return self._state.displayed_revision

    @property
    def has_document(self) -> bool:
        return self._document is not None

    # ------------------------------------------------------------------
    # live document
    # ------------------------------------------------------------------

    def load_document(self, data: bytes, annotations: Iterable[Annotation] = ()) -> Revision:
        """Start a new session on ``data`` and commit it as the initial version."""

        annotations = list(annotations)
        key_map(annotations, self.config.quantization_step)
        handle = self.mutator.load_document(bytes(data))
        self.orchestrator.invalidate()
        self.store = RevisionStore(self.config.quantization_step)
        self._document = handle
        self._annotations = annotations
        revision = self.store.commit(data, "Initial version", self._annotations)
        self._state.displayed_revision = revision.sequence_number
        return revision

    def replace_document(self, data: bytes, annotations: Optional[Iterable[Annotation]] = None) -> None:
        """Swap the live document for ``data`` without committing."""

        if annotations is not None:
            annotations = list(annotations)
            key_map(annotations, self.config.quantization_step)
        self._document = self.mutator.load_document(bytes(data))
        if annotations is not None:
            self._annotations = annotations

    def commit(self, message: str = "") -> Revision:
        if self._document is None:
            raise EmptyDocumentError("Load a document before committing")
        data = self.mutator.save_document(self._document)
        revision = self.store.commit(data, message, self._annotations)
        # keep editing a fresh handle so the snapshot and the live copy never share state
        self._document = self.mutator.load_document(revision.document_bytes)
        self._state.displayed_revision = revision.sequence_number
        return revision

    def add_annotation(
        self,
        kind: str,
        page: int,
        x: float,
        y: float,
        width: float,
        height: float,
        *,
        text: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Annotation:
        if self._document is None:
            raise EmptyDocumentError("Load a document before annotating")
        if kind == "redact":
            kind = "redaction"
        if kind not in ANNOTATION_KINDS:
            raise ValueError(f"Unknown annotation kind '{kind}'")
        annotation = Annotation(
            id=f"annotation-{uuid.uuid4().hex}",
            kind=kind,  # type: ignore[arg-type]
            page=page,
            x=x,
            y=y,
            width=width,
            height=height,
            color=color,
            text=text,
        )
        self._ensure_free_cell(annotation)
        paint_annotation(self.mutator, self._document, annotation, scale=self.config.scale, colors=self.colors)
        self._annotations.append(annotation)
        logger.debug("added %s annotation on page %d", kind, page)
        return annotation

    def update_annotation(self, annotation_id: str, text: Optional[str]) -> Annotation:
        index = self._find_annotation(annotation_id)
        updated = self._annotations[index].with_text(text)
        self._annotations[index] = updated
        return updated

    def remove_annotation(self, annotation_id: str) -> Annotation:
        return self._annotations.pop(self._find_annotation(annotation_id))

    def apply_text_edit(
        self,
        page: int,
        box: BoundingBox,
        text: str,
        *,
        font_size: float = 12.0,
        color: Color = (0.0, 0.0, 0.0),
    ) -> None:
        if self._document is None:
            raise EmptyDocumentError("Load a document before editing")
        if not text.strip():
            raise ValueError("Replacement text must not be blank")
        paint_text_edit(
            self.mutator,
            self._document,
            page,
            box,
            text,
            scale=self.config.scale,
            font_size=font_size,
            color=color,
        )

    def switch_revision(self, sequence_number: int) -> Revision:
        """Make a committed revision the live document.

        Any comparison still running is invalidated; its result is discarded.
        """

        revision = self.store.get(sequence_number)
        self.orchestrator.invalidate()
        self._document = self.mutator.load_document(revision.document_bytes)
        self._annotations = list(revision.annotations)
        self._state.displayed_revision = sequence_number
        logger.info("switched to V%d", sequence_number)
        return revision

    # ------------------------------------------------------------------
    # comparison
    # ------------------------------------------------------------------

    async def compare(self, seq_a: int, seq_b: int) -> ComparisonResult:
        revision_a = self.store.get(seq_a)
        revision_b = self.store.get(seq_b)
        return await self.orchestrator.compare(revision_a, revision_b)

    def diff_annotations(self, seq_a: int, seq_b: int) -> List[DiffHighlight]:
        revision_a = self.store.get(seq_a)
        revision_b = self.store.get(seq_b)
        return diff_annotations(
            revision_a.annotations,
            revision_b.annotations,
            step=self.config.quantization_step,
        )

    def _ensure_free_cell(self, annotation: Annotation) -> None:
        step = self.config.quantization_step
        key = AnnotationKey.of(annotation, step)
        for existing in self._annotations:
            if AnnotationKey.of(existing, step) == key:
                raise AmbiguousAnnotationError(
                    f"A {key.kind} annotation already sits at ({key.x:g}, {key.y:g}) "
                    f"on page {key.page}: '{existing.id}'"
                )

    def _find_annotation(self, annotation_id: str) -> int:
        for index, annotation in enumerate(self._annotations):
            if annotation.id == annotation_id:
                return index
        raise AnnotationNotFoundError(f"No live annotation '{annotation_id}'")
