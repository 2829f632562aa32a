"""Custom exceptions used across revdiff."""
from __future__ import annotations

from typing import Optional, Tuple

__all__ = [
    "EngineError",
    "EmptyDocumentError",
    "EmptyStoreError",
    "NotFoundError",
    "RenderTimeoutError",
    "ExtractionEmptyError",
    "NothingToCompareError",
    "ComparisonInProgressError",
    "AmbiguousAnnotationError",
    "AnnotationNotFoundError",
]


class EngineError(Exception):
    """Base class for revdiff failures.

    ``revision_pair`` and ``state`` are filled in by the orchestrator when the
    error surfaces from a comparison so callers can offer retry or abort.
    """

    def __init__(
        self,
        message: str = "",
        *,
        revision_pair: Optional[Tuple[int, int]] = None,
        state: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.revision_pair = revision_pair
        self.state = state

    def describe(self) -> str:
        parts = [str(self) or self.__class__.__name__]
        if self.revision_pair is not None:
            parts.append("revisions=%d..%d" % self.revision_pair)
        if self.state is not None:
            parts.append("state=%s" % self.state)
        return " ".join(parts)


class EmptyDocumentError(EngineError):
    """Raised when committing without a live document."""

    pass


class EmptyStoreError(EngineError):
    """Raised when asking an empty store for its latest revision."""

    pass


class NotFoundError(EngineError):
    """Raised for an unknown revision sequence number."""

    pass


class RenderTimeoutError(EngineError):
    """Raised when the renderer never signalled readiness within budget."""

    pass


class ExtractionEmptyError(EngineError):
    """Both sides produced no text runs after retries."""

    pass


class NothingToCompareError(EngineError):
    """Both revisions have neither text nor annotations."""

    pass


class ComparisonInProgressError(EngineError):
    """Raised when a comparison is requested while another one runs."""

    pass


class AmbiguousAnnotationError(EngineError):
    """Two annotations of one revision share a quantized key."""

    pass


class AnnotationNotFoundError(EngineError):
    """Raised when editing an annotation id that is not live."""

    pass
