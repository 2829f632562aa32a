"""Append-only, in-memory store of document revisions."""
from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Iterable, Iterator, List, Optional, Union

from ..errors import EmptyDocumentError, EmptyStoreError, NotFoundError
from .annotations import DEFAULT_STEP, key_map
from .types import Annotation, Revision

logger = logging.getLogger(__name__)

Buffer = Union[bytes, bytearray, memoryview]


class RevisionStore:
    """Ordered collection of immutable :class:`Revision` snapshots.

    Revisions are only ever appended.  Readers never lock: a committed
    revision is frozen and the backing list only grows, so a comparison that
    already fetched its revisions is unaffected by later commits.

    Annotations of one snapshot must have distinct keys at
    ``quantization_step``; a colliding set is rejected with
    :class:`~revdiff.errors.AmbiguousAnnotationError` so every stored
    revision stays comparable.
    """

    def __init__(self, quantization_step: float = DEFAULT_STEP) -> None:
        self.quantization_step = quantization_step
        self._revisions: List[Revision] = []
        self._lock = threading.Lock()

    def commit(
        self,
        document_bytes: Optional[Buffer],
        message: str = "",
        annotations: Iterable[Annotation] = (),
    ) -> Revision:
        if document_bytes is None or len(document_bytes) == 0:
            raise EmptyDocumentError("No live document to commit")

        # bytes() of a bytearray/memoryview is a copy; later edits of the
        # caller's buffer cannot reach the snapshot.
        snapshot = bytes(document_bytes)
        frozen_annotations = tuple(annotations)
        key_map(frozen_annotations, self.quantization_step)

        with self._lock:
            sequence_number = self._next_sequence_number()
            revision = Revision(
                id=f"revision-{uuid.uuid4().hex}",
                sequence_number=sequence_number,
                message=message.strip() or f"Version {sequence_number}",
                created_at=datetime.now(timezone.utc),
                document_bytes=snapshot,
                annotations=frozen_annotations,
            )
            self._revisions.append(revision)

        logger.info(
            "committed V%d (%d bytes, %d annotations)",
            revision.sequence_number,
            len(snapshot),
            len(frozen_annotations),
        )
        return revision

    def get(self, sequence_number: int) -> Revision:
        for revision in self._revisions:
            if revision.sequence_number == sequence_number:
                return revision
        raise NotFoundError(f"Revision {sequence_number} does not exist")

    def latest(self) -> Revision:
        if not self._revisions:
            raise EmptyStoreError("No revisions committed yet")
        return max(self._revisions, key=lambda revision: revision.sequence_number)

    def revisions(self) -> List[Revision]:
        return sorted(self._revisions, key=lambda revision: revision.sequence_number)

    def _next_sequence_number(self) -> int:
        if not self._revisions:
            return 1
        return max(revision.sequence_number for revision in self._revisions) + 1

    def __len__(self) -> int:
        return len(self._revisions)

    def __iter__(self) -> Iterator[Revision]:
        return iter(self.revisions())

    def __contains__(self, sequence_number: object) -> bool:
        return any(r.sequence_number == sequence_number for r in self._revisions)
