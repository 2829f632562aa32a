"""Turn a rendered page into an ordered sequence of positioned text runs."""
from __future__ import annotations

import logging
from typing import Any, Optional, Tuple

from ..backend.interfaces import Renderer
from .types import PositionedTextRun

logger = logging.getLogger(__name__)


class SpanExtractor:
    """Snapshot the text runs of a rendered page.

    Each call to :meth:`extract` asks the renderer again, so a second call
    after a re-render sees the new layout.  Runs with no visible content are
    dropped before offsets are assigned (see :mod:`revdiff.core.index`).
    The caller is expected to have confirmed readiness of ``handle``.
    """

    def __init__(self, renderer: Renderer) -> None:
        self.renderer = renderer

    def extract(self, handle: Optional[Any]) -> Tuple[PositionedTextRun, ...]:
        if handle is None:
            logger.debug("no rendered page available, returning no runs")
            return ()
        runs = self.renderer.get_text_runs(handle)
        if not runs:
            return ()
        kept = tuple(run for run in runs if run.text and run.text.strip())
        logger.debug("extracted %d text runs (%d dropped)", len(kept), len(runs) - len(kept))
        return kept
