"""Character-level text diff between two joined run sequences.

Uses diff-match-patch: ``diff_main`` for the alignment followed by
``diff_cleanupSemantic``, which folds trivial equalities into the
surrounding edits so highlights cover readable chunks instead of single
letters.  The cleanup only regroups characters; both inputs remain fully
covered by the operations, in order.
"""
from __future__ import annotations

import logging
from typing import Iterable, List

import diff_match_patch as dmp_module

from .types import DiffOperation

logger = logging.getLogger(__name__)

_KINDS = {
    dmp_module.diff_match_patch.DIFF_EQUAL: "equal",
    dmp_module.diff_match_patch.DIFF_INSERT: "insert",
    dmp_module.diff_match_patch.DIFF_DELETE: "delete",
}


def diff_texts(
    text_a: str,
    text_b: str,
    *,
    timeout: float = 2.0,
    edit_cost: int = 4,
) -> List[DiffOperation]:
    """Return the ordered equal/insert/delete operations turning A into B."""

    dmp = dmp_module.diff_match_patch()
    dmp.Diff_Timeout = timeout
    dmp.Diff_EditCost = edit_cost

    diffs = dmp.diff_main(text_a, text_b)
    dmp.diff_cleanupSemantic(diffs)

    operations = [DiffOperation(kind=_KINDS[op], text=text) for op, text in diffs if text]  # type: ignore[arg-type]
    logger.debug(
        "diff of %d vs %d chars produced %d operations",
        len(text_a),
        len(text_b),
        len(operations),
    )
    return operations


def source_text(operations: Iterable[DiffOperation]) -> str:
    """Rebuild the first input from ``operations``."""

    return "".join(op.text for op in operations if op.touches_source)


def target_text(operations: Iterable[DiffOperation]) -> str:
    """Rebuild the second input from ``operations``."""

    return "".join(op.text for op in operations if op.touches_target)
