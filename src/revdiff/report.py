"""JSON report helpers."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, Optional

from .core.types import Revision
from .orchestrator import ComparisonResult


def result_to_dict(result: ComparisonResult, revisions: Optional[Iterable[Revision]] = None) -> Dict[str, object]:
    data = result.to_dict()
    if revisions is not None:
        data["history"] = [revision.summary() for revision in revisions]
    return data


def write_json_report(
    result: ComparisonResult,
    path: str | Path,
    *,
    revisions: Optional[Iterable[Revision]] = None,
) -> None:
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    data = result_to_dict(result, revisions)
    with out_path.open("w", encoding="utf-8") as handle:
        json.dump(data, handle, ensure_ascii=False, indent=2)


def result_to_json(result: ComparisonResult) -> str:
    return json.dumps(result_to_dict(result), ensure_ascii=False, indent=2)
