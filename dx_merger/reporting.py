from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Sequence

from .labels import LabelMergeResult
from .objects import ObjectMergeResult


def summarize_cli(
    objects: Sequence[ObjectMergeResult],
    labels: LabelMergeResult | None = None,
) -> str:
    lines = []
    lines.append("Object Merge Summary")
    lines.append("====================")
    if not objects:
        lines.append("- no packages merged")
    for result in objects:
        detail = f"- {result.package}: {result.status}"
        if result.status == "merged":
            detail += f" ({result.files} file(s) from {result.source})"
        elif result.message:
            detail += f" ({result.message})"
        lines.append(detail)
    if labels is not None:
        lines.append("")
        lines.append("Custom Labels")
        lines.append("=============")
        lines.append(f"- files: {len(labels.files)}")
        lines.append(f"- labels: {len(labels.labels)}")
        if labels.duplicates:
            lines.append(
                f"- duplicates dropped: {len(labels.duplicates)} ({', '.join(sorted(set(labels.duplicates)))})"
            )
        lines.append(f"- output: {labels.output}" + ("" if labels.written else " (not written)"))
    return "\n".join(lines)


def write_run_report(
    report_path: Path,
    objects: Sequence[ObjectMergeResult],
    labels: LabelMergeResult | None = None,
) -> None:
    payload = {
        "objects": [asdict(result) for result in objects],
        "labels": asdict(labels) if labels is not None else None,
    }
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text(json.dumps(payload, indent=2))
    logging.info("Wrote run report to %s", report_path)
