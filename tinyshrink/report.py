from __future__ import annotations

import csv
import json
from dataclasses import asdict, dataclass, fields
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from .batch import BatchSummary
from .results import FileResult


@dataclass(frozen=True)
class FileReport:
    path: str
    ok: bool
    saved_percent: Optional[int]
    ratio: Optional[float]
    input_size: Optional[int]
    output_size: Optional[int]
    output_url: Optional[str]
    backup_path: Optional[str]
    failed_stage: Optional[str]
    error: Optional[str]


@dataclass(frozen=True)
class BatchReport:
    created_utc: str
    summary: dict
    files: List[FileReport]


def build_report(results: List[FileResult], summary: BatchSummary) -> BatchReport:
    created_utc = datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")

    files: List[FileReport] = []
    for r in results:
        shrink = r.shrink
        files.append(
            FileReport(
                path=str(r.path),
                ok=r.ok,
                saved_percent=r.saved_percent,
                ratio=shrink.ratio if shrink else None,
                input_size=shrink.input_size if shrink else None,
                output_size=shrink.output_size if shrink else None,
                output_url=shrink.output_url if shrink else None,
                backup_path=str(r.backup_path) if r.backup_path else None,
                failed_stage=r.failed_stage,
                error=r.error,
            )
        )

    summary_dict = {
        "total_files": summary.total_files,
        "succeeded": summary.succeeded,
        "failed": summary.failed,
    }

    return BatchReport(created_utc=created_utc, summary=summary_dict, files=files)


def save_report_json(report: BatchReport, path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", encoding="utf-8") as f:
        json.dump(asdict(report), f, indent=2, ensure_ascii=False)


def save_report_csv(report: BatchReport, path: Path) -> None:
    """One row per file, summary left out."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    columns = [f.name for f in fields(FileReport)]
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=columns)
        writer.writeheader()
        for row in report.files:
            writer.writerow(asdict(row))


def save_report(report: BatchReport, path: Path) -> None:
    if Path(path).suffix.lower() == ".csv":
        save_report_csv(report, path)
    else:
        save_report_json(report, path)
