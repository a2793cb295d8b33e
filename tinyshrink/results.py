from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class ShrinkResult:
    """
    Parsed response of the compression service.

    ratio is the fraction of the original size that remains
    (size after / size before), so lower is better.
    """
    output_url: str
    ratio: float
    input_size: Optional[int] = None
    output_size: Optional[int] = None

    @property
    def saved_percent(self) -> int:
        return round(100 * (1 - self.ratio))


@dataclass(frozen=True)
class FileResult:
    """Outcome of running one file through the pipeline."""
    path: Path
    ok: bool
    shrink: Optional[ShrinkResult] = None
    failed_stage: Optional[str] = None  # "backup", "shrink" or "download"
    error: Optional[str] = None
    backup_path: Optional[Path] = None

    @property
    def saved_percent(self) -> Optional[int]:
        if self.shrink is None:
            return None
        return self.shrink.saved_percent
