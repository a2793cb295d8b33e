from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

import requests

from .engine import process_image
from .pacing import JitteredDelay
from .paths import file_ext
from .provider import CompressionProvider
from .results import FileResult
from .settings import ShrinkSettings


# Case-sensitive on purpose: "photo.JPG" is not picked up by a scan.
IMAGE_EXTS = (".jpg", ".jpeg", ".png")


@dataclass(frozen=True)
class BatchSummary:
    total_files: int
    succeeded: int
    failed: int


def find_image_files(directory: Path = Path(".")) -> List[Path]:
    """
    Regular image files directly inside directory, in listing order.
    Paths come back the way iterdir() builds them, so "." yields bare names.

    Symlinks and anything that isn't a plain file are left out.
    OSError from listing the directory is the caller's problem.
    """
    directory = Path(directory)
    found: List[Path] = []
    for entry in directory.iterdir():
        if entry.is_symlink() or not entry.is_file():
            continue
        if file_ext(entry) not in IMAGE_EXTS:
            continue
        found.append(entry)
    return found


def describe_result(r: FileResult) -> str:
    if r.ok:
        return f"OK, saved {r.saved_percent}%!"
    if r.failed_stage == "backup":
        return f"Failed to back up: {r.error}. Skipping."
    if r.failed_stage == "download" and r.shrink is not None:
        return f"Failed to download {r.shrink.output_url}: {r.error}"
    return f"Failed to shrink: {r.error}"


def process_batch(
    paths: Sequence[Union[str, Path]],
    settings: ShrinkSettings,
    provider: CompressionProvider,
    pacer: Optional[JitteredDelay] = None,
    session: Optional[requests.Session] = None,
    echo: Callable[..., None] = print,
) -> tuple[List[FileResult], BatchSummary]:
    """Shrink paths one after another, printing a line per file."""
    results: List[FileResult] = []
    succeeded = 0
    failed = 0

    for path in paths:
        echo(f'Shrinking "{path}"... ', end="", flush=True)

        r = process_image(Path(path), settings, provider, pacer=pacer, session=session)
        results.append(r)

        echo(describe_result(r))

        if r.ok:
            succeeded += 1
        else:
            failed += 1

    summary = BatchSummary(
        total_files=len(results),
        succeeded=succeeded,
        failed=failed,
    )
    return results, summary
