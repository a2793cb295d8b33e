from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


SHRINK_ENDPOINT = "https://tinyjpg.com/backend/opt/shrink"


@dataclass(frozen=True)
class ShrinkSettings:
    """
    All user-configurable knobs for a shrink run.

    Pure data object (no logic) so the CLI can build it from flags
    and tests can build it directly.
    """

    # ----- Backups -----
    # photo.jpg -> photo_original.jpg, written before anything is uploaded
    preserve_originals: bool = False
    backup_suffix: str = "_original"

    # ----- Remote service -----
    endpoint: str = SHRINK_ENDPOINT
    # None means wait forever, same as a plain HTTP client with no deadline.
    timeout: Optional[float] = None

    # ----- Pacing -----
    # Each request waits a random delay in [min, max] ms first.
    # min == max gives a fixed delay, 0/0 disables it.
    min_delay_ms: int = 500
    max_delay_ms: int = 1000

    # ----- Download -----
    # Check the downloaded bytes decode as an image before replacing the original.
    verify_download: bool = True
