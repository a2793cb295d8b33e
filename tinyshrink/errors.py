from __future__ import annotations


class TinyError(Exception):
    """Base class for per-file failures. The batch reports them and moves on."""

    stage = "unknown"


class BackupError(TinyError):
    stage = "backup"


class ShrinkError(TinyError):
    stage = "shrink"


class DownloadError(TinyError):
    stage = "download"

    def __init__(self, url: str, message: str) -> None:
        super().__init__(message)
        self.url = url
