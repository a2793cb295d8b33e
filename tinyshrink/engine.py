from __future__ import annotations

from pathlib import Path
from typing import Optional
import os
import shutil
import tempfile

import requests
from loguru import logger
from PIL import Image

from .errors import BackupError, DownloadError, ShrinkError, TinyError
from .pacing import JitteredDelay
from .paths import file_ext
from .provider import CompressionProvider, content_type_for
from .results import FileResult, ShrinkResult
from .settings import ShrinkSettings


CHUNK_SIZE = 64 * 1024


def process_image(
    path: Path,
    s: ShrinkSettings,
    provider: CompressionProvider,
    pacer: Optional[JitteredDelay] = None,
    session: Optional[requests.Session] = None,
) -> FileResult:
    """
    Run one file through backup -> delay -> shrink -> download.

    Stage failures come back as a FileResult with ok=False, they never
    raise, so one bad file can't stop the batch.
    """
    path = Path(path)
    backup_path: Optional[Path] = None
    shrink: Optional[ShrinkResult] = None

    try:
        if s.preserve_originals:
            backup_path = make_backup(path, s.backup_suffix)

        if pacer is not None:
            pacer.wait()

        shrink = shrink_file(path, provider)

        download(shrink.output_url, path, session=session, timeout=s.timeout, verify=s.verify_download)
    except TinyError as e:
        logger.debug(f"{path}: {e.stage} failed: {e!r}")
        return FileResult(
            path=path,
            ok=False,
            shrink=shrink,
            failed_stage=e.stage,
            error=str(e),
            backup_path=backup_path,
        )

    logger.debug(f"{path}: ratio={shrink.ratio} in={shrink.input_size} out={shrink.output_size}")
    return FileResult(path=path, ok=True, shrink=shrink, backup_path=backup_path)


def backup_path_for(path: Path, suffix: str = "_original") -> Path:
    # cat.jpg -> cat_original.jpg, .png -> _original.png
    path = Path(path)
    ext = file_ext(path)
    stem = path.name[: len(path.name) - len(ext)]
    return path.with_name(f"{stem}{suffix}{ext}")


def make_backup(path: Path, suffix: str = "_original") -> Path:
    """Copy path to its sibling backup, overwriting an older backup."""
    path = Path(path)
    backup = backup_path_for(path, suffix)
    try:
        shutil.copyfile(path, backup)
    except OSError as e:
        raise BackupError(f'can\'t back up "{path}" to "{backup}": {e}') from e
    return backup


def shrink_file(path: Path, provider: CompressionProvider) -> ShrinkResult:
    path = Path(path)
    try:
        f = path.open("rb")
    except OSError as e:
        raise ShrinkError(f'can\'t open "{path}": {e}') from e

    try:
        with f:
            return provider.shrink(f, content_type_for(path))
    except OSError as e:
        # reading the file while the body is streamed out
        raise ShrinkError(f'can\'t read "{path}": {e}') from e


def download(
    url: str,
    dest: Path,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
    verify: bool = True,
) -> None:
    """
    Fetch url and put the body at dest.

    The body goes to a temp file next to dest first and is only moved
    over dest once it is complete (and decodes, if verify is set), so
    a failed download leaves dest as it was.
    """
    dest = Path(dest)
    http = session or requests

    logger.debug(f"GET {url} -> {dest}")
    try:
        resp = http.get(url, stream=True, timeout=timeout)
    except requests.RequestException as e:
        raise DownloadError(url, str(e)) from e

    tmp_path: Optional[Path] = None
    try:
        with resp:
            resp.raise_for_status()
            tmp_path = _stream_to_temp(resp, dest)

        if verify:
            _verify_image(tmp_path)

        _finalize_output(tmp_path, dest)
        tmp_path = None
    except (requests.RequestException, ValueError) as e:
        raise DownloadError(url, str(e)) from e
    except OSError as e:
        raise DownloadError(url, f'can\'t write "{dest}": {e}') from e
    finally:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)


def _stream_to_temp(resp: requests.Response, dest: Path) -> Path:
    # Same directory as dest so the final rename stays on one filesystem
    fd, tmp_name = tempfile.mkstemp(prefix=".tiny_", suffix=file_ext(dest), dir=str(dest.parent))
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as out:
            for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    out.write(chunk)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    return tmp_path


def _verify_image(p: Path) -> None:
    try:
        with Image.open(p) as im:
            im.verify()
    except Exception as e:
        # Pillow raises a grab bag here (OSError, SyntaxError, struct.error...)
        raise ValueError(f"downloaded file is not a valid image: {e}") from e


def _finalize_output(tmp_path: Path, out_path: Path) -> None:
    # mkstemp creates 0600 files, keep whatever mode the original had
    if out_path.exists():
        shutil.copymode(out_path, tmp_path)
    tmp_path.replace(out_path)
