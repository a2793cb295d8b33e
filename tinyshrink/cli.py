from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .batch import find_image_files, process_batch
from .logger import logger, setup_logger
from .pacing import JitteredDelay
from .provider import TinyJpgProvider
from .report import build_report, save_report
from .settings import ShrinkSettings


SCAN_TOKEN = "."

USAGE = """\
USAGE
	tiny cat.jpg dog.png
	tiny .
	tiny -- -1.jpg    # names starting with "-" go after --"""


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="tiny",
        description="Shrink JPEG/PNG images with tinyjpg.com, in place",
        usage="%(prog)s [options] (FILE ... | .)",
    )
    p.add_argument("paths", nargs="*", help='Images to shrink, or "." for every image in the current folder. '
                   'Put names starting with "-" after --')

    p.add_argument("--backup", action="store_true", help="Keep a copy as <name>_original<ext> first")
    p.add_argument("--min-delay", type=int, default=500, help="Minimum pause before each upload, ms (default 500)")
    p.add_argument("--max-delay", type=int, default=1000, help="Maximum pause before each upload, ms (default 1000)")
    p.add_argument("--timeout", type=float, default=None, help="HTTP timeout in seconds (default: none)")
    p.add_argument("--no-verify", action="store_true", help="Don't check the download is a valid image")
    p.add_argument("--report", default=None, help="Write a JSON (or .csv) report to this path")
    p.add_argument("-v", "--verbose", action="store_true", help="Log requests and errors to stderr")

    return p


def resolve_paths(args: Sequence[str]) -> Optional[List[Union[str, Path]]]:
    """
    Turn positional args into the list of files to shrink.

    Explicit paths are returned as typed, so progress lines echo them
    unchanged. Returns None when the usage text should be shown instead.
    Raises OSError when "." was given and the folder can't be read.
    """
    if not args or (len(args) > 1 and args[0] == SCAN_TOKEN):
        return None

    if list(args) == [SCAN_TOKEN]:
        return find_image_files(Path("."))

    return list(args)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    # options may sit between paths: tiny a.jpg --backup b.jpg
    args = parser.parse_intermixed_args(argv)

    if args.min_delay < 0 or args.max_delay < args.min_delay:
        parser.error("--max-delay must be >= --min-delay >= 0")

    setup_logger(verbose=bool(args.verbose))

    try:
        paths = resolve_paths(args.paths)
    except OSError as e:
        logger.error(f"Couldn't find image files: {e}")
        return 1

    if paths is None:
        print(USAGE)
        return 0

    settings = ShrinkSettings(
        preserve_originals=bool(args.backup),
        timeout=args.timeout,
        min_delay_ms=int(args.min_delay),
        max_delay_ms=int(args.max_delay),
        verify_download=not bool(args.no_verify),
    )

    provider = TinyJpgProvider(endpoint=settings.endpoint, timeout=settings.timeout)
    pacer = JitteredDelay(settings.min_delay_ms, settings.max_delay_ms)

    results, summary = process_batch(
        paths,
        settings,
        provider,
        pacer=pacer,
        session=provider.session,
    )

    if args.report:
        save_report(build_report(results, summary), Path(args.report))
        logger.debug(f"Report written: {args.report}")

    # Per-file failures were already printed, they don't change the exit code.
    return 0
