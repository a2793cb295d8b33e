from __future__ import annotations

from pathlib import Path
from typing import Union


def file_ext(path: Union[str, Path]) -> str:
    """
    Extension of the file name, dot included, taken from the last ".".

    Unlike Path.suffix a bare ".png" counts as a PNG, not as a
    suffix-less hidden file.
    """
    name = Path(path).name
    i = name.rfind(".")
    if i < 0:
        return ""
    return name[i:]
