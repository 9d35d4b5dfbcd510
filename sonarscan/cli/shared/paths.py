"""File argument expansion for the analyze command."""

from __future__ import annotations

import glob
import os
from collections.abc import Iterable

from sonarscan.utils.exceptions import NotFoundError, ValidationError

_GLOB_CHARS = ("*", "?", "[")


def is_pattern(arg: str) -> bool:
    return any(ch in arg for ch in _GLOB_CHARS)


def expand_file_args(args: Iterable[str]) -> list[str]:
    """Expand glob patterns (``**`` included), keep plain paths, drop duplicates in order.

    Raises ValidationError for a pattern that matches nothing and
    NotFoundError for a plain path that is not a file.
    """
    files: list[str] = []
    seen: set[str] = set()
    for arg in args:
        if is_pattern(arg):
            matches = sorted(m for m in glob.glob(arg, recursive=True) if not os.path.isdir(m))
            if not matches:
                raise ValidationError(f"No files match pattern: {arg}", field="files")
        elif not os.path.isfile(arg):
            raise NotFoundError("file", arg)
        else:
            matches = [arg]
        for match in matches:
            if match not in seen:
                seen.add(match)
                files.append(match)
    return files
