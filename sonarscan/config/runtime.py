"""Java runtime lookup for the language server."""

from __future__ import annotations

import shutil
from pathlib import Path

from loguru import logger

DEFAULT_JAVA = "java"


def find_bundled_java(deps_dir: str | Path) -> Path | None:
    """First ``bin/java`` executable under ``<deps_dir>/jre``, if any."""
    jre = Path(deps_dir).expanduser() / "jre"
    if not jre.is_dir():
        return None
    for name in ("java", "java.exe"):
        for candidate in sorted(jre.rglob(name)):
            if candidate.is_file() and candidate.parent.name == "bin":
                return candidate
    return None


def resolve_java(java: str | None, deps_dir: str | Path) -> str:
    """Explicit java wins, even a bare ``java``; then a bundled JRE; then ``java`` from PATH."""
    if java:
        return java
    bundled = find_bundled_java(deps_dir)
    if bundled is not None:
        logger.debug("Using bundled java: {}", bundled)
        return str(bundled)
    on_path = shutil.which(DEFAULT_JAVA)
    if on_path is None:
        logger.warning("java not found in PATH or under {}/jre", deps_dir)
    return on_path or DEFAULT_JAVA
