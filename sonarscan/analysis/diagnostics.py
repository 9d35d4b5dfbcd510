"""Diagnostic records and file URI helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlparse


def absolute_path(path: str | Path) -> Path:
    """Absolute, normalized path; symlinks are kept as given."""
    return Path(os.path.abspath(path))


def path_to_uri(path: str | Path) -> str:
    return absolute_path(path).as_uri()


def uri_to_path(uri: str) -> str:
    """Strip the ``file://`` scheme and decode percent-escapes; other URIs pass through."""
    if not uri.startswith("file:"):
        return uri
    return unquote(urlparse(uri).path)


@dataclass(slots=True, frozen=True)
class Diagnostic:
    """One reported issue, positions 1-based."""

    file: str
    line: int
    column: int
    message: str
    code: str

    def render(self) -> str:
        return f"{self.file}:{self.line}:{self.column} - {self.message} ({self.code})"

    @classmethod
    def from_lsp(cls, file: str, payload: dict[str, Any]) -> "Diagnostic":
        """Build from an LSP diagnostic whose range is 0-based."""
        start = ((payload.get("range") or {}).get("start")) or {}
        code = payload.get("code")
        return cls(
            file=file,
            line=int(start.get("line", 0)) + 1,
            column=int(start.get("character", 0)) + 1,
            message=str(payload.get("message") or ""),
            code="" if code is None else str(code),
        )
