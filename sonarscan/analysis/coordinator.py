"""Analysis batches: open documents, collect diagnostics, signal completion."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from loguru import logger

from sonarscan.lsp.recorder import EventRecorder, NullRecorder
from sonarscan.lsp.registry import DispatchRegistry
from sonarscan.lsp.session import RpcSession

from .diagnostics import Diagnostic, absolute_path, path_to_uri, uri_to_path
from .rules import RuleCatalog, build_rule_configuration, normalize_rule_set

DEFAULT_LANGUAGE_ID = "javascript"

METHOD_CONFIGURATION = "workspace/configuration"
METHOD_IS_OPEN_IN_EDITOR = "sonarlint/isOpenInEditor"
METHOD_PUBLISH_DIAGNOSTICS = "textDocument/publishDiagnostics"
METHOD_DID_OPEN = "textDocument/didOpen"


class BatchState(str, Enum):
    IDLE = "idle"
    OPEN = "open"
    COMPLETE = "complete"


@dataclass(slots=True)
class AnalysisReport:
    """Outcome of one batch, diagnostics in arrival order."""

    diagnostics: list[Diagnostic] = field(default_factory=list)
    files: int = 0

    @property
    def issues_found(self) -> bool:
        return bool(self.diagnostics)

    @property
    def lines(self) -> list[str]:
        return [d.render() for d in self.diagnostics]


class AnalysisCoordinator:
    """Tracks one batch of opened files until the server has reported on each.

    The pending set is keyed by absolute path. A file leaves the set on its
    first diagnostics publish, empty or not; the batch future resolves the
    moment the set becomes empty. Rendered diagnostic lines are deduplicated
    per batch.
    """

    def __init__(
        self,
        session: RpcSession,
        *,
        language_id: str = DEFAULT_LANGUAGE_ID,
        on_diagnostic: Callable[[Diagnostic], None] | None = None,
        recorder: EventRecorder | None = None,
    ):
        self.session = session
        self.language_id = language_id
        self.on_diagnostic = on_diagnostic
        self._recorder = recorder or NullRecorder()
        self.rules: RuleCatalog = ()
        self.enabled_rules: frozenset[str] | None = None
        self.disabled_rules: frozenset[str] | None = None
        self.state = BatchState.IDLE
        self._seen: set[str] = set()
        self._pending: set[str] = set()
        self._report = AnalysisReport()
        self._done: asyncio.Future | None = None

    @property
    def pending_files(self) -> frozenset[str]:
        return frozenset(self._pending)

    @property
    def issues_found(self) -> bool:
        return self._report.issues_found

    @property
    def report(self) -> AnalysisReport:
        return self._report

    def register_handlers(self, registry: DispatchRegistry | None = None) -> None:
        registry = registry or self.session.registry
        registry.on_request(METHOD_CONFIGURATION, self.rule_configuration)
        registry.on_request(METHOD_IS_OPEN_IN_EDITOR, self.is_open_in_editor)
        registry.on_notification(METHOD_PUBLISH_DIAGNOSTICS, self.handle_diagnostics)

    def set_rules(self, rules: Iterable[str]) -> None:
        self.rules = tuple(rules)

    def set_rule_selection(
        self,
        enabled: Iterable[str] | None = None,
        disabled: Iterable[str] | None = None,
    ) -> None:
        self.enabled_rules = normalize_rule_set(enabled)
        self.disabled_rules = normalize_rule_set(disabled)

    def rule_configuration(self, params: Any = None) -> list[dict[str, Any]]:
        # Recomputed on every pull: the selection may change between batches.
        rules = build_rule_configuration(self.rules, self.enabled_rules, self.disabled_rules)
        return [{"rules": rules}]

    def is_open_in_editor(self, params: Any = None) -> bool:
        return True

    def open_batch(self, paths: Iterable[str | Path]) -> asyncio.Future:
        """Open every file with the server and return the batch completion future."""
        documents: list[tuple[Path, str]] = []
        for raw in paths:
            path = absolute_path(raw)
            documents.append((path, path.read_text(encoding="utf-8")))

        self._seen.clear()
        self._pending.clear()
        self._report = AnalysisReport(files=len(documents))
        self._done = asyncio.get_running_loop().create_future()
        self.state = BatchState.OPEN
        self._recorder.record("batch", f"open {len(documents)} file(s)")

        for path, text in documents:
            self._pending.add(str(path))
            self.session.notify(
                METHOD_DID_OPEN,
                {
                    "textDocument": {
                        "uri": path_to_uri(path),
                        "text": text,
                        "languageId": self.language_id,
                        "version": 1,
                    }
                },
            )
        if not self._pending:
            self._complete()
        return self._done

    def handle_diagnostics(self, params: Any) -> None:
        if not isinstance(params, dict) or not isinstance(params.get("uri"), str):
            logger.warning("Ignoring malformed diagnostics publish: {}", params)
            return
        file = uri_to_path(params["uri"])
        for payload in params.get("diagnostics") or []:
            if not isinstance(payload, dict):
                continue
            diagnostic = Diagnostic.from_lsp(file, payload)
            line = diagnostic.render()
            if line in self._seen:
                continue
            self._seen.add(line)
            self._report.diagnostics.append(diagnostic)
            if self.on_diagnostic is not None:
                self.on_diagnostic(diagnostic)

        self._pending.discard(file)
        if not self._pending and self.state is BatchState.OPEN:
            self._complete()

    def _complete(self) -> None:
        self.state = BatchState.COMPLETE
        self._recorder.record("batch", f"complete, {len(self._report.diagnostics)} issue(s)")
        if self._done is not None and not self._done.done():
            self._done.set_result(self._report)

    async def analyze(
        self,
        paths: Iterable[str | Path],
        enabled_rules: Iterable[str] | None = None,
        disabled_rules: Iterable[str] | None = None,
    ) -> AnalysisReport:
        """Run one batch to completion. There is no timeout at this layer."""
        self.set_rule_selection(enabled_rules, disabled_rules)
        report = await self.open_batch(paths)
        self.state = BatchState.IDLE
        logger.info("Analysis finished: {} file(s), {} issue(s)", report.files, len(report.diagnostics))
        return report
