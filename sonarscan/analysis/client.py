"""SonarLint language server client: startup, analysis batches, shutdown."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from loguru import logger

from sonarscan.config.schema import Config
from sonarscan.lsp.recorder import EventRecorder, NullRecorder
from sonarscan.lsp.registry import DispatchRegistry
from sonarscan.lsp.session import RpcSession
from sonarscan.lsp.transport import FramedTransport

from .coordinator import AnalysisCoordinator, AnalysisReport
from .diagnostics import Diagnostic
from .rules import RuleCatalog, flatten_rule_groups

METHOD_LIST_ALL_RULES = "sonarlint/listAllRules"


class SonarLintClient:
    """One language server process per client; ``start`` before use, ``stop`` after.

    Usable as an async context manager.
    """

    def __init__(
        self,
        config: Config | None = None,
        *,
        recorder: EventRecorder | None = None,
        on_diagnostic: Callable[[Diagnostic], None] | None = None,
    ):
        self.config = config or Config()
        self.recorder = recorder or NullRecorder()
        self.registry = DispatchRegistry()
        self.transport = FramedTransport(recorder=self.recorder)
        self.session = RpcSession(self.transport, self.registry)
        self.coordinator = AnalysisCoordinator(
            self.session,
            language_id=self.config.analysis.language_id,
            on_diagnostic=on_diagnostic,
            recorder=self.recorder,
        )
        self.coordinator.register_handlers(self.registry)
        self.coordinator.set_rule_selection(
            self.config.analysis.enabled_rules,
            self.config.analysis.disabled_rules,
        )
        self.server_info: dict[str, Any] = {}

    @property
    def rules(self) -> RuleCatalog:
        return self.coordinator.rules

    async def start(self, command: str | None = None, args: list[str] | None = None) -> None:
        """Launch the server and run the handshake; the rule catalog is loaded last."""
        if command is None:
            command, default_args = self.config.build_command()
            args = default_args if args is None else args
        await self.transport.start(command, list(args or []))

        result = await self.session.request(
            "initialize",
            {"initializationOptions": {"productKey": "", "productVersion": ""}},
        )
        self.server_info = result if isinstance(result, dict) else {}
        self.session.notify("initialized", {})
        self.session.notify("workspace/didChangeConfiguration", {})

        response = await self.session.request(METHOD_LIST_ALL_RULES)
        self.coordinator.set_rules(flatten_rule_groups(response))
        logger.info("Language server ready, {} rule(s) available", len(self.coordinator.rules))

    async def list_rules(self) -> list[str]:
        return list(self.coordinator.rules)

    async def analyze_files(
        self,
        files: Iterable[str | Path],
        rules: Iterable[str] | None = None,
        disable_rules: Iterable[str] | None = None,
    ) -> AnalysisReport:
        return await self.coordinator.analyze(files, enabled_rules=rules, disabled_rules=disable_rules)

    async def stop(self) -> None:
        await self.session.stop(self.config.server.shutdown_grace_seconds)

    async def __aenter__(self) -> "SonarLintClient":
        try:
            await self.start()
        except BaseException:
            await self.stop()
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
