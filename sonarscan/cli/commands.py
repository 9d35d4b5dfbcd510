"""CLI commands for sonarscan.

Global options select the language server and rule set; the two commands
are ``list-rules`` and ``analyze``. ``analyze`` exits with 1 when any issue
is reported.
"""

from __future__ import annotations

import asyncio
import contextlib
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape

from sonarscan import __logo__, __version__
from sonarscan.analysis.client import SonarLintClient
from sonarscan.analysis.diagnostics import Diagnostic
from sonarscan.cli.shared.logging_utils import configure_console_logging, ensure_rotating_log_file
from sonarscan.cli.shared.paths import expand_file_args
from sonarscan.config.loader import load_config
from sonarscan.config.schema import Config
from sonarscan.lsp.recorder import DebugLogRecorder, NullRecorder
from sonarscan.utils.exceptions import NotFoundError, SonarScanError, classify_exception, format_user_error

app = typer.Typer(
    name="sonarscan",
    help=f"{__logo__} sonarscan - SonarLint analysis from the command line",
    no_args_is_help=True,
)

console = Console(emoji=False)
err_console = Console(stderr=True, emoji=False)


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} sonarscan v{__version__}")
        raise typer.Exit()


def split_rules(value: str | None) -> list[str] | None:
    """Comma separated rule ids; None when the option was not given."""
    if value is None:
        return None
    return [part.strip() for part in value.split(",")]


def build_config(
    *,
    config_path: Path | None = None,
    debug: bool = False,
    java: str | None = None,
    sonarlint_lsp: str | None = None,
    analyzers: list[str] | None = None,
    rules: str | None = None,
    disable_rules: str | None = None,
) -> Config:
    """Config file (or defaults) overridden by whatever was given on the command line."""
    if config_path is not None and not config_path.exists():
        raise NotFoundError("config file", str(config_path))
    cfg = load_config(config_path)
    if debug:
        cfg.debug.enabled = True
    if java:
        cfg.server.java = java
    if sonarlint_lsp:
        cfg.server.sonarlint_lsp = sonarlint_lsp
    if analyzers:
        cfg.server.analyzers = list(analyzers)
    if rules is not None:
        cfg.analysis.enabled_rules = split_rules(rules)
    if disable_rules is not None:
        cfg.analysis.disabled_rules = split_rules(disable_rules)
    return cfg


def _print_diagnostic(diagnostic: Diagnostic) -> None:
    console.print(diagnostic.render(), markup=False, highlight=False, soft_wrap=True)


def _recorder_scope(cfg: Config):
    if cfg.debug.enabled:
        return DebugLogRecorder(cfg.debug.log_file)
    return contextlib.nullcontext(NullRecorder())


async def run_command(cfg: Config, command: str, files: list[str] | None = None) -> int:
    """Start a server, run one command, always stop the server; returns the exit code."""
    with _recorder_scope(cfg) as recorder:
        client = SonarLintClient(cfg, recorder=recorder, on_diagnostic=_print_diagnostic)
        exit_code = 0
        try:
            await client.start()
            if command == "list-rules":
                console.print(",".join(await client.list_rules()), markup=False, highlight=False, soft_wrap=True)
            else:
                report = await client.analyze_files(
                    files or [],
                    rules=cfg.analysis.enabled_rules,
                    disable_rules=cfg.analysis.disabled_rules,
                )
                exit_code = 1 if report.issues_found else 0
        except Exception as e:
            code, category = classify_exception(e)
            logger.opt(exception=e).debug("{} failed: {} ({})", command, code, category.value)
            err_console.print(f"[red]Error:[/red] {escape(format_user_error(e))}")
            exit_code = 1
        finally:
            await client.stop()
        return exit_code


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        None, "--version", "-V", callback=version_callback, is_eager=True
    ),
    debug: bool = typer.Option(False, "--debug", help="Write raw protocol traffic to the debug log and print debug logs"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print sonarscan runtime logs"),
    java: str = typer.Option(None, "--java", help="Java executable (default: bundled JRE, then PATH)"),
    sonarlint_lsp: str = typer.Option(None, "--sonarlint-lsp", help="Path to the SonarLint language server jar"),
    analyzers: list[str] = typer.Option(None, "--analyzers", help="Analyzer plugin jar (repeatable)"),
    rules: str = typer.Option(None, "--rules", help="Comma separated rules to enable; all others are off"),
    disable_rules: str = typer.Option(None, "--disable-rules", help="Comma separated rules to disable"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file (default: ./.sonarscan.json)"),
):
    """sonarscan - run SonarLint analyzers over files."""
    configure_console_logging(verbose=verbose, debug=debug)
    if debug:
        ensure_rotating_log_file("sonarscan", level="DEBUG")
    try:
        ctx.obj = build_config(
            config_path=config_path,
            debug=debug,
            java=java,
            sonarlint_lsp=sonarlint_lsp,
            analyzers=analyzers,
            rules=rules,
            disable_rules=disable_rules,
        )
    except (ValueError, SonarScanError) as e:
        err_console.print(f"[red]Error:[/red] {escape(format_user_error(e))}")
        raise typer.Exit(1) from e


@app.command("list-rules")
def list_rules_command(ctx: typer.Context):
    """Print every rule id known to the analyzers, comma separated."""
    raise typer.Exit(asyncio.run(run_command(ctx.obj, "list-rules")))


@app.command("analyze")
def analyze_command(
    ctx: typer.Context,
    files: list[str] = typer.Argument(None, help="Files or glob patterns to analyze"),
):
    """Analyze files and print one line per issue."""
    if not files:
        err_console.print("[red]Error:[/red] Files required for analyze")
        raise typer.Exit(1)
    try:
        paths = expand_file_args(files)
    except SonarScanError as e:
        err_console.print(f"[red]Error:[/red] {escape(format_user_error(e))}")
        raise typer.Exit(1) from e
    raise typer.Exit(asyncio.run(run_command(ctx.obj, "analyze", paths)))


if __name__ == "__main__":
    app()
