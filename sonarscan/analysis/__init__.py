"""Analysis layer: batches, diagnostics and rule configuration."""

from .client import SonarLintClient
from .coordinator import AnalysisCoordinator, AnalysisReport, BatchState
from .diagnostics import Diagnostic, absolute_path, path_to_uri, uri_to_path
from .rules import build_rule_configuration, flatten_rule_groups, rule_level

__all__ = [
    "AnalysisCoordinator",
    "AnalysisReport",
    "BatchState",
    "Diagnostic",
    "SonarLintClient",
    "absolute_path",
    "build_rule_configuration",
    "flatten_rule_groups",
    "path_to_uri",
    "rule_level",
    "uri_to_path",
]
