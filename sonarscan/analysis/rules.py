"""Rule catalog flattening and per-rule on/off configuration."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Literal

RuleCatalog = tuple[str, ...]
RuleLevel = Literal["on", "off"]


def flatten_rule_groups(response: Any) -> RuleCatalog:
    """Flatten ``{group: [{"key": rule_id, ...}, ...]}`` into an ordered tuple of ids."""
    if not isinstance(response, dict):
        return ()
    rules: list[str] = []
    for group in response.values():
        if not isinstance(group, list):
            continue
        for item in group:
            if isinstance(item, dict) and item.get("key"):
                rules.append(str(item["key"]))
    return tuple(rules)


def normalize_rule_set(rules: Iterable[str] | None) -> frozenset[str] | None:
    if rules is None:
        return None
    return frozenset(str(rule).strip() for rule in rules if str(rule).strip())


def rule_level(
    rule: str,
    enabled: frozenset[str] | None = None,
    disabled: frozenset[str] | None = None,
) -> RuleLevel:
    """Disabled wins; an enable list turns every unlisted rule off; otherwise on."""
    if disabled and rule in disabled:
        return "off"
    if enabled is not None:
        return "on" if rule in enabled else "off"
    return "on"


def build_rule_configuration(
    rules: Iterable[str],
    enabled: frozenset[str] | None = None,
    disabled: frozenset[str] | None = None,
) -> dict[str, dict[str, RuleLevel]]:
    return {rule: {"level": rule_level(rule, enabled, disabled)} for rule in rules}
