from sonarscan.analysis.rules import (
    build_rule_configuration,
    flatten_rule_groups,
    normalize_rule_set,
    rule_level,
)

CATALOG = ("A", "B", "C")


def _levels(enabled=None, disabled=None) -> dict[str, str]:
    config = build_rule_configuration(CATALOG, normalize_rule_set(enabled), normalize_rule_set(disabled))
    return {rule: entry["level"] for rule, entry in config.items()}


def test_disabled_wins_over_enabled_list():
    assert _levels(enabled=["A", "C"], disabled=["B"]) == {"A": "on", "B": "off", "C": "on"}
    assert _levels(enabled=["A", "B"], disabled=["B"]) == {"A": "on", "B": "off", "C": "off"}


def test_default_on_without_enable_list():
    assert _levels(disabled=["B"]) == {"A": "on", "B": "off", "C": "on"}
    assert _levels() == {"A": "on", "B": "on", "C": "on"}


def test_enable_list_turns_unlisted_rules_off():
    assert _levels(enabled=["C"]) == {"A": "off", "B": "off", "C": "on"}
    assert rule_level("A", enabled=frozenset()) == "off"


def test_flatten_rule_groups_keeps_server_order():
    response = {
        "JavaScript": [{"key": "javascript:S3504"}, {"key": "javascript:S1481", "name": "x"}],
        "CSS": [{"key": "css:S4647"}],
        "Broken": "not-a-list",
    }
    assert flatten_rule_groups(response) == ("javascript:S3504", "javascript:S1481", "css:S4647")
    assert flatten_rule_groups(None) == ()
    assert flatten_rule_groups({"G": [{"name": "no key"}, "junk"]}) == ()


def test_normalize_rule_set_strips_blanks():
    assert normalize_rule_set(None) is None
    assert normalize_rule_set([" a ", "", "b"]) == frozenset({"a", "b"})
