"""Factory for building rule tables from settings."""

import logging

from templint.config import LintSettings
from templint.pipeline.rules import (
    Phase,
    RuleConfigurationError,
    RuleTable,
    build_rule_table,
    build_rule_table_from_directory,
)

logger = logging.getLogger(__name__)


def _log_active_rules(rule_table: RuleTable) -> None:
    """Log the active rules for debugging."""
    if rule_table.is_empty:
        logger.warning("No rules configured - templates will not be checked")
        return

    logger.debug("Active rules:")
    for callback in rule_table.registered():
        logger.debug("  %s (key=%s)", callback.rule_name, callback.key)


def describe_rule_table(rule_table: RuleTable) -> dict[str, list[str]]:
    """Map each rule name to the keys it registered, in category order."""
    keys: dict[str, list[str]] = {name: [] for name in rule_table.rule_names}
    for category in rule_table.categories:
        for phase in Phase:
            for callback in rule_table.callbacks_for(category, phase):
                keys.setdefault(callback.rule_name, []).append(callback.key)
    return keys


def build_rule_table_from_settings(settings: LintSettings) -> RuleTable:
    """Build the rule table from settings.

    Raises:
        RuleConfigurationError: If a rule module is invalid. No table is
            built in that case.
    """
    rules_dir = settings.rules.rules_dir
    if rules_dir is None:
        rule_table = build_rule_table([])
    else:
        logger.info("Loading rules from directory: %s", rules_dir)
        try:
            rule_table = build_rule_table_from_directory(rules_dir)
        except RuleConfigurationError as e:
            logger.error("Failed to load rules: %s", e)
            raise
        logger.info("Loaded %d rule module(s) from %s", len(rule_table.rule_names), rules_dir)

    _log_active_rules(rule_table)
    return rule_table
