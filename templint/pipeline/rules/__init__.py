"""Rules system for category-based node callbacks."""

from .models import (
    Phase,
    RuleCallback,
    RuleConfigurationError,
    RuleExecutionError,
    RuleModule,
    RuleTable,
)
from .registry import (
    build_rule_table,
    build_rule_table_from_directory,
    discover_rule_files,
    load_rule_module,
    load_rule_modules,
    parse_rule_key,
)

__all__ = [
    "Phase",
    "RuleCallback",
    "RuleConfigurationError",
    "RuleExecutionError",
    "RuleModule",
    "RuleTable",
    "build_rule_table",
    "build_rule_table_from_directory",
    "discover_rule_files",
    "load_rule_module",
    "load_rule_modules",
    "parse_rule_key",
]
