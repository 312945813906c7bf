"""Loading rule modules and building the rule table."""

import importlib.util
import logging
import sys
from collections.abc import Iterable, Mapping
from pathlib import Path

from templint.pipeline.categories import CATEGORY_TABLE, CategoryTable, is_category
from templint.pipeline.context import DiagnosticContext, LintSession

from .models import (
    EXIT_SUFFIX,
    Phase,
    RuleCallback,
    RuleConfigurationError,
    RuleModule,
    RuleTable,
)

logger = logging.getLogger(__name__)

RULE_FACTORY_NAME = "create"
_MODULE_PREFIX = "templint_rule_"


def discover_rule_files(rules_dir: Path) -> list[Path]:
    """List rule files in a directory, sorted by file name.

    Directory listing order differs between platforms, so it is never used
    as the registration order.
    """
    path = Path(rules_dir)
    if not path.is_dir():
        raise RuleConfigurationError(f"Rules directory does not exist: {path}")
    return sorted(
        (p for p in path.iterdir() if p.is_file() and p.suffix == ".py" and not p.name.startswith("_")),
        key=lambda p: p.name,
    )


def load_rule_module(path: Path) -> RuleModule:
    """Import a rule file and return its ``create`` factory."""
    name = path.stem
    module_name = f"{_MODULE_PREFIX}{name.replace('-', '_')}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise RuleConfigurationError(f"Cannot import rule module {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(module_name, None)
        raise RuleConfigurationError(f"Failed to import rule module {path}: {e}") from e

    factory = getattr(module, RULE_FACTORY_NAME, None)
    if not callable(factory):
        raise RuleConfigurationError(
            f"Rule module {path} must define a callable '{RULE_FACTORY_NAME}(context)'"
        )
    return RuleModule(name=name, create=factory, path=path)


def load_rule_modules(rules_dir: Path) -> list[RuleModule]:
    """Load every rule module of a directory, in file name order."""
    modules = [load_rule_module(path) for path in discover_rule_files(rules_dir)]
    logger.debug("Loaded %d rule module(s) from %s", len(modules), rules_dir)
    return modules


def parse_rule_key(key: str, table: CategoryTable = CATEGORY_TABLE) -> tuple[str, Phase]:
    """Split a rule key into its category and phase.

    ``"Set"`` selects the enter phase and ``"Set:exit"`` the exit phase.
    """
    if not isinstance(key, str):
        raise RuleConfigurationError(f"{key!r} is not an allowed target for a rule")

    category, phase = key, Phase.ENTER
    if key.endswith(EXIT_SUFFIX):
        category, phase = key[: -len(EXIT_SUFFIX)], Phase.EXIT

    if not is_category(category, table):
        raise RuleConfigurationError(f"{key} is not an allowed target for a rule")
    return category, phase


def _register_module(
    module: RuleModule, session: LintSession, table: CategoryTable
) -> list[RuleCallback]:
    context = DiagnosticContext(module.name, session)
    source = module.path or module.name
    try:
        mapping = module.create(context)
    except Exception as e:
        raise RuleConfigurationError(
            f"Rule module {source} failed in {RULE_FACTORY_NAME}(): {e}"
        ) from e
    if not isinstance(mapping, Mapping):
        raise RuleConfigurationError(
            f"Rule module {source} must return a mapping of categories to callbacks"
        )

    registrations = []
    for key, callback in mapping.items():
        try:
            category, phase = parse_rule_key(key, table)
        except RuleConfigurationError as e:
            raise RuleConfigurationError(f"{e}. See {source}") from e
        if not callable(callback):
            raise RuleConfigurationError(f"Callback for {key} in {source} is not callable")
        registrations.append(
            RuleCallback(rule_name=module.name, category=category, phase=phase, callback=callback)
        )
    return registrations


def build_rule_table(
    modules: Iterable[RuleModule], table: CategoryTable = CATEGORY_TABLE
) -> RuleTable:
    """Build the rule table from rule modules, in the order given.

    Any invalid module aborts the whole build, so a partial rule set is
    never used.
    """
    session = LintSession()
    registrations: list[RuleCallback] = []
    names: list[str] = []
    for module in modules:
        registrations.extend(_register_module(module, session, table))
        names.append(module.name)
    return RuleTable.from_registrations(registrations, names, session, table)


def build_rule_table_from_directory(
    rules_dir: Path, table: CategoryTable = CATEGORY_TABLE
) -> RuleTable:
    return build_rule_table(load_rule_modules(rules_dir), table)
