"""Data models for the rules system."""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Optional

from templint.pipeline.categories import CATEGORY_TABLE, CategoryTable

if TYPE_CHECKING:
    from templint.pipeline.context import DiagnosticContext, LintSession

EXIT_SUFFIX = ":exit"


class Phase(Enum):
    """Points in the traversal at which callbacks fire."""

    ENTER = "enter"
    EXIT = "exit"


class RuleConfigurationError(Exception):
    """Raised when a rule module cannot be registered."""

    pass


class RuleExecutionError(Exception):
    """Raised when a rule callback fails during traversal."""

    def __init__(self, rule_name: str, category: str, phase: Phase, lineno: Optional[int]):
        self.rule_name = rule_name
        self.category = category
        self.phase = phase
        self.lineno = lineno
        location = f"line {lineno}" if lineno is not None else "unknown line"
        super().__init__(
            f"Rule '{rule_name}' failed on {category} ({phase.value}) at {location}"
        )


RuleFactory = Callable[["DiagnosticContext"], Mapping[str, Callable[[Any], None]]]


@dataclass(frozen=True)
class RuleModule:
    """A named unit that supplies category callbacks.

    ``create`` receives the rule's ``DiagnosticContext`` and returns a mapping
    of ``"Category"`` or ``"Category:exit"`` to one-argument callbacks.
    """

    name: str
    create: RuleFactory
    path: Optional[Path] = None


@dataclass(frozen=True)
class RuleCallback:
    """A callback registered by a rule module for one category and phase."""

    rule_name: str
    category: str
    phase: Phase
    callback: Callable[[Any], None]

    @property
    def key(self) -> str:
        if self.phase is Phase.EXIT:
            return f"{self.category}{EXIT_SUFFIX}"
        return self.category

    def __call__(self, node: Any) -> None:
        try:
            self.callback(node)
        except Exception as e:
            raise RuleExecutionError(
                self.rule_name, self.category, self.phase, getattr(node, "lineno", None)
            ) from e


@dataclass(frozen=True)
class RuleTable:
    """Ordered callbacks for every (category, phase) pair of the vocabulary.

    Built once, read-only afterwards, and reusable across documents.
    """

    callbacks: Mapping[tuple[str, Phase], tuple[RuleCallback, ...]]
    rule_names: tuple[str, ...]
    session: "LintSession"
    categories: CategoryTable = field(default_factory=lambda: CATEGORY_TABLE)

    @classmethod
    def from_registrations(
        cls,
        registrations: Iterable[RuleCallback],
        rule_names: Iterable[str],
        session: "LintSession",
        categories: CategoryTable = CATEGORY_TABLE,
    ) -> "RuleTable":
        """Group registrations by key, keeping their registration order."""
        grouped: dict[tuple[str, Phase], list[RuleCallback]] = {
            (category, phase): [] for category in categories for phase in Phase
        }
        for registration in registrations:
            grouped[(registration.category, registration.phase)].append(registration)
        return cls(
            callbacks=MappingProxyType({key: tuple(value) for key, value in grouped.items()}),
            rule_names=tuple(rule_names),
            session=session,
            categories=categories,
        )

    def callbacks_for(self, category: str, phase: Phase) -> tuple[RuleCallback, ...]:
        return self.callbacks.get((category, phase), ())

    def registered(self) -> list[RuleCallback]:
        """Every registered callback, in category then registration order."""
        return [
            callback
            for category in self.categories
            for phase in Phase
            for callback in self.callbacks_for(category, phase)
        ]

    @property
    def is_empty(self) -> bool:
        return not any(self.callbacks.values())
