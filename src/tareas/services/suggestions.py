"""Suggestion chips offered to the user before a task is created.

The parser produces suggestions on every debounced keystroke. The user can
accept a chip (it stays applied even if later parses stop detecting it) or
dismiss it (it never comes back during the same input session). At submit,
applied and still-pending suggestions are merged.
"""

from dataclasses import dataclass, field
from enum import Enum


class SuggestionKind(str, Enum):
    """Field a suggestion fills in."""

    CATEGORY = "category"
    ENTITY = "entity"
    TASK_TYPE = "task_type"
    DATE = "date"


@dataclass(frozen=True)
class Suggestion:
    kind: SuggestionKind
    value: str
    label: str
    confidence: float

    @property
    def key(self) -> tuple[SuggestionKind, str]:
        """Identity of a suggestion across re-parses."""
        return (self.kind, self.value)


@dataclass
class SuggestionTray:
    """Chip state for a single input session."""

    applied: list[Suggestion] = field(default_factory=list)
    pending: list[Suggestion] = field(default_factory=list)
    dismissed: set[tuple[SuggestionKind, str]] = field(default_factory=set)

    def update(self, suggestions: list[Suggestion]) -> None:
        """Replace pending chips with the latest parse, minus applied and dismissed ones."""
        applied_keys = {s.key for s in self.applied}
        self.pending = [
            s for s in suggestions if s.key not in applied_keys and s.key not in self.dismissed
        ]

    def clear_pending(self) -> None:
        self.pending = []

    def accept(self, suggestion: Suggestion) -> None:
        if all(s.key != suggestion.key for s in self.applied):
            self.applied.append(suggestion)
        self.pending = [s for s in self.pending if s.key != suggestion.key]

    def dismiss(self, suggestion: Suggestion) -> None:
        self.dismissed.add(suggestion.key)
        self.pending = [s for s in self.pending if s.key != suggestion.key]

    def remove(self, suggestion: Suggestion) -> None:
        """Un-apply an accepted chip. A later parse may offer it again."""
        self.applied = [s for s in self.applied if s.key != suggestion.key]

    def merged(self) -> list[Suggestion]:
        """Applied chips first, then pending ones, without duplicates."""
        merged: dict[tuple[SuggestionKind, str], Suggestion] = {}
        for suggestion in [*self.applied, *self.pending]:
            merged.setdefault(suggestion.key, suggestion)
        return list(merged.values())

    def finalize(self) -> list[Suggestion]:
        """Return the suggestions to commit and start a fresh session."""
        result = self.merged()
        self.reset()
        return result

    def reset(self) -> None:
        self.applied = []
        self.pending = []
        self.dismissed = set()


def values_of(suggestions: list[Suggestion], kind: SuggestionKind) -> list[str]:
    return [s.value for s in suggestions if s.kind == kind]
