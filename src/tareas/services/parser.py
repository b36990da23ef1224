import re
from dataclasses import dataclass, field
from datetime import date, datetime

import pytz

from tareas.config import settings
from tareas.services.blocks import build_category_path
from tareas.services.dates import detect_due_date, format_date_label
from tareas.services.entities import detect_entities
from tareas.services.suggestions import Suggestion, SuggestionKind
from tareas.services.task_types import TaskType, detect_task_type
from tareas.store.schemas import TaskPriority

PRIORITY_SUFFIX = re.compile(r"\s+(low|mid|high)$", re.IGNORECASE)
# "<>" is the introduction shorthand, not a group marker
GROUP_SUFFIX = re.compile(r"(?<!<)>\s*(.+)$")


@dataclass
class ShorthandResult:
    text: str
    group_name: str | None = None
    priority: TaskPriority | None = None


@dataclass
class ParseResult:
    category_path: list[str]
    path_confidence: float
    entities: list[str]
    task_type: TaskType
    task_type_confidence: float
    due_date: date | None
    overall_confidence: float
    suggestions: list[Suggestion] = field(default_factory=list)
    text: str = ""
    group_name: str | None = None
    priority: TaskPriority | None = None
    raw_text: str = ""


def parse_shorthand(raw_text: str) -> ShorthandResult:
    """Split "Comprar leche > Compras high" into text, group name and priority.

    The priority must be the last word; the group name is whatever follows
    the first ">" once the priority is removed.
    """
    text = raw_text.strip()
    priority = None
    group_name = None

    priority_match = PRIORITY_SUFFIX.search(text)
    if priority_match:
        priority = TaskPriority(priority_match.group(1).lower())
        text = text[: priority_match.start()].strip()

    group_match = GROUP_SUFFIX.search(text)
    if group_match:
        group_name = group_match.group(1).strip()
        text = text[: group_match.start()].strip()

    return ShorthandResult(text=text, group_name=group_name, priority=priority)


class Parser:
    """Rule-based parser turning free task text into structured suggestions.

    Parsing is pure: the same text on the same day always yields the same
    result, suggestion order included.
    """

    def __init__(self, timezone: str | None = None):
        self.timezone = pytz.timezone(timezone or settings.user_timezone)

    def today(self) -> date:
        return datetime.now(self.timezone).date()

    def parse(self, text: str, today: date | None = None) -> ParseResult:
        today = today or self.today()

        path_result = build_category_path(text)
        type_result = detect_task_type(text)
        entity_result = detect_entities(text)
        date_result = detect_due_date(text, today=today)
        shorthand = parse_shorthand(text)

        suggestions = self._build_suggestions(
            path_result.value,
            path_result.confidence,
            entity_result.value,
            entity_result.confidence,
            type_result.value,
            type_result.confidence,
            date_result.value,
            date_result.confidence,
            today,
        )

        confidences = [
            c
            for c in (
                path_result.confidence,
                type_result.confidence,
                entity_result.confidence,
                date_result.confidence,
            )
            if c > 0
        ]
        overall = sum(confidences) / len(confidences) if confidences else 0.0

        return ParseResult(
            category_path=path_result.value,
            path_confidence=path_result.confidence,
            entities=entity_result.value,
            task_type=type_result.value,
            task_type_confidence=type_result.confidence,
            due_date=date_result.value,
            overall_confidence=overall,
            suggestions=suggestions,
            text=shorthand.text,
            group_name=shorthand.group_name,
            priority=shorthand.priority,
            raw_text=text,
        )

    def _build_suggestions(
        self,
        path: list[str],
        path_confidence: float,
        entities: list[str],
        entity_confidence: float,
        task_type: TaskType,
        task_type_confidence: float,
        due_date: date | None,
        date_confidence: float,
        today: date,
    ) -> list[Suggestion]:
        suggestions = [
            Suggestion(SuggestionKind.CATEGORY, name, name, path_confidence) for name in path
        ]
        suggestions.extend(
            Suggestion(SuggestionKind.ENTITY, entity, entity, entity_confidence)
            for entity in entities
        )

        if task_type != TaskType.OTHER or task_type_confidence > 0.5:
            suggestions.append(
                Suggestion(
                    SuggestionKind.TASK_TYPE,
                    task_type.value,
                    task_type.label,
                    task_type_confidence,
                )
            )

        if due_date is not None:
            suggestions.append(
                Suggestion(
                    SuggestionKind.DATE,
                    due_date.isoformat(),
                    format_date_label(due_date, today),
                    date_confidence,
                )
            )

        return suggestions


def parse_task_input(text: str, timezone: str | None = None) -> ParseResult:
    """Convenience function to parse one input with a fresh parser."""
    return Parser(timezone=timezone).parse(text)
