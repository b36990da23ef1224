"""Task intake: turn one submitted input into a stored task."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from tareas.sentry import add_breadcrumb
from tareas.services.classification import (
    ClassificationConfig,
    ClassificationOutcome,
    ClassificationPolicy,
)
from tareas.services.classifier import CategoryClassifier
from tareas.services.parser import ParseResult, Parser
from tareas.services.suggestions import Suggestion, SuggestionKind, values_of
from tareas.services.task_types import TaskType
from tareas.store.repositories import CategoryStore, PendingQueueStore, TaskStore
from tareas.store.schemas import PendingClassification, Task

logger = logging.getLogger(__name__)


class EmptyTaskError(ValueError):
    """Raised when the input has no task text once shorthand is removed."""


@dataclass
class IntakeResult:
    task: Task
    outcome: ClassificationOutcome
    parse: ParseResult
    pending: PendingClassification | None = None


class TaskIntakeService:
    """Creates tasks from raw input.

    The flow for one submission:
    1. Parse the input, splitting off "> Group" and a trailing priority
    2. Pick the destination category (accepted chip, AI classifier or fallback)
    3. Reuse or create the named group inside that category
    4. Store the task with the parsed attributes
    5. Queue a late classification when the category was picked offline
    """

    def __init__(
        self,
        category_store: CategoryStore,
        task_store: TaskStore,
        pending_store: PendingQueueStore,
        classifier: CategoryClassifier | None,
        parser: Parser | None = None,
    ):
        self.task_store = task_store
        self.pending_store = pending_store
        self.parser = parser or Parser()
        self.policy = ClassificationPolicy(category_store, classifier)

    async def submit(
        self,
        raw_text: str,
        config: ClassificationConfig,
        online: bool,
        applied: Sequence[Suggestion] = (),
        suggestions: Sequence[Suggestion] | None = None,
    ) -> IntakeResult:
        """Create a task from raw input.

        Args:
            raw_text: Input exactly as typed
            config: Classification settings
            online: Whether the network is currently reachable
            applied: Suggestions the user accepted
            suggestions: Applied and pending suggestions merged at submit.
                When given, path, entities, type and due date come only from
                this list; None uses the parser's own detection

        Returns:
            IntakeResult with the stored task and how its category was chosen

        Raises:
            EmptyTaskError: If nothing is left once shorthand is removed
            NoCategoriesError: If there is no category to put the task in
        """
        parse = self.parser.parse(raw_text)
        if not parse.text:
            raise EmptyTaskError("Task text is empty")

        accepted_categories = values_of(list(applied), SuggestionKind.CATEGORY)
        preferred = accepted_categories[0] if accepted_categories else None

        outcome = await self.policy.decide(
            parse.text, config, online, preferred_category=preferred
        )

        group_id = None
        if parse.group_name:
            group = await self.task_store.find_or_create_group(
                outcome.destination_category_id, parse.group_name
            )
            group_id = group.id

        if suggestions is None:
            category_path = parse.category_path
            entities = parse.entities
            task_type = parse.task_type.value
            due_date = parse.due_date
        else:
            # Only what the user kept; dismissed chips leave the field empty
            chosen = list(suggestions)
            category_path = values_of(chosen, SuggestionKind.CATEGORY)
            entities = values_of(chosen, SuggestionKind.ENTITY)
            task_types = values_of(chosen, SuggestionKind.TASK_TYPE)
            task_type = task_types[0] if task_types else TaskType.OTHER.value
            due_dates = values_of(chosen, SuggestionKind.DATE)
            due_date = date.fromisoformat(due_dates[0]) if due_dates else None

        task = await self.task_store.create_task(
            Task(
                category_id=outcome.destination_category_id,
                task_group_id=group_id,
                text=parse.text,
                raw_text=raw_text,
                priority=parse.priority,
                category_path=category_path,
                entities=entities,
                task_type=task_type,
                due_date=due_date,
            )
        )
        logger.info(f"Created task {task.id} via {outcome.source.value}")
        add_breadcrumb(
            "Task created",
            category="intake",
            data={"task_id": task.id, "source": outcome.source.value},
        )

        pending = None
        if outcome.needs_late_classification:
            pending = await self.pending_store.enqueue(task.id, raw_text)

        return IntakeResult(task=task, outcome=outcome, parse=parse, pending=pending)
