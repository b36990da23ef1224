"""Repository interfaces the intake pipeline depends on.

The pipeline never touches a storage engine directly; it is handed objects
implementing these interfaces. LocalStore and OfflineQueue are the bundled
implementations.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum

from tareas.store.schemas import Category, PendingClassification, Task, TaskGroup


class TaskNotFoundError(KeyError):
    """Raised when a task id is not present in the store."""


class CategoryUpdate(str, Enum):
    """What update_task_category did."""

    MOVED = "moved"
    UNCHANGED = "unchanged"  # already in that category
    MISSING = "missing"


class CategoryStore(ABC):
    @abstractmethod
    async def list_categories(self) -> list[Category]:
        """Return all categories sorted by their display order."""
        ...


class TaskStore(ABC):
    @abstractmethod
    async def create_task(self, task: Task) -> Task:
        """Persist a new task, placing it last within its group."""
        ...

    @abstractmethod
    async def update_task_category(self, task_id: str, category_id: str) -> CategoryUpdate:
        """Move a task to another category.

        Returns:
            MISSING if the task no longer exists, UNCHANGED if it already
            belongs to the category, MOVED otherwise
        """
        ...

    @abstractmethod
    async def find_or_create_group(self, category_id: str, name: str) -> TaskGroup:
        """Return the category's group with this name (case-insensitive) or create it."""
        ...

    @abstractmethod
    async def list_tasks(self) -> list[Task]:
        ...


class PendingQueueStore(ABC):
    """Durable list of tasks waiting for a late classification."""

    @abstractmethod
    async def enqueue(
        self, task_id: str, raw_text: str, created_at: datetime | None = None
    ) -> PendingClassification:
        ...

    @abstractmethod
    async def list_pending(self) -> list[PendingClassification]:
        """Return pending entries in creation order."""
        ...

    @abstractmethod
    async def remove(self, entry_id: str) -> None:
        ...
