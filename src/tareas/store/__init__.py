from tareas.store.local import LocalStore
from tareas.store.repositories import (
    CategoryStore,
    CategoryUpdate,
    PendingQueueStore,
    TaskNotFoundError,
    TaskStore,
)
from tareas.store.schemas import (
    Category,
    PendingClassification,
    Task,
    TaskGroup,
    TaskPriority,
)

__all__ = [
    "LocalStore",
    "CategoryStore",
    "CategoryUpdate",
    "TaskStore",
    "PendingQueueStore",
    "TaskNotFoundError",
    "Category",
    "TaskGroup",
    "Task",
    "TaskPriority",
    "PendingClassification",
]
