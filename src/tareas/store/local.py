"""JSON-file implementation of the category and task stores."""

import json
import logging
from pathlib import Path
from typing import Any

from tareas.store.repositories import (
    CategoryStore,
    CategoryUpdate,
    TaskNotFoundError,
    TaskStore,
)
from tareas.store.schemas import CATEGORY_COLORS, Category, Task, TaskGroup, utc_now

logger = logging.getLogger(__name__)


class LocalStore(CategoryStore, TaskStore):
    """Keeps categories, task groups and tasks in a single JSON document.

    The document is read lazily on first access and rewritten after every
    mutation, so separate instances pointed at the same path see each
    other's committed changes once reloaded.
    """

    def __init__(self, path: Path):
        self.path = path
        self._categories: list[Category] = []
        self._groups: list[TaskGroup] = []
        self._tasks: list[Task] = []
        self._loaded = False

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        self._loaded = True
        if not self.path.exists():
            return

        with open(self.path, encoding="utf-8") as f:
            data: dict[str, Any] = json.load(f)

        self._categories = [Category.model_validate(c) for c in data.get("categories", [])]
        self._groups = [TaskGroup.model_validate(g) for g in data.get("task_groups", [])]
        self._tasks = [Task.model_validate(t) for t in data.get("tasks", [])]
        logger.debug(
            f"Loaded {len(self._categories)} categories and {len(self._tasks)} tasks "
            f"from {self.path}"
        )

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "categories": [c.model_dump(mode="json") for c in self._categories],
            "task_groups": [g.model_dump(mode="json") for g in self._groups],
            "tasks": [t.model_dump(mode="json") for t in self._tasks],
        }
        tmp_path = self.path.with_suffix(".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        tmp_path.replace(self.path)

    # Categories

    async def list_categories(self) -> list[Category]:
        self._ensure_loaded()
        return sorted(self._categories, key=lambda c: c.order)

    async def add_category(
        self,
        name: str,
        color: str | None = None,
        context_hint: str = "",
        keywords: list[str] | None = None,
    ) -> Category:
        """Create a category at the end of the list, rotating through the palette."""
        self._ensure_loaded()
        count = len(self._categories)
        category = Category(
            name=name,
            color=color or CATEGORY_COLORS[count % len(CATEGORY_COLORS)],
            order=count,
            context_hint=context_hint,
            keywords=keywords or [],
        )
        self._categories.append(category)
        self._save()
        logger.info(f"Created category {category.name!r}")
        return category

    async def reorder_categories(self, ordered_ids: list[str]) -> None:
        """Assign order by position in ordered_ids. Unknown ids are ignored."""
        self._ensure_loaded()
        now = utc_now()
        by_id = {c.id: c for c in self._categories}
        for index, category_id in enumerate(ordered_ids):
            category = by_id.get(category_id)
            if category is None:
                logger.warning(f"Cannot reorder unknown category {category_id}")
                continue
            category.order = index
            category.updated_at = now
        self._save()

    # Task groups

    async def list_groups(self, category_id: str) -> list[TaskGroup]:
        self._ensure_loaded()
        groups = [g for g in self._groups if g.category_id == category_id]
        return sorted(groups, key=lambda g: g.order)

    async def find_or_create_group(self, category_id: str, name: str) -> TaskGroup:
        groups = await self.list_groups(category_id)
        wanted = name.strip().lower()
        for group in groups:
            if group.name.strip().lower() == wanted:
                return group

        group = TaskGroup(category_id=category_id, name=name.strip(), order=len(groups))
        self._groups.append(group)
        self._save()
        logger.info(f"Created task group {group.name!r}")
        return group

    # Tasks

    async def list_tasks(self) -> list[Task]:
        self._ensure_loaded()
        return list(self._tasks)

    async def get_task(self, task_id: str) -> Task:
        self._ensure_loaded()
        for task in self._tasks:
            if task.id == task_id:
                return task
        raise TaskNotFoundError(task_id)

    async def create_task(self, task: Task) -> Task:
        self._ensure_loaded()
        task.order = sum(
            1
            for t in self._tasks
            if t.category_id == task.category_id and t.task_group_id == task.task_group_id
        )
        self._tasks.append(task)
        self._save()
        return task

    async def update_task_category(self, task_id: str, category_id: str) -> CategoryUpdate:
        try:
            task = await self.get_task(task_id)
        except TaskNotFoundError:
            return CategoryUpdate.MISSING

        if task.category_id == category_id:
            return CategoryUpdate.UNCHANGED

        task.category_id = category_id
        # Groups belong to a single category
        task.task_group_id = None
        task.updated_at = utc_now()
        self._save()
        return CategoryUpdate.MOVED
