"""Tests for the stored record models."""

from datetime import date

from tareas.store.schemas import (
    Category,
    PendingClassification,
    Task,
    TaskGroup,
    TaskPriority,
    generate_id,
)


class TestSchemas:
    def test_generate_id_is_unique(self):
        assert generate_id() != generate_id()

    def test_task_defaults(self):
        task = Task(category_id="c1", text="Comprar leche")

        assert task.task_group_id is None
        assert task.priority is None
        assert task.category_path == []
        assert task.task_type == "other"
        assert not task.is_completed
        assert not task.is_archived

    def test_priority_serializes_as_value(self):
        task = Task(
            category_id="c1", text="x", priority=TaskPriority.MID, due_date=date(2026, 1, 15)
        )
        data = task.model_dump(mode="json")

        assert data["priority"] == "mid"
        assert data["due_date"] == "2026-01-15"

    def test_priority_parsed_from_value(self):
        task = Task.model_validate({"category_id": "c1", "text": "x", "priority": "low"})
        assert task.priority == TaskPriority.LOW

    def test_category_defaults(self):
        category = Category(name="Omme")
        assert category.keywords == []
        assert category.context_hint == ""

    def test_group_and_pending_get_ids(self):
        group = TaskGroup(category_id="c1", name="Compras")
        pending = PendingClassification(task_id="t1", raw_text="comprar pan")

        assert group.id
        assert pending.id
        assert pending.created_at.tzinfo is not None
