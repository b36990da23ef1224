"""Tests for the task intake service."""

from datetime import date
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from tareas.services.capture import CaptureSession
from tareas.services.classification import (
    ClassificationConfig,
    ClassificationSource,
    NoCategoriesError,
)
from tareas.services.classifier import ClassifierResponse, ClassifierUnavailable
from tareas.services.intake import EmptyTaskError, TaskIntakeService
from tareas.services.offline_queue import OfflineQueue
from tareas.services.parser import Parser
from tareas.services.suggestions import Suggestion, SuggestionKind
from tareas.store.local import LocalStore
from tareas.store.schemas import TaskPriority

CONFIG = ClassificationConfig(api_key="sk-test")
TODAY = date(2026, 1, 14)


class FixedDayParser(Parser):
    def today(self) -> date:
        return TODAY


def make_classifier(result) -> MagicMock:
    classifier = MagicMock()
    classifier.classify = AsyncMock(return_value=result)
    return classifier


class TestTaskIntakeService:
    @pytest.fixture
    def store(self, tmp_path: Path) -> LocalStore:
        return LocalStore(tmp_path / "store.json")

    @pytest.fixture
    def queue(self, tmp_path: Path) -> OfflineQueue:
        return OfflineQueue(tmp_path / "queue" / "pending.jsonl")

    def make_service(self, store, queue, classifier) -> TaskIntakeService:
        return TaskIntakeService(
            store, store, queue, classifier, parser=FixedDayParser(timezone="UTC")
        )

    @pytest.mark.asyncio
    async def test_ai_classification(self, store, queue):
        await store.add_category("Inbox")
        omme = await store.add_category("Omme")
        service = self.make_service(store, queue, make_classifier(ClassifierResponse("Omme")))

        result = await service.submit("Omme: revisar marketing con Marta hoy", CONFIG, online=True)

        assert result.outcome.source == ClassificationSource.AI
        assert result.task.category_id == omme.id
        assert result.task.category_path == ["Omme", "Marketing"]
        assert result.task.entities == ["Marta"]
        assert result.task.due_date == TODAY
        assert result.pending is None
        assert await queue.list_pending() == []

    @pytest.mark.asyncio
    async def test_classifier_gets_text_without_shorthand(self, store, queue):
        await store.add_category("Casa")
        classifier = make_classifier(ClassifierResponse("Casa"))
        service = self.make_service(store, queue, classifier)

        await service.submit("Comprar leche > Compras high", CONFIG, online=True)

        request = classifier.classify.call_args.args[0]
        assert request.task_text == "Comprar leche"

    @pytest.mark.asyncio
    async def test_shorthand_fields_are_stored(self, store, queue):
        home = await store.add_category("Casa")
        service = self.make_service(store, queue, make_classifier(ClassifierResponse("Casa")))

        result = await service.submit("Comprar leche > Compras high", CONFIG, online=True)

        assert result.task.text == "Comprar leche"
        assert result.task.raw_text == "Comprar leche > Compras high"
        assert result.task.priority == TaskPriority.HIGH
        groups = await store.list_groups(home.id)
        assert [g.name for g in groups] == ["Compras"]
        assert result.task.task_group_id == groups[0].id

    @pytest.mark.asyncio
    async def test_group_is_reused(self, store, queue):
        await store.add_category("Casa")
        service = self.make_service(store, queue, make_classifier(ClassifierResponse("Casa")))

        first = await service.submit("Comprar leche > Compras", CONFIG, online=True)
        second = await service.submit("Comprar pan > compras", CONFIG, online=True)

        assert first.task.task_group_id == second.task.task_group_id
        assert second.task.order == 1

    @pytest.mark.asyncio
    async def test_offline_places_in_first_category_and_queues_raw_text(self, store, queue):
        inbox = await store.add_category("Inbox")
        await store.add_category("Casa")
        classifier = make_classifier(ClassifierResponse("Casa"))
        service = self.make_service(store, queue, classifier)

        result = await service.submit("Comprar leche > Compras high", CONFIG, online=False)

        assert result.outcome.source == ClassificationSource.QUEUED
        assert result.task.category_id == inbox.id
        assert result.task.text == "Comprar leche"
        classifier.classify.assert_not_called()

        pending = await queue.list_pending()
        assert len(pending) == 1
        assert pending[0].task_id == result.task.id
        assert pending[0].raw_text == "Comprar leche > Compras high"
        assert result.pending == pending[0]

    @pytest.mark.asyncio
    async def test_classifier_failure_still_creates_task(self, store, queue):
        inbox = await store.add_category("Inbox")
        service = self.make_service(
            store, queue, make_classifier(ClassifierUnavailable("timeout"))
        )

        result = await service.submit("llamar al banco", CONFIG, online=True)

        assert result.outcome.source == ClassificationSource.FALLBACK_FIRST
        assert result.task.category_id == inbox.id
        assert await queue.list_pending() == []

    @pytest.mark.asyncio
    async def test_accepted_category_chip_wins(self, store, queue):
        await store.add_category("Inbox")
        omme = await store.add_category("Omme")
        classifier = make_classifier(ClassifierResponse("Inbox"))
        service = self.make_service(store, queue, classifier)
        chip = Suggestion(SuggestionKind.CATEGORY, "Omme", "Omme", 0.8)

        result = await service.submit("preparar pitch", CONFIG, online=True, applied=[chip])

        assert result.outcome.source == ClassificationSource.RULE
        assert result.task.category_id == omme.id
        classifier.classify.assert_not_called()

    @pytest.mark.asyncio
    async def test_submitted_suggestions_override_parse(self, store, queue):
        await store.add_category("Casa")
        service = self.make_service(store, queue, None)
        suggestions = [
            Suggestion(SuggestionKind.CATEGORY, "Casa", "Casa", 0.8),
            Suggestion(SuggestionKind.CATEGORY, "Jardín", "Jardín", 0.8),
            Suggestion(SuggestionKind.DATE, "2026-02-01", "1 feb", 0.9),
        ]

        result = await service.submit(
            "Omme: revisar marketing hoy", CONFIG, online=True, suggestions=suggestions
        )

        assert result.task.category_path == ["Casa", "Jardín"]
        assert result.task.due_date == date(2026, 2, 1)

    @pytest.mark.asyncio
    async def test_dismissed_chips_leave_fields_empty(self, store, queue):
        await store.add_category("Casa")
        service = self.make_service(store, queue, None)

        result = await service.submit(
            "Omme: revisar marketing con Marta hoy", CONFIG, online=True, suggestions=[]
        )

        assert result.task.category_path == []
        assert result.task.entities == []
        assert result.task.task_type == "other"
        assert result.task.due_date is None

    @pytest.mark.asyncio
    async def test_capture_session_submission_keeps_only_remaining_chips(self, store, queue):
        await store.add_category("Casa")
        service = self.make_service(store, queue, None)
        session = CaptureSession(FixedDayParser(timezone="UTC"), debounce_seconds=0.01)

        session.on_input("Omme: revisar marketing con Marta hoy")
        await session.flush()
        for chip in list(session.suggestions):
            if chip.kind in (SuggestionKind.CATEGORY, SuggestionKind.DATE):
                session.dismiss(chip)
        submission = session.submit()

        result = await service.submit(
            submission.raw_text,
            CONFIG,
            online=True,
            applied=submission.applied,
            suggestions=submission.suggestions,
        )

        kept_types = [
            s.value for s in submission.suggestions if s.kind == SuggestionKind.TASK_TYPE
        ]
        assert result.task.category_path == []
        assert result.task.due_date is None
        assert result.task.entities == ["Marta"]
        assert [result.task.task_type] == kept_types

    @pytest.mark.asyncio
    async def test_no_credential_online_is_not_queued(self, store, queue):
        inbox = await store.add_category("Inbox")
        await store.add_category("Omme")
        classifier = make_classifier(ClassifierResponse("Omme"))
        service = self.make_service(store, queue, classifier)

        result = await service.submit("preparar pitch Omme", ClassificationConfig(), online=True)

        assert result.outcome.source == ClassificationSource.FALLBACK_FIRST
        assert result.task.category_id == inbox.id
        assert result.pending is None
        assert await queue.list_pending() == []
        classifier.classify.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_text_rejected(self, store, queue):
        await store.add_category("Casa")
        service = self.make_service(store, queue, None)

        with pytest.raises(EmptyTaskError):
            await service.submit("> Compras", CONFIG, online=True)

        assert await store.list_tasks() == []

    @pytest.mark.asyncio
    async def test_no_categories(self, store, queue):
        service = self.make_service(store, queue, None)

        with pytest.raises(NoCategoriesError):
            await service.submit("comprar pan", CONFIG, online=False)

        assert await store.list_tasks() == []
        assert await queue.list_pending() == []
