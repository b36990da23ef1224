"""Offline classification queue.

Tasks created while offline land in the first category and get an entry
here. When connectivity returns the queue is drained in creation order: each
entry is classified again and the task moved if the classifier names a
category. A failure stops the pass and leaves the rest queued for the next
attempt.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from tareas.sentry import add_breadcrumb, capture_exception
from tareas.services.classification import ClassificationConfig
from tareas.services.classifier import (
    CategoryClassifier,
    ClassifierRequest,
    ClassifierUnavailable,
    resolve_category_name,
)
from tareas.store.repositories import (
    CategoryStore,
    CategoryUpdate,
    PendingQueueStore,
    TaskStore,
)
from tareas.store.schemas import PendingClassification, utc_now

logger = logging.getLogger(__name__)


@dataclass
class QueueProcessResult:
    """Result of one drain pass."""

    total_pending: int = 0
    successful: int = 0  # entries removed from the queue
    reclassified: int = 0  # tasks moved to the suggested category
    unmatched: int = 0  # classifier answered but named no category
    unchanged: int = 0  # already in the suggested category
    remaining: int = 0
    halted: bool = False
    skipped_reason: str | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def all_successful(self) -> bool:
        return self.remaining == 0 and self.total_pending > 0


class OfflineQueue(PendingQueueStore):
    """Pending classifications stored one JSON object per line."""

    def __init__(self, queue_path: Path):
        self.queue_path = queue_path

    def _ensure_queue_dir(self) -> None:
        self.queue_path.parent.mkdir(parents=True, exist_ok=True)

    def read_queue(self) -> list[PendingClassification]:
        """Read all entries in creation order, skipping malformed lines."""
        if not self.queue_path.exists():
            return []

        entries = []
        with open(self.queue_path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    try:
                        entries.append(PendingClassification.model_validate_json(line))
                    except ValidationError as e:
                        logger.warning(f"Skipping malformed queue entry: {e}")

        entries.sort(key=lambda e: e.created_at)
        return entries

    def write_queue(self, entries: list[PendingClassification]) -> None:
        if not entries:
            self.clear_queue()
            return

        self._ensure_queue_dir()
        with open(self.queue_path, "w", encoding="utf-8") as f:
            for entry in entries:
                f.write(entry.model_dump_json() + "\n")

    def clear_queue(self) -> None:
        if self.queue_path.exists():
            self.queue_path.unlink()

    def get_pending_count(self) -> int:
        return len(self.read_queue())

    async def enqueue(
        self, task_id: str, raw_text: str, created_at: datetime | None = None
    ) -> PendingClassification:
        entry = PendingClassification(
            task_id=task_id, raw_text=raw_text, created_at=created_at or utc_now()
        )
        self._ensure_queue_dir()
        with open(self.queue_path, "a", encoding="utf-8") as f:
            f.write(entry.model_dump_json() + "\n")

        logger.info(f"Queued task {task_id} for classification")
        return entry

    async def list_pending(self) -> list[PendingClassification]:
        return self.read_queue()

    async def remove(self, entry_id: str) -> None:
        entries = self.read_queue()
        self.write_queue([e for e in entries if e.id != entry_id])

    async def drain(
        self,
        classifier: CategoryClassifier,
        category_store: CategoryStore,
        task_store: TaskStore,
        config: ClassificationConfig,
        online: bool,
    ) -> QueueProcessResult:
        """Classify queued tasks in creation order.

        Args:
            classifier: Classifier to consult
            category_store: Source of the current categories
            task_store: Store the reclassified tasks live in
            config: Classification settings; a credential is required
            online: Whether the network is currently reachable

        Returns:
            Counts for the pass. A halted pass leaves the failed entry and
            everything after it queued.
        """
        entries = await self.list_pending()
        result = QueueProcessResult(total_pending=len(entries), remaining=len(entries))

        if not entries:
            return result
        if not online:
            result.skipped_reason = "offline"
            return result
        if not config.has_credential:
            result.skipped_reason = "no classifier credential"
            return result

        categories = await category_store.list_categories()
        if not categories:
            result.skipped_reason = "no categories"
            return result

        add_breadcrumb(
            f"Draining {len(entries)} pending classifications",
            category="queue",
        )

        for entry in entries:
            request = ClassifierRequest.from_categories(entry.raw_text, categories)
            response = await classifier.classify(request, config.api_key)

            if isinstance(response, ClassifierUnavailable):
                result.halted = True
                result.errors.append(f"{entry.id}: {response.reason}")
                logger.warning(f"Stopping queue drain at {entry.id}: {response.reason}")
                break

            matched = resolve_category_name(response.category_name, categories)
            try:
                if matched is None:
                    result.unmatched += 1
                else:
                    update = await task_store.update_task_category(entry.task_id, matched.id)
                    if update == CategoryUpdate.MOVED:
                        result.reclassified += 1
                        logger.info(f"Moved task {entry.task_id} to {matched.name!r}")
                    elif update == CategoryUpdate.UNCHANGED:
                        result.unchanged += 1
                    else:
                        logger.warning(
                            f"Task {entry.task_id} no longer exists; dropping entry"
                        )

                await self.remove(entry.id)
            except Exception as e:
                capture_exception(e)
                result.halted = True
                result.errors.append(f"{entry.id}: {e}")
                logger.error(f"Failed to apply classification for {entry.id}: {e}")
                break

            result.successful += 1

        result.remaining = result.total_pending - result.successful
        return result


_offline_queue: OfflineQueue | None = None


def get_offline_queue(queue_path: Path | None = None) -> OfflineQueue:
    """Get the singleton offline queue instance.

    Args:
        queue_path: Optional custom queue path; defaults to the configured one

    Returns:
        OfflineQueue instance
    """
    global _offline_queue
    if _offline_queue is None or queue_path is not None:
        if queue_path is None:
            from tareas.config import settings

            queue_path = settings.queue_path
        _offline_queue = OfflineQueue(queue_path)
    return _offline_queue
