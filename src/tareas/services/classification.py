"""Classification policy for new tasks.

Decides which category a task lands in. The AI classifier is consulted only
when a credential is configured and the device is online; every other path
falls back to the first category so the user is never blocked. Tasks created
offline are marked QUEUED so the caller can schedule a late classification.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from tareas.services.classifier import (
    CategoryClassifier,
    ClassifierRequest,
    ClassifierUnavailable,
    resolve_category_name,
)
from tareas.store.repositories import CategoryStore
from tareas.store.schemas import Category

logger = logging.getLogger(__name__)


class NoCategoriesError(ValueError):
    """Raised when a task is submitted before any category exists."""


class ClassificationSource(str, Enum):
    """Where the destination category came from."""

    RULE = "rule"  # User accepted a category suggestion
    AI = "ai"
    FALLBACK_FIRST = "fallback-first"
    QUEUED = "queued"  # Offline fallback awaiting a late classification


class ClassificationState(str, Enum):
    UNCLASSIFIED = "unclassified"
    QUEUED = "queued"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class ClassificationConfig:
    """Classification settings passed explicitly at call time."""

    api_key: str = ""

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key)


@dataclass(frozen=True)
class ClassificationOutcome:
    destination_category_id: str
    source: ClassificationSource
    state: ClassificationState
    suggested_name: str | None = None
    reason: str = ""

    @property
    def needs_late_classification(self) -> bool:
        return self.state == ClassificationState.QUEUED


def first_available(categories: list[Category]) -> Category:
    """Lowest order wins; ties are broken by name."""
    return min(categories, key=lambda c: (c.order, c.name.lower()))


class ClassificationPolicy:
    """Chooses the destination category for a new task.

    Precedence:
    1. No categories: NoCategoriesError
    2. An accepted category suggestion naming an existing category
    3. Offline: first category, queued for later
    4. Credential configured: AI classifier, first category when it has no answer
    5. No credential: first category
    """

    def __init__(self, category_store: CategoryStore, classifier: CategoryClassifier | None):
        self.category_store = category_store
        self.classifier = classifier

    async def decide(
        self,
        task_text: str,
        config: ClassificationConfig,
        online: bool,
        preferred_category: str | None = None,
    ) -> ClassificationOutcome:
        """Resolve the destination category for a task.

        Args:
            task_text: Task text with shorthand removed
            config: Classification settings
            online: Whether the network is currently reachable
            preferred_category: Category name from an accepted suggestion chip

        Returns:
            ClassificationOutcome with the chosen category id
        """
        categories = await self.category_store.list_categories()
        if not categories:
            raise NoCategoriesError("Create a category before adding tasks")

        if preferred_category:
            matched = resolve_category_name(preferred_category, categories)
            if matched:
                return ClassificationOutcome(
                    destination_category_id=matched.id,
                    source=ClassificationSource.RULE,
                    state=ClassificationState.RESOLVED,
                    suggested_name=preferred_category,
                    reason=f"Accepted suggestion {preferred_category!r}",
                )

        fallback = first_available(categories)

        if not online:
            logger.info(f"Offline; placing task in {fallback.name!r} until it can be classified")
            return ClassificationOutcome(
                destination_category_id=fallback.id,
                source=ClassificationSource.QUEUED,
                state=ClassificationState.QUEUED,
                reason="Offline",
            )

        if not config.has_credential or self.classifier is None:
            return ClassificationOutcome(
                destination_category_id=fallback.id,
                source=ClassificationSource.FALLBACK_FIRST,
                state=ClassificationState.RESOLVED,
                reason="No classifier credential configured",
            )

        request = ClassifierRequest.from_categories(task_text, categories)
        result = await self.classifier.classify(request, config.api_key)

        if isinstance(result, ClassifierUnavailable):
            logger.warning(f"Classifier unavailable ({result.reason}); using {fallback.name!r}")
            return ClassificationOutcome(
                destination_category_id=fallback.id,
                source=ClassificationSource.FALLBACK_FIRST,
                state=ClassificationState.RESOLVED,
                reason=f"Classifier unavailable: {result.reason}",
            )

        matched = resolve_category_name(result.category_name, categories)
        if matched:
            return ClassificationOutcome(
                destination_category_id=matched.id,
                source=ClassificationSource.AI,
                state=ClassificationState.RESOLVED,
                suggested_name=result.category_name,
                reason=f"Classified as {matched.name!r}",
            )

        return ClassificationOutcome(
            destination_category_id=fallback.id,
            source=ClassificationSource.FALLBACK_FIRST,
            state=ClassificationState.RESOLVED,
            suggested_name=result.category_name,
            reason="Classifier found no matching category",
        )
