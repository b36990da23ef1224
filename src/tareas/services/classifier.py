"""External category classifiers.

A classifier receives the task text plus every category's name, context
hint and keywords, and answers with the name of the best category. Failures
never raise: they come back as a ClassifierUnavailable value so callers can
fall back without a try/except around every call.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import httpx

from tareas.store.schemas import Category

if TYPE_CHECKING:
    from tareas.config import Settings

logger = logging.getLogger(__name__)

ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MODEL = "claude-haiku-4-5-20251001"
DEFAULT_TIMEOUT_SECONDS = 15.0
MAX_TOKENS = 50

# Answer the model gives when nothing fits
NO_MATCH_SENTINEL = "general"


@dataclass(frozen=True)
class CategoryHint:
    name: str
    context_hint: str = ""
    keywords: tuple[str, ...] = ()


@dataclass(frozen=True)
class ClassifierRequest:
    task_text: str
    categories: list[CategoryHint] = field(default_factory=list)

    @classmethod
    def from_categories(cls, task_text: str, categories: list[Category]) -> ClassifierRequest:
        return cls(
            task_text=task_text,
            categories=[
                CategoryHint(c.name, c.context_hint, tuple(c.keywords)) for c in categories
            ],
        )


@dataclass(frozen=True)
class ClassifierResponse:
    category_name: str | None


@dataclass(frozen=True)
class ClassifierUnavailable:
    """The classifier could not be reached or answered with garbage."""

    reason: str
    status_code: int | None = None


ClassifierResult = ClassifierResponse | ClassifierUnavailable


def build_prompt(request: ClassifierRequest) -> str:
    """Spanish classification prompt listing every category with its hints."""
    descriptions = []
    for hint in request.categories:
        desc = f"## {hint.name}"
        if hint.context_hint:
            desc += f"\nContexto: {hint.context_hint}"
        if hint.keywords:
            desc += f"\nPalabras clave: {', '.join(hint.keywords)}"
        descriptions.append(desc)

    categories_block = "\n\n".join(descriptions)
    category_names = ", ".join(hint.name for hint in request.categories)

    return (
        "Eres un clasificador de tareas. Tu trabajo es asignar cada tarea a la carpeta "
        "más apropiada.\n\n"
        "CARPETAS DISPONIBLES:\n"
        f"{categories_block}\n\n"
        f'TAREA A CLASIFICAR: "{request.task_text}"\n\n'
        "INSTRUCCIONES:\n"
        "- Analiza el contexto y palabras clave de cada carpeta\n"
        "- Elige la carpeta que mejor se relacione con la tarea\n"
        f"- DEBES elegir una de estas carpetas: {category_names}\n"
        "- Responde ÚNICAMENTE con el nombre exacto de la carpeta, sin explicaciones\n"
        '- Solo responde "General" si la tarea no tiene NINGUNA relación con ninguna carpeta'
    )


def resolve_category_name(name: str | None, categories: list[Category]) -> Category | None:
    """Map a suggested name onto an existing category.

    Empty answers and the "General" sentinel never match. Otherwise an exact
    case-insensitive match wins, then the first category whose name contains
    the suggestion or is contained in it.
    """
    if not name or name.strip().lower() == NO_MATCH_SENTINEL:
        logger.info("No category match for empty or sentinel answer")
        return None

    wanted = name.strip().lower()

    for category in categories:
        if category.name.strip().lower() == wanted:
            return category

    for category in categories:
        candidate = category.name.lower()
        if wanted in candidate or candidate in wanted:
            logger.info(f"Partial category match: {name!r} -> {category.name!r}")
            return category

    logger.info(f"No category named like {name!r}")
    return None


class CategoryClassifier(ABC):
    """Base class for category classifiers backed by an HTTP API."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.timeout = timeout
        if client is None:
            self._client = httpx.AsyncClient(timeout=timeout)
            self._owns_client = True
        else:
            self._client = client
            self._owns_client = False

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client:
            await self._client.aclose()

    async def classify(self, request: ClassifierRequest, api_key: str) -> ClassifierResult:
        """Ask for the best category for a task.

        Args:
            request: Task text and category hints
            api_key: Credential for the classification API

        Returns:
            ClassifierResponse with the suggested name (possibly None), or
            ClassifierUnavailable on transport errors, non-success statuses
            and malformed bodies
        """
        try:
            response = await self._send(request, api_key)
            response.raise_for_status()
            name = self._extract_name(response.json())
        except httpx.HTTPStatusError as e:
            logger.warning(f"Classifier returned HTTP {e.response.status_code}")
            return ClassifierUnavailable(
                f"HTTP {e.response.status_code}", status_code=e.response.status_code
            )
        except httpx.TimeoutException:
            logger.warning("Classifier request timed out")
            return ClassifierUnavailable("timeout")
        except httpx.RequestError as e:
            logger.warning(f"Classifier request failed: {e}")
            return ClassifierUnavailable(f"request error: {e}")
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Malformed classifier response: {e}")
            return ClassifierUnavailable(f"malformed response: {e}")

        logger.debug(f"Classifier suggested {name!r}")
        return ClassifierResponse(category_name=name)

    @abstractmethod
    async def _send(self, request: ClassifierRequest, api_key: str) -> httpx.Response:
        ...

    @abstractmethod
    def _extract_name(self, data: Any) -> str | None:
        ...


class AnthropicClassifier(CategoryClassifier):
    """Classifies by calling the Anthropic Messages API directly."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        api_url: str = ANTHROPIC_API_URL,
    ) -> None:
        super().__init__(client=client, timeout=timeout)
        self.model = model
        self.api_url = api_url

    async def _send(self, request: ClassifierRequest, api_key: str) -> httpx.Response:
        return await self._client.post(
            self.api_url,
            headers={
                "x-api-key": api_key,
                "anthropic-version": ANTHROPIC_VERSION,
                "content-type": "application/json",
            },
            json={
                "model": self.model,
                "max_tokens": MAX_TOKENS,
                "temperature": 0,
                "messages": [{"role": "user", "content": build_prompt(request)}],
            },
        )

    def _extract_name(self, data: Any) -> str | None:
        for block in data.get("content", []):
            if block.get("type") == "text":
                return block.get("text", "").strip() or None
        return None


class ProxyClassifier(CategoryClassifier):
    """Classifies through a server-side endpoint that holds its own API key.

    The endpoint takes {"taskText", "folders": [{"name", "llmContext",
    "keywords"}]} and answers {"folderName": str | null}.
    """

    def __init__(
        self,
        endpoint: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__(client=client, timeout=timeout)
        self.endpoint = endpoint

    async def _send(self, request: ClassifierRequest, api_key: str) -> httpx.Response:
        return await self._client.post(
            self.endpoint,
            json={
                "taskText": request.task_text,
                "folders": [
                    {
                        "name": hint.name,
                        "llmContext": hint.context_hint,
                        "keywords": list(hint.keywords),
                    }
                    for hint in request.categories
                ],
            },
        )

    def _extract_name(self, data: Any) -> str | None:
        name = data["folderName"]
        if name is None:
            return None
        if not isinstance(name, str):
            raise TypeError(f"folderName must be a string, got {type(name).__name__}")
        return name.strip() or None


def build_classifier(settings: Settings) -> CategoryClassifier:
    """Pick the proxy classifier when an endpoint is configured, else Anthropic."""
    if settings.has_classifier_endpoint:
        return ProxyClassifier(settings.classifier_endpoint, timeout=settings.classifier_timeout)
    return AnthropicClassifier(
        model=settings.classifier_model, timeout=settings.classifier_timeout
    )
