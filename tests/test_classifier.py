import json

import httpx
import pytest

from tareas.config import Settings
from tareas.services.classifier import (
    AnthropicClassifier,
    CategoryHint,
    ClassifierRequest,
    ClassifierResponse,
    ClassifierUnavailable,
    ProxyClassifier,
    build_classifier,
    build_prompt,
    resolve_category_name,
)
from tareas.store.schemas import Category

REQUEST = ClassifierRequest(
    task_text="preparar pitch para inversores",
    categories=[
        CategoryHint("Omme", "Startup de moda", ("pitch", "inversores")),
        CategoryHint("Personal"),
    ],
)


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestBuildPrompt:
    def test_lists_categories_with_hints(self):
        prompt = build_prompt(REQUEST)
        assert "## Omme\nContexto: Startup de moda\nPalabras clave: pitch, inversores" in prompt
        assert "## Personal\nContexto" not in prompt
        assert "DEBES elegir una de estas carpetas: Omme, Personal" in prompt
        assert 'TAREA A CLASIFICAR: "preparar pitch para inversores"' in prompt

    def test_mentions_sentinel(self):
        assert '"General"' in build_prompt(REQUEST)


class TestAnthropicClassifier:
    @pytest.mark.asyncio
    async def test_sends_messages_request(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["headers"] = request.headers
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"content": [{"type": "text", "text": " Omme \n"}]})

        classifier = AnthropicClassifier(model="test-model", client=mock_client(handler))
        result = await classifier.classify(REQUEST, "sk-test")

        assert result == ClassifierResponse(category_name="Omme")
        assert captured["headers"]["x-api-key"] == "sk-test"
        assert captured["headers"]["anthropic-version"] == "2023-06-01"
        assert captured["body"]["model"] == "test-model"
        assert captured["body"]["max_tokens"] == 50
        assert captured["body"]["temperature"] == 0
        assert "Omme" in captured["body"]["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_empty_content_is_no_answer(self):
        classifier = AnthropicClassifier(
            client=mock_client(lambda request: httpx.Response(200, json={"content": []}))
        )
        assert await classifier.classify(REQUEST, "sk-test") == ClassifierResponse(None)

    @pytest.mark.asyncio
    async def test_http_error_is_unavailable(self):
        classifier = AnthropicClassifier(
            client=mock_client(lambda request: httpx.Response(529, json={"error": "overloaded"}))
        )
        result = await classifier.classify(REQUEST, "sk-test")

        assert isinstance(result, ClassifierUnavailable)
        assert result.status_code == 529

    @pytest.mark.asyncio
    async def test_transport_error_is_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        classifier = AnthropicClassifier(client=mock_client(handler))
        result = await classifier.classify(REQUEST, "sk-test")

        assert isinstance(result, ClassifierUnavailable)
        assert result.status_code is None

    @pytest.mark.asyncio
    async def test_timeout_is_unavailable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        classifier = AnthropicClassifier(client=mock_client(handler))
        result = await classifier.classify(REQUEST, "sk-test")

        assert result == ClassifierUnavailable("timeout")

    @pytest.mark.asyncio
    async def test_malformed_body_is_unavailable(self):
        classifier = AnthropicClassifier(
            client=mock_client(lambda request: httpx.Response(200, text="<html>oops</html>"))
        )
        result = await classifier.classify(REQUEST, "sk-test")

        assert isinstance(result, ClassifierUnavailable)
        assert "malformed" in result.reason

    @pytest.mark.asyncio
    async def test_close_leaves_injected_client_open(self):
        client = mock_client(lambda request: httpx.Response(200, json={"content": []}))
        classifier = AnthropicClassifier(client=client)
        await classifier.close()
        assert not client.is_closed
        await client.aclose()


class TestProxyClassifier:
    @pytest.mark.asyncio
    async def test_posts_folders_payload(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"folderName": "Omme"})

        classifier = ProxyClassifier("https://tareas.test/api/classify", client=mock_client(handler))
        result = await classifier.classify(REQUEST, "sk-test")

        assert result == ClassifierResponse("Omme")
        assert captured["url"] == "https://tareas.test/api/classify"
        assert captured["body"] == {
            "taskText": "preparar pitch para inversores",
            "folders": [
                {"name": "Omme", "llmContext": "Startup de moda", "keywords": ["pitch", "inversores"]},
                {"name": "Personal", "llmContext": "", "keywords": []},
            ],
        }

    @pytest.mark.asyncio
    async def test_null_folder_name(self):
        classifier = ProxyClassifier(
            "https://tareas.test/api/classify",
            client=mock_client(lambda request: httpx.Response(200, json={"folderName": None})),
        )
        assert await classifier.classify(REQUEST, "sk-test") == ClassifierResponse(None)

    @pytest.mark.asyncio
    async def test_missing_folder_name_is_unavailable(self):
        classifier = ProxyClassifier(
            "https://tareas.test/api/classify",
            client=mock_client(lambda request: httpx.Response(200, json={"error": "nope"})),
        )
        assert isinstance(await classifier.classify(REQUEST, "sk-test"), ClassifierUnavailable)

    @pytest.mark.asyncio
    async def test_server_error_is_unavailable(self):
        classifier = ProxyClassifier(
            "https://tareas.test/api/classify",
            client=mock_client(lambda request: httpx.Response(502, json={"error": "upstream"})),
        )
        result = await classifier.classify(REQUEST, "sk-test")
        assert result.status_code == 502


class TestResolveCategoryName:
    def setup_method(self):
        self.categories = [
            Category(name="Omme", order=0),
            Category(name="Antai Admin", order=1),
            Category(name="Personal", order=2),
        ]

    def test_exact_match_is_case_insensitive(self):
        assert resolve_category_name(" personal ", self.categories).name == "Personal"

    def test_suggestion_contained_in_category(self):
        assert resolve_category_name("admin", self.categories).name == "Antai Admin"

    def test_category_contained_in_suggestion(self):
        assert resolve_category_name("Carpeta Omme", self.categories).name == "Omme"

    def test_exact_match_beats_partial(self):
        categories = [Category(name="Omme Tech"), Category(name="Omme")]
        assert resolve_category_name("Omme", categories).name == "Omme"

    @pytest.mark.parametrize("name", ["General", "general", "", None])
    def test_sentinel_and_empty_never_match(self, name):
        assert resolve_category_name(name, self.categories) is None

    def test_sentinel_is_not_matched_even_if_category_exists(self):
        categories = [Category(name="General")]
        assert resolve_category_name("General", categories) is None

    def test_no_match(self):
        assert resolve_category_name("Finanzas", self.categories) is None


class TestBuildClassifier:
    @pytest.mark.asyncio
    async def test_proxy_when_endpoint_configured(self):
        settings = Settings(_env_file=None, classifier_endpoint="https://tareas.test/api/classify")
        classifier = build_classifier(settings)
        assert isinstance(classifier, ProxyClassifier)
        assert classifier.endpoint == "https://tareas.test/api/classify"
        await classifier.close()

    @pytest.mark.asyncio
    async def test_anthropic_by_default(self):
        settings = Settings(_env_file=None, classifier_endpoint="", classifier_model="m-1")
        classifier = build_classifier(settings)
        assert isinstance(classifier, AnthropicClassifier)
        assert classifier.model == "m-1"
        await classifier.close()
