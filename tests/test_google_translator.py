from __future__ import annotations

import argparse
import asyncio

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from jsontranslate.translators import LanguageDescriptor, ProviderError
from jsontranslate.translators.google import DEFAULT_ENDPOINT, Translator


class FakeGoogle:
    """Minimal stand-in for the Translation v2 REST API."""

    def __init__(self) -> None:
        self.requests: list[tuple[dict[str, str], dict | None]] = []
        self.error: dict | None = None
        self.endpoint = ""

    async def translate(self, request: web.Request) -> web.Response:
        payload = await request.json()
        self.requests.append((dict(request.query), payload))
        if self.error:
            return web.json_response({"error": self.error}, status=self.error["code"])
        translations = [{"translatedText": f"{text} ({payload['target']})"} for text in payload["q"]]
        return web.json_response({"data": {"translations": translations}})

    async def languages(self, request: web.Request) -> web.Response:
        self.requests.append((dict(request.query), None))
        return web.json_response(
            {
                "data": {
                    "languages": [
                        {"language": "it", "name": "Italian"},
                        {"language": "fr", "name": "French"},
                    ]
                }
            }
        )

    async def slow(self, request: web.Request) -> web.Response:
        await asyncio.sleep(1)
        return web.json_response({"data": {"translations": []}})

    async def broken(self, request: web.Request) -> web.Response:
        return web.Response(status=502, text="upstream unavailable")


@pytest_asyncio.fixture
async def google():
    fake = FakeGoogle()
    app = web.Application()
    app.router.add_post("/language/translate/v2", fake.translate)
    app.router.add_get("/language/translate/v2/languages", fake.languages)
    app.router.add_post("/broken", fake.broken)
    app.router.add_post("/slow", fake.slow)
    server = TestServer(app)
    await server.start_server()
    fake.endpoint = str(server.make_url("/language/translate/v2"))
    yield fake
    await server.close()


@pytest.mark.asyncio
async def test_translate_posts_batch_with_key(google) -> None:
    async with Translator("secret", endpoint=google.endpoint) as translator:
        result = await translator.translate(["Hello", "Goodbye"], "it")

    assert result == ["Hello (it)", "Goodbye (it)"]
    query, payload = google.requests[0]
    assert query == {"key": "secret"}
    assert payload == {"q": ["Hello", "Goodbye"], "target": "it", "format": "text"}


@pytest.mark.asyncio
async def test_translate_sends_source_when_given(google) -> None:
    async with Translator("secret", endpoint=google.endpoint, source="en", format="html") as translator:
        await translator.translate(["<b>Hello</b>"], "fr")

    _, payload = google.requests[0]
    assert payload["source"] == "en"
    assert payload["format"] == "html"


@pytest.mark.asyncio
async def test_translate_splits_large_batches_in_order(google) -> None:
    values = [f"message {i}" for i in range(5)]

    async with Translator("secret", endpoint=google.endpoint, max_segments=2) as translator:
        result = await translator.translate(values, "de")

    assert [len(payload["q"]) for _, payload in google.requests] == [2, 2, 1]
    assert result == [f"message {i} (de)" for i in range(5)]


@pytest.mark.asyncio
async def test_translate_empty_batch_sends_nothing(google) -> None:
    async with Translator("secret", endpoint=google.endpoint) as translator:
        assert await translator.translate([], "it") == []

    assert google.requests == []


@pytest.mark.asyncio
async def test_translate_maps_error_body(google) -> None:
    google.error = {"code": 400, "message": "Invalid Value", "errors": []}

    async with Translator("secret", endpoint=google.endpoint) as translator:
        with pytest.raises(ProviderError) as excinfo:
            await translator.translate(["Hello"], "xx")

    assert excinfo.value.code == 400
    assert excinfo.value.message == "Invalid Value"


@pytest.mark.asyncio
async def test_translate_maps_non_json_failure(google) -> None:
    endpoint = google.endpoint.replace("/language/translate/v2", "/broken")

    async with Translator("secret", endpoint=endpoint) as translator:
        with pytest.raises(ProviderError) as excinfo:
            await translator.translate(["Hello"], "it")

    assert excinfo.value.code == 502


@pytest.mark.asyncio
async def test_translate_maps_connection_error() -> None:
    async with Translator("secret", endpoint="http://127.0.0.1:1/language/translate/v2") as translator:
        with pytest.raises(ProviderError) as excinfo:
            await translator.translate(["Hello"], "it")

    assert excinfo.value.code == "ClientConnectorError"


@pytest.mark.asyncio
async def test_get_languages(google) -> None:
    async with Translator("secret", endpoint=google.endpoint) as translator:
        languages = await translator.get_languages()

    assert languages == [
        LanguageDescriptor(code="it", name="Italian"),
        LanguageDescriptor(code="fr", name="French"),
    ]
    assert google.requests[0][0] == {"key": "secret", "target": "en"}


@pytest.mark.asyncio
async def test_request_outside_context_manager() -> None:
    translator = Translator("secret")

    with pytest.raises(RuntimeError):
        await translator.translate(["Hello"], "it")


def test_empty_api_key_rejected() -> None:
    with pytest.raises(ValueError, match="empty API key"):
        Translator("")


def test_from_args() -> None:
    args = argparse.Namespace(
        endpoint=DEFAULT_ENDPOINT, source=None, format="text", timeout=5.0
    )

    translator = Translator.from_args(args, "secret")

    assert translator.timeout == 5.0
    assert translator.endpoint == DEFAULT_ENDPOINT


def test_from_args_rejects_bad_timeout() -> None:
    args = argparse.Namespace(
        endpoint=DEFAULT_ENDPOINT, source=None, format="text", timeout=0.0
    )

    with pytest.raises(ValueError, match="timeout"):
        Translator.from_args(args, "secret")


@pytest.mark.asyncio
async def test_translate_times_out(google) -> None:
    endpoint = google.endpoint.replace("/language/translate/v2", "/slow")

    async with Translator("secret", endpoint=endpoint, timeout=0.2) as translator:
        with pytest.raises(ProviderError) as excinfo:
            await translator.translate(["Hello"], "it")

    assert excinfo.value.code == "TIMEOUT"
    assert "0.2s" in excinfo.value.message
