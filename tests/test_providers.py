"""Tests for translation providers."""

import asyncio
import json
from types import SimpleNamespace

import httpx
import pytest
from openai import APIConnectionError, AuthenticationError, InternalServerError, RateLimitError

from subtitle_translator import llm_client
from subtitle_translator.errors import ProviderError
from subtitle_translator.llm_client import APIErrorType, call_llm_async, classify_error
from subtitle_translator.providers import (
    AzureOpenAIProvider,
    AzureProvider,
    ChatCompletionProvider,
    DeepLProvider,
    DeepLXProvider,
    GoogleProvider,
    GtxProvider,
    create_provider,
)

REQUEST = httpx.Request("POST", "https://api.example.com/v1/chat/completions")


def transport(handler):
    return httpx.MockTransport(handler)


def status_error(cls, code):
    return cls("error", response=httpx.Response(code, request=REQUEST), body=None)


class FakeCompletions:

    def __init__(self, results):
        self.results = list(results)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        message = SimpleNamespace(content=result)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(*results):
    return SimpleNamespace(chat=SimpleNamespace(completions=FakeCompletions(results)))


class TestHttpProviders:

    def test_gtx(self):
        def handler(request):
            assert request.url.params["tl"] == "fr"
            assert request.url.params["q"] == "Hello. Bye."
            return httpx.Response(200, json=[[["Bonjour. ", "Hello. "], ["Au revoir.", "Bye."]], None, "en"])

        provider = GtxProvider({}, transport=transport(handler))
        assert asyncio.run(provider.translate("Hello. Bye.", "auto", "fr")) == "Bonjour. Au revoir."

    def test_http_status_maps_to_provider_error(self):
        provider = GtxProvider({}, transport=transport(lambda request: httpx.Response(429, text="Too many")))
        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(provider.translate("Hello", "auto", "fr"))
        assert exc_info.value.status == 429

    def test_transport_error_maps_to_provider_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        provider = GtxProvider({}, transport=transport(handler))
        with pytest.raises(ProviderError):
            asyncio.run(provider.translate("Hello", "auto", "fr"))

    def test_invalid_json(self):
        provider = GtxProvider({}, transport=transport(lambda request: httpx.Response(200, text="<html>")))
        with pytest.raises(ProviderError):
            asyncio.run(provider.translate("Hello", "auto", "fr"))

    def test_unexpected_shape(self):
        provider = GtxProvider({}, transport=transport(lambda request: httpx.Response(200, json={"x": 1})))
        with pytest.raises(ProviderError):
            asyncio.run(provider.translate("Hello", "auto", "fr"))

    def test_google(self):
        def handler(request):
            assert request.url.params["key"] == "g-key"
            body = json.loads(request.content)
            assert body["target"] == "de"
            assert "source" not in body
            return httpx.Response(200, json={"data": {"translations": [{"translatedText": "Hallo"}]}})

        provider = GoogleProvider({"apiKey": "g-key"}, transport=transport(handler))
        assert asyncio.run(provider.translate("Hello", "auto", "de")) == "Hallo"

    def test_google_requires_key(self):
        provider = GoogleProvider({}, transport=transport(lambda request: httpx.Response(200)))
        with pytest.raises(ProviderError):
            asyncio.run(provider.translate("Hello", "auto", "de"))

    def test_deepl_free_key(self):
        def handler(request):
            assert request.url.host == "api-free.deepl.com"
            assert request.headers["Authorization"] == "DeepL-Auth-Key abc:fx"
            body = json.loads(request.content)
            assert body == {"text": ["Hello"], "target_lang": "IT", "source_lang": "EN"}
            return httpx.Response(200, json={"translations": [{"text": "Ciao"}]})

        provider = DeepLProvider({"apiKey": "abc:fx"}, transport=transport(handler))
        assert asyncio.run(provider.translate("Hello", "en", "it")) == "Ciao"

    def test_deepl_pro_endpoint(self):
        assert DeepLProvider({"apiKey": "abc"}).endpoint == "https://api.deepl.com/v2/translate"

    def test_deeplx(self):
        def handler(request):
            assert str(request.url) == "http://localhost:1188/translate"
            assert json.loads(request.content)["source_lang"] == "auto"
            return httpx.Response(200, json={"code": 200, "data": "Hola"})

        provider = DeepLXProvider({"url": "http://localhost:1188/translate"}, transport=transport(handler))
        assert asyncio.run(provider.translate("Hello", "auto", "es")) == "Hola"

    def test_deeplx_requires_url(self):
        with pytest.raises(ProviderError):
            asyncio.run(DeepLXProvider({}).translate("Hello", "auto", "es"))

    def test_azure(self):
        def handler(request):
            assert request.headers["Ocp-Apim-Subscription-Key"] == "az"
            assert request.headers["Ocp-Apim-Subscription-Region"] == "westeurope"
            assert request.url.params["to"] == "fr"
            assert json.loads(request.content) == [{"Text": "Hello"}]
            return httpx.Response(200, json=[{"translations": [{"text": "Bonjour", "to": "fr"}]}])

        provider = AzureProvider({"apiKey": "az", "region": "westeurope"}, transport=transport(handler))
        assert asyncio.run(provider.translate("Hello", "auto", "fr")) == "Bonjour"


class TestChatCompletionProvider:

    def test_translate_cleans_output(self):
        client = fake_client('"Bonjour"')
        provider = ChatCompletionProvider("openai", {"apiKey": "k", "model": "gpt-4o-mini"}, client=client)

        assert asyncio.run(provider.translate("Hello", "en", "fr")) == "Bonjour"

        call = client.chat.completions.calls[0]
        assert call["model"] == "gpt-4o-mini"
        assert call["temperature"] == 1.3
        assert call["messages"][0]["role"] == "system"
        assert "from English to French" in call["messages"][1]["content"]

    def test_custom_prompts(self):
        client = fake_client("Hallo")
        prompts = {"system": "Be brief.", "user": "${targetLanguage}: ${content}"}
        provider = ChatCompletionProvider("deepseek", {"apiKey": "k"}, prompts, client=client)

        asyncio.run(provider.translate("Hello", "auto", "de"))

        messages = client.chat.completions.calls[0]["messages"]
        assert messages[0]["content"] == "Be brief."
        assert messages[1]["content"] == "German: Hello"

    def test_missing_key(self):
        provider = ChatCompletionProvider("openai", {})
        with pytest.raises(ProviderError):
            asyncio.run(provider.translate("Hello", "en", "fr"))

    def test_llm_base_url(self):
        provider = ChatCompletionProvider("llm", {"url": "http://localhost:11434/v1/chat/completions"})
        assert provider._base_url() == "http://localhost:11434/v1"

    def test_openrouter_headers(self):
        provider = ChatCompletionProvider("openrouter", {"siteUrl": "https://example.com", "siteName": "Subs"})
        assert provider._default_headers() == {"HTTP-Referer": "https://example.com", "X-Title": "Subs"}

    def test_azure_openai_requires_endpoint(self):
        provider = AzureOpenAIProvider({"apiKey": "k"})
        with pytest.raises(ProviderError):
            asyncio.run(provider.translate("Hello", "en", "fr"))


class TestCreateProvider:

    def test_http_provider(self):
        assert isinstance(create_provider("deepl", {"apiKey": "k"}), DeepLProvider)
        assert isinstance(create_provider("gtxFreeAPI"), GtxProvider)

    def test_chat_provider_defaults(self):
        provider = create_provider("groq", {"apiKey": "k"})
        assert isinstance(provider, ChatCompletionProvider)
        assert provider.provider_id == "groq"
        assert provider.model == "gemma2-9b-it"

    def test_azure_openai(self):
        assert isinstance(create_provider("azureopenai"), AzureOpenAIProvider)

    def test_unknown(self):
        with pytest.raises(ValueError):
            create_provider("babelfish")


class TestLlmClient:

    def test_classify_error(self):
        assert classify_error(status_error(RateLimitError, 429)) == (APIErrorType.RATE_LIMIT, True)
        assert classify_error(status_error(AuthenticationError, 401)) == (APIErrorType.AUTH, False)
        assert classify_error(status_error(InternalServerError, 500)) == (APIErrorType.SERVER, True)
        assert classify_error(APIConnectionError(request=REQUEST)) == (APIErrorType.CONNECTION, True)
        assert classify_error(ValueError("x")) == (APIErrorType.UNKNOWN, False)

    def test_non_retryable_fails_fast(self):
        client = fake_client(status_error(AuthenticationError, 401), "unused")
        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(call_llm_async(client, "m", []))
        assert exc_info.value.status == 401
        assert len(client.chat.completions.calls) == 1

    def test_retry_then_success(self, monkeypatch):
        monkeypatch.setattr(llm_client, "retry_delay", lambda error_type, attempt: 0)
        client = fake_client(APIConnectionError(request=REQUEST), "  Bonjour  ")
        assert asyncio.run(call_llm_async(client, "m", [])) == "Bonjour"
        assert len(client.chat.completions.calls) == 2

    def test_retries_exhausted(self, monkeypatch):
        monkeypatch.setattr(llm_client, "retry_delay", lambda error_type, attempt: 0)
        errors = [status_error(InternalServerError, 503) for _ in range(3)]
        client = fake_client(*errors)
        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(call_llm_async(client, "m", [], max_retries=3))
        assert exc_info.value.status == 503

    def test_empty_response(self):
        with pytest.raises(ProviderError):
            asyncio.run(call_llm_async(fake_client("   "), "m", []))
