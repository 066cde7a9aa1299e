"""
Translation provider adapters.

Every provider exposes one capability, ``translate(text, src, tgt)``, and
reports failures as ProviderError. REST services are called with httpx,
chat-completion services through the openai client.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple, Type

import httpx

from .errors import ProviderError
from .llm_client import call_llm_async, create_azure_client, create_client
from .text_utils import (
    DEFAULT_SYSTEM_PROMPT,
    build_user_prompt,
    clean_translated_text,
)

logger = logging.getLogger(__name__)

# (id, label) in display order
TRANSLATION_SERVICES: List[Tuple[str, str]] = [
    ("gtxFreeAPI", "GTX API (Free)"),
    ("google", "Google Translate"),
    ("deepl", "DeepL"),
    ("azure", "Azure Translate"),
    ("deeplx", "DeepLX (Free)"),
    ("deepseek", "DeepSeek"),
    ("openai", "OpenAI"),
    ("azureopenai", "Azure OpenAI"),
    ("siliconflow", "SiliconFlow"),
    ("groq", "Groq"),
    ("openrouter", "OpenRouter"),
    ("llm", "Custom LLM"),
]

FREE_SERVICES = ("gtxFreeAPI", "deeplx")
LLM_MODELS = ("deepseek", "openai", "azureopenai", "siliconflow", "groq", "openrouter", "llm")

# Providers usable without an API key
KEYLESS_METHODS = ("gtxFreeAPI", "deeplx", "llm")

DEFAULT_API_CONFIGS: Dict[str, Dict[str, Any]] = {
    "gtxFreeAPI": {},
    "deeplx": {"url": ""},
    "deepl": {"url": "", "apiKey": ""},
    "google": {"apiKey": ""},
    "azure": {"apiKey": "", "region": "eastasia"},
    "deepseek": {"apiKey": "", "model": "deepseek-chat", "temperature": 1.3},
    "openai": {"apiKey": "", "model": "gpt-4o-mini", "temperature": 1.3},
    "azureopenai": {"url": "", "apiKey": "", "model": "gpt-4o-mini", "apiVersion": "2024-07-18", "temperature": 1.3},
    "siliconflow": {"apiKey": "", "model": "deepseek-ai/DeepSeek-V3", "temperature": 1.3},
    "groq": {"apiKey": "", "model": "gemma2-9b-it", "temperature": 1.3},
    "openrouter": {"apiKey": "", "model": "deepseek/deepseek-chat-v3-0324:free", "temperature": 1.3, "siteUrl": "", "siteName": ""},
    "llm": {"url": "http://127.0.0.1:11434/v1", "apiKey": "", "model": "llama3.2", "temperature": 1.3},
}

CHAT_BASE_URLS: Dict[str, Optional[str]] = {
    "deepseek": "https://api.deepseek.com",
    "openai": None,
    "siliconflow": "https://api.siliconflow.cn/v1",
    "groq": "https://api.groq.com/openai/v1",
    "openrouter": "https://openrouter.ai/api/v1",
}


class TranslationProvider(ABC):
    """One translation backend, selected by its provider id."""

    provider_id: str = ""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config: Dict[str, Any] = dict(config or {})

    @property
    def api_key(self) -> str:
        return self.config.get("apiKey") or ""

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ProviderError(f"{self.provider_id} API key is required")
        return self.api_key

    @abstractmethod
    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        """
        Translate one text.

        Raises:
            ProviderError: on transport, auth, quota or response errors
        """


class HttpProvider(TranslationProvider):
    """Base for REST JSON services."""

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        super().__init__(config)
        self._transport = transport
        self.timeout = timeout

    async def request_json(self, method: str, url: str, **kwargs) -> Any:
        """Send a request and return the decoded JSON body."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.request(method, url, **kwargs)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            body = e.response.text[:200]
            raise ProviderError(f"{self.provider_id} HTTP error: {body}", e.response.status_code) from e
        except httpx.HTTPError as e:
            raise ProviderError(f"{self.provider_id} request failed: {type(e).__name__}: {e}") from e
        except ValueError as e:
            raise ProviderError(f"{self.provider_id} returned invalid JSON: {e}") from e

    def unexpected(self, data: Any) -> ProviderError:
        return ProviderError(f"{self.provider_id} returned an unexpected response: {str(data)[:200]}")


class GtxProvider(HttpProvider):
    """Free Google Translate endpoint (client=gtx)."""

    provider_id = "gtxFreeAPI"
    endpoint = "https://translate.googleapis.com/translate_a/single"

    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        params = {"client": "gtx", "sl": source_language, "tl": target_language, "dt": "t", "q": text}
        data = await self.request_json("GET", self.endpoint, params=params)
        try:
            return "".join(part[0] for part in data[0] if part and part[0])
        except (IndexError, KeyError, TypeError) as e:
            raise self.unexpected(data) from e


class GoogleProvider(HttpProvider):
    """Google Cloud Translation v2."""

    provider_id = "google"
    endpoint = "https://translation.googleapis.com/language/translate/v2"

    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        body = {"q": text, "target": target_language, "format": "text"}
        if source_language != "auto":
            body["source"] = source_language
        data = await self.request_json("POST", self.endpoint, params={"key": self.require_api_key()}, json=body)
        try:
            return data["data"]["translations"][0]["translatedText"]
        except (IndexError, KeyError, TypeError) as e:
            raise self.unexpected(data) from e


class DeepLProvider(HttpProvider):
    """DeepL API (free keys end with ':fx')."""

    provider_id = "deepl"

    @property
    def endpoint(self) -> str:
        if self.config.get("url"):
            return self.config["url"]
        if self.api_key.endswith(":fx"):
            return "https://api-free.deepl.com/v2/translate"
        return "https://api.deepl.com/v2/translate"

    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        headers = {"Authorization": f"DeepL-Auth-Key {self.require_api_key()}"}
        body: Dict[str, Any] = {"text": [text], "target_lang": target_language.upper()}
        if source_language != "auto":
            body["source_lang"] = source_language.split("-")[0].upper()
        data = await self.request_json("POST", self.endpoint, headers=headers, json=body)
        try:
            return data["translations"][0]["text"]
        except (IndexError, KeyError, TypeError) as e:
            raise self.unexpected(data) from e


class DeepLXProvider(HttpProvider):
    """Self-hosted DeepLX server."""

    provider_id = "deeplx"

    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        url = self.config.get("url")
        if not url:
            raise ProviderError("deeplx server url is required")
        body = {
            "text": text,
            "source_lang": "auto" if source_language == "auto" else source_language.upper(),
            "target_lang": target_language.upper(),
        }
        data = await self.request_json("POST", url, json=body)
        try:
            return data["data"]
        except (KeyError, TypeError) as e:
            raise self.unexpected(data) from e


class AzureProvider(HttpProvider):
    """Azure AI Translator v3."""

    provider_id = "azure"
    endpoint = "https://api.cognitive.microsofttranslator.com/translate"

    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        params = {"api-version": "3.0", "to": target_language}
        if source_language != "auto":
            params["from"] = source_language
        headers = {
            "Ocp-Apim-Subscription-Key": self.require_api_key(),
            "Ocp-Apim-Subscription-Region": self.config.get("region") or "eastasia",
        }
        data = await self.request_json("POST", self.endpoint, params=params, headers=headers, json=[{"Text": text}])
        try:
            return data[0]["translations"][0]["text"]
        except (IndexError, KeyError, TypeError) as e:
            raise self.unexpected(data) from e


class ChatCompletionProvider(TranslationProvider):
    """OpenAI-compatible chat-completion services (DeepSeek, OpenAI, Groq, ...)."""

    def __init__(
        self,
        provider_id: str,
        config: Optional[Dict[str, Any]] = None,
        prompts: Optional[Dict[str, str]] = None,
        client=None,
    ):
        super().__init__(config)
        self.provider_id = provider_id
        self.prompts: Dict[str, str] = dict(prompts or {})
        self._client = client

    @property
    def model(self) -> str:
        return self.config.get("model") or DEFAULT_API_CONFIGS.get(self.provider_id, {}).get("model", "")

    @property
    def temperature(self) -> float:
        return float(self.config.get("temperature", 1.3))

    def _base_url(self) -> Optional[str]:
        if self.provider_id == "llm":
            url = self.config.get("url") or DEFAULT_API_CONFIGS["llm"]["url"]
            return url.rstrip("/").removesuffix("/chat/completions")
        return self.config.get("url") or CHAT_BASE_URLS.get(self.provider_id)

    def _default_headers(self) -> Optional[Dict[str, str]]:
        if self.provider_id != "openrouter":
            return None
        headers = {}
        if self.config.get("siteUrl"):
            headers["HTTP-Referer"] = self.config["siteUrl"]
        if self.config.get("siteName"):
            headers["X-Title"] = self.config["siteName"]
        return headers or None

    def _create_client(self):
        if self.provider_id == "llm":
            # 本地模型可以没有 key
            api_key = self.api_key or "none"
        else:
            api_key = self.require_api_key()
        return create_client(api_key, self._base_url(), default_headers=self._default_headers())

    @property
    def client(self):
        if self._client is None:
            self._client = self._create_client()
        return self._client

    def build_messages(self, text: str, source_language: str, target_language: str) -> List[Dict[str, str]]:
        system_prompt = self.prompts.get("system") or DEFAULT_SYSTEM_PROMPT
        user_prompt = build_user_prompt(text, source_language, target_language, self.prompts.get("user"))
        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

    async def translate(self, text: str, source_language: str, target_language: str) -> str:
        messages = self.build_messages(text, source_language, target_language)
        result = await call_llm_async(self.client, self.model, messages, temperature=self.temperature)
        return clean_translated_text(result)


class AzureOpenAIProvider(ChatCompletionProvider):
    """Azure OpenAI deployments; ``model`` is the deployment name."""

    def __init__(self, config=None, prompts=None, client=None):
        super().__init__("azureopenai", config, prompts, client)

    def _create_client(self):
        endpoint = self.config.get("url")
        if not endpoint:
            raise ProviderError("azureopenai endpoint url is required")
        return create_azure_client(self.require_api_key(), endpoint, self.config.get("apiVersion", "2024-07-18"))


HTTP_PROVIDERS: Dict[str, Type[HttpProvider]] = {
    GtxProvider.provider_id: GtxProvider,
    GoogleProvider.provider_id: GoogleProvider,
    DeepLProvider.provider_id: DeepLProvider,
    DeepLXProvider.provider_id: DeepLXProvider,
    AzureProvider.provider_id: AzureProvider,
}


def create_provider(
    method: str,
    config: Optional[Dict[str, Any]] = None,
    prompts: Optional[Dict[str, str]] = None,
) -> TranslationProvider:
    """
    Create the provider for a translation method id.

    Args:
        method: Provider id, e.g. "gtxFreeAPI", "deepl", "openai"
        config: Provider config block (apiKey, model, url, ...)
        prompts: LLM prompt templates ("system", "user")

    Raises:
        ValueError: if the method is unknown
    """
    config = {**DEFAULT_API_CONFIGS.get(method, {}), **(config or {})}
    logger.debug(f"Creating translation provider: {method}")

    if method in HTTP_PROVIDERS:
        return HTTP_PROVIDERS[method](config)
    if method == "azureopenai":
        return AzureOpenAIProvider(config, prompts)
    if method in LLM_MODELS:
        return ChatCompletionProvider(method, config, prompts)

    raise ValueError(f"Unsupported translation method: {method}")
