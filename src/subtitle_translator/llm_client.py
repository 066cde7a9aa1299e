"""LLM API client utilities."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Dict, Optional
from enum import Enum

from openai import (
    AsyncOpenAI,
    AsyncAzureOpenAI,
    APIConnectionError,
    RateLimitError,
    AuthenticationError,
    BadRequestError,
    APIStatusError,
)

from .errors import ProviderError

logger = logging.getLogger(__name__)


class APIErrorType(Enum):
    """API 错误类型分类。"""
    RATE_LIMIT = "rate_limit"      # 429 - 可重试
    CONNECTION = "connection"       # 网络问题 - 可重试
    AUTH = "auth"                   # 401 - 不可重试
    BAD_REQUEST = "bad_request"     # 400 - 不可重试
    SERVER = "server"               # 500+ - 可重试
    UNKNOWN = "unknown"


def classify_error(error: Exception) -> tuple[APIErrorType, bool]:
    """
    分类 API 错误并判断是否可重试。

    Returns:
        (错误类型, 是否可重试)
    """
    if isinstance(error, RateLimitError):
        return APIErrorType.RATE_LIMIT, True
    elif isinstance(error, APIConnectionError):
        return APIErrorType.CONNECTION, True
    elif isinstance(error, AuthenticationError):
        return APIErrorType.AUTH, False
    elif isinstance(error, BadRequestError):
        return APIErrorType.BAD_REQUEST, False
    elif isinstance(error, APIStatusError):
        # 5xx 错误可重试
        if error.status_code >= 500:
            return APIErrorType.SERVER, True
        return APIErrorType.UNKNOWN, False
    else:
        return APIErrorType.UNKNOWN, False


def retry_delay(error_type: APIErrorType, attempt: int) -> int:
    """Backoff in seconds before retry ``attempt`` (0-based)."""
    if error_type == APIErrorType.RATE_LIMIT:
        # Rate limit 使用更长的退避时间
        return min(2 ** (attempt + 2), 60)  # 4, 8, 16... max 60
    return 2 ** (attempt + 1)  # 2, 4, 8


async def call_llm_async(
    client: AsyncOpenAI,
    model: str,
    messages: List[Dict[str, str]],
    temperature: float = 0.3,
    max_retries: int = 3,
) -> str:
    """
    Make async call to LLM API with retry logic.

    Args:
        client: AsyncOpenAI (or AsyncAzureOpenAI) client instance
        model: Model name (deployment name for Azure)
        messages: List of message dictionaries
        temperature: Sampling temperature
        max_retries: Maximum attempts

    Returns:
        Response content as string

    Raises:
        ProviderError: on a non-retryable error, an empty response, or
            when all retries failed
    """
    last_error: Optional[Exception] = None
    attempt = 0

    for attempt in range(max_retries):
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
            )
        except Exception as e:
            last_error = e
            error_type, retryable = classify_error(e)

            if not retryable:
                logger.error(f"Non-retryable error ({error_type.value}): {e}")
                break

            if attempt + 1 < max_retries:
                delay = retry_delay(error_type, attempt)
                logger.warning(
                    f"Retryable error ({error_type.value}): {e}. "
                    f"Retry {attempt + 1}/{max_retries} in {delay}s..."
                )
                await asyncio.sleep(delay)
            continue

        if not response.choices:
            raise ProviderError(f"Model {model} returned no choices")
        content = response.choices[0].message.content
        if not content or not content.strip():
            raise ProviderError(f"Model {model} returned an empty response")
        return content.strip()

    status = getattr(last_error, "status_code", None)
    logger.error(f"LLM call failed after {attempt + 1} attempt(s). Last error: {last_error}")
    raise ProviderError(str(last_error), status)


def create_client(
    api_key: str,
    base_url: Optional[str] = None,
    timeout: float = 60.0,
    default_headers: Optional[Dict[str, str]] = None,
) -> AsyncOpenAI:
    """
    Create an AsyncOpenAI client.

    Args:
        api_key: API key for authentication
        base_url: API base URL, None for the OpenAI default
        timeout: Default timeout for requests
        default_headers: Extra headers sent with every request

    Returns:
        Configured AsyncOpenAI client
    """
    return AsyncOpenAI(
        api_key=api_key,
        base_url=base_url,
        timeout=timeout,
        default_headers=default_headers,
        max_retries=0,
    )


def create_azure_client(
    api_key: str,
    endpoint: str,
    api_version: str,
    timeout: float = 60.0,
) -> AsyncAzureOpenAI:
    """Create an AsyncAzureOpenAI client."""
    return AsyncAzureOpenAI(
        api_key=api_key,
        azure_endpoint=endpoint,
        api_version=api_version,
        timeout=timeout,
        max_retries=0,
    )
