"""Batched translation with caching and bounded concurrency."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from tqdm import tqdm

from .errors import AlignmentError, ProviderError
from .providers import TranslationProvider

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5
DEFAULT_PARALLELISM = 3
DEFAULT_INTER_BATCH_DELAY = 1000  # ms

CacheKey = Tuple[str, str, str, str]


@dataclass
class TranslationResult:
    """单条翻译结果。"""
    index: int
    original: str
    translated: str
    success: bool
    error: str = ""
    cached: bool = False


def extract_translations(results: Sequence[TranslationResult]) -> List[str]:
    """
    从 TranslationResult 列表中提取翻译文本。

    对于失败的项，返回原文（而非错误标记）。
    """
    return [r.translated if r.success and r.translated else r.original for r in results]


class TranslationService:
    """
    Translates sequences of subtitle lines through one provider.

    Lines are sent in fixed-size groups. Inside a group at most
    ``parallelism`` provider calls run at once; groups are separated by
    ``inter_batch_delay`` milliseconds. A failed line keeps its original text.
    The cache lives as long as the service instance.
    """

    def __init__(
        self,
        provider: TranslationProvider,
        batch_size: int = DEFAULT_BATCH_SIZE,
        parallelism: int = DEFAULT_PARALLELISM,
        inter_batch_delay: int = DEFAULT_INTER_BATCH_DELAY,
        show_progress: bool = False,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.provider = provider
        self.batch_size = batch_size
        self.parallelism = parallelism
        self.inter_batch_delay = inter_batch_delay
        self.show_progress = show_progress
        self._cache: Dict[CacheKey, str] = {}
        self._stop_requested = False

    @property
    def provider_id(self) -> str:
        return self.provider.provider_id

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def clear_cache(self) -> None:
        self._cache.clear()

    def request_stop(self) -> None:
        """Stop scheduling new groups; lines already sent still complete."""
        self._stop_requested = True

    def _cache_key(self, text: str, source_language: str, target_language: str) -> CacheKey:
        return (text, source_language, target_language, self.provider_id)

    async def translate_entry(
        self,
        index: int,
        text: str,
        source_language: str,
        target_language: str,
    ) -> TranslationResult:
        """Translate one line; never raises for provider failures."""
        if not text.strip() or source_language == target_language:
            return TranslationResult(index, text, text, success=True)

        key = self._cache_key(text, source_language, target_language)
        if key in self._cache:
            return TranslationResult(index, text, self._cache[key], success=True, cached=True)

        try:
            translated = await self.provider.translate(text, source_language, target_language)
        except ProviderError as e:
            logger.error(f"Translation failed for #{index} ({self.provider_id}): {e}")
            return TranslationResult(index, text, text, success=False, error=str(e))
        except Exception as e:
            logger.exception(f"Unexpected error from {self.provider_id} for #{index}: {e}")
            return TranslationResult(index, text, text, success=False, error=str(e))

        if not translated:
            logger.warning(f"Empty translation for #{index}, keeping original text")
            return TranslationResult(index, text, text, success=False, error="Empty translation")

        self._cache[key] = translated
        return TranslationResult(index, text, translated, success=True)

    async def translate_text(self, text: str, source_language: str, target_language: str) -> str:
        result = await self.translate_entry(0, text, source_language, target_language)
        return result.translated

    async def translate_batch(
        self,
        content: Sequence[str],
        source_language: str,
        target_language: str,
        parallelism: Optional[int] = None,
        inter_batch_delay: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> List[str]:
        """
        Translate lines, keeping input order.

        Args:
            content: Lines to translate
            source_language: Source language code or "auto"
            target_language: Target language code
            parallelism: Max concurrent provider calls (default: service setting)
            inter_batch_delay: Pause between groups in ms (default: service setting)
            timeout: Seconds after which no new group is started

        Returns:
            One string per input line; failed or unscheduled lines keep
            their original text
        """
        parallelism = parallelism or self.parallelism
        delay = self.inter_batch_delay if inter_batch_delay is None else inter_batch_delay
        sem = asyncio.Semaphore(max(1, parallelism))
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout if timeout else None

        results: List[Optional[TranslationResult]] = [None] * len(content)

        async def run(index: int, text: str) -> None:
            async with sem:
                results[index] = await self.translate_entry(index, text, source_language, target_language)

        total = len(content)
        with tqdm(total=total, desc="Translating", unit="line", disable=not self.show_progress) as bar:
            for start in range(0, total, self.batch_size):
                if self._stop_requested or (deadline is not None and loop.time() >= deadline):
                    logger.warning(f"Stopped scheduling at line {start}/{total}, remaining lines keep original text")
                    break

                group = range(start, min(start + self.batch_size, total))
                await asyncio.gather(*(run(i, content[i]) for i in group))
                bar.update(len(group))
                logger.debug(f"Progress: {group.stop}/{total} lines translated")

                if group.stop < total and delay > 0:
                    await asyncio.sleep(delay / 1000)

        for i, result in enumerate(results):
            if result is None:
                results[i] = TranslationResult(i, content[i], content[i], success=False, error="Not scheduled")

        translations = extract_translations(results)
        if len(translations) != len(content):
            raise AlignmentError(f"Expected {len(content)} translations, got {len(translations)}")

        failed = sum(1 for r in results if not r.success)
        if failed:
            logger.warning(f"{failed}/{total} lines kept their original text")
        return translations
