"""Text processing utilities."""

from __future__ import annotations

import re
from string import Template
from typing import Optional


LANGUAGE_NAMES = {
    "en": "English",
    "zh": "Chinese",
    "zh-hant": "Traditional Chinese",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "ja": "Japanese",
    "ko": "Korean",
    "pt": "Portuguese",
    "pt-br": "Brazilian Portuguese",
    "pt-pt": "European Portuguese",
    "ru": "Russian",
    "ar": "Arabic",
    "hi": "Hindi",
    "auto": "Auto-detect",
}

DEFAULT_SYSTEM_PROMPT = (
    "You are a professional subtitle translator. Translate the given subtitle "
    "text accurately while preserving timing and formatting."
)

DEFAULT_USER_PROMPT = (
    "Translate the following subtitle text from ${sourceLanguage} to ${targetLanguage}. "
    "Only return the translated text without any additional explanation:\n\n${content}"
)

# "from ${sourceLanguage} to" -> "into" 用于自动检测源语言
_AUTO_SOURCE_REGEX = re.compile(r"from \$\{sourceLanguage\} (?:to|into)")

# 模型有时会用代码块包裹输出
_CODE_FENCE_REGEX = re.compile(r"^```[\w-]*\s*\n?|\n?\s*```$")


def get_language_name(code: str) -> str:
    """Return the English name of a language code, or the code itself."""
    return LANGUAGE_NAMES.get(code.lower(), code)


def build_user_prompt(
    content: str,
    source_language: str,
    target_language: str,
    template: Optional[str] = None,
) -> str:
    """
    Fill a user prompt template.

    Templates use ``${sourceLanguage}``, ``${targetLanguage}`` and
    ``${content}``. With an ``auto`` source the "from X to" phrase becomes
    "into".
    """
    template = template or DEFAULT_USER_PROMPT
    if source_language == "auto":
        template = _AUTO_SOURCE_REGEX.sub("into", template)

    return Template(template).safe_substitute(
        sourceLanguage=get_language_name(source_language),
        targetLanguage=get_language_name(target_language),
        content=content,
    )


def clean_translated_text(text: str) -> str:
    """
    Clean LLM output for use as a subtitle line.

    Removes code fences and quotes the model wrapped around the whole answer.
    Subtitle markup such as ``<i>`` or leading dialogue dashes is kept.

    Args:
        text: Raw model output

    Returns:
        Cleaned text
    """
    if not text or not isinstance(text, str):
        return ""

    text = _CODE_FENCE_REGEX.sub("", text.strip()).strip()

    for opening, closing in (('"', '"'), ("“", "”")):
        inner = text[1:-1]
        if (
            len(text) >= 2
            and text[0] == opening
            and text[-1] == closing
            and opening not in inner
            and closing not in inner
        ):
            text = inner.strip()
            break

    return text


def truncate_text(text: str, max_length: int, suffix: str = "...") -> str:
    """
    Truncate text to maximum length with suffix.

    Args:
        text: Text to truncate
        max_length: Maximum length including suffix
        suffix: Suffix to append if truncated

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix
