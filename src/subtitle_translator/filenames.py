"""Output file naming."""

from __future__ import annotations

import logging
from pathlib import PurePath
from typing import Optional

from .models import SubtitleFormat

logger = logging.getLogger(__name__)

# ISO 639-1 codes (plus the regional variants the tool offers) accepted in file names
SUPPORTED_LANGUAGE_CODES = (
    "en", "zh", "zh-hant", "es", "de", "pt-br", "pt-pt", "ar", "ja", "ko", "ru", "fr", "it",
    "tr", "pl", "uk", "ro", "hu", "cs", "sk", "bg", "sv", "da", "fi", "nb", "lt", "lv", "et",
    "el", "sl", "nl", "id", "ms", "vi", "hi", "bn", "bho", "mr", "gu", "ta", "te", "kn", "th",
    "fil", "jv", "he", "am", "fa", "ha", "sw", "uz", "kk", "ky", "tk", "ur", "hr",
)

FALLBACK_SUFFIX = "translated"


def is_valid_iso639_code(language_code: str) -> bool:
    return language_code in SUPPORTED_LANGUAGE_CODES


def _stem(file_name: str) -> str:
    return PurePath(file_name).stem


def generate_translated_filename(original_name: str, language_code: str, extension: str) -> Optional[str]:
    """
    Build ``<stem>_<language>.<extension>``.

    Returns:
        The file name, or None if the language code is not supported
    """
    if not is_valid_iso639_code(language_code):
        logger.warning(f"Invalid language code for filename: {language_code}")
        return None
    return f"{_stem(original_name)}_{language_code}.{extension.lstrip('.')}"


def generate_safe_filename(original_name: str, language_code: str, extension: str) -> str:
    """Like generate_translated_filename, falling back to a ``_translated`` suffix."""
    name = generate_translated_filename(original_name, language_code, extension)
    if name:
        return name

    logger.warning(f"Using fallback filename for language code: {language_code}")
    return f"{_stem(original_name)}_{FALLBACK_SUFFIX}.{extension.lstrip('.')}"


def get_output_extension(
    file_format: SubtitleFormat,
    bilingual: bool = False,
    output_format: Optional[SubtitleFormat] = None,
) -> str:
    """
    File extension of the translated output.

    An explicit output format wins; otherwise bilingual SRT/WebVTT becomes
    ASS and every other format keeps its own extension.
    """
    if output_format is not None and output_format != SubtitleFormat.UNRECOGNIZED:
        return output_format.value
    if bilingual and file_format in (SubtitleFormat.SRT, SubtitleFormat.VTT):
        return SubtitleFormat.ASS.value
    return file_format.value
