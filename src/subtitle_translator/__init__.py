"""
Subtitle Translator - batch translation of SRT, WebVTT, ASS/SSA and LRC subtitles.

Features:
- Format detection and translatable-line extraction
- Translation through free, paid and LLM providers
- Bounded concurrency with batching and an in-memory cache
- Bilingual output (inline or restructured into ASS)
- Conversion between subtitle formats
"""

__version__ = "1.0.0"

from .models import SubtitleFormat, RawDocument, ContentMap, SubtitleEntry
from .errors import (
    SubtitleTranslatorError,
    FormatError,
    ExtractionEmptyError,
    ProviderError,
    ConversionUnsupportedError,
    AlignmentError,
)
from .timecode import normalize, parse_time, format_time
from .detector import detect
from .extractor import extract, reinsert
from .merger import merge_line, build_bilingual_ass
from .converter import convert, parse, render
from .providers import TranslationProvider, create_provider
from .translator import TranslationService, TranslationResult
from .config import TranslatorConfig
from .pipeline import SubtitleTranslator, TranslatedDocument, TranslationStats

__all__ = [
    # Models
    "SubtitleFormat",
    "RawDocument",
    "ContentMap",
    "SubtitleEntry",
    "TranslationResult",
    "TranslatedDocument",
    "TranslationStats",
    "TranslatorConfig",
    # Errors
    "SubtitleTranslatorError",
    "FormatError",
    "ExtractionEmptyError",
    "ProviderError",
    "ConversionUnsupportedError",
    "AlignmentError",
    # Parsing
    "detect",
    "extract",
    "reinsert",
    "normalize",
    "parse_time",
    "format_time",
    # Merging and conversion
    "merge_line",
    "build_bilingual_ass",
    "convert",
    "parse",
    "render",
    # Translation
    "TranslationProvider",
    "create_provider",
    "TranslationService",
    "SubtitleTranslator",
]
