"""Error types raised by the subtitle translator."""

from __future__ import annotations

from typing import Optional


class SubtitleTranslatorError(Exception):
    """Base class for all subtitle translator errors."""


class FormatError(SubtitleTranslatorError):
    """The input is not a recognized subtitle format (fatal for that file)."""


class ExtractionEmptyError(SubtitleTranslatorError):
    """The format was recognized but no translatable line was found."""


class ProviderError(SubtitleTranslatorError):
    """
    A translation provider failed (transport, auth, quota, bad response).

    Recovered locally by the orchestrator: the entry keeps its original text.
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self) -> str:
        if self.status is not None:
            return f"[{self.status}] {self.message}"
        return self.message


class ConversionUnsupportedError(SubtitleTranslatorError):
    """The requested cross-format conversion is not supported."""

    def __init__(self, source: str, target: str):
        super().__init__(f"Conversion from '{source}' to '{target}' is not supported")
        self.source = source
        self.target = target


class AlignmentError(SubtitleTranslatorError):
    """
    Content, indices and translations went out of step.

    This is a programming error and is never recovered from.
    """
