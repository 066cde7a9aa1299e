"""Data models shared by the subtitle engine."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Sequence, Tuple

from .errors import AlignmentError


class SubtitleFormat(str, Enum):
    """Subtitle container formats understood by the engine."""

    SRT = "srt"
    VTT = "vtt"
    ASS = "ass"
    LRC = "lrc"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def supported(cls) -> Tuple["SubtitleFormat", ...]:
        return (cls.SRT, cls.VTT, cls.ASS, cls.LRC)

    @classmethod
    def from_value(cls, value: str) -> "SubtitleFormat":
        """Look up a format by name, extension ('.srt') or 'ssa' alias."""
        name = value.strip().lower().lstrip(".")
        if name == "ssa":
            name = "ass"
        try:
            return cls(name)
        except ValueError:
            return cls.UNRECOGNIZED


@dataclass(frozen=True)
class RawDocument:
    """The lines of a subtitle file, in original order."""

    lines: Tuple[str, ...]
    newline: str = "\n"

    @classmethod
    def from_text(cls, text: str) -> "RawDocument":
        """Split text into lines, keeping the newline sequence for re-joining."""
        if text.startswith("\ufeff"):
            text = text[1:]
        newline = "\r\n" if "\r\n" in text else "\n"
        return cls(tuple(text.split(newline)), newline)

    def to_text(self, lines: Optional[Sequence[str]] = None) -> str:
        """Join lines (or replacement lines) back with the original newline."""
        return self.newline.join(self.lines if lines is None else lines)

    def __len__(self) -> int:
        return len(self.lines)


@dataclass(frozen=True)
class ContentMap:
    """
    Translatable text of a document and where each piece came from.

    ``content[i]`` was taken from line ``indices[i]``. For ASS documents
    ``field_offset`` is the number of comma-delimited fields that precede the
    text payload of a ``Dialogue:`` line.
    """

    content: Tuple[str, ...] = ()
    indices: Tuple[int, ...] = ()
    field_offset: Optional[int] = None

    def __post_init__(self):
        if len(self.content) != len(self.indices):
            raise AlignmentError(
                f"content/indices length mismatch: {len(self.content)} != {len(self.indices)}"
            )
        previous = -1
        for index in self.indices:
            if index <= previous:
                raise AlignmentError(f"indices must be strictly increasing, got {index} after {previous}")
            previous = index

    def __len__(self) -> int:
        return len(self.content)

    def __bool__(self) -> bool:
        return len(self.content) > 0


@dataclass(frozen=True)
class SubtitleEntry:
    """A format-neutral subtitle cue; times stay in the source format's syntax."""

    start_time: str
    end_time: str
    text: str
    index: Optional[int] = field(default=None)

    @property
    def timecode(self) -> str:
        return f"{self.start_time} --> {self.end_time}"

    def copy(self, **changes) -> "SubtitleEntry":
        """Create a copy with optional field changes."""
        return replace(self, **changes)
