"""Extraction of translatable text and reinsertion of translations."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from .ass import find_ass_field_offset, split_dialogue
from .detector import LRC_TIME_REGEX, WEBVTT_HEADER_REGEX, is_time_range
from .errors import AlignmentError, FormatError
from .merger import POSITION_BELOW, merge_line, split_lrc_line, strip_lrc_tags
from .models import ContentMap, SubtitleFormat

logger = logging.getLogger(__name__)

# 纯数字行（SRT 序号）
INTEGER_REGEX = re.compile(r"^\d+$")


def is_valid_subtitle_line(text: str) -> bool:
    """A content candidate must be non-blank and not purely numeric."""
    trimmed = text.strip()
    return bool(trimmed) and not INTEGER_REGEX.match(trimmed)


@dataclass(frozen=True)
class ExtractionRule:
    """
    Per-format extraction behaviour.

    ``starts_region`` opens the content region; inside it ``extract_text``
    returns the translatable text of a line, or None for non-content lines.
    """

    starts_region: Callable[[str], bool]
    extract_text: Callable[[str], Optional[str]]


def _srt_text(line: str) -> Optional[str]:
    if is_time_range(line):
        return None
    return line


def _vtt_text(line: str) -> Optional[str]:
    trimmed = line.strip()
    if is_time_range(line) or WEBVTT_HEADER_REGEX.match(trimmed) or trimmed.startswith("#"):
        return None
    return line


def _lrc_starts(line: str) -> bool:
    return LRC_TIME_REGEX.match(line.strip()) is not None


def _lrc_text(line: str) -> Optional[str]:
    if split_lrc_line(line) is None:
        return None
    return strip_lrc_tags(line)


def _ass_rule(field_offset: int) -> ExtractionRule:
    def extract_text(line: str) -> Optional[str]:
        if not line.startswith("Dialogue:"):
            return None
        parts = split_dialogue(line, field_offset)
        return parts[1] if parts else None

    return ExtractionRule(
        starts_region=lambda line: line.strip().startswith("Dialogue:"),
        extract_text=extract_text,
    )


EXTRACTION_RULES: Dict[SubtitleFormat, ExtractionRule] = {
    SubtitleFormat.SRT: ExtractionRule(starts_region=is_time_range, extract_text=_srt_text),
    SubtitleFormat.VTT: ExtractionRule(starts_region=is_time_range, extract_text=_vtt_text),
    SubtitleFormat.LRC: ExtractionRule(starts_region=_lrc_starts, extract_text=_lrc_text),
}


def extract(lines: Sequence[str], fmt: SubtitleFormat) -> ContentMap:
    """
    Isolate the translatable lines of a subtitle document.

    Lines before the first cue (headers, styles, metadata) are never content.
    From there on each line is accepted or skipped by the format's rule.

    Args:
        lines: Document lines in original order
        fmt: Detected format of the document

    Returns:
        ContentMap with one (text, line index) pair per content line

    Raises:
        FormatError: if the format is not one of the supported formats
    """
    field_offset: Optional[int] = None

    if fmt == SubtitleFormat.ASS:
        field_offset = find_ass_field_offset(lines)
        rule = _ass_rule(field_offset)
    else:
        rule = EXTRACTION_RULES.get(fmt)
        if rule is None:
            raise FormatError(f"Unsupported subtitle format: {fmt.value}")

    content: List[str] = []
    indices: List[int] = []
    extracting = False

    for index, line in enumerate(lines):
        if not extracting:
            extracting = rule.starts_region(line)
            if not extracting:
                continue

        text = rule.extract_text(line)
        if text is not None and is_valid_subtitle_line(text):
            content.append(text)
            indices.append(index)

    logger.debug(f"Extracted {len(content)} content lines from {len(lines)} {fmt.value} lines")
    return ContentMap(tuple(content), tuple(indices), field_offset)


def reinsert(
    lines: Sequence[str],
    content_map: ContentMap,
    translated: Sequence[str],
    fmt: SubtitleFormat,
    bilingual: bool = False,
    position: str = POSITION_BELOW,
    newline: str = "\n",
) -> List[str]:
    """
    Put translated text back into the original line layout.

    Returns a new list; every line that is not content is passed through
    untouched, and so is a monolingual content line whose text came back
    unchanged.

    Raises:
        AlignmentError: if the translation count differs from the content count
    """
    if len(translated) != len(content_map):
        raise AlignmentError(
            f"Expected {len(content_map)} translations, got {len(translated)}"
        )
    if content_map.indices and content_map.indices[-1] >= len(lines):
        raise AlignmentError(
            f"Content index {content_map.indices[-1]} out of range for {len(lines)} lines"
        )

    output = list(lines)
    for index, original, text in zip(content_map.indices, content_map.content, translated):
        if not bilingual and text == original:
            continue
        output[index] = merge_line(
            fmt,
            lines[index],
            text,
            field_offset=content_map.field_offset,
            bilingual=bilingual,
            position=position,
            newline=newline,
        )
    return output
