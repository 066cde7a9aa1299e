"""Monolingual and bilingual merging of translated text into subtitle lines."""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Sequence, Tuple

from .ass import ASS_HEADER, DEFAULT_FIELD_OFFSET, format_dialogue, split_dialogue
from .detector import split_time_range
from .errors import AlignmentError
from .models import ContentMap, SubtitleFormat
from .timecode import normalize

logger = logging.getLogger(__name__)

POSITION_ABOVE = "above"
POSITION_BELOW = "below"
BILINGUAL_POSITIONS = (POSITION_ABOVE, POSITION_BELOW)

LRC_TAG_REGEX = re.compile(r"\[\d{2}:\d{2}(?:\.\d{2,3})?\]")
_LRC_LEADING_TAGS = re.compile(r"^\s*(?:\[\d{2}:\d{2}(?:\.\d{2,3})?\])+\s*")

# Both styles are bottom-aligned: the Secondary event renders below Default
LOWER_STYLE = "Secondary"
UPPER_STYLE = "Default"


def strip_lrc_tags(line: str) -> str:
    """Remove every LRC time tag from a line."""
    return LRC_TAG_REGEX.sub("", line).strip()


def split_lrc_line(line: str) -> Optional[Tuple[str, str, str]]:
    """
    Split an LRC lyric line into (tag prefix, text, trailing whitespace).

    Returns None when the line does not start with a time tag.
    """
    match = _LRC_LEADING_TAGS.match(line)
    if not match:
        return None
    prefix = match.group(0)
    rest = line[len(prefix):]
    text = rest.rstrip()
    return prefix, text, rest[len(text):]


def _order(original: str, translated: str, position: str) -> Tuple[str, str]:
    if position == POSITION_ABOVE:
        return translated, original
    return original, translated


def _flatten(text: str, separator: str) -> str:
    """Join a multi-line translation with a format-specific separator."""
    if "\n" not in text:
        return text
    return separator.join(part.strip() for part in text.splitlines() if part.strip())


def merge_line(
    fmt: SubtitleFormat,
    original: str,
    translated: str,
    field_offset: Optional[int] = None,
    bilingual: bool = False,
    position: str = POSITION_BELOW,
    newline: str = "\n",
) -> str:
    """
    Merge a translated text into its original content line.

    Monolingual output replaces only the text span, so an unchanged text
    reproduces the original line exactly. Bilingual output keeps both texts
    using the format's own line-break convention.

    Args:
        fmt: Format of the document
        original: Original content line
        translated: Translation of the line's text
        field_offset: ASS fields preceding the text payload
        bilingual: Keep the original text alongside the translation
        position: Where the translation goes, "above" or "below" the original
        newline: Newline sequence of the document (SRT/WebVTT)

    Returns:
        The merged line
    """
    if fmt in (SubtitleFormat.SRT, SubtitleFormat.VTT):
        translated = _flatten(translated, newline)
        if not bilingual:
            return translated
        first, second = _order(original, translated, position)
        return f"{first}{newline}{second}"

    if fmt == SubtitleFormat.LRC:
        translated = _flatten(translated, " ")
        if bilingual:
            tags = "".join(LRC_TAG_REGEX.findall(original))
            first, second = _order(strip_lrc_tags(original), translated, position)
            return f"{tags} {first} / {second}"
        parts = split_lrc_line(original)
        if parts is None:
            return translated
        prefix, _, suffix = parts
        return f"{prefix}{translated}{suffix}"

    if fmt == SubtitleFormat.ASS:
        translated = _flatten(translated, "\\N")
        offset = DEFAULT_FIELD_OFFSET if field_offset is None else field_offset
        parts = split_dialogue(original, offset)
        if parts is None:
            raise AlignmentError(f"Dialogue line has fewer than {offset} fields: {original!r}")
        prefix, text, suffix = parts
        if bilingual:
            first, second = _order(text, translated, position)
            return f"{prefix}{first}\\N{second}{suffix}"
        return f"{prefix}{translated}{suffix}"

    raise ValueError(f"Cannot merge into format: {fmt}")


def build_bilingual_ass(
    lines: Sequence[str],
    content_map: ContentMap,
    translated: Sequence[str],
    source_format: SubtitleFormat,
    position: str = POSITION_BELOW,
) -> str:
    """
    Restructure an SRT/WebVTT document into a bilingual ASS document.

    Every timed span becomes two Dialogue lines. The Secondary line is drawn
    lowest, so it carries the translation for position "below" and the
    original for "above". Content lines sharing the same (start, end) key are joined with
    ``\\N`` inside the existing pair instead of producing another pair.
    A content line with no time-range line above it is dropped.

    Returns:
        Complete ASS document text
    """
    if len(translated) != len(content_map):
        raise AlignmentError(
            f"Expected {len(content_map)} translations, got {len(translated)}"
        )

    # key -> [upper texts, lower texts]
    spans: Dict[Tuple[str, str], Tuple[List[str], List[str]]] = {}
    dropped = 0

    for i, index in enumerate(content_map.indices):
        time_range = None
        for search in range(index - 1, -1, -1):
            time_range = split_time_range(lines[search])
            if time_range:
                break

        if not time_range:
            dropped += 1
            continue

        start, end = (normalize(t, source_format, SubtitleFormat.ASS) for t in time_range)
        upper, lower = _order(lines[index].strip(), _flatten(translated[i], "\\N"), position)

        uppers, lowers = spans.setdefault((start, end), ([], []))
        uppers.append(upper)
        lowers.append(lower)

    if dropped:
        logger.warning(f"Dropped {dropped} content line(s) with no preceding time line")

    events: List[str] = []
    for (start, end), (uppers, lowers) in spans.items():
        events.append(format_dialogue(start, end, "\\N".join(lowers), LOWER_STYLE))
        events.append(format_dialogue(start, end, "\\N".join(uppers), UPPER_STYLE))

    return "\n".join([ASS_HEADER, *events]) + "\n"
