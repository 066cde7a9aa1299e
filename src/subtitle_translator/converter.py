"""
Conversion between SRT, WebVTT, ASS and LRC.

Documents are parsed into format-neutral SubtitleEntry lists and rendered
into the target format. ASS styling and positioning codes are not modeled,
so converting from ASS is lossy.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Sequence

from .ass import ASS_HEADER, find_ass_field_offset, format_dialogue
from .detector import WEBVTT_HEADER_REGEX, split_time_range
from .errors import ConversionUnsupportedError
from .models import SubtitleEntry, SubtitleFormat
from .timecode import normalize, parse_time

logger = logging.getLogger(__name__)

_ASS_OVERRIDE_REGEX = re.compile(r"\{[^}]*\}")
_LRC_LINE_REGEX = re.compile(r"^((?:\[\d{2}:\d{2}(?:\.\d{2,3})?\])+)(.*)$")
_LRC_STAMP_REGEX = re.compile(r"\[(\d{2}:\d{2}(?:\.\d{2,3})?)\]")
_VTT_SKIPPED_BLOCKS = ("NOTE", "STYLE", "REGION")

FORMAT_DESCRIPTIONS: Dict[SubtitleFormat, str] = {
    SubtitleFormat.SRT: "SubRip Subtitle",
    SubtitleFormat.VTT: "WebVTT",
    SubtitleFormat.ASS: "Advanced SubStation Alpha",
    SubtitleFormat.LRC: "Lyric File",
}


def get_available_formats() -> List[Dict[str, str]]:
    """List the formats a document can be converted to."""
    return [
        {"value": fmt.value, "label": fmt.value.upper(), "description": description}
        for fmt, description in FORMAT_DESCRIPTIONS.items()
    ]


def is_conversion_supported(source: SubtitleFormat, target: SubtitleFormat) -> bool:
    supported = SubtitleFormat.supported()
    return source in supported and target in supported


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _blocks(lines: Sequence[str]) -> List[List[str]]:
    """Group trimmed lines into blank-line separated blocks."""
    blocks: List[List[str]] = []
    current: List[str] = []
    for raw in lines:
        line = raw.strip()
        if line:
            current.append(line)
        elif current:
            blocks.append(current)
            current = []
    if current:
        blocks.append(current)
    return blocks


def _parse_cue_block(block: Sequence[str]) -> Optional[SubtitleEntry]:
    """Parse an SRT/WebVTT cue: [identifier], time range, text lines."""
    for pos, line in enumerate(block):
        time_range = split_time_range(line)
        if not time_range:
            continue
        text_lines = block[pos + 1:]
        if not text_lines:
            return None
        index = None
        if pos > 0 and block[pos - 1].isdigit():
            index = int(block[pos - 1])
        start, end = time_range
        return SubtitleEntry(start, end, "\n".join(text_lines), index=index)
    return None


def parse_srt(lines: Sequence[str]) -> List[SubtitleEntry]:
    entries = []
    for block in _blocks(lines):
        entry = _parse_cue_block(block)
        if entry:
            entries.append(entry)
    return entries


def parse_vtt(lines: Sequence[str]) -> List[SubtitleEntry]:
    entries = []
    for block in _blocks(lines):
        first = block[0]
        if WEBVTT_HEADER_REGEX.match(first.strip()) or first.split(" ", 1)[0] in _VTT_SKIPPED_BLOCKS:
            continue
        entry = _parse_cue_block([line for line in block if not line.startswith("#")])
        if entry:
            entries.append(entry.copy(index=None))
    return entries


def parse_ass(lines: Sequence[str]) -> List[SubtitleEntry]:
    field_offset = find_ass_field_offset(lines)
    entries = []
    for line in lines:
        if not line.startswith("Dialogue:"):
            continue
        parts = line.split(",")
        if len(parts) <= field_offset:
            continue
        text = ",".join(parts[field_offset:]).strip()
        text = _ASS_OVERRIDE_REGEX.sub("", text).replace("\\N", "\n").replace("\\n", "\n")
        entries.append(SubtitleEntry(parts[1].strip(), parts[2].strip(), text))
    return entries


def parse_lrc(lines: Sequence[str]) -> List[SubtitleEntry]:
    """Parse LRC lyrics; a line with several time tags yields one entry per tag."""
    timed = []
    for line in lines:
        match = _LRC_LINE_REGEX.match(line.strip())
        if not match:
            continue
        tags, text = match.groups()
        for stamp in _LRC_STAMP_REGEX.findall(tags):
            # LRC 没有结束时间
            timed.append(SubtitleEntry(stamp, stamp, text.strip()))

    timed.sort(key=lambda entry: parse_time(entry.start_time, SubtitleFormat.LRC) or 0)
    return timed


_PARSERS = {
    SubtitleFormat.SRT: parse_srt,
    SubtitleFormat.VTT: parse_vtt,
    SubtitleFormat.ASS: parse_ass,
    SubtitleFormat.LRC: parse_lrc,
}


def parse(content: str, fmt: SubtitleFormat) -> List[SubtitleEntry]:
    """
    Parse subtitle content into SubtitleEntry objects.

    Args:
        content: Raw subtitle text
        fmt: Format of ``content``

    Returns:
        Entries in document order, times in the source syntax
    """
    parser = _PARSERS.get(fmt)
    if parser is None:
        raise ConversionUnsupportedError(fmt.value, "entries")
    return parser(content.replace("\r\n", "\n").split("\n"))


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def render_srt(entries: Sequence[SubtitleEntry], source: SubtitleFormat) -> str:
    blocks = []
    for i, entry in enumerate(entries, 1):
        start = normalize(entry.start_time, source, SubtitleFormat.SRT)
        end = normalize(entry.end_time, source, SubtitleFormat.SRT)
        number = entry.index if entry.index is not None else i
        blocks.append(f"{number}\n{start} --> {end}\n{entry.text}\n")
    return "\n".join(blocks)


def render_vtt(entries: Sequence[SubtitleEntry], source: SubtitleFormat) -> str:
    blocks = []
    for entry in entries:
        start = normalize(entry.start_time, source, SubtitleFormat.VTT)
        end = normalize(entry.end_time, source, SubtitleFormat.VTT)
        blocks.append(f"{start} --> {end}\n{entry.text}\n")
    return "WEBVTT\n\n" + "\n".join(blocks)


def render_ass(entries: Sequence[SubtitleEntry], source: SubtitleFormat) -> str:
    events = []
    for entry in entries:
        start = normalize(entry.start_time, source, SubtitleFormat.ASS)
        end = normalize(entry.end_time, source, SubtitleFormat.ASS)
        events.append(format_dialogue(start, end, entry.text.replace("\n", "\\N")))
    return "\n".join([ASS_HEADER, *events]) + "\n"


def render_lrc(entries: Sequence[SubtitleEntry], source: SubtitleFormat) -> str:
    lines = []
    for entry in entries:
        # end time is dropped, LRC only has start tags
        start = normalize(entry.start_time, source, SubtitleFormat.LRC)
        text = " ".join(part.strip() for part in entry.text.splitlines() if part.strip())
        lines.append(f"[{start}]{text}")
    return "\n".join(lines) + "\n"


_RENDERERS = {
    SubtitleFormat.SRT: render_srt,
    SubtitleFormat.VTT: render_vtt,
    SubtitleFormat.ASS: render_ass,
    SubtitleFormat.LRC: render_lrc,
}


def render(
    entries: Sequence[SubtitleEntry],
    target: SubtitleFormat,
    source: SubtitleFormat,
) -> str:
    """
    Render entries in the target format.

    Args:
        entries: Entries whose times are written in ``source`` syntax
        target: Format to produce
        source: Time syntax of the entries

    Returns:
        Subtitle document text
    """
    renderer = _RENDERERS.get(target)
    if renderer is None:
        raise ConversionUnsupportedError(source.value, target.value)
    return renderer(entries, source)


def convert(content: str, source: SubtitleFormat, target: SubtitleFormat) -> str:
    """
    Convert a subtitle document between two supported formats.

    Same-format conversion returns the content untouched.

    Raises:
        ConversionUnsupportedError: if either format is not supported
    """
    if not is_conversion_supported(source, target):
        raise ConversionUnsupportedError(source.value, target.value)
    if source == target:
        return content

    entries = parse(content, source)
    logger.info(f"Converting {len(entries)} entries from {source.value} to {target.value}")
    return render(entries, target, source)
