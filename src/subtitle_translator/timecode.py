"""Time-code conversion between SRT, WebVTT, ASS and LRC syntaxes."""

from __future__ import annotations

import re
from typing import Dict, Optional, Pattern

from .models import SubtitleFormat

# SRT: 00:00:01,000   VTT: 00:00:01.000 / 00:01.000
_SRT_VTT_TIME = re.compile(r"^(?:(\d+):)?(\d{1,2}):(\d{2})[,.](\d{1,3})$")
# ASS: 0:00:01.00
_ASS_TIME = re.compile(r"^(\d+):(\d{2}):(\d{2})[.,](\d{1,3})$")
# LRC: 01:23.45, minutes may exceed 59 (hours are folded in)
_LRC_TIME = re.compile(r"^()(\d+):(\d{2})(?:\.(\d{1,3}))?$")

TIME_GRAMMARS: Dict[SubtitleFormat, Pattern[str]] = {
    SubtitleFormat.SRT: _SRT_VTT_TIME,
    SubtitleFormat.VTT: _SRT_VTT_TIME,
    SubtitleFormat.ASS: _ASS_TIME,
    SubtitleFormat.LRC: _LRC_TIME,
}


def parse_time(time: str, fmt: SubtitleFormat) -> Optional[int]:
    """
    Parse a time string written in ``fmt`` syntax.

    The fractional part is a decimal fraction of a second, so ``1,5`` and
    ``1.50`` both mean 1500 ms.

    Returns:
        Milliseconds, or None if the string does not match the grammar
    """
    grammar = TIME_GRAMMARS.get(fmt)
    if grammar is None:
        return None

    match = grammar.match(time.strip())
    if not match:
        return None

    hours, minutes, seconds, fraction = match.groups()
    millis = int((fraction or "0").ljust(3, "0"))
    return (
        int(hours or 0) * 3_600_000
        + int(minutes) * 60_000
        + int(seconds) * 1000
        + millis
    )


def format_time(millis: int, fmt: SubtitleFormat) -> str:
    """Render milliseconds in the time syntax of ``fmt``."""
    hours, rest = divmod(millis, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    seconds, ms = divmod(rest, 1000)
    # 毫秒 -> 厘秒 截断，不四舍五入
    centis = ms // 10

    if fmt == SubtitleFormat.SRT:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d},{ms:03d}"
    if fmt == SubtitleFormat.VTT:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{ms:03d}"
    if fmt == SubtitleFormat.ASS:
        return f"{hours:d}:{minutes:02d}:{seconds:02d}.{centis:02d}"
    if fmt == SubtitleFormat.LRC:
        total_minutes = hours * 60 + minutes
        return f"{total_minutes:02d}:{seconds:02d}.{centis:02d}"

    raise ValueError(f"No time syntax for format: {fmt}")


def normalize(time: str, from_format: SubtitleFormat, to_format: SubtitleFormat) -> str:
    """
    Convert a time string from one subtitle syntax to another.

    Best effort: a string that does not match the source grammar is returned
    unchanged.

    Args:
        time: Time string in ``from_format`` syntax
        from_format: Syntax of ``time``
        to_format: Syntax to produce

    Returns:
        The converted time string
    """
    millis = parse_time(time, from_format)
    if millis is None or to_format not in TIME_GRAMMARS:
        return time
    return format_time(millis, to_format)


def convert_time_to_ass(time: str) -> str:
    """Convert an SRT or WebVTT time stamp to ASS syntax."""
    return normalize(time, SubtitleFormat.SRT, SubtitleFormat.ASS)
