"""Subtitle format detection."""

from __future__ import annotations

import re
import logging
from typing import Optional, Sequence, Tuple

from .models import SubtitleFormat

logger = logging.getLogger(__name__)

# Number of non-blank lines inspected by detect()
DETECTION_WINDOW = 50

# SRT / WebVTT time line: hours optional, 1-3 fraction digits, optional cue settings
_TIMESTAMP = r"(?:\d+:)?\d{2}:\d{2}[,.]\d{1,3}"
TIME_RANGE_REGEX = re.compile(rf"^({_TIMESTAMP})[ \t]+-->[ \t]+({_TIMESTAMP})(?:[ \t]+.*)?$")

# LRC 时间标记 [mm:ss] / [mm:ss.xx] / [mm:ss.xxx]
LRC_TIME_REGEX = re.compile(r"^\[\d{2}:\d{2}(?:\.\d{2,3})?\]")
LRC_METADATA_REGEX = re.compile(r"^\[(?:ar|ti|al|by|offset|re|ve):", re.IGNORECASE)

ASS_DIALOGUE_REGEX = re.compile(r"^dialogue:\s*\d+,[^,]*,[^,]*,", re.IGNORECASE)
WEBVTT_HEADER_REGEX = re.compile(r"^WEBVTT(?:\s|$)", re.IGNORECASE)


def split_time_range(line: str) -> Optional[Tuple[str, str]]:
    """Return (start, end) if the line is an SRT/WebVTT time-range line."""
    match = TIME_RANGE_REGEX.match(line.strip())
    if not match:
        return None
    return match.group(1), match.group(2)


def is_time_range(line: str) -> bool:
    return split_time_range(line) is not None


def detect(lines: Sequence[str]) -> SubtitleFormat:
    """
    Classify a document as SRT, WebVTT, ASS or LRC.

    Scans the first 50 non-blank lines. ``[Script Info]`` and a leading
    ``WEBVTT`` header decide immediately; otherwise the format with the most
    characteristic lines wins, in ASS > LRC > VTT > SRT priority.

    Args:
        lines: Document lines in original order

    Returns:
        The detected format, or SubtitleFormat.UNRECOGNIZED
    """
    non_blank = [line.strip() for line in lines if line.strip()][:DETECTION_WINDOW]

    ass_count = srt_count = vtt_count = lrc_count = 0

    for i, trimmed in enumerate(non_blank):
        if trimmed.lower() == "[script info]":
            return SubtitleFormat.ASS

        if i == 0 and WEBVTT_HEADER_REGEX.match(trimmed):
            return SubtitleFormat.VTT

        if ASS_DIALOGUE_REGEX.match(trimmed):
            ass_count += 1

        time_range = split_time_range(trimmed)
        if time_range:
            stamps = "".join(time_range)
            if "," in stamps:
                srt_count += 1
            elif "." in stamps:
                vtt_count += 1

        if LRC_TIME_REGEX.match(trimmed):
            lrc_count += 1
        if LRC_METADATA_REGEX.match(trimmed):
            lrc_count += 1

    logger.debug(
        f"Detection counters: ass={ass_count} srt={srt_count} vtt={vtt_count} lrc={lrc_count}"
    )

    if ass_count > 0 and ass_count >= max(vtt_count, srt_count, lrc_count):
        return SubtitleFormat.ASS
    if lrc_count > 0 and lrc_count >= max(vtt_count, srt_count):
        return SubtitleFormat.LRC
    if vtt_count > srt_count:
        return SubtitleFormat.VTT
    if srt_count > 0:
        return SubtitleFormat.SRT
    return SubtitleFormat.UNRECOGNIZED
