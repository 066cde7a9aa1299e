"""ASS/SSA helpers: header template, Dialogue field layout."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

# Fields before Text in "Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text"
DEFAULT_FIELD_OFFSET = 9

# Dialogue lines sampled when no Format: line is present
FIELD_OFFSET_SAMPLE_SIZE = 100

ASS_HEADER = """[Script Info]
ScriptType: v4.00+
WrapStyle: 0
ScaledBorderAndShadow: yes
PlayResX: 1920
PlayResY: 1080

[V4+ Styles]
Format: Name, Fontname, Fontsize, PrimaryColour, SecondaryColour, OutlineColour, BackColour, Bold, Italic, Underline, StrikeOut, ScaleX, ScaleY, Spacing, Angle, BorderStyle, Outline, Shadow, Alignment, MarginL, MarginR, MarginV, Encoding
Style: Default,Arial,64,&H00FFFFFF,&H000000FF,&H00000000,&H64000000,0,0,0,0,100,100,0,0,1,2,1,2,20,20,40,1
Style: Secondary,Arial,48,&H0000FFFF,&H000000FF,&H00000000,&H64000000,0,0,0,0,100,100,0,0,1,2,1,2,20,20,40,1

[Events]
Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text"""


def find_ass_field_offset(lines: Sequence[str]) -> int:
    """
    Count the comma-delimited fields that precede the text of a Dialogue line.

    Uses the ``Format:`` line under ``[Events]``. Headerless files fall back to
    the smallest comma count among the first 100 ``Dialogue:`` lines, then to 9.
    """
    try:
        events_index = next(i for i, line in enumerate(lines) if line.strip() == "[Events]")
    except StopIteration:
        events_index = None

    if events_index is not None:
        for line in lines[events_index:]:
            if line.startswith("Format:"):
                return line.count(",")

    dialogue_lines = [line for line in lines if line.startswith("Dialogue:")]
    sample = dialogue_lines[:FIELD_OFFSET_SAMPLE_SIZE]
    if sample:
        return min(line.count(",") for line in sample)

    return DEFAULT_FIELD_OFFSET


def split_dialogue(line: str, field_offset: int) -> Optional[Tuple[str, str, str]]:
    """
    Split a Dialogue line into (prefix, text, suffix).

    ``prefix`` runs through the ``field_offset``-th comma plus any leading
    whitespace of the payload, ``suffix`` is its trailing whitespace, so
    ``prefix + text + suffix == line``. Returns None for lines with too few
    fields.
    """
    parts = line.split(",")
    if len(parts) <= field_offset:
        return None

    head = ",".join(parts[:field_offset]) + "," if field_offset else ""
    payload = ",".join(parts[field_offset:])
    text = payload.strip()
    if not text:
        return head + payload, "", ""

    lead = payload[: len(payload) - len(payload.lstrip())]
    trail = payload[len(payload.rstrip()):]
    return head + lead, text, trail


def format_dialogue(start: str, end: str, text: str, style: str = "Default") -> str:
    """Render a Dialogue event using the default Format layout."""
    return f"Dialogue: 0,{start},{end},{style},,0,0,0,,{text}"
