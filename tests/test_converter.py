"""Tests for format conversion."""

import pytest

from subtitle_translator.converter import (
    convert,
    get_available_formats,
    is_conversion_supported,
    parse,
    parse_lrc,
)
from subtitle_translator.errors import ConversionUnsupportedError
from subtitle_translator.models import SubtitleFormat

SRT = SubtitleFormat.SRT
VTT = SubtitleFormat.VTT
ASS = SubtitleFormat.ASS
LRC = SubtitleFormat.LRC

SRT_CONTENT = """1
00:00:01,000 --> 00:00:02,000
Hello

2
00:00:03,500 --> 00:00:05,000
Two
lines
"""


class TestParse:

    def test_srt(self):
        entries = parse(SRT_CONTENT, SRT)
        assert len(entries) == 2
        assert entries[0].index == 1
        assert entries[0].start_time == "00:00:01,000"
        assert entries[1].text == "Two\nlines"

    def test_srt_crlf(self):
        entries = parse(SRT_CONTENT.replace("\n", "\r\n"), SRT)
        assert entries[1].text == "Two\nlines"

    def test_vtt_skips_header_and_notes(self):
        content = "WEBVTT\n\nNOTE a comment\n\nintro\n00:01.000 --> 00:02.000\nHi\n"
        entries = parse(content, VTT)
        assert len(entries) == 1
        assert entries[0].index is None
        assert entries[0].start_time == "00:01.000"
        assert entries[0].text == "Hi"

    def test_vtt_lowercase_header(self):
        content = "webvtt - Episode 1\n\n00:01.000 --> 00:02.000\nHi\n"
        entries = parse(content, VTT)
        assert [e.text for e in entries] == ["Hi"]

    def test_ass_strips_override_tags(self):
        content = (
            "[Events]\n"
            "Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text\n"
            "Dialogue: 0,0:00:01.00,0:00:02.00,Default,,0,0,0,,{\\i1}Hello{\\i0}\\NWorld\n"
        )
        entries = parse(content, ASS)
        assert entries[0].start_time == "0:00:01.00"
        assert entries[0].text == "Hello\nWorld"

    def test_lrc_repeated_tags_sorted(self):
        entries = parse_lrc(["[00:05.00]B", "[00:01.00][00:10.00]A"])
        assert [(e.start_time, e.text) for e in entries] == [
            ("00:01.00", "A"),
            ("00:05.00", "B"),
            ("00:10.00", "A"),
        ]

    def test_unsupported(self):
        with pytest.raises(ConversionUnsupportedError):
            parse("text", SubtitleFormat.UNRECOGNIZED)


class TestConvert:

    def test_srt_to_vtt(self):
        result = convert("1\n00:00:01,000 --> 00:00:02,000\nHello\n", SRT, VTT)
        assert result == "WEBVTT\n\n00:00:01.000 --> 00:00:02.000\nHello\n"

    def test_srt_to_ass(self):
        result = convert(SRT_CONTENT, SRT, ASS)
        assert result.startswith("[Script Info]")
        assert "Dialogue: 0,0:00:01.00,0:00:02.00,Default,,0,0,0,,Hello" in result
        assert "Dialogue: 0,0:00:03.50,0:00:05.00,Default,,0,0,0,,Two\\Nlines" in result

    def test_srt_to_lrc(self):
        assert convert(SRT_CONTENT, SRT, LRC) == "[00:01.00]Hello\n[00:03.50]Two lines\n"

    def test_lrc_to_srt(self):
        result = convert("[00:01.00]Hello\n[00:03.50]World\n", LRC, SRT)
        assert result == (
            "1\n00:00:01,000 --> 00:00:01,000\nHello\n\n"
            "2\n00:00:03,500 --> 00:00:03,500\nWorld\n"
        )

    def test_vtt_to_srt_numbers_cues(self):
        result = convert("WEBVTT\n\n00:01.000 --> 00:02.000\nHi\n", VTT, SRT)
        assert result == "1\n00:00:01,000 --> 00:00:02,000\nHi\n"

    def test_same_format_is_identity(self):
        assert convert(SRT_CONTENT, SRT, SRT) == SRT_CONTENT

    def test_unsupported(self):
        with pytest.raises(ConversionUnsupportedError):
            convert("text", SubtitleFormat.UNRECOGNIZED, SRT)


class TestFormats:

    def test_available_formats(self):
        values = [f["value"] for f in get_available_formats()]
        assert values == ["srt", "vtt", "ass", "lrc"]

    def test_is_conversion_supported(self):
        assert is_conversion_supported(SRT, LRC)
        assert not is_conversion_supported(SRT, SubtitleFormat.UNRECOGNIZED)
