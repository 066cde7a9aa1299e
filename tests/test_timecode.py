"""Tests for time-code conversion."""

import pytest

from subtitle_translator.models import SubtitleFormat
from subtitle_translator.timecode import convert_time_to_ass, format_time, normalize, parse_time

SRT = SubtitleFormat.SRT
VTT = SubtitleFormat.VTT
ASS = SubtitleFormat.ASS
LRC = SubtitleFormat.LRC


class TestParseTime:

    def test_srt(self):
        assert parse_time("01:02:03,456", SRT) == 3_723_456

    def test_vtt_without_hours(self):
        assert parse_time("00:01.500", VTT) == 1500

    def test_fraction_is_decimal(self):
        assert parse_time("00:00:01,5", SRT) == 1500
        assert parse_time("0:00:01.50", ASS) == 1500
        assert parse_time("00:01.5", LRC) == 1500

    def test_lrc_without_fraction(self):
        assert parse_time("02:03", LRC) == 123_000

    def test_malformed(self):
        assert parse_time("abc", SRT) is None
        assert parse_time("00:00:01", SRT) is None
        assert parse_time("00:00:01,000", SubtitleFormat.UNRECOGNIZED) is None


class TestFormatTime:

    def test_each_format(self):
        ms = 3_723_456
        assert format_time(ms, SRT) == "01:02:03,456"
        assert format_time(ms, VTT) == "01:02:03.456"
        assert format_time(ms, ASS) == "1:02:03.45"
        assert format_time(ms, LRC) == "62:03.45"

    def test_unsupported(self):
        with pytest.raises(ValueError):
            format_time(0, SubtitleFormat.UNRECOGNIZED)


class TestNormalize:

    def test_srt_to_ass_truncates(self):
        assert normalize("00:00:01,999", SRT, ASS) == "0:00:01.99"

    def test_ass_to_srt(self):
        assert normalize("0:00:01.50", ASS, SRT) == "00:00:01,500"

    def test_lrc_to_vtt(self):
        assert normalize("01:23.45", LRC, VTT) == "00:01:23.450"

    def test_hours_fold_into_lrc_minutes(self):
        assert normalize("01:30:00,000", SRT, LRC) == "90:00.00"

    def test_malformed_returned_unchanged(self):
        assert normalize("not a time", SRT, ASS) == "not a time"
        assert normalize("1:2:3", ASS, SRT) == "1:2:3"

    def test_convert_time_to_ass(self):
        assert convert_time_to_ass("00:00:01,000") == "0:00:01.00"
        assert convert_time_to_ass("00:00:01.000") == "0:00:01.00"
