"""Tests for format detection."""

from subtitle_translator.converter import render
from subtitle_translator.detector import detect, split_time_range
from subtitle_translator.models import RawDocument, SubtitleEntry, SubtitleFormat


def lines_of(text):
    return RawDocument.from_text(text).lines


class TestDetect:

    def test_srt(self):
        content = "1\n00:00:01,000 --> 00:00:02,000\nHello\n"
        assert detect(lines_of(content)) == SubtitleFormat.SRT

    def test_vtt_header(self):
        content = "WEBVTT\n\n00:00:01.000 --> 00:00:02.000\nHello\n"
        assert detect(lines_of(content)) == SubtitleFormat.VTT

    def test_vtt_without_header(self):
        content = "00:01.000 --> 00:02.000\nHello\n\n00:03.000 --> 00:04.000\nWorld\n"
        assert detect(lines_of(content)) == SubtitleFormat.VTT

    def test_ass_script_info(self):
        content = "\n[Script Info]\nTitle: test\n"
        assert detect(lines_of(content)) == SubtitleFormat.ASS

    def test_ass_dialogue_only(self):
        content = "Dialogue: 0,0:00:01.00,0:00:02.00,Default,,0,0,0,,Hello\n"
        assert detect(lines_of(content)) == SubtitleFormat.ASS

    def test_lrc(self):
        assert detect(["[00:01.00]La la la"]) == SubtitleFormat.LRC

    def test_lrc_metadata_counts(self):
        content = "[ar:Artist]\n[ti:Title]\n[00:01.00]La la la\n"
        assert detect(lines_of(content)) == SubtitleFormat.LRC

    def test_unrecognized(self):
        assert detect(["just some text", "and more"]) == SubtitleFormat.UNRECOGNIZED
        assert detect([]) == SubtitleFormat.UNRECOGNIZED

    def test_only_first_fifty_lines_scanned(self):
        prose = [f"line {i}" for i in range(60)]
        cue = ["1", "00:00:01,000 --> 00:00:02,000", "Hello"]
        assert detect(prose + cue) == SubtitleFormat.UNRECOGNIZED

    def test_blank_lines_do_not_count_towards_window(self):
        blanks = [""] * 100
        cue = ["1", "00:00:01,000 --> 00:00:02,000", "Hello"]
        assert detect(blanks + cue) == SubtitleFormat.SRT

    def test_rendered_output_detects_as_its_format(self):
        entries = [
            SubtitleEntry("00:00:01,000", "00:00:02,000", "Hello", index=1),
            SubtitleEntry("00:00:03,000", "00:00:04,500", "World", index=2),
        ]
        for fmt in SubtitleFormat.supported():
            text = render(entries, fmt, SubtitleFormat.SRT)
            assert detect(lines_of(text)) == fmt


class TestSplitTimeRange:

    def test_with_cue_settings(self):
        line = "00:00:01.000 --> 00:00:02.000 align:start position:10%"
        assert split_time_range(line) == ("00:00:01.000", "00:00:02.000")

    def test_not_a_time_range(self):
        assert split_time_range("Hello --> World") is None
