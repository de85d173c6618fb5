"""
Unit tests for duration formatting, timestamp parsing and caption parsing.
"""
import pytest

from services.processing.transcriber import (
    DEFAULT_ITEM_DURATION_MS,
    normalize_items,
    parse_srt_captions,
    parse_timedtext_xml,
)
from services.processing.utils import (
    clean_caption_text,
    format_duration,
    format_timestamp,
    parse_timestamp,
)


class TestFormatDuration:
    """Test M:SS / H:MM:SS rendering."""

    @pytest.mark.parametrize("seconds,expected", [
        (0, "0:00"),
        (5, "0:05"),
        (65, "1:05"),
        (599, "9:59"),
        (3599, "59:59"),
        (3600, "1:00:00"),
        (3725, "1:02:05"),
        (36000, "10:00:00"),
    ])
    def test_format(self, seconds, expected):
        assert format_duration(seconds) == expected

    def test_fractional_seconds_floor(self):
        """Test that fractions are floored."""
        assert format_duration(65.9) == "1:05"

    def test_format_timestamp_takes_milliseconds(self):
        assert format_timestamp(125000) == "2:05"

    def test_parse_inverts_format(self):
        """Test parse_timestamp(format_duration(s)) == s."""
        for seconds in list(range(0, 4000, 7)) + [86399, 90061]:
            assert parse_timestamp(format_duration(seconds)) == seconds


class TestParseTimestamp:
    """Test base-60 parsing."""

    def test_minutes_seconds(self):
        assert parse_timestamp("05:30") == 330

    def test_hours(self):
        assert parse_timestamp("1:02:03") == 3723

    def test_bare_number(self):
        assert parse_timestamp("45") == 45

    @pytest.mark.parametrize("value", ["", "ab:cd", "1:xx", "1.5"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_timestamp(value)


class TestCaptionParsing:
    """Test caption payload parsing."""

    def test_clean_caption_text(self):
        assert clean_caption_text("  hello\nworld \t again  ") == "hello world again"

    def test_normalize_items_drops_empty(self):
        items = normalize_items([("  ", 0, 1000), ("ok\n", 1000, 500), ("", 2000, 10)])

        assert len(items) == 1
        assert items[0].text == "ok"
        assert items[0].offset_ms == 1000

    def test_parse_timedtext_xml(self):
        """Test start/dur conversion and entity decoding."""
        xml = (
            '<?xml version="1.0" encoding="utf-8" ?><transcript>'
            '<text start="0.5" dur="2.25">it&amp;#39;s a\ntest</text>'
            '<text start="3">no duration &amp;amp; more</text>'
            '<text start="4" dur="1">   </text>'
            '</transcript>'
        )

        items = parse_timedtext_xml(xml)

        assert len(items) == 2
        assert items[0].text == "it's a test"
        assert items[0].offset_ms == 500
        assert items[0].duration_ms == 2250
        assert items[1].text == "no duration & more"
        assert items[1].duration_ms == DEFAULT_ITEM_DURATION_MS

    def test_parse_srt(self):
        srt = (
            "1\n00:00:01,000 --> 00:00:04,500\nHello there\n\n"
            "2\n00:01:00,000 --> 00:01:02,000\nSecond\nline\n"
        )

        items = parse_srt_captions(srt)

        assert [i.text for i in items] == ["Hello there", "Second line"]
        assert items[0].offset_ms == 1000
        assert items[0].duration_ms == 3500
        assert items[1].offset_ms == 60000
