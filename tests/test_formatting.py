# ==============================================
# Tests for Formatting Helpers
# ==============================================

import pytest

from conftest import make_record
from es2ch.formatting import format_duration, format_sample_row, sample_table_header, sample_table_separator


class TestFormatDuration:
    @pytest.mark.parametrize("seconds,expected", [
        (0, "00:00:00:000"),
        (0.0015, "00:00:00:002"),
        (123.456, "00:02:03:456"),
        (3600, "01:00:00:000"),
        (3 * 3600 + 25 * 60 + 7.25, "03:25:07:250"),
    ])
    def test_formats(self, seconds, expected):
        assert format_duration(seconds) == expected

    @pytest.mark.parametrize("value", [-1, None, "12", True])
    def test_invalid_input_renders_zero(self, value):
        assert format_duration(value) == "00:00:00:000"


class TestSampleTable:
    def test_rows_line_up_with_header(self):
        row = format_sample_row(make_record("A"))
        assert len(row) == len(sample_table_header()) == len(sample_table_separator())

    def test_row_contents(self):
        row = format_sample_row(make_record("A", age=36, followers_count=1815))
        cells = [cell.strip() for cell in row.strip("|").split("|")]
        assert cells == ["A", "Ada", "Lovelace", "36", "1815"]

    def test_missing_record(self):
        assert format_sample_row(None).count("N/A") == 5
