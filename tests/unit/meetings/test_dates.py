"""Date helper tests"""

from datetime import datetime

import pytest

from backend.app.decision_layer.meetings import (
    format_date,
    last_month_range,
    last_week_range,
    parse_date_reference,
)


class TestParseDateReference:
    """Month-first date parsing"""

    @pytest.mark.parametrize("text,expected", [
        ("Aug 7", datetime(2025, 8, 7)),
        ("August 7, 2025", datetime(2025, 8, 7)),
        ("sept 3 2024", datetime(2024, 9, 3)),
        ("8/7", datetime(2025, 8, 7)),
        ("8/7/25", datetime(2025, 8, 7)),
        ("8-7-2024", datetime(2024, 8, 7)),
    ])
    def test_valid_dates(self, text, expected, now):
        """Supported forms parse; missing years use the current year"""
        assert parse_date_reference(text, now) == expected

    @pytest.mark.parametrize("text", ["Foo 7", "13/40", "Feb 30", "yesterday"])
    def test_invalid_dates(self, text, now):
        """Unknown months and impossible dates give None"""
        assert parse_date_reference(text, now) is None


class TestRanges:
    """Relative ranges and display format"""

    def test_last_week_starts_at_midnight(self, now):
        """Last week starts at midnight seven days ago and ends now"""
        start, end = last_week_range(now)
        assert start == datetime(2025, 8, 13)
        assert end == now

    def test_last_month_is_thirty_days(self, now):
        """Last month covers thirty days"""
        start, _ = last_month_range(now)
        assert start == datetime(2025, 7, 21)

    def test_format_date(self):
        """Dates display as "Aug 7, 2025" """
        assert format_date(datetime(2025, 8, 7, 15, 30)) == "Aug 7, 2025"
