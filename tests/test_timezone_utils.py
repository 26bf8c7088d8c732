"""Tests for kickoff parsing and display."""

from datetime import datetime, timezone

import pytest
import pytz

from app.utils.timezone_utils import display_kickoff, get_app_timezone, parse_kickoff


@pytest.fixture(autouse=True)
def paris(app):
    app.config["TIMEZONE"] = "Europe/Paris"


class TestParseKickoff:
    @pytest.mark.parametrize(
        "value, expected",
        [
            # CET, UTC+1
            ("2024-01-15 21:00", datetime(2024, 1, 15, 20, 0, tzinfo=timezone.utc)),
            # CEST, UTC+2
            ("2024-06-15 21:00", datetime(2024, 6, 15, 19, 0, tzinfo=timezone.utc)),
            ("2024-06-15T21:00", datetime(2024, 6, 15, 19, 0, tzinfo=timezone.utc)),
            (" 2024-06-15 21:00 ", datetime(2024, 6, 15, 19, 0, tzinfo=timezone.utc)),
        ],
    )
    def test_local_string_to_utc(self, value, expected):
        assert parse_kickoff(value) == expected

    def test_naive_datetime_is_local(self):
        assert parse_kickoff(datetime(2024, 6, 15, 21, 0)) == datetime(
            2024, 6, 15, 19, 0, tzinfo=timezone.utc
        )

    def test_aware_datetime_is_only_converted(self):
        kickoff = pytz.timezone("America/New_York").localize(datetime(2024, 6, 15, 15, 0))

        result = parse_kickoff(kickoff)

        assert result == datetime(2024, 6, 15, 19, 0, tzinfo=timezone.utc)
        assert result.utcoffset().total_seconds() == 0

    @pytest.mark.parametrize("value", ["tomorrow", "15/06/2024 21:00", "2024-06-15"])
    def test_invalid_string(self, value):
        with pytest.raises(ValueError, match="Invalid kickoff"):
            parse_kickoff(value)


class TestDisplayKickoff:
    def test_naive_value_is_utc(self):
        assert display_kickoff(datetime(2024, 6, 15, 18, 0)) == "Sat 15/06 20:00"

    def test_aware_value(self, now):
        assert display_kickoff(now, "%H:%M") == "20:00"

    def test_missing_kickoff(self):
        assert display_kickoff(None) == "TBD"


def test_unknown_timezone_falls_back_to_utc(app):
    app.config["TIMEZONE"] = "Mars/Olympus_Mons"

    assert get_app_timezone() == pytz.UTC
    assert parse_kickoff("2024-06-15 21:00") == datetime(
        2024, 6, 15, 21, 0, tzinfo=timezone.utc
    )
    assert display_kickoff(datetime(2024, 6, 15, 21, 0), "%H:%M") == "21:00"
