"""Tests for formatting helpers and the dashboard's data shaping."""

from datetime import date

import pytest

from backend.utils import c_to_f, export_filename, format_reading_time, format_uptime, time_ago
from frontend.utils import format_value, history_to_frame, manual_fields, manual_reading_data, reading_options


class TestFormatting:

    def test_c_to_f(self):
        assert c_to_f("22.5") == "72.5"
        assert c_to_f("") == ""

    @pytest.mark.parametrize("seconds, expected", [
        ("7384", "2h 3m"),
        ("59", "0m"),
        ("600.9", "10m"),
        ("abc", ""),
    ])
    def test_format_uptime(self, seconds, expected):
        assert format_uptime(seconds) == expected

    @pytest.mark.parametrize("elapsed_ms, expected", [
        (10_000, "just now"),
        (5 * 60_000, "5m ago"),
        (125 * 60_000, "2h 5m ago"),
        (50 * 3_600_000, "2d ago"),
    ])
    def test_time_ago(self, elapsed_ms, expected):
        now = 1_700_000_000_000
        assert time_ago(now - elapsed_ms, now=now) == expected

    def test_reading_time_is_derived_from_timestamp(self):
        assert format_reading_time(0, "UTC") == ("00:00:00", "1970-01-01")
        assert format_reading_time(0, "Europe/Warsaw") == ("01:00:00", "1970-01-01")

    def test_export_filename(self):
        assert export_filename(date(2024, 3, 9)) == "air-quality-2024-03-09.json"


class TestDashboardData:

    def test_history_to_frame(self, history):
        readings = [r.model_dump(mode="json") for r in history]
        readings[1]["data"]["pm25"] = ""
        df = history_to_frame(list(reversed(readings)))
        assert list(df["id"]) == [r.id for r in history]
        assert list(df["co2"]) == [600.0, 900.0, 1200.0]
        assert df["pm25"].isna().sum() == 1
        assert str(df["timestamp"].dt.tz) == "UTC"

    def test_empty_history(self):
        assert history_to_frame([]).empty

    def test_reading_options_newest_first(self, history):
        readings = [r.model_dump(mode="json") for r in history]
        options = reading_options(readings)
        assert list(options.values()) == [r.id for r in reversed(history)]
        assert all("Office" in label for label in options)

    def test_format_value(self):
        assert format_value("") == "—"
        assert format_value("812", 0) == "812"
        assert format_value("Normal") == "Normal"

    def test_manual_fields_in_entry_order(self):
        fields = manual_fields()
        assert [key for key, _ in fields][:3] == ["pm25", "pm10", "co2"]
        assert ("voc", "VOC index") in fields
        assert ("co2", "CO₂ (ppm)") in fields
        assert len(fields) == 12

    def test_manual_reading_data_keeps_numeric_entries(self):
        data = manual_reading_data({"co2": " 640 ", "pm25": "", "humidity": "n/a", "rssi": "-58", "bogus": "1"})
        assert data == {"co2": "640", "rssi": "-58"}
