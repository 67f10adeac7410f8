"""Tests for the sensor console parser.

Run:
    pytest tests/test_parser.py -v
"""

import re

import pytest

from backend.parser import SENSOR_PATTERNS, SensorPattern, parse_line, parse_report
from backend.thresholds import Metric


class TestParseReport:

    def test_full_console_dump(self, sample_report):
        data = parse_report(sample_report)
        assert data == {
            "co2": "812",
            "pressure": "1013.2",
            "pm_1um": "3.1",
            "pm25": "8.4",
            "pm_4um": "9.9",
            "pm10": "10.6",
            "rssi": "-61",
            "humidity": "44.2",
            "nox": "1",
            "temperature": "22.7",
            "voc": "101",
            "uptime": "7384",
            "vocQuality": "Normal",
        }

    def test_co2_line_with_sensor_suffix(self):
        assert parse_report("CO2 Sensor  415 ppm") == {"co2": "415"}

    def test_unrecognized_lines_are_ignored(self):
        text = "Garbage line 12 ppm\nCO2\t500 ppm\nsomething else"
        assert parse_report(text) == {"co2": "500"}

    def test_line_order_does_not_matter(self):
        lines = ["SEN55 VOC\t120", "CO2\t700 ppm", "SEN55 Humidity\t40 %"]
        assert parse_report("\n".join(lines)) == parse_report("\n".join(reversed(lines)))

    def test_leading_whitespace_is_trimmed(self):
        assert parse_report("    RSSI\t-70 dBm   ") == {"rssi": "-70"}

    def test_windows_line_endings(self):
        assert parse_report("CO2\t640 ppm\r\nUptime\t90 s\r\n") == {"co2": "640", "uptime": "90"}

    @pytest.mark.parametrize("text", [None, "", "   \n\n", "hello world", "co2 500 ppm"])
    def test_nothing_recognized(self, text):
        assert parse_report(text) is None

    def test_prefixes_are_case_sensitive(self):
        assert parse_report("sen55 voc\t120") is None

    def test_recognized_line_without_value_is_skipped(self):
        # The CO2 rule owns the line even though no "ppm" value follows
        assert parse_report("CO2\tunavailable") is None
        assert parse_report("CO2\tunavailable\nSEN55 NOX\t2") == {"nox": "2"}

    def test_result_is_never_padded(self):
        data = parse_report("SEN55 Temperature\t21.0 °C")
        assert data == {"temperature": "21.0"}
        assert "co2" not in data

    def test_pm_sizes_are_distinguished(self):
        text = "\n".join([
            "PM <10µm Weight concentration\t20 µg/m³",
            "PM <1µm Weight concentration\t5 µg/m³",
            "PM <2.5µm Weight concentration\t12 µg/m³",
            "PM <4µm Weight concentration\t15 µg/m³",
        ])
        assert parse_report(text) == {"pm10": "20", "pm_1um": "5", "pm25": "12", "pm_4um": "15"}

    def test_voc_quality_keeps_free_text(self):
        assert parse_report("VOC Quality\tVery Abnormal  ") == {"vocQuality": "Very Abnormal"}

    def test_later_line_overwrites_earlier_value(self):
        assert parse_report("CO2\t500 ppm\nCO2\t550 ppm") == {"co2": "550"}


class TestPatternOrder:

    def test_first_matcher_wins_even_without_extraction(self):
        patterns = [
            SensorPattern(re.compile(r"^CO2[\t\s]"), Metric.CO2, re.compile(r"(\d+)\s*ppm")),
            SensorPattern(re.compile(r"^CO2"), Metric.NOX, re.compile(r"(\d+)")),
        ]
        # The second rule would extract "5", but the first owns the line
        assert parse_report("CO2 5", patterns) is None

    def test_parse_line_returns_owner(self):
        assert parse_line("PM <10µm Weight concentration\t20 µg/m³").metric is Metric.PM10
        assert parse_line("nothing here") is None

    def test_pattern_order_is_fixed(self):
        assert [p.metric for p in SENSOR_PATTERNS] == [
            Metric.CO2, Metric.PRESSURE, Metric.PM10, Metric.PM1, Metric.PM25, Metric.PM4, Metric.RSSI,
            Metric.HUMIDITY, Metric.NOX, Metric.TEMPERATURE, Metric.VOC, Metric.UPTIME, Metric.VOC_QUALITY,
        ]
