"""Tests for tier classification.

Run:
    pytest tests/test_classifier.py -v
"""

import pytest

from backend.classifier import classify, classify_all, is_higher_worse, parse_number
from backend.thresholds import THRESHOLDS, Metric


# =============================================================================
# parse_number
# =============================================================================

class TestParseNumber:

    @pytest.mark.parametrize("raw, expected", [
        ("415", 415.0),
        ("-61", -61.0),
        ("22.7", 22.7),
        (".5", 0.5),
        ("21.5 °C", 21.5),
        ("  8 ", 8.0),
        ("1e3", 1000.0),
    ])
    def test_numeric_prefix(self, raw, expected):
        assert parse_number(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", [None, "", "abc", ".", "-", "NaN", "Infinity", "°C 21"])
    def test_not_a_number(self, raw):
        assert parse_number(raw) is None


# =============================================================================
# classify
# =============================================================================

class TestClassify:

    def test_co2_boundaries(self):
        assert classify("co2", "600").tier.label == "Excellent"
        assert classify("co2", "601").tier.label == "Good"
        assert classify("co2", "5000").tier.label == "Dangerous"

    def test_upper_bound_is_inclusive(self):
        result = classify(Metric.PM25, "12")
        assert result.tier.label == "Good"
        assert result.rank == 0
        assert classify(Metric.PM25, "12.1").tier.label == "Moderate"

    def test_value_above_every_bound_falls_into_last_tier(self):
        result = classify("humidity", "140")
        assert result.tier.label == "Too Humid"
        assert result.rank == len(THRESHOLDS["humidity"]) - 1

    def test_negative_values_take_first_tier(self):
        assert classify("temperature", "-5").tier.label == "Cold"

    def test_result_carries_value_and_metric(self):
        result = classify(Metric.VOC, "180")
        assert result.metric == "voc"
        assert result.value == 180.0
        assert result.tier.label == "Abnormal"
        assert result.tier.advice == "Elevated VOCs. Ventilate."

    @pytest.mark.parametrize("metric, raw", [
        ("co2", ""),
        ("co2", None),
        ("co2", "n/a"),
        ("rssi", "-60"),
        ("unknown", "10"),
    ])
    def test_absent_results(self, metric, raw):
        assert classify(metric, raw) is None

    def test_zero_is_observed(self):
        assert classify("pm25", "0").tier.label == "Good"

    def test_tiers_are_sorted(self):
        for tiers in THRESHOLDS.values():
            bounds = [t.max for t in tiers]
            assert bounds == sorted(bounds)


class TestClassifyAll:

    def test_only_metrics_with_tiers(self):
        results = classify_all({"co2": "900", "rssi": "-50", "pm25": "", "vocQuality": "Normal"})
        assert list(results) == ["co2"]
        assert results["co2"].tier.label == "Acceptable"


class TestPolarity:

    @pytest.mark.parametrize("metric", ["pm25", "pm10", "co2", "voc", Metric.CO2])
    def test_higher_is_worse(self, metric):
        assert is_higher_worse(metric)

    @pytest.mark.parametrize("metric", ["humidity", "temperature"])
    def test_lower_is_worse(self, metric):
        assert not is_higher_worse(metric)

    def test_custom_polarity(self):
        assert is_higher_worse("humidity", frozenset({"humidity"}))
