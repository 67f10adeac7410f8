# file: backend/parser.py

import logging
import re
from typing import Dict, List, NamedTuple, Optional, Pattern

from backend.thresholds import Metric


class SensorPattern(NamedTuple):
    matcher: Pattern
    metric: Metric
    extractor: Pattern


# Tried in order against each trimmed line. The first matcher that fires
# owns the line, even if its extractor then finds nothing.
SENSOR_PATTERNS: List[SensorPattern] = [
    SensorPattern(re.compile(r"^CO2[\t\s]"), Metric.CO2, re.compile(r"[\t\s](-?[\d.]+)\s*ppm")),
    SensorPattern(re.compile(r"^DPS310 Pressure[\t\s]"), Metric.PRESSURE, re.compile(r"[\t\s](-?[\d.]+)\s*hPa")),
    SensorPattern(re.compile(r"^PM\s*<\s*10.*[Ww]eight"), Metric.PM10, re.compile(r"[\t\s](-?[\d.]+)\s*µg")),
    SensorPattern(
        re.compile(r"^PM\s*<\s*1\s*µ?m\s*[Ww]eight|^PM\s*<\s*1µm\s*[Ww]eight"),
        Metric.PM1,
        re.compile(r"[\t\s](-?[\d.]+)\s*µg"),
    ),
    SensorPattern(re.compile(r"^PM\s*<\s*2[.\s]*5.*[Ww]eight"), Metric.PM25, re.compile(r"[\t\s](-?[\d.]+)\s*µg")),
    SensorPattern(re.compile(r"^PM\s*<\s*4.*[Ww]eight"), Metric.PM4, re.compile(r"[\t\s](-?[\d.]+)\s*µg")),
    SensorPattern(re.compile(r"^RSSI[\t\s]"), Metric.RSSI, re.compile(r"[\t\s](-?[\d.]+)\s*dBm")),
    SensorPattern(re.compile(r"^SEN55 Humidity[\t\s]"), Metric.HUMIDITY, re.compile(r"Humidity[\t\s]+(-?[\d.]+)\s*%")),
    SensorPattern(re.compile(r"^SEN55 NOX[\t\s]"), Metric.NOX, re.compile(r"NOX[\t\s]+(-?[\d.]+)")),
    SensorPattern(
        re.compile(r"^SEN55 Temperature[\t\s]"),
        Metric.TEMPERATURE,
        re.compile(r"Temperature[\t\s]+(-?[\d.]+)\s*°C"),
    ),
    SensorPattern(re.compile(r"^SEN55 VOC[\t\s]"), Metric.VOC, re.compile(r"VOC[\t\s]+(-?[\d.]+)")),
    SensorPattern(re.compile(r"^Uptime[\t\s]"), Metric.UPTIME, re.compile(r"[\t\s](-?[\d.]+)\s*s")),
    SensorPattern(re.compile(r"^VOC Quality[\t\s]"), Metric.VOC_QUALITY, re.compile(r"Quality[\t\s]+(.+)")),
]


def parse_line(line: str, patterns: List[SensorPattern] = SENSOR_PATTERNS) -> Optional[SensorPattern]:
    """Return the pattern that owns a trimmed line, if any."""
    for pattern in patterns:
        if pattern.matcher.search(line):
            return pattern
    return None


def parse_report(text: Optional[str], patterns: List[SensorPattern] = SENSOR_PATTERNS) -> Optional[Dict[str, str]]:
    """Extract metric values from a sensor web console dump.

    Returns a mapping of metric key -> raw value string holding only the
    metrics that were extracted, or None when nothing was recognized.
    """
    if not text:
        return None

    result: Dict[str, str] = {}
    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed:
            continue
        pattern = parse_line(trimmed, patterns)
        if pattern is None:
            continue
        match = pattern.extractor.search(trimmed)
        if match:
            result[pattern.metric.value] = match.group(1).strip()
        else:
            logging.debug(f"Recognized {pattern.metric.value} line without a value: {trimmed!r}")

    if not result:
        logging.info("No sensor values recognized in report")
        return None
    return result
