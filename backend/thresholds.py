# file: backend/thresholds.py

from enum import Enum
from typing import Dict, FrozenSet, List

from backend.models import ThresholdTier


class Metric(str, Enum):
    CO2 = "co2"
    PM25 = "pm25"
    PM10 = "pm10"
    PM1 = "pm_1um"
    PM4 = "pm_4um"
    HUMIDITY = "humidity"
    TEMPERATURE = "temperature"
    VOC = "voc"
    VOC_QUALITY = "vocQuality"
    NOX = "nox"
    PRESSURE = "pressure"
    RSSI = "rssi"
    UPTIME = "uptime"


UNITS: Dict[Metric, str] = {
    Metric.CO2: "ppm",
    Metric.PM25: "µg/m³",
    Metric.PM10: "µg/m³",
    Metric.PM1: "µg/m³",
    Metric.PM4: "µg/m³",
    Metric.HUMIDITY: "%",
    Metric.TEMPERATURE: "°C",
    Metric.VOC: "index",
    Metric.VOC_QUALITY: "",
    Metric.NOX: "index",
    Metric.PRESSURE: "hPa",
    Metric.RSSI: "dBm",
    Metric.UPTIME: "s",
}

LABELS: Dict[Metric, str] = {
    Metric.PM25: "PM2.5",
    Metric.PM10: "PM10",
    Metric.CO2: "CO₂",
    Metric.VOC: "VOC index",
    Metric.HUMIDITY: "Humidity",
    Metric.TEMPERATURE: "Temperature",
    Metric.PM1: "PM <1µm",
    Metric.PM4: "PM <4µm",
    Metric.PRESSURE: "Pressure",
    Metric.NOX: "NOx index",
    Metric.RSSI: "RSSI",
    Metric.UPTIME: "Uptime",
    Metric.VOC_QUALITY: "VOC quality",
}


def _tier(max_value: float, label: str, color: str, advice: str = None) -> ThresholdTier:
    return ThresholdTier(max=max_value, label=label, color=color, advice=advice)


# Tiers are ascending by bound; the last one catches everything above it.
THRESHOLDS: Dict[str, List[ThresholdTier]] = {
    Metric.PM25.value: [
        _tier(12, "Good", "#22c55e", "Air quality is great."),
        _tier(35.4, "Moderate", "#eab308", "Acceptable. Sensitive individuals limit exposure."),
        _tier(55.4, "Unhealthy (Sensitive)", "#f97316", "Sensitive groups reduce exertion."),
        _tier(150.4, "Unhealthy", "#ef4444", "Ventilate or run HEPA filter."),
        _tier(250.4, "Very Unhealthy", "#a855f7", "Health alert. Ventilate immediately."),
        _tier(9999, "Hazardous", "#991b1b", "Emergency. Purifier on max."),
    ],
    Metric.PM10.value: [
        _tier(54, "Good", "#22c55e"),
        _tier(154, "Moderate", "#eab308"),
        _tier(254, "Unhealthy (Sensitive)", "#f97316"),
        _tier(354, "Unhealthy", "#ef4444"),
        _tier(424, "Very Unhealthy", "#a855f7"),
        _tier(9999, "Hazardous", "#991b1b"),
    ],
    Metric.CO2.value: [
        _tier(600, "Excellent", "#22c55e", "Well-ventilated."),
        _tier(800, "Good", "#86efac", "Normal occupied room."),
        _tier(1000, "Acceptable", "#eab308", "Getting stuffy. Open a window."),
        _tier(1500, "Poor", "#f97316", "Drowsiness & reduced focus likely."),
        _tier(2000, "Bad", "#ef4444", "Open windows now."),
        _tier(9999, "Dangerous", "#991b1b", "Ventilate immediately."),
    ],
    Metric.HUMIDITY.value: [
        _tier(24.9, "Too Dry", "#f97316", "Consider a humidifier."),
        _tier(30, "Dry", "#eab308", "Slightly dry."),
        _tier(50, "Comfortable", "#22c55e", "Ideal range."),
        _tier(60, "Humid", "#eab308", "Watch for condensation."),
        _tier(100, "Too Humid", "#f97316", "Mold risk."),
    ],
    Metric.VOC.value: [
        _tier(79, "Improved", "#38bdf8", "Cleaner than baseline."),
        _tier(149, "Normal", "#22c55e", "Typical for this environment."),
        _tier(249, "Abnormal", "#f97316", "Elevated VOCs. Ventilate."),
        _tier(399, "Very Abnormal", "#ef4444", "High VOCs. Open windows."),
        _tier(9999, "Extremely Abnormal", "#991b1b", "Ventilate immediately."),
    ],
    Metric.TEMPERATURE.value: [
        _tier(15, "Cold", "#38bdf8"),
        _tier(18, "Cool", "#67e8f9"),
        _tier(24, "Comfortable", "#22c55e"),
        _tier(27, "Warm", "#eab308"),
        _tier(99, "Hot", "#ef4444"),
    ],
}

# Polarity used when judging whether a change is for the worse.
HIGHER_IS_WORSE: FrozenSet[str] = frozenset(
    m.value for m in (Metric.PM25, Metric.PM10, Metric.CO2, Metric.VOC)
)

# Metrics whose tier rank feeds the overall verdict.
SEVERITY_METRICS = (Metric.PM25, Metric.CO2, Metric.VOC, Metric.HUMIDITY)

VOC_QUALITY_COLORS: Dict[str, str] = {
    "Normal": "#22c55e",
    "Improved": "#38bdf8",
    "Abnormal": "#f97316",
    "Very Abnormal": "#ef4444",
    "Unknown": "#64748b",
}

VOC_QUALITY_HINTS: Dict[str, str] = {
    "Unknown": "sensor initializing",
    "Abnormal": "needs more runtime to baseline",
    "Very Abnormal": "sensor unreliable, needs 24+ hrs",
    "Improved": "air cleaner than baseline",
}

# WHO 24-hr guideline limits, µg/m³
WHO_LIMITS: Dict[Metric, float] = {
    Metric.PM25: 15,
    Metric.PM10: 45,
}

# Order of fields offered for manual entry
MANUAL_FIELDS: List[Metric] = [
    Metric.PM25,
    Metric.PM10,
    Metric.CO2,
    Metric.VOC,
    Metric.HUMIDITY,
    Metric.TEMPERATURE,
    Metric.PM1,
    Metric.PM4,
    Metric.PRESSURE,
    Metric.NOX,
    Metric.RSSI,
    Metric.UPTIME,
]


def metric_key(metric) -> str:
    """Wire key for a Metric member or a plain string key."""
    return metric.value if isinstance(metric, Metric) else str(metric)
