# file: backend/analysis.py

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, FrozenSet, List, Mapping, Optional

from backend.classifier import classify, classify_all, parse_number
from backend.models import (
    Assessment,
    Delta,
    GuidelineRatio,
    ParticleBreakdown,
    ParticleSegment,
    Reading,
    ReadingAnalysis,
    SignalInfo,
    Tip,
    Verdict,
    VocQualityInfo,
)
from backend.thresholds import (
    HIGHER_IS_WORSE,
    LABELS,
    SEVERITY_METRICS,
    UNITS,
    VOC_QUALITY_COLORS,
    VOC_QUALITY_HINTS,
    WHO_LIMITS,
    Metric,
    metric_key,
)

NOISE_FLOOR_PERCENT = 0.5

VERDICTS: List[Verdict] = [
    Verdict(label="All Clear", color="#22c55e", icon="✓", message="Air quality looks great."),
    Verdict(label="Fair", color="#eab308", icon="~", message="Mostly fine, minor concerns."),
    Verdict(label="Caution", color="#f97316", icon="!", message="Some metrics need attention."),
    Verdict(label="Poor", color="#ef4444", icon="✕", message="Significant issues detected."),
    Verdict(label="Hazardous", color="#991b1b", icon="☠", message="Dangerous air quality."),
]


def compute_delta(current: Optional[str], previous: Optional[str], metric: str,
                  higher_is_worse: FrozenSet[str] = HIGHER_IS_WORSE) -> Optional[Delta]:
    """Percent change of current against previous.

    None when either side is missing or non-numeric, when previous is zero,
    or when the change is below the noise floor.
    """
    if not current or not previous:
        return None
    c, p = parse_number(current), parse_number(previous)
    if c is None or p is None or p == 0:
        return None
    pct = (c - p) / abs(p) * 100
    if abs(pct) < NOISE_FLOOR_PERCENT:
        return None
    increased = pct > 0
    worse_when_up = metric_key(metric) in higher_is_worse
    return Delta(
        percent_change=pct,
        absolute_diff=c - p,
        previous=p,
        increased=increased,
        is_worse=increased if worse_when_up else not increased,
    )


def compare_readings(current: Mapping[str, str], baseline: Mapping[str, str],
                     higher_is_worse: FrozenSet[str] = HIGHER_IS_WORSE) -> Dict[str, Delta]:
    deltas = {}
    for metric, value in current.items():
        delta = compute_delta(value, baseline.get(metric), metric, higher_is_worse)
        if delta is not None:
            deltas[metric] = delta
    return deltas


def aggregate_severity(data: Mapping[str, str]) -> int:
    """Worst tier rank across the verdict metrics present in a reading."""
    worst = 0
    for metric in SEVERITY_METRICS:
        result = classify(metric, data.get(metric.value))
        if result is not None:
            worst = max(worst, result.rank)
    return min(worst, len(VERDICTS) - 1)


def verdict_for(severity: int) -> Verdict:
    return VERDICTS[max(0, min(severity, len(VERDICTS) - 1))]


def advisory_tips(data: Mapping[str, str]) -> List[Tip]:
    tips: List[Tip] = []
    pm = parse_number(data.get(Metric.PM25.value))
    co = parse_number(data.get(Metric.CO2.value))
    hu = parse_number(data.get(Metric.HUMIDITY.value))
    vo = parse_number(data.get(Metric.VOC.value))
    voc_quality = data.get(Metric.VOC_QUALITY.value, "")

    if pm is not None:
        if pm > 150:
            tips.append(Tip(icon="🔴", text="PM2.5 is Unhealthy+. Run HEPA filter and ventilate."))
        elif pm > 55:
            tips.append(Tip(icon="🟠", text="PM2.5 elevated. Open a window or run air purifier."))
        elif pm > 35:
            tips.append(Tip(icon="🟡", text="PM2.5 moderate. Sensitive individuals take note."))
        elif pm <= 12:
            tips.append(Tip(icon="🟢", text="PM2.5 is within healthy range."))
        limit = WHO_LIMITS[Metric.PM25]
        if pm > limit:
            tips.append(Tip(text=f"→ {pm / limit:.1f}× WHO 24-hr guideline (15 µg/m³)", indent=True))
    if co is not None:
        if co < 350:
            tips.append(Tip(icon="⚠️", text="CO2 below outdoor ambient (~420ppm). Sensor may need calibration."))
        elif co > 1500:
            tips.append(Tip(icon="🔴", text="CO2 very high. Ventilate urgently."))
        elif co > 1000:
            tips.append(Tip(icon="🟠", text="CO2 elevated. Getting stuffy."))
    if hu is not None:
        if hu < 25:
            tips.append(Tip(icon="🟠", text="Humidity very low. Humidifier recommended."))
        elif hu > 60:
            tips.append(Tip(icon="🟠", text="Humidity high. Watch for mold."))
    if vo is not None and vo >= 150:
        tips.append(Tip(icon="🟠", text="VOC index abnormal. Ventilate."))
    if voc_quality in ("Abnormal", "Very Abnormal"):
        tips.append(Tip(icon="⚠️", text=f"VOC sensor {voc_quality}. May need 24+ hrs to baseline."))

    if not tips:
        tips.append(Tip(icon="🟢", text="Everything looks good."))
    return tips


def assess(data: Mapping[str, str]) -> Assessment:
    severity = aggregate_severity(data)
    return Assessment(severity=severity, verdict=verdict_for(severity), tips=advisory_tips(data))


def _whole_percent(part: float, whole: float) -> int:
    """Share of whole as an integer percent, halves rounded up."""
    return int(Decimal(part / whole * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def particle_breakdown(data: Mapping[str, str]) -> Optional[ParticleBreakdown]:
    """Split PM10 mass into ultrafine, fine and coarse shares."""
    pm1 = parse_number(data.get(Metric.PM1.value)) or 0.0
    pm25 = parse_number(data.get(Metric.PM25.value)) or 0.0
    pm10 = parse_number(data.get(Metric.PM10.value)) or 0.0
    if pm10 == 0:
        return None

    ultrafine = pm1
    fine = max(pm25 - pm1, 0.0)
    coarse = max(pm10 - pm25, 0.0)
    uf_pct = _whole_percent(ultrafine, pm10)
    f_pct = _whole_percent(fine, pm10)
    c_pct = _whole_percent(coarse, pm10)

    signature = "Mixed sources"
    if uf_pct > 65:
        signature = "Combustion dominant (smoke, fire, candles)"
    elif c_pct > 40:
        signature = "Dust / mechanical (pets, HVAC, construction)"
    elif f_pct > 35:
        signature = "Cooking / mixed combustion"

    return ParticleBreakdown(
        segments=[
            ParticleSegment(label="<1µm", value=ultrafine, percent=uf_pct, color="#ef4444"),
            ParticleSegment(label="1–2.5µm", value=fine, percent=f_pct, color="#f97316"),
            ParticleSegment(label=">2.5µm", value=coarse, percent=c_pct, color="#eab308"),
        ],
        signature=signature,
    )


def guideline_ratios(data: Mapping[str, str]) -> List[GuidelineRatio]:
    ratios = []
    for metric, limit in WHO_LIMITS.items():
        value = parse_number(data.get(metric.value)) if data.get(metric.value) else None
        if value is not None:
            ratios.append(GuidelineRatio(label=LABELS[metric], value=value, limit=limit, unit=UNITS[metric]))
    return ratios


def signal_info(rssi: Optional[str]) -> Optional[SignalInfo]:
    v = parse_number(rssi)
    if v is None:
        return None
    if v >= -50:
        return SignalInfo(bars=4, label="Excellent", color="#22c55e")
    if v >= -60:
        return SignalInfo(bars=3, label="Good", color="#86efac")
    if v >= -70:
        return SignalInfo(bars=2, label="Fair", color="#eab308")
    if v >= -80:
        return SignalInfo(bars=1, label="Weak", color="#f97316")
    return SignalInfo(bars=1, label="Very Weak", color="#ef4444")


def voc_quality_info(quality: Optional[str]) -> Optional[VocQualityInfo]:
    """Badge for the SEN55 VOC quality state; unknown states get a neutral color."""
    if not quality:
        return None
    return VocQualityInfo(
        label=quality,
        color=VOC_QUALITY_COLORS.get(quality, VOC_QUALITY_COLORS["Unknown"]),
        hint=VOC_QUALITY_HINTS.get(quality, ""),
    )


def analyze_reading(reading: Reading, baseline: Optional[Reading] = None) -> ReadingAnalysis:
    """Every derived view of a reading, optionally compared to a baseline."""
    return ReadingAnalysis(
        reading=reading,
        baseline_id=baseline.id if baseline else None,
        classifications=classify_all(reading.data),
        deltas=compare_readings(reading.data, baseline.data) if baseline else {},
        assessment=assess(reading.data),
        particles=particle_breakdown(reading.data),
        guidelines=guideline_ratios(reading.data),
        signal=signal_info(reading.data.get(Metric.RSSI.value)),
        voc_quality=voc_quality_info(reading.data.get(Metric.VOC_QUALITY.value)),
    )
