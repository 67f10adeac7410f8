# file: backend/classifier.py

import math
import re
from typing import Dict, FrozenSet, Mapping, Optional

from backend.models import ClassificationResult
from backend.thresholds import HIGHER_IS_WORSE, THRESHOLDS, metric_key

# Leading number, the rest of the string is ignored ("21.5 °C" -> 21.5)
_NUMBER = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def parse_number(raw: Optional[str]) -> Optional[float]:
    """Parse the numeric prefix of a raw value, None when there is none."""
    if raw is None:
        return None
    match = _NUMBER.match(str(raw).strip())
    if not match:
        return None
    value = float(match.group(0))
    return value if math.isfinite(value) else None


def classify(metric: str, raw_value: Optional[str]) -> Optional[ClassificationResult]:
    """Map a raw value to the first tier whose bound is >= the value.

    Values above every bound fall into the last tier. Returns None for
    unobserved values, unknown metrics and non-numeric input.
    """
    if not raw_value:
        return None
    key = metric_key(metric)
    tiers = THRESHOLDS.get(key)
    if not tiers:
        return None
    value = parse_number(raw_value)
    if value is None:
        return None

    rank = len(tiers) - 1
    for index, tier in enumerate(tiers):
        if value <= tier.max:
            rank = index
            break
    return ClassificationResult(metric=key, value=value, rank=rank, tier=tiers[rank])


def classify_all(data: Mapping[str, str]) -> Dict[str, ClassificationResult]:
    """Classify every metric in a reading that has a tier table."""
    results = {}
    for metric, raw_value in data.items():
        result = classify(metric, raw_value)
        if result is not None:
            results[metric] = result
    return results


def is_higher_worse(metric: str, higher_is_worse: FrozenSet[str] = HIGHER_IS_WORSE) -> bool:
    return metric_key(metric) in higher_is_worse
