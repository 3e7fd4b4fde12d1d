"""
Baseline normalization: raw metric vs personal baseline -> dimensionless ratio.

All factor math consumes ratios, never raw units. A missing or zero
reference yields the neutral ratio 1.0 (no deviation assumed).
"""

import math
from typing import Optional

from wellzone.config import EngineConfig
from wellzone.models import Baseline


NEUTRAL_RATIO = 1.0


def _missing(x) -> bool:
    return x is None or (isinstance(x, float) and math.isnan(x))


def ratio(value: Optional[float], baseline: Optional[float]) -> float:
    """value / baseline, or 1.0 when either side is unusable."""
    if _missing(value) or _missing(baseline) or baseline == 0:
        return NEUTRAL_RATIO
    return float(value) / float(baseline)


def inverse_ratio(value: Optional[float], baseline: Optional[float]) -> float:
    """baseline / value, for metrics where lower than baseline is better."""
    if _missing(value) or _missing(baseline) or value == 0:
        return NEUTRAL_RATIO
    return float(baseline) / float(value)


def expected_deep_sleep(baseline: Baseline, cfg: EngineConfig) -> Optional[float]:
    """Deep-sleep reference: explicit baseline, else a share of baseline sleep."""
    if not _missing(baseline.baseline_deep_sleep_hours):
        return baseline.baseline_deep_sleep_hours
    if _missing(baseline.baseline_sleep_hours):
        return None
    return baseline.baseline_sleep_hours * cfg.sleep.deep_sleep_share


def percent_vs_baseline(value: Optional[float], baseline: Optional[float]) -> Optional[float]:
    """Signed percentage deviation, None when no baseline is available."""
    if _missing(value) or _missing(baseline) or baseline == 0:
        return None
    return (float(value) - float(baseline)) / float(baseline) * 100.0
