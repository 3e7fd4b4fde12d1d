"""
Zone classification: (burnout, readiness, thresholds) -> red | yellow | green.

Decision order matters: burnout is checked first, so at equal boundary
cases the red zone wins over green.
"""

from typing import Optional

from wellzone.models import ZONE_GREEN, ZONE_RED, ZONE_YELLOW, ThresholdConfig


def classify(burnout_score: float, readiness_score: float, thresholds: ThresholdConfig) -> str:
    """
    Regimes:
        red     — burnout at or above the red threshold
        green   — readiness at or above the green threshold
        yellow  — everything else
    """
    if burnout_score >= thresholds.burnout_red_threshold:
        return ZONE_RED
    if readiness_score >= thresholds.readiness_green_threshold:
        return ZONE_GREEN
    return ZONE_YELLOW


def zone_changed(previous_zone: Optional[str], zone: str) -> bool:
    return previous_zone is not None and previous_zone != zone
