"""
Data model for the scoring engine.

Snapshots, baselines and self-reports are inputs supplied by the caller;
factor contributions, explanations and zone records are produced here.
Every optional field defaults to None and the engine substitutes a
documented default when it is missing.
"""

import re
from dataclasses import dataclass, field, fields
from datetime import date as Date
from typing import Dict, List, Optional


ZONE_RED = "red"
ZONE_YELLOW = "yellow"
ZONE_GREEN = "green"
ZONES = (ZONE_RED, ZONE_YELLOW, ZONE_GREEN)

IMPACT_POSITIVE = "positive"
IMPACT_NEGATIVE = "negative"
IMPACT_NEUTRAL = "neutral"


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HealthSnapshot:
    """One day of physiological telemetry."""

    sleep_hours: float
    sleep_quality_score: float           # 0-100
    heart_rate_variability: float        # ms
    resting_heart_rate: float            # bpm
    deep_sleep_hours: Optional[float] = None
    exercise_minutes: float = 0.0
    recovery_score: Optional[float] = None  # 0-100
    date: Optional[Date] = None


@dataclass(frozen=True)
class WorkSnapshot:
    """One day of work activity."""

    hours_worked: float
    overtime_hours: float = 0.0
    tasks_completed: int = 0
    tasks_assigned: int = 0
    meetings_attended: int = 0
    date: Optional[Date] = None


@dataclass(frozen=True)
class Baseline:
    """Rolling personal reference values. Any field may be missing."""

    baseline_sleep_hours: Optional[float] = None
    baseline_sleep_quality: Optional[float] = None
    baseline_hrv: Optional[float] = None
    baseline_resting_hr: Optional[float] = None
    baseline_hours_worked: Optional[float] = None
    baseline_tasks_completed: Optional[float] = None
    baseline_response_time: Optional[float] = None
    baseline_deep_sleep_hours: Optional[float] = None


@dataclass(frozen=True)
class History:
    """Trailing daily snapshots, oldest first or in any order (sorted on use)."""

    health: tuple = ()
    work: tuple = ()


SCOPE_SYSTEM = "system"
SCOPE_ORGANIZATION = "organization"
SCOPE_INDIVIDUAL = "individual"

THRESHOLD_ABSOLUTE = "absolute"
THRESHOLD_PERCENTILE = "percentile"


@dataclass(frozen=True)
class ThresholdConfig:
    """Red/green cutoffs and engine switches. Defaults are the system config."""

    scope: str = SCOPE_SYSTEM
    burnout_red_threshold: float = 70.0
    readiness_green_threshold: float = 70.0
    threshold_type: str = THRESHOLD_ABSOLUTE
    interaction_high_threshold: float = 50.0
    enable_interaction_effects: bool = True
    weekend_adjustment_enabled: bool = True
    valid_from: Optional[Date] = None
    valid_to: Optional[Date] = None
    percentile: float = 70.0
    scope_id: Optional[str] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class ThresholdOverride:
    """Date-bounded individual override. None fields inherit from the org layer."""

    individual_id: str
    burnout_red_threshold: Optional[float] = None
    readiness_green_threshold: Optional[float] = None
    interaction_high_threshold: Optional[float] = None
    valid_from: Optional[Date] = None
    valid_to: Optional[Date] = None
    reason: Optional[str] = None
    created_at: Optional[str] = None


@dataclass(frozen=True)
class SelfReportSample:
    date: Date
    overall_feeling: float               # 1-5
    energy_level: Optional[float] = None
    stress_level: Optional[float] = None
    motivation_level: Optional[float] = None


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FactorContribution:
    name: str
    label: str
    category: str                        # "burnout" | "readiness"
    raw_ratio: Optional[float]
    normalized_score: float
    weight: float
    impact: str
    description: str = ""

    @property
    def absolute_impact(self) -> float:
        return abs(self.normalized_score - 50.0) * self.weight


@dataclass(frozen=True)
class ExplanationFactor:
    name: str
    label: str
    impact: str
    value: str
    description: str
    weight: float


@dataclass(frozen=True)
class Explanation:
    zone: str
    burnout_score: float
    readiness_score: float
    factors: List[ExplanationFactor] = field(default_factory=list)
    recommendations: Dict[str, List[str]] = field(default_factory=dict)
    context: Dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class ZoneRecord:
    """One scored day for one individual. Upserted by (individual_id, date)."""

    individual_id: str
    date: Date
    burnout_score: float
    readiness_score: float
    zone: str
    previous_zone: Optional[str] = None
    zone_changed: bool = False
    explanation: Optional[Explanation] = None
    needs_break: bool = False
    days_since_rest: int = 0

    @property
    def key(self):
        return (self.individual_id, self.date)


# ---------------------------------------------------------------------------
# Dict construction (service layer / JSON payloads)
# ---------------------------------------------------------------------------

_CAMEL = re.compile(r"(?<!^)(?=[A-Z])")


def snake_case(name: str) -> str:
    return _CAMEL.sub("_", name).lower()


def from_dict(cls, data: dict):
    """
    Build a dataclass from a dict, accepting camelCase or snake_case keys.

    Unknown keys are ignored. ISO date strings are parsed for `date`-typed
    fields named `date`, `valid_from` or `valid_to`.
    """
    names = {f.name for f in fields(cls)}
    kwargs = {}
    for key, value in data.items():
        name = snake_case(key)
        if name not in names:
            continue
        if name in ("date", "valid_from", "valid_to") and isinstance(value, str):
            value = Date.fromisoformat(value[:10])
        kwargs[name] = value
    return cls(**kwargs)
