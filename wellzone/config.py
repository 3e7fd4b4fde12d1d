"""
Centralized configuration for factor weights, saturation rules and windows.

Every tunable constant of the scoring engine lives here. Runtime thresholds
(red/green cutoffs) are not constants: they are data resolved per evaluation
by `wellzone.thresholds`.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple


# ---------------------------------------------------------------------------
# Factor keys
# ---------------------------------------------------------------------------

BURNOUT_FACTORS = (
    "sleep_deficit",
    "hrv_stress",
    "work_overload",
    "recovery_deficit",
)

READINESS_FACTORS = (
    "sleep_quality",
    "hrv_recovery",
    "work_balance",
    "trend",
)

FACTOR_LABELS = {
    "sleep_deficit": "Sleep Deficit",
    "hrv_stress": "Stress Level (HRV)",
    "work_overload": "Work Hours",
    "recovery_deficit": "Recovery",
    "sleep_quality": "Sleep Quality",
    "hrv_recovery": "HRV Recovery",
    "work_balance": "Work-Life Balance",
    "trend": "Recent Trend",
}


def _check_sum(weights: Dict[str, float], what: str) -> None:
    total = sum(weights.values())
    if abs(total - 1.0) > 1e-9:
        raise ValueError(f"{what} weights must sum to 1.0, got {total}")


# ---------------------------------------------------------------------------
# Weights
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BurnoutWeights:
    """Weights for combining the four burnout factors."""

    sleep_deficit: float = 0.25
    hrv_stress: float = 0.25
    work_overload: float = 0.25
    recovery_deficit: float = 0.25

    def __post_init__(self):
        _check_sum(self.as_dict(), "Burnout")

    def as_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in BURNOUT_FACTORS}


@dataclass(frozen=True)
class ReadinessWeights:
    """Weights for combining the four readiness factors."""

    sleep_quality: float = 0.30
    hrv_recovery: float = 0.30
    work_balance: float = 0.20
    trend: float = 0.20

    def __post_init__(self):
        _check_sum(self.as_dict(), "Readiness")

    def as_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in READINESS_FACTORS}


# ---------------------------------------------------------------------------
# Factor parameters
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SleepParams:
    """Sleep deficit / sleep quality saturation rules."""

    duration_weight: float = 0.6
    quality_weight: float = 0.4
    deficit_floor_ratio: float = 0.6     # combined ratio at which deficit saturates
    deficit_slope: float = 250.0

    short_duration_ratio: float = 0.85   # below this, quality is capped
    short_duration_cap: float = 50.0
    long_duration_ratio: float = 1.1
    long_duration_bonus: float = 10.0
    deep_sleep_ratio_cap: float = 1.2

    # Expected deep sleep as a share of total sleep when no deep-sleep baseline exists
    deep_sleep_share: float = 0.2


@dataclass(frozen=True)
class HeartParams:
    """HRV stress / HRV recovery saturation rules."""

    stress_hrv_floor: float = 0.7
    stress_hr_ceiling: float = 1.2
    stress_hrv_slope: float = 166.0
    stress_hr_slope: float = 500.0
    stress_hrv_weight: float = 0.6
    stress_hr_weight: float = 0.4

    recovery_hrv_peak: float = 1.1
    recovery_hr_peak: float = 1.0
    recovery_hrv_low: float = 0.8
    recovery_hr_low: float = 0.9
    recovery_scale: float = 50.0


@dataclass(frozen=True)
class WorkParams:
    """Work overload / work balance rules."""

    overtime_penalty_per_hour: float = 10.0
    meeting_allowance: int = 4
    meeting_penalty: float = 5.0

    balance_hours_ratio: float = 1.1
    balance_over_base: float = 50.0
    balance_over_slope: float = 200.0
    balance_base: float = 60.0
    no_overtime_bonus: float = 20.0
    efficiency_scale: float = 20.0


@dataclass(frozen=True)
class RecoveryParams:
    """Recovery deficit: deep-sleep shortfall, recovery shortfall, exercise credit."""

    deep_sleep_scale: float = 50.0
    recovery_scale: float = 0.5
    exercise_credit_start_minutes: float = 20.0
    exercise_minutes_per_point: float = 3.0
    exercise_credit_cap: float = 10.0


@dataclass(frozen=True)
class TrendParams:
    """Readiness trend factor over the trailing history window."""

    window_days: int = 7
    min_data_points: int = 2
    base: float = 50.0
    hrv_rising_bonus: float = 20.0
    sleep_rising_bonus: float = 15.0
    work_flat_bonus: float = 15.0


@dataclass(frozen=True)
class ImpactThresholds:
    """Score boundaries used to label a factor's impact."""

    burnout_negative_above: float = 50.0
    burnout_positive_below: float = 30.0
    readiness_positive_above: float = 70.0
    readiness_negative_below: float = 40.0


# ---------------------------------------------------------------------------
# Interaction rules (declarative)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InteractionRule:
    """Two burnout factors that compound each other when both run high."""

    first: str
    second: str
    multiplier: float


DEFAULT_INTERACTION_RULES: tuple = (
    InteractionRule(first="sleep_deficit", second="work_overload", multiplier=1.30),
    InteractionRule(first="hrv_stress", second="work_overload", multiplier=1.25),
    InteractionRule(first="sleep_deficit", second="hrv_stress", multiplier=1.20),
    InteractionRule(first="sleep_deficit", second="recovery_deficit", multiplier=1.35),
)


@dataclass(frozen=True)
class InteractionParams:
    max_total_penalty: float = 30.0


# ---------------------------------------------------------------------------
# Context: day of week + fatigue accumulation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DayOfWeekMultipliers:
    """Work overload expectation by weekday (Monday = 0)."""

    multipliers: Tuple[float, ...] = (1.1, 1.0, 1.0, 1.0, 0.85, 0.3, 0.3)

    def for_weekday(self, weekday: int) -> float:
        return self.multipliers[weekday]


@dataclass(frozen=True)
class FatigueParams:
    """Days since the last good recovery day -> flat burnout penalty."""

    # (max days in tier, penalty); anything past the last tier gets `max_penalty`
    tiers: Tuple[Tuple[int, float], ...] = ((14, 0.0), (21, 5.0), (30, 10.0))
    max_penalty: float = 15.0
    needs_break_after_days: int = 21
    good_day_min_readiness: float = 80.0


# ---------------------------------------------------------------------------
# Calibration & aggregation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CalibrationParams:
    window_days: int = 14
    min_samples: int = 3
    min_factor: float = 0.8
    max_factor: float = 1.2


@dataclass(frozen=True)
class AggregateParams:
    min_group_size: int = 5
    trend_weeks: int = 4
    trend_slope: float = 2.0           # burnout points per week
    elevated_burnout: float = 50.0
    zone_weights: Tuple[Tuple[str, float], ...] = (
        ("green", 100.0), ("yellow", 60.0), ("red", 20.0),
    )
    burnout_buckets: Tuple[Tuple[str, float], ...] = (
        ("low", 40.0), ("moderate", 70.0),
    )


@dataclass(frozen=True)
class PercentileParams:
    min_samples: int = 10


# ---------------------------------------------------------------------------
# Top-level config aggregate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EngineConfig:
    """Complete engine configuration. Pass to pipeline to override defaults."""

    burnout_weights: BurnoutWeights = field(default_factory=BurnoutWeights)
    readiness_weights: ReadinessWeights = field(default_factory=ReadinessWeights)
    sleep: SleepParams = field(default_factory=SleepParams)
    heart: HeartParams = field(default_factory=HeartParams)
    work: WorkParams = field(default_factory=WorkParams)
    recovery: RecoveryParams = field(default_factory=RecoveryParams)
    trend: TrendParams = field(default_factory=TrendParams)
    impact: ImpactThresholds = field(default_factory=ImpactThresholds)
    interactions: InteractionParams = field(default_factory=InteractionParams)
    interaction_rules: tuple = DEFAULT_INTERACTION_RULES
    day_of_week: DayOfWeekMultipliers = field(default_factory=DayOfWeekMultipliers)
    fatigue: FatigueParams = field(default_factory=FatigueParams)
    calibration: CalibrationParams = field(default_factory=CalibrationParams)
    aggregate: AggregateParams = field(default_factory=AggregateParams)
    percentile: PercentileParams = field(default_factory=PercentileParams)
    explanation_top_n: int = 4
