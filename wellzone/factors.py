"""
Factor calculators: baseline ratios -> eight [0, 100] sub-scores.

Burnout factors (higher = more risk):
    sleep_deficit, hrv_stress, work_overload, recovery_deficit
Readiness factors (higher = more ready):
    sleep_quality, hrv_recovery, work_balance, trend

Each calculator is a pure function over ratios and a few raw counts.
`score_burnout` / `score_readiness` combine them into weighted scores and
the list of FactorContribution records the explanation is built from.
"""

import math
from datetime import date as Date
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from wellzone.config import (
    BURNOUT_FACTORS,
    FACTOR_LABELS,
    READINESS_FACTORS,
    EngineConfig,
)
from wellzone.models import (
    IMPACT_NEGATIVE,
    IMPACT_NEUTRAL,
    IMPACT_POSITIVE,
    Baseline,
    FactorContribution,
    HealthSnapshot,
    History,
    WorkSnapshot,
)
from wellzone.normalize import expected_deep_sleep, inverse_ratio, ratio


SLOPE_EPSILON = 1e-9


def clamp(x: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return float(min(hi, max(lo, x)))


# ---------------------------------------------------------------------------
# Ratios
# ---------------------------------------------------------------------------

def compute_ratios(
    health: HealthSnapshot,
    work: WorkSnapshot,
    baseline: Baseline,
    cfg: EngineConfig,
) -> Dict[str, float]:
    """All baseline-relative ratios consumed by the factor calculators."""
    return {
        "sleep_duration": ratio(health.sleep_hours, baseline.baseline_sleep_hours),
        "sleep_quality": ratio(health.sleep_quality_score, baseline.baseline_sleep_quality),
        "deep_sleep": ratio(health.deep_sleep_hours, expected_deep_sleep(baseline, cfg)),
        "hrv": ratio(health.heart_rate_variability, baseline.baseline_hrv),
        "resting_hr": ratio(health.resting_heart_rate, baseline.baseline_resting_hr),
        "inverse_hr": inverse_ratio(health.resting_heart_rate, baseline.baseline_resting_hr),
        "hours": ratio(work.hours_worked, baseline.baseline_hours_worked),
    }


# ---------------------------------------------------------------------------
# Burnout factors
# ---------------------------------------------------------------------------

def combined_sleep_ratio(duration_ratio: float, quality_ratio: float, cfg: EngineConfig) -> float:
    s = cfg.sleep
    return duration_ratio * s.duration_weight + quality_ratio * s.quality_weight


def sleep_deficit(duration_ratio: float, quality_ratio: float, cfg: EngineConfig) -> float:
    """0 at or above baseline, 100 at 60% of baseline, linear in between."""
    combined = combined_sleep_ratio(duration_ratio, quality_ratio, cfg)
    if combined >= 1.0:
        return 0.0
    if combined <= cfg.sleep.deficit_floor_ratio:
        return 100.0
    return clamp((1.0 - combined) * cfg.sleep.deficit_slope)


def hrv_stress(hrv_ratio: float, hr_ratio: float, cfg: EngineConfig) -> float:
    """Low HRV and elevated resting heart rate, both relative to baseline."""
    h = cfg.heart
    if hrv_ratio >= 1.0 and hr_ratio <= 1.0:
        return 0.0
    if hrv_ratio <= h.stress_hrv_floor or hr_ratio >= h.stress_hr_ceiling:
        return 100.0
    hrv_part = max(0.0, (1.0 - hrv_ratio) * h.stress_hrv_slope)
    hr_part = max(0.0, (hr_ratio - 1.0) * h.stress_hr_slope)
    return clamp(hrv_part * h.stress_hrv_weight + hr_part * h.stress_hr_weight)


def work_overload(
    hours_ratio: float,
    overtime_hours: float,
    meetings_attended: int,
    cfg: EngineConfig,
) -> float:
    w = cfg.work
    excess_hours = max(0.0, (hours_ratio - 1.0) * 100.0)
    overtime = max(0.0, overtime_hours or 0.0) * w.overtime_penalty_per_hour
    meetings = max(0, (meetings_attended or 0) - w.meeting_allowance) * w.meeting_penalty
    return clamp(excess_hours + overtime + meetings)


def exercise_credit(exercise_minutes: float, cfg: EngineConfig) -> float:
    r = cfg.recovery
    minutes = max(0.0, (exercise_minutes or 0.0) - r.exercise_credit_start_minutes)
    return min(r.exercise_credit_cap, minutes / r.exercise_minutes_per_point)


def recovery_deficit(
    deep_sleep_ratio: float,
    recovery_score: Optional[float],
    exercise_minutes: float,
    cfg: EngineConfig,
) -> float:
    """
    Deep-sleep shortfall plus recovery-score shortfall, minus exercise credit.

    The credit can only offset an existing shortfall; a missing recovery
    score contributes no shortfall.
    """
    r = cfg.recovery
    deep = max(0.0, r.deep_sleep_scale * (1.0 - deep_sleep_ratio))
    rec = 0.0
    if recovery_score is not None and not math.isnan(recovery_score):
        rec = max(0.0, r.recovery_scale * (100.0 - recovery_score))
    shortfall = deep + rec
    credit = min(shortfall, exercise_credit(exercise_minutes, cfg))
    return clamp(shortfall - credit)


# ---------------------------------------------------------------------------
# Readiness factors
# ---------------------------------------------------------------------------

def sleep_quality(
    duration_ratio: float,
    quality_score: float,
    deep_sleep_ratio: float,
    cfg: EngineConfig,
) -> float:
    s = cfg.sleep
    quality = quality_score or 0.0
    if duration_ratio < s.short_duration_ratio:
        return clamp(min(s.short_duration_cap, quality * 0.5))
    bonus = s.long_duration_bonus if duration_ratio > s.long_duration_ratio else 0.0
    return clamp(quality * min(s.deep_sleep_ratio_cap, deep_sleep_ratio) + bonus)


def hrv_recovery(hrv_ratio: float, inverse_hr_ratio: float, cfg: EngineConfig) -> float:
    h = cfg.heart
    if hrv_ratio >= h.recovery_hrv_peak and inverse_hr_ratio >= h.recovery_hr_peak:
        return 100.0
    if hrv_ratio < h.recovery_hrv_low or inverse_hr_ratio < h.recovery_hr_low:
        return clamp(max(0.0, hrv_ratio * h.recovery_scale))
    return clamp(hrv_ratio * h.recovery_scale + inverse_hr_ratio * h.recovery_scale)


def task_efficiency(tasks_completed: int, tasks_assigned: int) -> float:
    if not tasks_assigned:
        return 1.0
    return (tasks_completed or 0) / tasks_assigned


def work_balance(
    hours_ratio: float,
    overtime_hours: float,
    tasks_completed: int,
    tasks_assigned: int,
    cfg: EngineConfig,
) -> float:
    w = cfg.work
    if hours_ratio > w.balance_hours_ratio:
        return clamp(w.balance_over_base - (hours_ratio - w.balance_hours_ratio) * w.balance_over_slope)
    bonus = w.no_overtime_bonus if not overtime_hours else 0.0
    efficiency = task_efficiency(tasks_completed, tasks_assigned)
    return clamp(w.balance_base + bonus + efficiency * w.efficiency_scale)


# ---------------------------------------------------------------------------
# Trend factor
# ---------------------------------------------------------------------------

def ols_slope(y: np.ndarray) -> float:
    """
    Ordinary least-squares slope for evenly-spaced data.

    Uses the closed-form solution:  slope = sum(x_c * y_c) / sum(x_c^2)
    where x_c and y_c are mean-centered.
    """
    n = len(y)
    if n < 2:
        return 0.0
    x = np.arange(n, dtype=np.float64)
    x_c = x - x.mean()
    y_c = y - y.mean()
    denom = np.dot(x_c, x_c)
    if denom == 0.0:
        return 0.0
    slope = float(np.dot(x_c, y_c) / denom)
    return 0.0 if abs(slope) < SLOPE_EPSILON else slope


def history_frame(
    snapshots,
    columns: Tuple[str, ...],
    as_of: Optional[Date] = None,
) -> pd.DataFrame:
    """
    Snapshots -> DataFrame ordered by date (input order kept for undated rows).

    Rows dated after `as_of` are dropped; undated rows are kept.
    """
    rows = [
        {"date": getattr(s, "date", None), **{c: getattr(s, c, None) for c in columns}}
        for s in snapshots
    ]
    df = pd.DataFrame(rows, columns=["date", *columns])
    if df.empty:
        return df
    if as_of is not None:
        dates = pd.to_datetime(df["date"])
        df = df[dates.isna() | (dates <= pd.Timestamp(as_of))]
    if df["date"].notna().all():
        df["date"] = pd.to_datetime(df["date"])
        df = df.sort_values("date", kind="stable")
    return df.reset_index(drop=True)


def _tail_slope(series: pd.Series, cfg: EngineConfig) -> Optional[float]:
    values = pd.to_numeric(series, errors="coerce").dropna().tail(cfg.trend.window_days)
    if len(values) < cfg.trend.min_data_points:
        return None
    return ols_slope(values.values.astype(np.float64))


def trend_signals(
    history: Optional[History],
    cfg: EngineConfig,
    as_of: Optional[Date] = None,
) -> Dict[str, Optional[float]]:
    """Slopes of HRV, sleep hours and work hours over the window ending on `as_of`."""
    if history is None:
        return {"hrv": None, "sleep": None, "work": None}

    health = history_frame(history.health, ("heart_rate_variability", "sleep_hours"), as_of)
    work = history_frame(history.work, ("hours_worked",), as_of)

    return {
        "hrv": _tail_slope(health["heart_rate_variability"], cfg),
        "sleep": _tail_slope(health["sleep_hours"], cfg),
        "work": _tail_slope(work["hours_worked"], cfg),
    }


def favourable_trends(signals: Dict[str, Optional[float]]) -> Dict[str, bool]:
    return {
        "hrv": signals["hrv"] is not None and signals["hrv"] > 0,
        "sleep": signals["sleep"] is not None and signals["sleep"] > 0,
        "work": signals["work"] is not None and signals["work"] <= 0,
    }


def trend(signals: Dict[str, Optional[float]], cfg: EngineConfig) -> float:
    """Base 50, plus bonuses for rising HRV, rising sleep, flat/falling work hours."""
    t = cfg.trend
    if all(v is None for v in signals.values()):
        return t.base

    good = favourable_trends(signals)
    score = t.base
    if good["hrv"]:
        score += t.hrv_rising_bonus
    if good["sleep"]:
        score += t.sleep_rising_bonus
    if good["work"]:
        score += t.work_flat_bonus
    return clamp(score)


# ---------------------------------------------------------------------------
# Impact labels
# ---------------------------------------------------------------------------

def impact_for(category: str, score: float, cfg: EngineConfig) -> str:
    it = cfg.impact
    if category == "burnout":
        if score > it.burnout_negative_above:
            return IMPACT_NEGATIVE
        if score < it.burnout_positive_below:
            return IMPACT_POSITIVE
        return IMPACT_NEUTRAL
    if score > it.readiness_positive_above:
        return IMPACT_POSITIVE
    if score < it.readiness_negative_below:
        return IMPACT_NEGATIVE
    return IMPACT_NEUTRAL


def _contributions(
    category: str,
    names: Tuple[str, ...],
    scores: Dict[str, float],
    raw_ratios: Dict[str, Optional[float]],
    weights: Dict[str, float],
    cfg: EngineConfig,
) -> List[FactorContribution]:
    return [
        FactorContribution(
            name=name,
            label=FACTOR_LABELS[name],
            category=category,
            raw_ratio=raw_ratios.get(name),
            normalized_score=scores[name],
            weight=weights[name],
            impact=impact_for(category, scores[name], cfg),
        )
        for name in names
    ]


def weighted_sum(contributions: List[FactorContribution]) -> float:
    return sum(c.normalized_score * c.weight for c in contributions)


# ---------------------------------------------------------------------------
# Score composition
# ---------------------------------------------------------------------------

def score_burnout(
    health: HealthSnapshot,
    work: WorkSnapshot,
    baseline: Baseline,
    cfg: EngineConfig,
    work_multiplier: float = 1.0,
) -> Tuple[float, List[FactorContribution]]:
    """
    Weighted burnout score (before interaction and fatigue adjustments).

    `work_multiplier` is the day-of-week expectation applied to the work
    overload factor before weighting.
    """
    r = compute_ratios(health, work, baseline, cfg)

    scores = {
        "sleep_deficit": sleep_deficit(r["sleep_duration"], r["sleep_quality"], cfg),
        "hrv_stress": hrv_stress(r["hrv"], r["resting_hr"], cfg),
        "work_overload": clamp(
            work_overload(r["hours"], work.overtime_hours, work.meetings_attended, cfg)
            * work_multiplier
        ),
        "recovery_deficit": recovery_deficit(
            r["deep_sleep"], health.recovery_score, health.exercise_minutes, cfg,
        ),
    }
    raw_ratios = {
        "sleep_deficit": combined_sleep_ratio(r["sleep_duration"], r["sleep_quality"], cfg),
        "hrv_stress": r["hrv"],
        "work_overload": r["hours"],
        "recovery_deficit": r["deep_sleep"],
    }

    factors = _contributions(
        "burnout", BURNOUT_FACTORS, scores, raw_ratios,
        cfg.burnout_weights.as_dict(), cfg,
    )
    return clamp(weighted_sum(factors)), factors


def score_readiness(
    health: HealthSnapshot,
    work: WorkSnapshot,
    baseline: Baseline,
    history: Optional[History],
    cfg: EngineConfig,
    as_of: Optional[Date] = None,
) -> Tuple[float, List[FactorContribution]]:
    r = compute_ratios(health, work, baseline, cfg)
    signals = trend_signals(history, cfg, as_of)
    good = favourable_trends(signals)

    scores = {
        "sleep_quality": sleep_quality(
            r["sleep_duration"], health.sleep_quality_score, r["deep_sleep"], cfg,
        ),
        "hrv_recovery": hrv_recovery(r["hrv"], r["inverse_hr"], cfg),
        "work_balance": work_balance(
            r["hours"], work.overtime_hours, work.tasks_completed, work.tasks_assigned, cfg,
        ),
        "trend": trend(signals, cfg),
    }
    raw_ratios = {
        "sleep_quality": r["sleep_duration"],
        "hrv_recovery": r["hrv"],
        "work_balance": r["hours"],
        "trend": sum(good.values()) / len(good),
    }

    factors = _contributions(
        "readiness", READINESS_FACTORS, scores, raw_ratios,
        cfg.readiness_weights.as_dict(), cfg,
    )
    return clamp(weighted_sum(factors)), factors
