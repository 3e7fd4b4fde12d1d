"""
Context adjustments: day-of-week workload expectation and fatigue accumulation.

Both are driven by the explicit evaluation date, never by the wall clock.
"""

from dataclasses import dataclass
from datetime import date as Date
from typing import Iterable, Optional

from wellzone.config import EngineConfig
from wellzone.models import ZONE_GREEN, ThresholdConfig, ZoneRecord


# ---------------------------------------------------------------------------
# Day of week
# ---------------------------------------------------------------------------

def workload_multiplier(day: Date, thresholds: ThresholdConfig, cfg: EngineConfig) -> float:
    """Work overload dampening for the evaluation weekday (1.0 when disabled)."""
    if not thresholds.weekend_adjustment_enabled:
        return 1.0
    return cfg.day_of_week.for_weekday(day.weekday())


# ---------------------------------------------------------------------------
# Fatigue accumulation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FatigueState:
    days_since_rest: int
    penalty: float
    needs_break: bool
    last_rest_date: Optional[Date] = None


def is_good_recovery_day(record: ZoneRecord, cfg: EngineConfig) -> bool:
    return (
        record.zone == ZONE_GREEN
        and record.readiness_score >= cfg.fatigue.good_day_min_readiness
    )


def fatigue_penalty(days_since_rest: int, cfg: EngineConfig) -> float:
    for max_days, penalty in cfg.fatigue.tiers:
        if days_since_rest <= max_days:
            return penalty
    return cfg.fatigue.max_penalty


def fatigue_state(
    day: Date,
    zone_history: Optional[Iterable[ZoneRecord]],
    cfg: EngineConfig,
) -> FatigueState:
    """
    Days elapsed since the last good recovery day before `day`.

    No history -> 0 days. History without a good day -> days since the
    earliest known record.
    """
    prior = [r for r in (zone_history or ()) if r.date < day]
    if not prior:
        return FatigueState(days_since_rest=0, penalty=0.0, needs_break=False)

    good_days = [r.date for r in prior if is_good_recovery_day(r, cfg)]
    if good_days:
        last_rest = max(good_days)
        days = (day - last_rest).days
    else:
        last_rest = None
        days = (day - min(r.date for r in prior)).days

    return FatigueState(
        days_since_rest=days,
        penalty=fatigue_penalty(days, cfg),
        needs_break=days > cfg.fatigue.needs_break_after_days,
        last_rest_date=last_rest,
    )
