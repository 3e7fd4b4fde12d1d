"""
Personalization: personal ideals and active life events reshape the baseline.

Preferences replace the generic baseline sleep and work hours with the
individual's own ideals. Life events (a move, a new child, an illness)
scale those expectations by a percentage for as long as they are active.
"""

from dataclasses import dataclass, field, replace
from datetime import date as Date
from typing import Dict, Optional, Tuple

from wellzone.models import Baseline


@dataclass(frozen=True)
class Preferences:
    ideal_sleep_hours: Optional[float] = None
    ideal_work_hours: Optional[float] = None


@dataclass(frozen=True)
class LifeEvent:
    label: str
    start_date: Date
    end_date: Optional[Date] = None
    sleep_adjustment: float = 0.0       # percent, e.g. -15 expects 15% less sleep
    work_adjustment: float = 0.0

    def is_active(self, as_of: Date) -> bool:
        return self.start_date <= as_of and (self.end_date is None or self.end_date >= as_of)


@dataclass(frozen=True)
class Personalization:
    preferences: Optional[Preferences] = None
    life_events: Tuple[LifeEvent, ...] = field(default_factory=tuple)


def active_events(personalization: Optional[Personalization], as_of: Date) -> Tuple[LifeEvent, ...]:
    if personalization is None:
        return ()
    return tuple(e for e in personalization.life_events if e.is_active(as_of))


def _scaled(value: Optional[float], percent: float) -> Optional[float]:
    if value is None:
        return None
    return value * (1.0 + percent / 100.0)


def personalize_baseline(
    baseline: Baseline,
    personalization: Optional[Personalization],
    as_of: Date,
) -> Tuple[Baseline, Dict[str, object]]:
    """
    Return the adjusted baseline and a context dict for the explanation.

    The context is empty when nothing was adjusted.
    """
    if personalization is None:
        return baseline, {}

    context: Dict[str, object] = {}
    adjusted = baseline
    prefs = personalization.preferences

    if prefs is not None:
        if prefs.ideal_sleep_hours:
            adjusted = replace(adjusted, baseline_sleep_hours=prefs.ideal_sleep_hours)
        if prefs.ideal_work_hours:
            adjusted = replace(adjusted, baseline_hours_worked=prefs.ideal_work_hours)
        if prefs.ideal_sleep_hours or prefs.ideal_work_hours:
            context["using_personal_baselines"] = True

    events = active_events(personalization, as_of)
    if events:
        sleep_pct = sum(e.sleep_adjustment for e in events)
        work_pct = sum(e.work_adjustment for e in events)
        adjusted = replace(
            adjusted,
            baseline_sleep_hours=_scaled(adjusted.baseline_sleep_hours, sleep_pct),
            baseline_hours_worked=_scaled(adjusted.baseline_hours_worked, work_pct),
        )
        context["active_life_events"] = [e.label for e in events]
        context["sleep_expectation_adjustment"] = sleep_pct
        context["work_expectation_adjustment"] = work_pct

    return adjusted, context
