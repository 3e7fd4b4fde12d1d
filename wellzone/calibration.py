"""
Self-report calibration: nudge the algorithmic burnout score toward what
the individual reports feeling in recent check-ins.

The correction is bounded to [0.8, 1.2] and only touches burnout. Too few
check-ins is a no-op, reported as `applied=False`.
"""

import logging
from dataclasses import dataclass
from datetime import date as Date
from datetime import timedelta
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from wellzone.config import EngineConfig
from wellzone.models import SelfReportSample, ZoneRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalibrationResult:
    applied: bool
    factor: float = 1.0
    sample_count: int = 0
    self_reported_burnout: Optional[float] = None
    algorithmic_burnout: Optional[float] = None
    reason: Optional[str] = None


def _window_start(as_of: Date, cfg: EngineConfig) -> Date:
    return as_of - timedelta(days=cfg.calibration.window_days - 1)


def samples_frame(samples: Iterable[SelfReportSample], as_of: Date, cfg: EngineConfig) -> pd.DataFrame:
    """Check-ins inside the trailing window ending on `as_of` (inclusive)."""
    columns = ["date", "overall_feeling", "stress_level"]
    df = pd.DataFrame(
        [{c: getattr(s, c) for c in columns} for s in samples],
        columns=columns,
    )
    if df.empty:
        return df
    start = _window_start(as_of, cfg)
    return df[(df["date"] >= start) & (df["date"] <= as_of)]


def self_reported_burnout(df: pd.DataFrame) -> float:
    """(5 - avgFeeling) * 20 + (avgStress - 1) * 10; missing stress is skipped."""
    avg_feeling = float(pd.to_numeric(df["overall_feeling"]).mean())
    stress = pd.to_numeric(df["stress_level"], errors="coerce").dropna()
    stress_term = (float(stress.mean()) - 1.0) * 10.0 if len(stress) else 0.0
    return (5.0 - avg_feeling) * 20.0 + stress_term


def algorithmic_burnout(
    current_burnout: float,
    zone_history: Optional[Iterable[ZoneRecord]],
    as_of: Date,
    cfg: EngineConfig,
) -> float:
    start = _window_start(as_of, cfg)
    scores = [
        r.burnout_score for r in (zone_history or ())
        if start <= r.date < as_of
    ]
    scores.append(current_burnout)
    return float(np.mean(scores))


def calibration_factor(self_reported: float, algorithmic: float, cfg: EngineConfig) -> float:
    c = cfg.calibration
    raw = 1.0 + (self_reported - algorithmic) / 100.0
    return float(np.clip(raw, c.min_factor, c.max_factor))


def calibrate(
    current_burnout: float,
    samples: Optional[Iterable[SelfReportSample]],
    as_of: Date,
    cfg: EngineConfig,
    zone_history: Optional[Iterable[ZoneRecord]] = None,
) -> CalibrationResult:
    """Derive the burnout correction for an evaluation on `as_of`."""
    df = samples_frame(samples or (), as_of, cfg)

    if len(df) < cfg.calibration.min_samples:
        return CalibrationResult(
            applied=False, sample_count=len(df), reason="insufficient_data",
        )

    reported = self_reported_burnout(df)
    algorithmic = algorithmic_burnout(current_burnout, zone_history, as_of, cfg)
    factor = calibration_factor(reported, algorithmic, cfg)

    logger.info(
        "Calibration applied: %d check-ins, self-reported %.1f vs algorithmic %.1f -> x%.3f",
        len(df), reported, algorithmic, factor,
    )

    return CalibrationResult(
        applied=True,
        factor=round(factor, 4),
        sample_count=len(df),
        self_reported_burnout=round(reported, 2),
        algorithmic_burnout=round(algorithmic, 2),
    )
