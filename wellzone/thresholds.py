"""
Threshold resolution: individual override > organization config > system default.

Exactly one effective ThresholdConfig comes out of every resolution. A
misconfigured layer never raises: the resolver falls back to the system
default and reports why.
"""

import logging
import math
from dataclasses import dataclass, replace
from datetime import date as Date
from typing import Iterable, Optional, Sequence

import numpy as np
import pandas as pd

from wellzone.config import EngineConfig
from wellzone.models import (
    SCOPE_INDIVIDUAL,
    SCOPE_ORGANIZATION,
    SCOPE_SYSTEM,
    THRESHOLD_ABSOLUTE,
    THRESHOLD_PERCENTILE,
    ThresholdConfig,
    ThresholdOverride,
    ZoneRecord,
)

logger = logging.getLogger(__name__)


SYSTEM_DEFAULT = ThresholdConfig()


@dataclass(frozen=True)
class ResolvedThresholds:
    config: ThresholdConfig
    source: str                          # scope that supplied the cutoffs
    fallback_reason: Optional[str] = None
    sample_size: Optional[int] = None    # percentile mode only


# ---------------------------------------------------------------------------
# Layer selection
# ---------------------------------------------------------------------------

def is_active(valid_from: Optional[Date], valid_to: Optional[Date], as_of: Date) -> bool:
    if valid_from is not None and valid_from > as_of:
        return False
    if valid_to is not None and valid_to < as_of:
        return False
    return True


def active_override(
    overrides: Iterable[ThresholdOverride],
    as_of: Date,
) -> Optional[ThresholdOverride]:
    """Most recently created override whose date range covers `as_of`."""
    live = [o for o in overrides if is_active(o.valid_from, o.valid_to, as_of)]
    if not live:
        return None
    return max(live, key=lambda o: o.created_at or "")


def apply_override(base: ThresholdConfig, override: ThresholdOverride) -> ThresholdConfig:
    """Override fields left as None inherit from `base`."""
    def pick(value, fallback):
        return fallback if value is None else value

    return replace(
        base,
        scope=SCOPE_INDIVIDUAL,
        scope_id=override.individual_id,
        burnout_red_threshold=pick(override.burnout_red_threshold, base.burnout_red_threshold),
        readiness_green_threshold=pick(
            override.readiness_green_threshold, base.readiness_green_threshold
        ),
        interaction_high_threshold=pick(
            override.interaction_high_threshold, base.interaction_high_threshold
        ),
        valid_from=override.valid_from,
        valid_to=override.valid_to,
        reason=override.reason,
    )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _in_range(x) -> bool:
    return x is not None and not (isinstance(x, float) and math.isnan(x)) and 0 <= x <= 100


def validation_error(config: ThresholdConfig) -> Optional[str]:
    """Describe why a config is unusable, or None when it is valid."""
    for name in ("burnout_red_threshold", "readiness_green_threshold",
                 "interaction_high_threshold"):
        if not _in_range(getattr(config, name)):
            return f"{name} out of range: {getattr(config, name)!r}"
    if config.burnout_red_threshold < config.readiness_green_threshold:
        return (
            f"burnout_red_threshold {config.burnout_red_threshold} is below "
            f"readiness_green_threshold {config.readiness_green_threshold}"
        )
    if config.threshold_type not in (THRESHOLD_ABSOLUTE, THRESHOLD_PERCENTILE):
        return f"unknown threshold_type: {config.threshold_type!r}"
    if config.threshold_type == THRESHOLD_PERCENTILE and not _in_range(config.percentile):
        return f"percentile out of range: {config.percentile!r}"
    return None


# ---------------------------------------------------------------------------
# Percentile mode
# ---------------------------------------------------------------------------

def _score_frame(records) -> pd.DataFrame:
    if isinstance(records, pd.DataFrame):
        return records
    rows = [
        {"burnout_score": r.burnout_score, "readiness_score": r.readiness_score}
        for r in records
    ]
    return pd.DataFrame(rows, columns=["burnout_score", "readiness_score"])


def _percentile_value(values: np.ndarray, percentile: float) -> float:
    ordered = np.sort(values)
    index = min(int(math.floor(percentile / 100.0 * len(ordered))), len(ordered) - 1)
    return float(round(ordered[index]))


def percentile_thresholds(
    config: ThresholdConfig,
    org_scores,
    cfg: EngineConfig,
):
    """
    Recompute cutoffs from the organization's trailing score distribution.

    `org_scores` is a DataFrame with burnout_score / readiness_score columns
    or an iterable of ZoneRecords. Too few samples keeps the stored values.

    Returns (config, sample_size).
    """
    df = _score_frame(org_scores if org_scores is not None else ())
    df = df.dropna(subset=["burnout_score", "readiness_score"])
    n = len(df)

    if n < cfg.percentile.min_samples:
        logger.debug(
            "Percentile thresholds need %d samples, have %d; keeping stored values",
            cfg.percentile.min_samples, n,
        )
        return config, n

    return replace(
        config,
        burnout_red_threshold=_percentile_value(
            df["burnout_score"].to_numpy(dtype=np.float64), config.percentile
        ),
        readiness_green_threshold=_percentile_value(
            df["readiness_score"].to_numpy(dtype=np.float64), config.percentile
        ),
    ), n


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def resolve_thresholds(
    as_of: Date,
    organization: Optional[ThresholdConfig] = None,
    overrides: Sequence[ThresholdOverride] = (),
    org_scores: Optional[Iterable[ZoneRecord]] = None,
    cfg: Optional[EngineConfig] = None,
) -> ResolvedThresholds:
    """Resolve the single effective ThresholdConfig for an evaluation on `as_of`."""
    if cfg is None:
        cfg = EngineConfig()

    base = SYSTEM_DEFAULT
    if organization is not None and is_active(
        organization.valid_from, organization.valid_to, as_of
    ):
        base = replace(organization, scope=SCOPE_ORGANIZATION)

    override = active_override(overrides, as_of)
    config = apply_override(base, override) if override else base

    error = validation_error(config)
    if error is not None:
        logger.warning(
            "Invalid %s threshold config (%s); falling back to system default",
            config.scope, error,
        )
        return ResolvedThresholds(
            config=SYSTEM_DEFAULT, source=SCOPE_SYSTEM, fallback_reason=error,
        )

    sample_size = None
    if config.threshold_type == THRESHOLD_PERCENTILE:
        derived, sample_size = percentile_thresholds(config, org_scores, cfg)
        error = validation_error(derived)
        if error is not None:
            # A skewed distribution can put red below green; keep stored cutoffs
            logger.warning(
                "Percentile thresholds rejected for %s config (%s); keeping stored values",
                config.scope, error,
            )
            return ResolvedThresholds(
                config=config, source=config.scope,
                fallback_reason=error, sample_size=sample_size,
            )
        config = derived

    return ResolvedThresholds(config=config, source=config.scope, sample_size=sample_size)
