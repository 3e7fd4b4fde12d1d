"""
Team aggregation: privacy-preserving rollups of per-individual zone records.

Opted-out individuals are removed before anything else. Groups smaller than
the minimum size get an explicit InsufficientGroup result and no scores.
Outputs carry counts only, never individual identifiers.
"""

import logging
from dataclasses import dataclass, field
from datetime import date as Date
from datetime import timedelta
from typing import Dict, Iterable, List, Optional, Union

import numpy as np
import pandas as pd

from wellzone.config import EngineConfig
from wellzone.factors import ols_slope
from wellzone.ledger import ZoneLedger
from wellzone.models import ZONE_GREEN, ZONE_RED, ZONE_YELLOW, ZoneRecord
from wellzone.providers import BaseHRProvider, group_members

logger = logging.getLogger(__name__)


TREND_IMPROVING = "improving"
TREND_STABLE = "stable"
TREND_WORSENING = "worsening"

PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}

# Most severe first: ties for the largest bucket resolve toward this order
SEVERITY_ORDER = (ZONE_RED, ZONE_YELLOW, ZONE_GREEN)


@dataclass(frozen=True)
class InsufficientGroup:
    group_size: int
    minimum_required: int
    privacy_note: str
    reason: str = "insufficient_group_size"


@dataclass(frozen=True)
class TeamAggregate:
    team_size: int
    team_health_score: float
    zone_distribution: Dict[str, int]
    burnout_distribution: Dict[str, int]
    weekly_trend: List[Dict[str, object]]
    trend_direction: str
    elevated_stress_count: int
    elevated_stress_percentage: float
    action_items: List[Dict[str, str]] = field(default_factory=list)
    privacy_note: str = "Individual scores not shown. All data aggregated across team."


# ---------------------------------------------------------------------------
# Frames
# ---------------------------------------------------------------------------

def records_frame(records: Iterable[ZoneRecord]) -> pd.DataFrame:
    rows = [
        {
            "individual_id": r.individual_id,
            "date": pd.Timestamp(r.date),
            "burnout_score": r.burnout_score,
            "readiness_score": r.readiness_score,
            "zone": r.zone,
        }
        for r in records
    ]
    return pd.DataFrame(
        rows, columns=["individual_id", "date", "burnout_score", "readiness_score", "zone"],
    )


def consenting(df: pd.DataFrame, consent: Optional[Dict[str, bool]]) -> pd.DataFrame:
    """Drop every record of anyone who opted out (missing consent = allowed)."""
    if not consent:
        return df
    opted_out = {pid for pid, allowed in consent.items() if allowed is False}
    return df[~df["individual_id"].isin(opted_out)]


def latest_per_individual(df: pd.DataFrame) -> pd.DataFrame:
    return (
        df.sort_values(["individual_id", "date"], kind="stable")
        .groupby("individual_id", sort=True)
        .tail(1)
    )


# ---------------------------------------------------------------------------
# Distributions
# ---------------------------------------------------------------------------

def zone_distribution(latest: pd.DataFrame) -> Dict[str, int]:
    counts = latest["zone"].value_counts()
    return {z: int(counts.get(z, 0)) for z in (ZONE_RED, ZONE_YELLOW, ZONE_GREEN)}


def burnout_bucket(score: float, cfg: EngineConfig) -> str:
    for name, upper in cfg.aggregate.burnout_buckets:
        if score < upper:
            return name
    return "high"


def burnout_distribution(latest: pd.DataFrame, cfg: EngineConfig) -> Dict[str, int]:
    dist = {name: 0 for name, _ in cfg.aggregate.burnout_buckets}
    dist["high"] = 0
    for score in latest["burnout_score"]:
        dist[burnout_bucket(score, cfg)] += 1
    return dist


def team_health_score(zones: Dict[str, int], cfg: EngineConfig) -> float:
    total = sum(zones.values())
    if total == 0:
        return 0.0
    weights = dict(cfg.aggregate.zone_weights)
    return round(sum(zones[z] * weights[z] for z in zones) / total, 1)


# ---------------------------------------------------------------------------
# Trend
# ---------------------------------------------------------------------------

def weekly_trend(df: pd.DataFrame, as_of: Date, cfg: EngineConfig) -> List[Dict[str, object]]:
    """
    Weekly mean scores over the trailing window, oldest week first.

    Weeks with fewer than the minimum group size of distinct contributors
    are dropped so no week can single anyone out.
    """
    a = cfg.aggregate
    start = pd.Timestamp(as_of - timedelta(weeks=a.trend_weeks) + timedelta(days=1))
    window = df[(df["date"] >= start) & (df["date"] <= pd.Timestamp(as_of))]
    if window.empty:
        return []

    week = window["date"].dt.to_period("W").dt.start_time
    grouped = window.groupby(week).agg(
        avg_burnout=("burnout_score", "mean"),
        avg_readiness=("readiness_score", "mean"),
        contributors=("individual_id", "nunique"),
    )
    grouped = grouped[grouped["contributors"] >= a.min_group_size].sort_index()

    return [
        {
            "week": ts.date(),
            "avg_burnout": round(float(row.avg_burnout), 1),
            "avg_readiness": round(float(row.avg_readiness), 1),
            "contributors": int(row.contributors),
        }
        for ts, row in grouped.iterrows()
    ]


def trend_direction(weeks: List[Dict[str, object]], cfg: EngineConfig) -> str:
    """Slope of weekly mean burnout: rising burnout is worsening."""
    if len(weeks) < 2:
        return TREND_STABLE
    slope = ols_slope(np.array([w["avg_burnout"] for w in weeks], dtype=np.float64))
    if slope > cfg.aggregate.trend_slope:
        return TREND_WORSENING
    if slope < -cfg.aggregate.trend_slope:
        return TREND_IMPROVING
    return TREND_STABLE


# ---------------------------------------------------------------------------
# Action items
# ---------------------------------------------------------------------------

def largest_bucket(zones: Dict[str, int]) -> str:
    return max(SEVERITY_ORDER, key=lambda z: (zones[z], -SEVERITY_ORDER.index(z)))


def action_items(
    zones: Dict[str, int],
    direction: str,
    elevated_pct: float,
    team_size: int,
) -> List[Dict[str, str]]:
    items: List[Dict[str, str]] = []

    dominant = largest_bucket(zones)
    if dominant == ZONE_RED:
        items.append({
            "priority": "high",
            "type": "dominant_red",
            "message": "Most of the team is in the red zone",
            "action": "Pause non-essential work and rebalance deadlines this week",
        })
    elif dominant == ZONE_YELLOW:
        items.append({
            "priority": "medium",
            "type": "dominant_yellow",
            "message": "Most of the team is in the yellow zone",
            "action": "Keep workload steady and watch for early warning signs",
        })
    else:
        items.append({
            "priority": "low",
            "type": "dominant_green",
            "message": "Most of the team is in the green zone",
            "action": "Good time for stretch assignments or new initiatives",
        })

    if zones[ZONE_RED] > 0 and dominant != ZONE_RED:
        items.append({
            "priority": "high",
            "type": "attention",
            "message": f"{zones[ZONE_RED]} team member(s) in red zone",
            "action": "Consider scheduling 1:1 check-ins across the team",
        })

    if direction == TREND_WORSENING:
        items.append({
            "priority": "medium",
            "type": "trend",
            "message": "Team burnout trend is worsening",
            "action": "Review workload distribution and upcoming deadlines",
        })

    if elevated_pct > 50:
        items.append({
            "priority": "medium",
            "type": "widespread",
            "message": f"{elevated_pct:.0f}% of team showing elevated stress",
            "action": "Consider team-wide interventions like reduced meetings or flexible hours",
        })

    if dominant != ZONE_GREEN and zones[ZONE_GREEN] > team_size * 0.6:
        items.append({
            "priority": "low",
            "type": "positive",
            "message": "Majority of team in green zone",
            "action": "Good time for stretch assignments or new initiatives",
        })

    return sorted(items, key=lambda i: PRIORITY_ORDER[i["priority"]])


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def aggregate_team(
    records: Iterable[ZoneRecord],
    as_of: Date,
    consent: Optional[Dict[str, bool]] = None,
    cfg: Optional[EngineConfig] = None,
) -> Union[TeamAggregate, InsufficientGroup]:
    """Roll a group's zone records up into a TeamAggregate."""
    if cfg is None:
        cfg = EngineConfig()
    a = cfg.aggregate

    df = records_frame(records)
    df = consenting(df, consent)
    df = df[df["date"] <= pd.Timestamp(as_of)]

    group_size = int(df["individual_id"].nunique())
    if group_size < a.min_group_size:
        logger.debug("Team aggregate withheld: %d of %d required", group_size, a.min_group_size)
        return InsufficientGroup(
            group_size=group_size,
            minimum_required=a.min_group_size,
            privacy_note=(
                f"Aggregate views require at least {a.min_group_size} consenting "
                f"team members to protect individual privacy."
            ),
        )

    latest = latest_per_individual(df)
    zones = zone_distribution(latest)
    weeks = weekly_trend(df, as_of, cfg)
    direction = trend_direction(weeks, cfg)

    elevated = int((latest["burnout_score"] >= a.elevated_burnout).sum())
    elevated_pct = round(elevated / group_size * 100.0, 1)

    return TeamAggregate(
        team_size=group_size,
        team_health_score=team_health_score(zones, cfg),
        zone_distribution=zones,
        burnout_distribution=burnout_distribution(latest, cfg),
        weekly_trend=weeks,
        trend_direction=direction,
        elevated_stress_count=elevated,
        elevated_stress_percentage=elevated_pct,
        action_items=action_items(zones, direction, elevated_pct, group_size),
    )


def aggregate_group(
    ledger: ZoneLedger,
    as_of: Date,
    provider: Optional[BaseHRProvider] = None,
    department: Optional[str] = None,
    manager_id: Optional[str] = None,
    consent: Optional[Dict[str, bool]] = None,
    cfg: Optional[EngineConfig] = None,
) -> Union[TeamAggregate, InsufficientGroup]:
    """
    Aggregate a department or manager's reports from the ledger.

    Membership comes from the HR provider; without one, every individual in
    the ledger is treated as the group.
    """
    members = None
    if provider is not None:
        members = group_members(provider, department=department, manager_id=manager_id)
    return aggregate_team(ledger.records(members), as_of, consent=consent, cfg=cfg)
