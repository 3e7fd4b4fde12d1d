"""
Pipeline orchestration: personalize -> score -> adjust -> calibrate -> classify -> explain.

This is the only module with I/O (JSON loading, report formatting).
All analytical logic is delegated to factors, interactions, context,
calibration, zones and explain.

Entry points:
    evaluate(...)          — typed, in-process API (pure function)
    evaluate_into(ledger, ...) — evaluate against ledger history and upsert
    evaluate_data(payload) — dict / JSON payload from a service layer
    evaluate_file(path)    — CLI mode
"""

import json
import logging
from dataclasses import asdict
from datetime import date as Date
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence, Union

from wellzone.calibration import calibrate
from wellzone.config import EngineConfig
from wellzone.context import fatigue_state, workload_multiplier
from wellzone.explain import generate_explanation
from wellzone.factors import clamp, score_burnout, score_readiness
from wellzone.interactions import interaction_penalty
from wellzone.ledger import ZoneLedger
from wellzone.models import (
    Baseline,
    HealthSnapshot,
    History,
    SelfReportSample,
    ThresholdConfig,
    ThresholdOverride,
    WorkSnapshot,
    ZoneRecord,
    from_dict,
)
from wellzone.personalization import LifeEvent, Personalization, Preferences, personalize_baseline
from wellzone.thresholds import SYSTEM_DEFAULT, resolve_thresholds
from wellzone.zones import classify, zone_changed

logger = logging.getLogger(__name__)


SCORE_PRECISION = 2


# ---------------------------------------------------------------------------
# Core evaluation (PURE FUNCTION — NO FILE I/O)
# ---------------------------------------------------------------------------

def evaluate(
    individual_id: str,
    date: Date,
    health: HealthSnapshot,
    work: WorkSnapshot,
    history: Optional[History] = None,
    baseline: Optional[Baseline] = None,
    thresholds: Optional[ThresholdConfig] = None,
    self_reports: Optional[Sequence[SelfReportSample]] = None,
    previous_zone: Optional[str] = None,
    zone_history: Optional[Iterable[ZoneRecord]] = None,
    personalization: Optional[Personalization] = None,
    cfg: Optional[EngineConfig] = None,
) -> ZoneRecord:
    """
    Score one individual for one day and classify the result.

    Stateless and idempotent: identical inputs give identical records.
    `date` is the as-of date for every date-sensitive rule; `zone_history`
    holds the individual's earlier records (fatigue, calibration, and the
    default for `previous_zone`).
    """
    if cfg is None:
        cfg = EngineConfig()
    if thresholds is None:
        thresholds = SYSTEM_DEFAULT
    if baseline is None:
        baseline = Baseline()
    prior = sorted((r for r in (zone_history or ()) if r.date < date), key=lambda r: r.date)

    # Stage 1: Personal expectations
    baseline, personal_context = personalize_baseline(baseline, personalization, date)

    # Stage 2: Burnout factors with day-of-week dampening
    multiplier = workload_multiplier(date, thresholds, cfg)
    weighted_burnout, burnout_factors = score_burnout(health, work, baseline, cfg, multiplier)

    # Stage 3: Interaction + fatigue adjustments
    factor_scores = {f.name: f.normalized_score for f in burnout_factors}
    synergy, fired = interaction_penalty(factor_scores, thresholds, cfg)
    fatigue = fatigue_state(date, prior, cfg)
    burnout = clamp(weighted_burnout + synergy + fatigue.penalty)

    # Stage 4: Self-report calibration (burnout only)
    calibration = calibrate(burnout, self_reports, date, cfg, zone_history=prior)
    if calibration.applied:
        burnout = clamp(burnout * calibration.factor)
    burnout = round(burnout, SCORE_PRECISION)

    # Stage 5: Readiness
    readiness, readiness_factors = score_readiness(health, work, baseline, history, cfg, date)
    readiness = round(readiness, SCORE_PRECISION)

    # Stage 6: Classification
    zone = classify(burnout, readiness, thresholds)
    if previous_zone is None and prior:
        previous_zone = prior[-1].zone

    logger.debug(
        "%s %s: burnout %.2f (weighted %.2f, synergy %.2f, fatigue %.1f), readiness %.2f -> %s",
        individual_id, date, burnout, weighted_burnout, synergy, fatigue.penalty, readiness, zone,
    )

    # Stage 7: Explanation
    context: Dict[str, object] = {
        "workload_multiplier": multiplier,
        "interaction_penalty": round(synergy, 3),
        "interactions": fired,
        "days_since_rest": fatigue.days_since_rest,
        "fatigue_penalty": fatigue.penalty,
        "needs_break": fatigue.needs_break,
        "calibration": asdict(calibration),
        "threshold_scope": thresholds.scope,
        **personal_context,
    }
    explanation = generate_explanation(
        zone, burnout, readiness,
        burnout_factors + readiness_factors,
        health, work, baseline, cfg, context,
    )

    return ZoneRecord(
        individual_id=individual_id,
        date=date,
        burnout_score=burnout,
        readiness_score=readiness,
        zone=zone,
        previous_zone=previous_zone,
        zone_changed=zone_changed(previous_zone, zone),
        explanation=explanation,
        needs_break=fatigue.needs_break,
        days_since_rest=fatigue.days_since_rest,
    )


def evaluate_into(
    ledger: ZoneLedger,
    individual_id: str,
    date: Date,
    health: HealthSnapshot,
    work: WorkSnapshot,
    **kwargs,
) -> ZoneRecord:
    """
    Evaluate with the ledger's earlier records as zone history, then upsert.

    Previous zone, fatigue and calibration all read from the same history,
    so re-scoring a day replaces that day's record without affecting it.
    """
    history = ledger.history(individual_id, before=date)
    record = evaluate(individual_id, date, health, work, zone_history=history, **kwargs)
    return ledger.upsert(record)


# ---------------------------------------------------------------------------
# Payload decoding
# ---------------------------------------------------------------------------

REQUIRED_KEYS = {"individualId", "date", "health", "work"}


def _snapshots(cls, rows) -> tuple:
    return tuple(from_dict(cls, row) for row in (rows or ()))


def _personalization(data: Optional[dict]) -> Optional[Personalization]:
    if not data:
        return None
    prefs = data.get("preferences")
    events = tuple(
        LifeEvent(
            label=e["label"],
            start_date=Date.fromisoformat(e["startDate"]),
            end_date=Date.fromisoformat(e["endDate"]) if e.get("endDate") else None,
            sleep_adjustment=e.get("sleepAdjustment", 0.0),
            work_adjustment=e.get("workAdjustment", 0.0),
        )
        for e in data.get("lifeEvents", ())
    )
    return Personalization(
        preferences=from_dict(Preferences, prefs) if prefs else None,
        life_events=events,
    )


def evaluate_data(payload: dict, cfg: Optional[EngineConfig] = None) -> ZoneRecord:
    """
    Backend / UI integration entry point.

    Accepts a camelCase (or snake_case) JSON-shaped dict. The optional
    `thresholds` block is treated as the organization layer and resolved
    together with `thresholdOverrides`.
    """
    if cfg is None:
        cfg = EngineConfig()

    if not payload:
        raise ValueError("Input payload cannot be empty")

    missing = {k for k in REQUIRED_KEYS if k not in payload}
    if missing:
        raise ValueError(f"Missing required keys: {sorted(missing)}")

    day = Date.fromisoformat(str(payload["date"])[:10])
    history = payload.get("history") or {}

    organization = payload.get("thresholds")
    resolved = resolve_thresholds(
        day,
        organization=from_dict(ThresholdConfig, organization) if organization else None,
        overrides=_snapshots(ThresholdOverride, payload.get("thresholdOverrides")),
        cfg=cfg,
    )

    return evaluate(
        individual_id=str(payload["individualId"]),
        date=day,
        health=from_dict(HealthSnapshot, payload["health"]),
        work=from_dict(WorkSnapshot, payload["work"]),
        history=History(
            health=_snapshots(HealthSnapshot, history.get("health")),
            work=_snapshots(WorkSnapshot, history.get("work")),
        ),
        baseline=from_dict(Baseline, payload.get("baseline") or {}),
        thresholds=resolved.config,
        self_reports=_snapshots(SelfReportSample, payload.get("selfReports")),
        previous_zone=payload.get("previousZone"),
        personalization=_personalization(payload.get("personalization")),
        cfg=cfg,
    )


# ---------------------------------------------------------------------------
# Data loading (CLI mode only)
# ---------------------------------------------------------------------------

def load_data(filepath: Union[str, Path]) -> dict:
    """Load an evaluation payload from a JSON file."""
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    with open(path, "r") as f:
        data = json.load(f)

    if not data:
        raise ValueError("Data file is empty")

    return data


def evaluate_file(filepath: Union[str, Path], cfg: Optional[EngineConfig] = None) -> ZoneRecord:
    """CLI-compatible entry point."""
    return evaluate_data(load_data(filepath), cfg)


# ---------------------------------------------------------------------------
# Serialization (dashboard read API shape)
# ---------------------------------------------------------------------------

def _jsonable(value):
    if isinstance(value, Date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def record_to_dict(record: ZoneRecord) -> dict:
    explanation = record.explanation
    return _jsonable({
        "individualId": record.individual_id,
        "date": record.date,
        "burnoutScore": record.burnout_score,
        "readinessScore": record.readiness_score,
        "zone": record.zone,
        "previousZone": record.previous_zone,
        "zoneChanged": record.zone_changed,
        "needsBreak": record.needs_break,
        "daysSinceRest": record.days_since_rest,
        "explanation": None if explanation is None else {
            "zone": explanation.zone,
            "burnoutScore": explanation.burnout_score,
            "readinessScore": explanation.readiness_score,
            "factors": [asdict(f) for f in explanation.factors],
            "recommendations": explanation.recommendations,
            "context": explanation.context,
        },
    })


# ---------------------------------------------------------------------------
# Report generation
# ---------------------------------------------------------------------------

def generate_report(record: ZoneRecord) -> str:
    """Format a zone record as a human-readable text report."""
    explanation = record.explanation
    context = explanation.context if explanation else {}
    change = f"(was {record.previous_zone})" if record.zone_changed else "(unchanged)"

    lines = [
        "WELLZONE STATUS REPORT",
        "=" * 58,
        "",
        f"  Individual          : {record.individual_id}",
        f"  Date                : {record.date.isoformat()}",
        f"  Zone                : {record.zone.upper()} {change}",
        f"  Burnout Score       : {record.burnout_score:.1f}",
        f"  Readiness Score     : {record.readiness_score:.1f}",
        f"  Days Since Rest     : {record.days_since_rest}",
        f"  Needs Break         : {'YES' if record.needs_break else 'No'}",
    ]

    calibration = context.get("calibration") or {}
    if calibration.get("applied"):
        lines.append(f"  Calibration         : x{calibration['factor']:.3f}")
    if context.get("interactions"):
        lines.append(f"  Interaction Penalty : +{context['interaction_penalty']:.1f}")

    if explanation is not None:
        lines.append("")
        lines.append("  Top Factors:")
        for f in explanation.factors:
            lines.append(f"    {f.label:20s} : {f.impact:8s} {f.value}")
            lines.append(f"      {f.description}")

        for audience in ("personal", "leadership"):
            recs = explanation.recommendations.get(audience) or []
            if recs:
                lines.append("")
                lines.append(f"  Recommendations ({audience}):")
                for rec in recs:
                    lines.append(f"    - {rec}")

    lines.append("")
    lines.append("=" * 58)
    return "\n".join(lines)
