"""
WellZone — Wellness Scoring & Zone Classification Engine

A deterministic, interpretable engine that turns daily physiological and
work telemetry into a burnout-risk score and a peak-readiness score,
classifies them into red / yellow / green zones, explains the result, and
rolls records up into privacy-preserving team aggregates.

Architecture:
    config           — All weights, saturation rules and windows (single source of truth)
    models           — Snapshots, baselines, thresholds, zone records
    normalize        — Metric vs personal baseline -> ratio
    factors          — Eight factor calculators, weighted burnout / readiness
    interactions     — Synergy penalties for co-occurring stressors
    context          — Day-of-week dampening, fatigue accumulation
    thresholds       — Override > organization > system resolution, percentile mode
    zones            — Zone classification
    explain          — Ranked factors, descriptions, recommendations
    calibration      — Self-report correction of burnout
    personalization  — Personal ideals and life events
    aggregate        — Team rollups gated by group size and consent
    ledger           — Zone record upsert store
    providers        — HR directory providers
    pipeline         — Orchestration: personalize → score → adjust → classify → explain

Public API:
    evaluate(...)          → typed in-process mode
    evaluate_into(ledger, ...) → evaluate against ledger history and upsert
    aggregate_group(ledger, as_of, provider, department) → team rollup
    evaluate_data(payload) → UI / backend mode
    evaluate_file(path)    → CLI mode
    generate_report(record) → formatted report
"""

from wellzone.aggregate import aggregate_group, aggregate_team
from wellzone.ledger import ZoneLedger
from wellzone.pipeline import (
    evaluate,
    evaluate_data,
    evaluate_file,
    evaluate_into,
    generate_report,
    record_to_dict,
)
from wellzone.providers import get_provider, group_members
from wellzone.thresholds import resolve_thresholds
from wellzone.zones import classify

__version__ = "1.0.0"

__all__ = [
    "ZoneLedger",
    "aggregate_group",
    "aggregate_team",
    "classify",
    "evaluate",
    "evaluate_data",
    "evaluate_file",
    "evaluate_into",
    "generate_report",
    "get_provider",
    "group_members",
    "record_to_dict",
    "resolve_thresholds",
]
