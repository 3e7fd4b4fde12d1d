"""
Explainability: rank factor contributions and turn them into readable text.

Factors are ranked by |score - 50| * weight (ties by factor name) and the
top four are described with zone-specific wording. The explanation always
carries the zone it was generated for; it never reclassifies.
"""

from typing import Dict, List, Optional

from wellzone.config import EngineConfig
from wellzone.models import (
    IMPACT_NEGATIVE,
    IMPACT_NEUTRAL,
    IMPACT_POSITIVE,
    ZONE_GREEN,
    ZONE_RED,
    Baseline,
    Explanation,
    ExplanationFactor,
    FactorContribution,
    HealthSnapshot,
    WorkSnapshot,
)
from wellzone.normalize import expected_deep_sleep, percent_vs_baseline


MAX_RECOMMENDATIONS = 6


# ---------------------------------------------------------------------------
# Description templates
# ---------------------------------------------------------------------------

RED_TEMPLATES = {
    "sleep_deficit": {
        IMPACT_NEGATIVE: "Your sleep has been well below your personal baseline",
        IMPACT_NEUTRAL: "Your sleep is holding near baseline, but it is not offsetting other strain",
        IMPACT_POSITIVE: "Your sleep is one thing still working in your favour",
    },
    "hrv_stress": {
        IMPACT_NEGATIVE: "Your HRV indicates elevated stress levels",
        IMPACT_NEUTRAL: "Your stress indicators are within range, but watch them closely",
        IMPACT_POSITIVE: "Your heart metrics show low physiological stress",
    },
    "work_overload": {
        IMPACT_NEGATIVE: "You've been working well beyond your usual hours",
        IMPACT_NEUTRAL: "Your work hours are close to normal",
        IMPACT_POSITIVE: "Your work hours are under control",
    },
    "recovery_deficit": {
        IMPACT_NEGATIVE: "Your deep sleep and recovery time have been lower than your needs",
        IMPACT_NEUTRAL: "Your recovery is only just keeping up",
        IMPACT_POSITIVE: "You're still getting restorative sleep",
    },
    "sleep_quality": {
        IMPACT_NEGATIVE: "Short or shallow sleep is limiting how ready you are",
        IMPACT_NEUTRAL: "Your sleep quality is average for you",
        IMPACT_POSITIVE: "Your sleep quality has held up well",
    },
    "hrv_recovery": {
        IMPACT_NEGATIVE: "Your recovery metrics indicate you need more rest",
        IMPACT_NEUTRAL: "Your recovery is at your baseline levels",
        IMPACT_POSITIVE: "Your body is still showing recovery signals",
    },
    "work_balance": {
        IMPACT_NEGATIVE: "Your work-life balance needs attention",
        IMPACT_NEUTRAL: "Your work-life balance is stable for now",
        IMPACT_POSITIVE: "You've kept a reasonable work-life balance",
    },
    "trend": {
        IMPACT_NEGATIVE: "Your recent trends are moving the wrong way",
        IMPACT_NEUTRAL: "Your recent trends are mixed",
        IMPACT_POSITIVE: "Your recent trends are improving",
    },
}

GREEN_TEMPLATES = {
    "sleep_deficit": {
        IMPACT_NEGATIVE: "Your sleep dipped below baseline; keep an eye on it",
        IMPACT_NEUTRAL: "Your sleep is consistent with your personal baseline",
        IMPACT_POSITIVE: "You're fully rested relative to your baseline",
    },
    "hrv_stress": {
        IMPACT_NEGATIVE: "Some stress is showing in your heart metrics",
        IMPACT_NEUTRAL: "Your stress indicators are within your normal range",
        IMPACT_POSITIVE: "Your HRV shows good recovery and low stress",
    },
    "work_overload": {
        IMPACT_NEGATIVE: "Your hours are running high even on a good stretch",
        IMPACT_NEUTRAL: "Your work hours are consistent with your usual pattern",
        IMPACT_POSITIVE: "You've maintained your ideal work hours",
    },
    "recovery_deficit": {
        IMPACT_NEGATIVE: "Deep sleep has been lighter than usual",
        IMPACT_NEUTRAL: "Your recovery metrics are meeting your needs",
        IMPACT_POSITIVE: "You're getting quality restorative sleep",
    },
    "sleep_quality": {
        IMPACT_NEGATIVE: "Sleep quality is the one area holding you back",
        IMPACT_NEUTRAL: "Your sleep quality is solid",
        IMPACT_POSITIVE: "Your sleep quality has been excellent for you",
    },
    "hrv_recovery": {
        IMPACT_NEGATIVE: "Your HRV recovery is lagging behind the rest",
        IMPACT_NEUTRAL: "Your recovery is steady",
        IMPACT_POSITIVE: "Your body is showing strong recovery signals",
    },
    "work_balance": {
        IMPACT_NEGATIVE: "Watch the balance between work and rest",
        IMPACT_NEUTRAL: "Your work-life balance is stable",
        IMPACT_POSITIVE: "You've maintained a healthy work-life balance",
    },
    "trend": {
        IMPACT_NEGATIVE: "Recent trends are softening despite a strong day",
        IMPACT_NEUTRAL: "Your recent trends are steady",
        IMPACT_POSITIVE: "Your recent trends are building momentum",
    },
}

NEUTRAL_TEMPLATES = {
    "sleep_deficit": "Your sleep is close to your personal baseline",
    "hrv_stress": "Your stress indicators are within your normal range",
    "work_overload": "Your work hours are consistent with your usual pattern",
    "recovery_deficit": "Your recovery is roughly keeping pace",
    "sleep_quality": "Your sleep quality is about average for you",
    "hrv_recovery": "Your recovery is at your baseline levels",
    "work_balance": "Your work-life balance is stable",
    "trend": "Your recent trends are mixed",
}

GENERIC_TEMPLATE = {
    IMPACT_NEGATIVE: "This factor is affecting you negatively",
    IMPACT_NEUTRAL: "This factor is within normal range",
    IMPACT_POSITIVE: "This factor is contributing positively",
}


def describe(factor: FactorContribution, zone: str) -> str:
    """Zone-specific wording; yellow blends red, green and neutral sets."""
    if zone == ZONE_RED:
        return RED_TEMPLATES.get(factor.name, GENERIC_TEMPLATE)[factor.impact]
    if zone == ZONE_GREEN:
        return GREEN_TEMPLATES.get(factor.name, GENERIC_TEMPLATE)[factor.impact]

    if factor.impact == IMPACT_NEGATIVE:
        return RED_TEMPLATES.get(factor.name, GENERIC_TEMPLATE)[IMPACT_NEGATIVE]
    if factor.impact == IMPACT_POSITIVE:
        return GREEN_TEMPLATES.get(factor.name, GENERIC_TEMPLATE)[IMPACT_POSITIVE]
    return NEUTRAL_TEMPLATES.get(factor.name, GENERIC_TEMPLATE[IMPACT_NEUTRAL])


# ---------------------------------------------------------------------------
# Value text
# ---------------------------------------------------------------------------

def _percent_text(value, reference, suffix: str = "") -> str:
    pct = percent_vs_baseline(value, reference)
    if pct is None:
        return "no baseline"
    return f"{pct:+.0f}% vs baseline{suffix}"


def format_value(
    factor: FactorContribution,
    health: HealthSnapshot,
    work: WorkSnapshot,
    baseline: Baseline,
    cfg: EngineConfig,
    adjusted: bool = False,
) -> str:
    suffix = " (adjusted)" if adjusted else ""
    name = factor.name

    if name in ("sleep_deficit", "sleep_quality"):
        return _percent_text(health.sleep_hours, baseline.baseline_sleep_hours, suffix)
    if name in ("hrv_stress", "hrv_recovery"):
        return _percent_text(health.heart_rate_variability, baseline.baseline_hrv)
    if name in ("work_overload", "work_balance"):
        return _percent_text(work.hours_worked, baseline.baseline_hours_worked, suffix)
    if name == "recovery_deficit":
        return _percent_text(health.deep_sleep_hours, expected_deep_sleep(baseline, cfg))
    if name == "trend":
        favourable = round((factor.raw_ratio or 0.0) * 3)
        return f"{favourable} of 3 trends favourable"
    return f"Score: {factor.normalized_score:.0f}"


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------

def rank_factors(factors: List[FactorContribution]) -> List[FactorContribution]:
    """Descending |score - 50| * weight, ties broken by factor name."""
    return sorted(factors, key=lambda f: (-f.absolute_impact, f.name))


# ---------------------------------------------------------------------------
# Recommendations
# ---------------------------------------------------------------------------

def generate_recommendations(
    zone: str,
    ranked: List[FactorContribution],
    context: Dict[str, object],
) -> Dict[str, List[str]]:
    personal: List[str] = []
    leadership: List[str] = []

    events = context.get("active_life_events") or []
    impacts = {f.name: f.impact for f in ranked}

    if zone == ZONE_RED:
        if events:
            personal.append("During this time, focus on essentials and be gentle with yourself")
        if context.get("needs_break"):
            personal.append("It has been weeks since a full recovery day; plan time off soon")
        personal.append("Take short breaks every 90 minutes to prevent mental fatigue")
        if impacts.get("sleep_deficit") == IMPACT_NEGATIVE:
            personal.append("Prioritize getting your baseline sleep hours; set a bedtime alarm")
        if impacts.get("work_overload") == IMPACT_NEGATIVE:
            personal.append("Hand off or postpone anything that is not due this week")
        personal.append("Consider using the wellness resources available to you")

        leadership.append("DIVERSION: Reassign non-critical tasks to reduce workload by 20-30%")
        if events:
            leadership.append(f'CONTEXT: Employee is experiencing "{events[0]}"; expectations adjusted')
        if context.get("interactions"):
            leadership.append("COMPOUNDING: Several stressors are elevated together; address workload first")
        leadership.append("SUPPORT: Schedule a 1:1 check-in to discuss priorities")
        leadership.append("PROTECT: Shield from new project requests until recovery")

    elif zone == ZONE_GREEN:
        personal.append("This is a great time to tackle challenging projects")
        personal.append("Maintain your current wellness routine; it's working")

        leadership.append("OPPORTUNITY: Assign high-impact, challenging projects")
        leadership.append("GROWTH: Offer stretch assignments or leadership opportunities")
        leadership.append("RECOGNITION: Acknowledge their peak performance state")

    else:
        personal.append("Maintain your current routine and monitor trends")
        if events:
            personal.append(f"You're managing {events[0]} well")
        if context.get("needs_break"):
            personal.append("Schedule a proper rest day; recovery has been scarce lately")
        personal.append("Focus on a consistent sleep schedule this week")

        leadership.append("MONITOR: Keep standard workload, watch for trend changes")
        leadership.append("BALANCE: Ensure mix of challenging and routine tasks")
        leadership.append("CHECK-IN: Brief weekly sync to gauge wellbeing")

    return {
        "personal": personal[:MAX_RECOMMENDATIONS],
        "leadership": leadership[:MAX_RECOMMENDATIONS],
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def generate_explanation(
    zone: str,
    burnout_score: float,
    readiness_score: float,
    factors: List[FactorContribution],
    health: HealthSnapshot,
    work: WorkSnapshot,
    baseline: Baseline,
    cfg: EngineConfig,
    context: Optional[Dict[str, object]] = None,
) -> Explanation:
    """Build the ranked narrative for an already-classified zone."""
    context = dict(context or {})
    ranked = rank_factors(factors)
    adjusted = bool(context.get("active_life_events"))

    top = [
        ExplanationFactor(
            name=f.name,
            label=f.label,
            impact=f.impact,
            value=format_value(f, health, work, baseline, cfg, adjusted=adjusted),
            description=describe(f, zone),
            weight=f.weight,
        )
        for f in ranked[: cfg.explanation_top_n]
    ]

    return Explanation(
        zone=zone,
        burnout_score=burnout_score,
        readiness_score=readiness_score,
        factors=top,
        recommendations=generate_recommendations(zone, ranked, context),
        context=context,
    )
