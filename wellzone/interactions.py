"""
Interaction effects: synergy penalties for co-occurring burnout factors.

Two stressors that are both elevated compound each other more than their
weighted sum suggests. Rules are declared in config.interaction_rules.
"""

import math
from typing import Dict, List, Tuple

from wellzone.config import EngineConfig
from wellzone.models import ThresholdConfig


def interaction_penalty(
    factor_scores: Dict[str, float],
    thresholds: ThresholdConfig,
    cfg: EngineConfig,
) -> Tuple[float, List[Dict[str, object]]]:
    """
    Sum the synergy penalties of every rule whose two factors both exceed
    `interaction_high_threshold`.

    Per rule:   sqrt((f1 - t) * (f2 - t)) * (multiplier - 1)
    Total capped at cfg.interactions.max_total_penalty.

    Returns (penalty, fired) where `fired` lists the contributing pairs.
    """
    if not thresholds.enable_interaction_effects:
        return 0.0, []

    t = thresholds.interaction_high_threshold
    total = 0.0
    fired: List[Dict[str, object]] = []

    for rule in cfg.interaction_rules:
        f1 = factor_scores.get(rule.first, 0.0)
        f2 = factor_scores.get(rule.second, 0.0)

        if f1 > t and f2 > t:
            penalty = math.sqrt((f1 - t) * (f2 - t)) * (rule.multiplier - 1.0)
            total += penalty
            fired.append({
                "factors": (rule.first, rule.second),
                "multiplier": rule.multiplier,
                "penalty": round(penalty, 3),
            })

    return min(total, cfg.interactions.max_total_penalty), fired
