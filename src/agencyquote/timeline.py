from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

from .models import InternalCost, Phase, PricingInputs, TeamSize, Timeline
from .price_logic import round_half_up
from .pricing_config import PricingConfiguration

HOURS_PER_WEEK = 40
MIN_TEAM_SIZE = 2
MAX_TEAM_SIZE = 8

PHASE_WEIGHTS: Tuple[Tuple[str, float], ...] = (
    ("Discovery & Planning", 0.15),
    ("Design", 0.20),
    ("Development", 0.45),
    ("Testing & QA", 0.12),
    ("Launch & Handoff", 0.08),
)


def estimate_team_size(feature_count: int) -> TeamSize:
    low = max(MIN_TEAM_SIZE, math.ceil(feature_count / 4))
    high = min(MAX_TEAM_SIZE, math.ceil(feature_count / 2) + 3)
    if low > high:
        low, high = high, low
    return TeamSize(min=low, max=high)


def distribute_phases(total_weeks: int, weights: Sequence[Tuple[str, float]] = PHASE_WEIGHTS) -> Tuple[Phase, ...]:
    """
    Split ``total_weeks`` across weighted phases.

    Every phase but the last gets its rounded share (at least one week once the
    project is longer than three weeks) without exceeding what is left; the
    last phase absorbs the remainder and is never shorter than one week.
    """

    remaining = total_weeks
    phases = []
    for name, weight in weights[:-1]:
        duration = round_half_up(total_weeks * weight)
        if duration == 0 and total_weeks > 3:
            duration = 1
        duration = min(duration, remaining)
        remaining -= duration
        phases.append(Phase(name=name, duration=duration))
    last_name, _ = weights[-1]
    phases.append(Phase(name=last_name, duration=max(1, remaining)))
    return tuple(phases)


def compute_timeline(
    inputs: PricingInputs,
    internal_cost: InternalCost,
    config: Optional[PricingConfiguration] = None,
) -> Timeline:
    """Plan the delivery schedule from the internal cost's labor hours.

    ``total_weeks`` is the sum of the phase durations, which may exceed the
    computed schedule when short projects get minimum-length phases.
    """

    if not inputs.idea_type:
        return Timeline()
    cfg = config or PricingConfiguration.defaults()

    team_size = estimate_team_size(inputs.feature_count)
    total_hours = internal_cost.total_hours
    average_team = (team_size.min + team_size.max) / 2
    raw_weeks = math.ceil(total_hours / (average_team * HOURS_PER_WEEK))

    speed_multiplier = cfg.delivery_multiplier(inputs.delivery_speed)
    weeks = math.ceil(raw_weeks / speed_multiplier) if speed_multiplier > 1.0 else raw_weeks
    weeks = max(1, weeks)

    phases = distribute_phases(weeks)
    return Timeline(
        phases=phases,
        total_weeks=sum(phase.duration for phase in phases),
        team_size=team_size,
    )


__all__ = ["HOURS_PER_WEEK", "PHASE_WEIGHTS", "compute_timeline", "distribute_phases", "estimate_team_size"]
