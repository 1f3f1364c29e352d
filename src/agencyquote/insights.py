"""Client-facing cost categories and admin risk warnings."""
from __future__ import annotations

from typing import Callable, List, Tuple

from .models import CostBreakdown, InternalCost, PricingInputs, ProfitAnalysis, RiskWarning, Timeline
from .price_logic import has_ai_scope, round_half_up

SECURITY_SHARE_OF_OVERHEAD = 0.30
TARGET_MARGIN = 40.0
MINIMUM_MARGIN = 30.0
HIGH_FEATURE_COUNT = 8

# (label, color, description, amount extractor)
CLIENT_COST_CATEGORIES: Tuple[Tuple[str, str, str, Callable[[InternalCost], float]], ...] = (
    ("Product Engineering", "#0ea5e9", "Building your product features", lambda c: c.role_cost("frontend")),
    ("UX & Design", "#8b5cf6", "User experience and visual design", lambda c: c.role_cost("designer")),
    ("Business Logic & Automation", "#ec4899", "Backend systems and workflows", lambda c: c.role_cost("backend")),
    ("QA & Testing", "#10b981", "Testing and quality assurance", lambda c: c.role_cost("qa")),
    (
        "Security & Data Protection",
        "#f59e0b",
        "Keeping your data safe",
        lambda c: c.overhead_cost * SECURITY_SHARE_OF_OVERHEAD,
    ),
    ("Product Management", "#6366f1", "Coordination and delivery", lambda c: c.role_cost("pm")),
    (
        "Infrastructure & Tools",
        "#14b8a6",
        "Hosting and development tools",
        lambda c: c.infrastructure_cost + c.overhead_cost * (1 - SECURITY_SHARE_OF_OVERHEAD),
    ),
    ("Support & Risk Coverage", "#ef4444", "Maintenance and contingency", lambda c: c.risk_buffer),
)


def compute_cost_breakdown(internal_cost: InternalCost) -> List[CostBreakdown]:
    """
    Relabel the internal cost into the eight client-facing categories.

    Percentages are rounded per row and are not normalised, so they may not
    add up to exactly 100.  A zero total yields 0% rows.
    """

    total = internal_cost.total_internal_cost
    rows = []
    for label, color, description, extract in CLIENT_COST_CATEGORIES:
        amount = extract(internal_cost)
        percentage = round_half_up(amount / total * 100) if total else 0
        rows.append(
            CostBreakdown(
                label=label,
                percentage=percentage,
                amount=round_half_up(amount),
                color=color,
                description=description,
            )
        )
    return rows


def compute_risk_warnings(
    inputs: PricingInputs,
    profit: ProfitAnalysis,
    timeline: Timeline,
) -> List[RiskWarning]:
    """Evaluate the independent warning rules once, in a fixed order."""

    if not inputs.idea_type:
        return []
    warnings: List[RiskWarning] = []
    margin = profit.profit_margin

    if margin < MINIMUM_MARGIN:
        warnings.append(
            RiskWarning(
                type="margin",
                severity="high",
                message=f"Profit margin is {margin:.1f}% - below recommended 30% minimum",
            )
        )
    elif margin < TARGET_MARGIN:
        warnings.append(
            RiskWarning(
                type="margin",
                severity="medium",
                message=f"Profit margin is {margin:.1f}% - below target 40%",
            )
        )

    if inputs.delivery_speed != "standard":
        weeks = f" over {timeline.total_weeks} weeks" if timeline.total_weeks else ""
        warnings.append(
            RiskWarning(
                type="timeline",
                severity="high" if inputs.delivery_speed == "priority" else "medium",
                message=f"Accelerated timeline ({inputs.delivery_speed}){weeks} increases execution risk",
            )
        )

    if inputs.feature_count > HIGH_FEATURE_COUNT:
        warnings.append(
            RiskWarning(
                type="complexity",
                severity="medium",
                message=f"{inputs.feature_count} features selected - high complexity project",
            )
        )

    if has_ai_scope(inputs):
        warnings.append(
            RiskWarning(
                type="complexity",
                severity="medium",
                message="AI features add technical complexity and uncertainty",
            )
        )

    return warnings


__all__ = ["CLIENT_COST_CATEGORIES", "compute_cost_breakdown", "compute_risk_warnings"]
