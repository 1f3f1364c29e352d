"""Internal cost, client price and profit calculations.

All functions are pure: they read a :class:`PricingInputs` and a
:class:`PricingConfiguration` and return fresh frozen results.
"""
from __future__ import annotations

import logging
import math
from typing import Optional

from .catalog import AI_FEATURE_ID, feature_hours
from .models import (
    AI_IDEA_TYPE,
    ROLES,
    ClientPrice,
    InternalCost,
    PriceRange,
    PricingInputs,
    ProfitAnalysis,
    RoleCost,
)
from .pricing_config import PricingConfiguration

logger = logging.getLogger(__name__)

INFRASTRUCTURE_MONTHS = 6
OVERHEAD_RATE = 0.15
RUSH_EFFORT_ADJUSTMENT = 1.2

RISK_BUFFER_BASE = 0.10
RISK_BUFFER_CAP = 0.20

PRICE_RANGE_LOW = 0.85
PRICE_RANGE_HIGH = 1.15

HEALTHY_MARGIN = 45.0
WARNING_MARGIN = 30.0


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""

    if value < 0:
        return -int(math.floor(-value + 0.5))
    return int(math.floor(value + 0.5))


def round_to_thousand(value: float) -> int:
    return round_half_up(value / 1000.0) * 1000


def _whole(value: float) -> float:
    # Keep whole-dollar amounts integral in serialised quotes; cents pass through.
    return int(value) if float(value).is_integer() else value


def has_ai_scope(inputs: PricingInputs) -> bool:
    return AI_FEATURE_ID in inputs.selected_features or inputs.idea_type == AI_IDEA_TYPE


def complexity_tier(feature_count: int) -> float:
    if feature_count <= 3:
        return 1.0
    if feature_count <= 6:
        return 1.15
    if feature_count <= 9:
        return 1.30
    return 1.50


def risk_buffer_percentage(feature_count: int, has_ai: bool) -> float:
    buffer = RISK_BUFFER_BASE
    if feature_count > 6:
        buffer += 0.03
    if feature_count > 9:
        buffer += 0.02
    if has_ai:
        buffer += 0.05
    return min(buffer, RISK_BUFFER_CAP)


def delivery_adjustment(inputs: PricingInputs, config: PricingConfiguration) -> float:
    """Extra effort factor applied to hours when delivery is rushed."""

    if config.delivery_multiplier(inputs.delivery_speed) > 1.0:
        return RUSH_EFFORT_ADJUSTMENT
    return 1.0


def compute_internal_cost(
    inputs: PricingInputs, config: Optional[PricingConfiguration] = None
) -> InternalCost:
    """
    Estimate what delivering ``inputs`` costs the agency.

    Per-role hours are the idea-type baseline plus catalog feature hours,
    scaled by the product format multiplier and the rush adjustment.  Labor is
    priced at the configured hourly rates, then infrastructure (six months),
    15% overhead and a complexity-driven risk buffer are layered on top.
    """

    if not inputs.idea_type:
        return InternalCost()
    cfg = config or PricingConfiguration.defaults()

    base_hours = cfg.base_hours(inputs.idea_type)
    extra_hours = feature_hours(inputs.selected_features)
    format_multiplier = cfg.format_multiplier(inputs.product_format)
    adjustment = delivery_adjustment(inputs, cfg)

    labor_costs = []
    for role in ROLES:
        hours = round_half_up((base_hours.get(role) + extra_hours.get(role)) * format_multiplier * adjustment)
        rate = cfg.hourly_rate(role)
        labor_costs.append(RoleCost(role=role, hours=hours, hourly_rate=rate, total_cost=hours * rate))

    total_labor_cost = sum(item.total_cost for item in labor_costs)
    infrastructure_cost = cfg.infrastructure_monthly(inputs.idea_type) * INFRASTRUCTURE_MONTHS
    overhead_cost = total_labor_cost * OVERHEAD_RATE

    buffer_pct = risk_buffer_percentage(inputs.feature_count, has_ai_scope(inputs))
    risk_buffer = (total_labor_cost + infrastructure_cost + overhead_cost) * buffer_pct

    total = total_labor_cost + infrastructure_cost + overhead_cost + risk_buffer
    logger.debug(
        "internal_cost idea=%s labor=%.2f infra=%.2f overhead=%.2f risk=%.2f (%.0f%%)",
        inputs.idea_type,
        total_labor_cost,
        infrastructure_cost,
        overhead_cost,
        risk_buffer,
        buffer_pct * 100,
    )
    return InternalCost(
        labor_costs=tuple(labor_costs),
        total_labor_cost=total_labor_cost,
        infrastructure_cost=infrastructure_cost,
        overhead_cost=overhead_cost,
        risk_buffer=risk_buffer,
        risk_buffer_percentage=buffer_pct,
        total_internal_cost=total,
    )


def _features_cost(inputs: PricingInputs, cfg: PricingConfiguration) -> float:
    if cfg.feature_costs:
        return sum(cfg.feature_cost(feature_id) for feature_id in sorted(inputs.selected_features))
    return inputs.feature_count * cfg.feature_base_cost


def compute_client_price(
    inputs: PricingInputs, config: Optional[PricingConfiguration] = None
) -> ClientPrice:
    """
    Price the project for the client.

    ``(base + features) x tech x complexity x timeline`` is rounded to the
    nearest thousand before the flat support package is added unrounded.  The AI
    complexity signal can only raise the feature-count complexity tier.
    """

    if not inputs.idea_type:
        return ClientPrice()
    cfg = config or PricingConfiguration.defaults()

    base_price = cfg.base_cost(inputs.idea_type)
    features_cost = _features_cost(inputs, cfg)
    tech_multiplier = cfg.tech_multiplier(inputs.tech_stack)

    complexity_multiplier = complexity_tier(inputs.feature_count)
    if inputs.complexity_level:
        complexity_multiplier = max(complexity_multiplier, cfg.complexity_multiplier(inputs.complexity_level))

    timeline_multiplier = cfg.delivery_multiplier(inputs.delivery_speed)
    support_cost = cfg.support_package_cost(inputs.support_duration)

    core = (base_price + features_cost) * tech_multiplier * complexity_multiplier * timeline_multiplier
    total_price = round_to_thousand(core) + _whole(support_cost)
    price_range = PriceRange(
        min=round_to_thousand(total_price * PRICE_RANGE_LOW),
        max=round_to_thousand(total_price * PRICE_RANGE_HIGH),
    )
    return ClientPrice(
        base_price=base_price,
        features_cost=features_cost,
        tech_multiplier=tech_multiplier,
        complexity_multiplier=complexity_multiplier,
        timeline_multiplier=timeline_multiplier,
        support_cost=support_cost,
        total_price=total_price,
        price_range=price_range,
    )


def classify_margin(profit_margin: float) -> str:
    if profit_margin >= HEALTHY_MARGIN:
        return "healthy"
    if profit_margin >= WARNING_MARGIN:
        return "warning"
    return "critical"


def compute_profit(client_price: ClientPrice, internal_cost: InternalCost) -> ProfitAnalysis:
    """Compare the quote to the internal cost; a zero quote reports a 0% margin."""

    price = float(client_price.total_price)
    cost = float(internal_cost.total_internal_cost)
    profit = price - cost
    profit_margin = (profit / price) * 100 if price else 0.0
    return ProfitAnalysis(
        client_price=price,
        internal_cost=cost,
        profit=profit,
        profit_margin=profit_margin,
        health_status=classify_margin(profit_margin),
    )


__all__ = [
    "classify_margin",
    "complexity_tier",
    "compute_client_price",
    "compute_internal_cost",
    "compute_profit",
    "delivery_adjustment",
    "has_ai_scope",
    "risk_buffer_percentage",
    "round_half_up",
    "round_to_thousand",
]
