from __future__ import annotations

from dataclasses import replace

import pytest

from agencyquote.models import ClientPrice, InternalCost, PricingInputs
from agencyquote.price_logic import (
    classify_margin,
    complexity_tier,
    compute_client_price,
    compute_internal_cost,
    compute_profit,
    risk_buffer_percentage,
    round_half_up,
    round_to_thousand,
)
from agencyquote.pricing_config import PricingConfiguration


def test_rounding_halves_go_away_from_zero() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(-2.5) == -3
    assert round_to_thousand(12750) == 13000
    assert round_to_thousand(17250) == 17000
    assert round_to_thousand(499.99) == 0


def test_website_internal_cost(website_inputs: PricingInputs) -> None:
    cost = compute_internal_cost(website_inputs)

    hours = {item.role: item.hours for item in cost.labor_costs}
    assert hours == {"frontend": 80, "backend": 40, "designer": 60, "qa": 30, "pm": 20}
    assert cost.role_cost("qa") == 750
    assert cost.role_cost("pm") == 900
    assert cost.total_labor_cost == 7950
    assert cost.infrastructure_cost == 600
    assert cost.overhead_cost == pytest.approx(1192.5)
    assert cost.risk_buffer_percentage == pytest.approx(0.10)
    assert cost.risk_buffer == pytest.approx(974.25)
    assert cost.total_internal_cost == pytest.approx(10716.75)


def test_website_client_price(website_inputs: PricingInputs) -> None:
    price = compute_client_price(website_inputs)

    assert price.base_price == 15000
    assert price.features_cost == 0
    assert price.complexity_multiplier == 1.0
    assert price.total_price == 15000
    assert (price.price_range.min, price.price_range.max) == (13000, 17000)


def test_priority_delivery_raises_hours_and_price(website_inputs: PricingInputs) -> None:
    rushed = replace(website_inputs, delivery_speed="priority")

    cost = compute_internal_cost(rushed)
    price = compute_client_price(rushed)

    assert [item.hours for item in cost.labor_costs] == [96, 48, 72, 36, 24]
    assert cost.total_labor_cost == 9540
    assert cost.total_internal_cost == pytest.approx(12728.1)
    assert price.timeline_multiplier == 1.6
    assert price.total_price == 24000
    assert (price.price_range.min, price.price_range.max) == (20000, 28000)


def test_large_startup_quote(startup_inputs: PricingInputs) -> None:
    cost = compute_internal_cost(startup_inputs)
    price = compute_client_price(startup_inputs)

    assert [item.hours for item in cost.labor_costs] == [1134, 1350, 603, 666, 391]
    assert cost.total_labor_cost == 142290
    assert cost.infrastructure_cost == 3000
    assert cost.risk_buffer_percentage == pytest.approx(0.15)
    assert cost.total_internal_cost == pytest.approx(166633.5 * 1.15)

    assert price.features_cost == 50000
    assert price.complexity_multiplier == 1.5
    assert price.support_cost == 10800
    assert price.total_price == 160800
    assert (price.price_range.min, price.price_range.max) == (137000, 185000)


def test_total_price_rounding(startup_inputs: PricingInputs, website_inputs: PricingInputs) -> None:
    for inputs in (website_inputs, startup_inputs, replace(website_inputs, tech_stack="flutter")):
        price = compute_client_price(inputs)
        assert (price.total_price - price.support_cost) % 1000 == 0


def test_configured_feature_costs_replace_flat_rate(website_inputs: PricingInputs) -> None:
    config = PricingConfiguration.from_dict({"featureCosts": {"chat": 9000}})
    inputs = replace(website_inputs, selected_features=frozenset({"chat", "search"}))

    price = compute_client_price(inputs, config)

    assert price.features_cost == 14000
    assert price.total_price == 29000


def test_complexity_level_only_raises_tier(website_inputs: PricingInputs) -> None:
    basic = compute_client_price(replace(website_inputs, complexity_level="basic"))
    advanced = compute_client_price(replace(website_inputs, complexity_level="advanced"))
    crowded = replace(
        website_inputs,
        selected_features=frozenset({f"extra-{n}" for n in range(10)}),
        complexity_level="medium",
    )

    assert basic.complexity_multiplier == 1.0
    assert advanced.complexity_multiplier == 1.6
    assert advanced.total_price == 24000
    assert compute_client_price(crowded).complexity_multiplier == 1.5


def test_unknown_features_count_for_price_but_not_hours(website_inputs: PricingInputs) -> None:
    inputs = replace(website_inputs, selected_features=frozenset({"geolocation"}))

    assert compute_client_price(inputs).features_cost == 5000
    assert compute_internal_cost(inputs).total_labor_cost == 7950


def test_ai_scope_raises_risk_buffer_but_not_price_tier(website_inputs: PricingInputs) -> None:
    inputs = replace(website_inputs, selected_features=frozenset({"ai-recommendations"}))

    cost = compute_internal_cost(inputs)
    price = compute_client_price(inputs)

    assert cost.risk_buffer_percentage == pytest.approx(0.15)
    assert price.complexity_multiplier == 1.0


def test_complexity_tiers_and_risk_buffer_cap() -> None:
    assert [complexity_tier(n) for n in (0, 3, 4, 6, 7, 9, 10)] == [1.0, 1.0, 1.15, 1.15, 1.3, 1.3, 1.5]
    assert risk_buffer_percentage(0, False) == pytest.approx(0.10)
    assert risk_buffer_percentage(7, False) == pytest.approx(0.13)
    assert risk_buffer_percentage(12, True) == pytest.approx(0.20)


def test_missing_idea_type_yields_zero_results() -> None:
    inputs = PricingInputs(product_format="website", selected_features=frozenset({"chat"}))

    assert compute_internal_cost(inputs) == InternalCost()
    assert compute_client_price(inputs) == ClientPrice()


@pytest.mark.parametrize(
    "margin, status",
    [(45.0, "healthy"), (44.999, "warning"), (30.0, "warning"), (29.999, "critical"), (-10.0, "critical")],
)
def test_margin_classification_boundaries(margin: float, status: str) -> None:
    assert classify_margin(margin) == status


def test_profit_for_website(website_inputs: PricingInputs) -> None:
    profit = compute_profit(compute_client_price(website_inputs), compute_internal_cost(website_inputs))

    assert profit.client_price == 15000
    assert profit.profit == pytest.approx(4283.25)
    assert profit.profit_margin == pytest.approx(28.555)
    assert profit.health_status == "critical"


def test_zero_price_reports_zero_margin() -> None:
    profit = compute_profit(ClientPrice(), InternalCost(total_internal_cost=500.0))

    assert profit.profit == -500.0
    assert profit.profit_margin == 0.0
    assert profit.health_status == "critical"


def test_more_features_never_lower_the_quote(website_inputs: PricingInputs) -> None:
    previous_price, previous_cost = 0, 0.0
    features: set = set()
    for feature_id in ("chat", "search", "payments", "analytics", "backups", "compliance", "invoicing"):
        features.add(feature_id)
        inputs = replace(website_inputs, selected_features=frozenset(features))
        price = compute_client_price(inputs).total_price
        cost = compute_internal_cost(inputs).total_internal_cost
        assert price >= previous_price
        assert cost >= previous_cost
        previous_price, previous_cost = price, cost


@pytest.mark.parametrize("idea_type", ["business-website", "mobile-app", "enterprise-software", "ai-powered-product"])
@pytest.mark.parametrize("delivery_speed", ["standard", "faster", "priority"])
@pytest.mark.parametrize("support_duration", ["none", "3-months", "12-months"])
def test_quotes_land_on_whole_thousands(idea_type: str, delivery_speed: str, support_duration: str) -> None:
    inputs = PricingInputs(
        idea_type=idea_type,
        product_format="website-and-app",
        tech_stack="react-native",
        selected_features=frozenset({"chat", "payments", "search", "backups", "compliance"}),
        delivery_speed=delivery_speed,
        support_duration=support_duration,
    )

    price = compute_client_price(inputs)
    cost = compute_internal_cost(inputs)

    assert price.total_price % 1000 == 0
    assert price.price_range.min % 1000 == 0
    assert price.price_range.max % 1000 == 0
    assert price.price_range.min <= price.total_price <= price.price_range.max
    assert cost.risk_buffer_percentage <= 0.20


def test_fractional_support_package_is_added_unrounded(website_inputs: PricingInputs) -> None:
    config = PricingConfiguration.from_dict({"supportPackages": {"3-months": 6000.5}})

    price = compute_client_price(replace(website_inputs, support_duration="3-months"), config)

    assert price.support_cost == 6000.5
    assert price.total_price == 21000.5
