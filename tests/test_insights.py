from __future__ import annotations

from dataclasses import replace

from agencyquote.insights import compute_cost_breakdown, compute_risk_warnings
from agencyquote.models import InternalCost, PricingInputs, ProfitAnalysis, Timeline
from agencyquote.price_logic import compute_client_price, compute_internal_cost, compute_profit
from agencyquote.timeline import compute_timeline


def _warnings(inputs: PricingInputs):
    cost = compute_internal_cost(inputs)
    profit = compute_profit(compute_client_price(inputs), cost)
    return compute_risk_warnings(inputs, profit, compute_timeline(inputs, cost))


def test_website_breakdown(website_inputs: PricingInputs) -> None:
    rows = compute_cost_breakdown(compute_internal_cost(website_inputs))

    by_label = {row.label: (row.percentage, row.amount) for row in rows}
    assert by_label == {
        "Product Engineering": (26, 2800),
        "UX & Design": (20, 2100),
        "Business Logic & Automation": (13, 1400),
        "QA & Testing": (7, 750),
        "Security & Data Protection": (3, 358),
        "Product Management": (8, 900),
        "Infrastructure & Tools": (13, 1435),
        "Support & Risk Coverage": (9, 974),
    }
    assert [row.label for row in rows][0] == "Product Engineering"
    assert all(row.color.startswith("#") for row in rows)


def test_breakdown_amounts_cover_internal_cost(startup_inputs: PricingInputs) -> None:
    cost = compute_internal_cost(startup_inputs)
    rows = compute_cost_breakdown(cost)

    assert abs(sum(row.amount for row in rows) - cost.total_internal_cost) <= len(rows)
    assert 96 <= sum(row.percentage for row in rows) <= 104


def test_zero_cost_breakdown_has_zero_percentages() -> None:
    rows = compute_cost_breakdown(InternalCost())

    assert len(rows) == 8
    assert {row.percentage for row in rows} == {0}
    assert {row.amount for row in rows} == {0}


def test_low_margin_website_warns_once(website_inputs: PricingInputs) -> None:
    warnings = _warnings(website_inputs)

    assert [(w.type, w.severity) for w in warnings] == [("margin", "high")]
    assert warnings[0].message == "Profit margin is 28.6% - below recommended 30% minimum"


def test_priority_delivery_warning(website_inputs: PricingInputs) -> None:
    warnings = _warnings(replace(website_inputs, delivery_speed="priority"))

    assert [(w.type, w.severity) for w in warnings] == [("timeline", "high")]
    assert warnings[0].message == "Accelerated timeline (priority) over 2 weeks increases execution risk"


def test_margin_between_thirty_and_forty_is_medium(website_inputs: PricingInputs) -> None:
    profit = ProfitAnalysis(
        client_price=100.0, internal_cost=65.0, profit=35.0, profit_margin=35.0, health_status="warning"
    )

    warnings = compute_risk_warnings(website_inputs, profit, Timeline())

    assert [(w.type, w.severity) for w in warnings] == [("margin", "medium")]
    assert warnings[0].message == "Profit margin is 35.0% - below target 40%"


def test_feature_heavy_ai_project_warnings(startup_inputs: PricingInputs) -> None:
    inputs = replace(
        startup_inputs,
        selected_features=startup_inputs.selected_features | {"ai-recommendations"},
        delivery_speed="faster",
    )

    warnings = _warnings(inputs)

    assert [(w.type, w.severity) for w in warnings] == [
        ("margin", "high"),
        ("timeline", "medium"),
        ("complexity", "medium"),
        ("complexity", "medium"),
    ]
    assert warnings[2].message == "11 features selected - high complexity project"
    assert warnings[3].message == "AI features add technical complexity and uncertainty"


def test_blank_form_has_no_warnings() -> None:
    inputs = PricingInputs(delivery_speed="priority", selected_features=frozenset({"chat"}))

    assert _warnings(inputs) == []
