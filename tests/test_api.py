from __future__ import annotations

import json

import pytest

from agencyquote import estimate, estimate_from_analysis, estimate_from_text
from agencyquote.models import PricingInputs
from agencyquote.pricing_config import PricingConfiguration


def test_estimate_accepts_persisted_camel_case_inputs() -> None:
    result = estimate(
        {
            "ideaType": "business-website",
            "productFormat": "website",
            "techStack": "react-nextjs",
            "selectedFeatures": [],
            "deliverySpeed": "standard",
            "supportDuration": "none",
        }
    )

    assert result.client_price.total_price == 15000
    assert result.profit.health_status == "critical"
    assert result.timeline.total_weeks == 3
    assert len(result.cost_breakdown) == 8
    assert [w.type for w in result.risk_warnings] == ["margin"]
    assert result.config_version == 0
    assert result.analysis is None


def test_estimate_is_deterministic(startup_inputs: PricingInputs) -> None:
    assert estimate(startup_inputs) == estimate(startup_inputs)


def test_result_serialises_to_json(website_inputs: PricingInputs) -> None:
    data = estimate(website_inputs).to_dict()

    encoded = json.loads(json.dumps(data))
    assert encoded["clientPrice"]["priceRange"] == {"min": 13000, "max": 17000}
    assert encoded["profitAnalysis"]["healthStatus"] == "critical"
    assert encoded["inputs"]["ideaType"] == "business-website"
    assert len(encoded["internalCost"]["laborCosts"]) == 5
    assert "aiAnalysis" not in encoded


def test_invalid_selections_degrade_gracefully() -> None:
    result = estimate(
        {
            "ideaType": "business-website",
            "productFormat": "hologram",
            "techStack": "cobol",
            "deliverySpeed": "yesterday",
            "supportDuration": "forever",
        }
    )

    assert result.inputs.delivery_speed == "standard"
    assert result.inputs.support_duration == "none"
    assert result.client_price.total_price == 15000


def test_configuration_version_is_reported(website_inputs: PricingInputs) -> None:
    config = PricingConfiguration.from_dict({"version": 7, "hourlyRates": {"qa": 50}})

    result = estimate(website_inputs, config)

    assert result.config_version == 7
    assert result.internal_cost.role_cost("qa") == 1500


def test_estimate_from_analysis_attaches_analysis() -> None:
    result = estimate_from_analysis(
        {
            "project_type": "mobile_app",
            "platforms": ["ios", "android"],
            "idea_domain": "fitness",
            "required_features": ["real_time_chat"],
            "complexity_level": "medium",
            "third_party_integrations": [],
            "risk_level": "medium",
            "admin_panel_required": True,
            "ai_features_required": False,
        }
    )

    assert result.inputs.idea_type == "mobile-app"
    assert result.inputs.delivery_speed == "faster"
    assert result.analysis is not None
    assert result.to_dict()["aiAnalysis"]["idea_domain"] == "fitness"  # type: ignore[index]


def test_estimate_from_text_runs_heuristic_pipeline() -> None:
    result = estimate_from_text("A booking app for salons with online payments and reminders")

    assert result.analysis is not None
    assert result.analysis.classification_source == "heuristic"
    assert result.inputs.idea_type == "mobile-app"
    assert result.inputs.support_duration == "6-months"
    assert {"payments", "booking-system", "notifications", "user-accounts"} <= result.inputs.selected_features
    assert result.client_price.total_price > 0


def test_blank_form_yields_empty_quote() -> None:
    result = estimate({"deliverySpeed": "priority"})

    assert result.risk_warnings == []
    assert result.client_price.total_price == 0
    assert result.timeline.phases == ()


@pytest.mark.parametrize("spelling", ["enterprise software", "Enterprise Software", "enterprise_software", "enterprise"])
def test_loose_idea_type_spellings_are_priced_with_their_base_cost(spelling: str) -> None:
    result = estimate({"ideaType": spelling, "selectedFeatures": ["chat"]})

    assert result.inputs.idea_type == "enterprise-software"
    assert result.client_price.base_price == 100000


def test_unknown_idea_type_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown idea type 'space-station'"):
        estimate({"ideaType": "space-station"})
    with pytest.raises(ValueError):
        PricingInputs(idea_type="space-station")
