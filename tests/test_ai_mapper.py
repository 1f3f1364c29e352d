from __future__ import annotations

from typing import Dict

import pytest

from agencyquote.ai_mapper import (
    AIAnalysis,
    FeatureRule,
    apply_implicit_features,
    map_ai_output_to_pricing_inputs,
    normalize_ai_features,
    pricing_inputs_from_analysis,
    summarize_analysis,
    validate_ai_analysis,
)


def _analysis(**overrides: object) -> Dict[str, object]:
    data: Dict[str, object] = {
        "project_type": "website",
        "platforms": ["web"],
        "idea_domain": "hospitality",
        "required_features": [],
        "complexity_level": "basic",
        "third_party_integrations": [],
        "risk_level": "low",
        "admin_panel_required": False,
        "ai_features_required": False,
    }
    data.update(overrides)
    return data


def test_basic_website_strips_app_features() -> None:
    mapped = map_ai_output_to_pricing_inputs(
        _analysis(required_features=["user_authentication", "analytics_dashboard", "online_payments"])
    )

    assert mapped == {
        "idea_type": "business-website",
        "product_format": "website",
        "tech_stack": "react-nextjs",
        "selected_features": ["payments"],
        "delivery_speed": "priority",
        "support_duration": "3-months",
        "complexity_level": "basic",
    }


def test_medium_mobile_app_gets_standard_features() -> None:
    mapped = map_ai_output_to_pricing_inputs(
        _analysis(
            project_type="mobile_app",
            platforms=["ios", "android"],
            required_features=["real_time_chat"],
            complexity_level="medium",
        )
    )

    assert mapped["idea_type"] == "mobile-app"
    assert mapped["product_format"] == "mobile-app"
    assert mapped["tech_stack"] == "react-native"
    assert mapped["selected_features"] == ["chat", "user-accounts", "admin-control", "notifications", "file-uploads"]
    assert mapped["delivery_speed"] == "faster"
    assert mapped["support_duration"] == "6-months"


def test_advanced_enterprise_adds_full_baseline() -> None:
    mapped = map_ai_output_to_pricing_inputs(
        _analysis(project_type="enterprise", platforms=[], complexity_level="advanced")
    )

    assert mapped["idea_type"] == "enterprise-software"
    assert mapped["product_format"] == "full-ecosystem"
    assert "tech_stack" not in mapped
    assert set(mapped["selected_features"]) == {  # type: ignore[arg-type]
        "user-accounts",
        "admin-control",
        "notifications",
        "file-uploads",
        "analytics",
        "search",
        "data-security",
        "backups",
    }
    assert mapped["delivery_speed"] == "standard"
    assert mapped["support_duration"] == "12-months"


def test_enterprise_support_does_not_depend_on_complexity() -> None:
    mapped = map_ai_output_to_pricing_inputs(_analysis(project_type="enterprise-software"))
    assert mapped["support_duration"] == "12-months"


@pytest.mark.parametrize(
    "platforms, stack",
    [
        (["web", "ios"], "react-nextjs"),
        (["ios", "android"], "react-native"),
        (["android"], "native-android"),
        (["iOS"], "native-ios"),
    ],
)
def test_platforms_choose_tech_stack(platforms: list, stack: str) -> None:
    assert map_ai_output_to_pricing_inputs(_analysis(platforms=platforms))["tech_stack"] == stack


def test_ai_product_adds_recommendations() -> None:
    features = apply_implicit_features(_analysis(project_type="ai_product", platforms=["android"]))
    assert features == ["user-accounts", "admin-control", "notifications", "file-uploads", "ai-recommendations"]


def test_unknown_project_type_falls_back() -> None:
    mapped = map_ai_output_to_pricing_inputs(_analysis(project_type="metaverse"))

    assert (mapped["idea_type"], mapped["product_format"]) == ("startup-product", "website")
    assert mapped["selected_features"] == []


def test_startup_with_payments_keeps_payments() -> None:
    features = apply_implicit_features(
        _analysis(project_type="startup_product", required_features=["online_payments"])
    )
    assert features[0] == "payments"
    assert features.count("payments") == 1


def test_custom_rule_table() -> None:
    rules = (FeatureRule("always-chat", lambda p, c, s: True, add=("chat",)),)
    assert apply_implicit_features(_analysis(), rules) == ["chat"]


def test_feature_normalisation() -> None:
    assert normalize_ai_features(
        ["push_notifications", "Push Notifications", "video-calls", "email_notifications", "Blockchain"]
    ) == ["notifications", "notifications", "video-calls", "notifications", "Blockchain"]


def test_pricing_inputs_from_analysis_deduplicates() -> None:
    inputs = pricing_inputs_from_analysis(
        AIAnalysis(
            project_type="web_and_app",
            platforms=["web", "ios", "android"],
            required_features=["push_notifications", "email_notifications"],
            complexity_level="medium",
        )
    )

    assert inputs.idea_type == "website-mobile-app"
    assert inputs.product_format == "website-and-app"
    assert inputs.selected_features == frozenset({"notifications", "user-accounts", "admin-control", "file-uploads"})
    assert inputs.complexity_level == "medium"


def test_validate_requires_every_field() -> None:
    payload = _analysis()
    assert isinstance(validate_ai_analysis(payload), AIAnalysis)

    del payload["risk_level"]
    assert validate_ai_analysis(payload) is None
    assert validate_ai_analysis("website please") is None
    assert validate_ai_analysis({}) is None


def test_summary_text() -> None:
    summary = summarize_analysis(_analysis(project_type="web_and_app", platforms=["web", "ios"], required_features=["a", "b"]))
    assert summary == "web and app for web + ios with 2 features (basic complexity)"


def test_quoted_booleans_are_parsed() -> None:
    analysis = AIAnalysis.from_dict(_analysis(admin_panel_required="false", ai_features_required="True"))

    assert analysis.admin_panel_required is False
    assert analysis.ai_features_required is True
