from __future__ import annotations

from agencyquote.analyzer import analyze_idea_locally, assess_complexity, detect_project_type


def test_booking_app_idea() -> None:
    analysis = analyze_idea_locally("A booking app for salons with online payments and reminders")

    assert analysis.project_type == "mobile_app"
    assert analysis.platforms == ["web", "ios", "android"]
    assert analysis.required_features == [
        "user_authentication",
        "online_payments",
        "booking_system",
        "push_notifications",
    ]
    assert analysis.complexity_level == "medium"
    assert analysis.risk_level == "medium"
    assert analysis.third_party_integrations == ["Stripe", "Firebase Auth", "SendGrid"]
    assert analysis.admin_panel_required is False
    assert analysis.confidence == 0.5
    assert analysis.classification_source == "heuristic"


def test_short_plain_description_is_basic_website() -> None:
    analysis = analyze_idea_locally("Simple site")

    assert analysis.project_type == "website"
    assert analysis.platforms == ["web"]
    assert analysis.required_features == []
    assert analysis.complexity_level == "basic"
    assert analysis.risk_level == "low"


def test_ai_keywords_mark_advanced_ai_product() -> None:
    analysis = analyze_idea_locally("An AI chatbot")

    assert analysis.project_type == "ai_product"
    assert analysis.complexity_level == "advanced"
    assert analysis.ai_features_required is True
    assert analysis.admin_panel_required is True
    assert "real_time_chat" in analysis.required_features
    assert "OpenAI/Gemini" in analysis.third_party_integrations


def test_project_type_precedence() -> None:
    assert detect_project_type("web portal with a companion app") == "web_and_app"
    assert detect_project_type("android client") == "mobile_app"
    assert detect_project_type("enterprise saas suite") == "enterprise"


def test_feature_count_drives_complexity() -> None:
    assert assess_complexity("notes", 5) == ("medium", "medium")
    assert assess_complexity("notes", 9) == ("advanced", "high")
    assert assess_complexity("notes", 4) == ("basic", "low")
