"""Offline keyword heuristic that reads a product idea into an :class:`AIAnalysis`.

Used when no language model is configured, so ``agencyquote quote --idea``
always produces a quote.  Matching is plain substring search on the lowered
text, so short keywords such as ``ai`` also hit inside longer words.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from .ai_mapper import AIAnalysis

logger = logging.getLogger(__name__)

HEURISTIC_CONFIDENCE = 0.5
AUTH_TEXT_LENGTH = 50

FEATURE_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "user_authentication": (
        "login", "sign up", "account", "user", "auth", "profile", "member", "registration", "access",
    ),
    "online_payments": (
        "pay", "stripe", "money", "transaction", "subscription", "buy", "sell", "store", "shop",
        "ecommerce", "billing", "cart", "checkout", "invoice", "clearing",
    ),
    "booking_system": ("book", "schedule", "reservation", "appointment", "calendar", "date", "meeting"),
    "real_time_chat": ("chat", "message", "messaging", "talk", "communicate", "dm", "inbox"),
    "admin_dashboard": (
        "admin", "panel", "dashboard", "control", "manage", "analytics", "report", "cms", "system",
        "clearing", "matching", "automation",
    ),
    "ai_recommendations": (
        "ai", "recommend", "intelligence", "robot", "learn", "suggest", "ml", "machine learning", "gpt",
        "bot", "automation",
    ),
    "geolocation": ("map", "location", "gps", "track", "route", "navigation", "nearby"),
    "push_notifications": ("notify", "notification", "alert", "remind", "push", "update"),
    "file_upload": (
        "upload", "image", "picture", "file", "video", "document", "media", "gallery", "invoice", "bill",
        "receipt",
    ),
    "social_login": ("google", "facebook", "social", "oauth", "apple"),
    "search_functionality": ("search", "find", "filter", "query", "lookup", "matching", "clearing"),
    "video_streaming": ("video", "stream", "live", "zoom", "broadcast"),
    "multi_language": (
        "language", "translation", "translate", "english", "spanish", "localization", "global",
    ),
    "data_security": ("secure", "security", "private", "privacy", "encrypt", "financial", "clearing"),
}

ADVANCED_KEYWORDS = ("ai", "intelligence", "crypto", "blockchain", "streaming", "real time", "game", "vr", "ar")
MEDIUM_KEYWORDS = ("marketplace", "social", "booking", "tracking", "platform")

INTEGRATIONS: Tuple[Tuple[str, str], ...] = (
    ("online_payments", "Stripe"),
    ("geolocation", "Google Maps"),
    ("user_authentication", "Firebase Auth"),
    ("push_notifications", "SendGrid"),
    ("ai_recommendations", "OpenAI/Gemini"),
)


def _contains_any(text: str, keywords: Tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


def detect_features(text: str) -> List[str]:
    lowered = text.lower()
    features: List[str] = []
    if len(lowered) > AUTH_TEXT_LENGTH:
        features.append("user_authentication")
    for feature, keywords in FEATURE_KEYWORDS.items():
        if feature not in features and _contains_any(lowered, keywords):
            features.append(feature)
    return features


def assess_complexity(text: str, feature_count: int) -> Tuple[str, str]:
    """Return ``(complexity_level, risk_level)``."""

    lowered = text.lower()
    if _contains_any(lowered, ADVANCED_KEYWORDS) or feature_count > 8:
        return "advanced", "high"
    if _contains_any(lowered, MEDIUM_KEYWORDS) or feature_count > 4:
        return "medium", "medium"
    return "basic", "low"


def detect_project_type(text: str) -> str:
    lowered = text.lower()
    if "app" in lowered and "web" in lowered:
        return "web_and_app"
    if _contains_any(lowered, ("app", "ios", "android")):
        return "mobile_app"
    if _contains_any(lowered, ("ai", "intelligence")):
        return "ai_product"
    if _contains_any(lowered, ("enterprise", "saas")):
        return "enterprise"
    return "website"


def analyze_idea_locally(text: str) -> AIAnalysis:
    features = detect_features(text)
    complexity, risk = assess_complexity(text, len(features))
    project_type = detect_project_type(text)
    integrations = [name for feature, name in INTEGRATIONS if feature in features]
    logger.debug(
        "heuristic analysis: type=%s complexity=%s features=%s", project_type, complexity, features
    )
    return AIAnalysis(
        project_type=project_type,
        platforms=["web", "ios", "android"] if "app" in project_type else ["web"],
        idea_domain="custom_project",
        required_features=features,
        complexity_level=complexity,
        third_party_integrations=integrations,
        risk_level=risk,
        admin_panel_required="admin_dashboard" in features or complexity == "advanced",
        ai_features_required="ai_recommendations" in features,
        confidence=HEURISTIC_CONFIDENCE,
        classification_source="heuristic",
        reasoning="Heuristic analysis based on keyword matching.",
    )


__all__ = ["analyze_idea_locally", "assess_complexity", "detect_features", "detect_project_type"]
