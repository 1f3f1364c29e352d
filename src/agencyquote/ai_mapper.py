"""
Translate natural-language idea analysis into pricing inputs.

The analysis comes from the LLM analyzer (or the offline heuristic in
:mod:`agencyquote.analyzer`) and is loosely typed.  Mapping picks the idea
type, format and stack, inverts complexity into a delivery speed, derives a
support package and fills in baseline features the free-text extraction tends
to omit.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .catalog import AI_FEATURE_ID, FEATURE_IDS
from .models import COMPLEXITY_LEVELS, PricingInputs

logger = logging.getLogger(__name__)

REQUIRED_FIELDS: Tuple[str, ...] = (
    "project_type",
    "platforms",
    "idea_domain",
    "required_features",
    "complexity_level",
    "third_party_integrations",
    "risk_level",
    "admin_panel_required",
    "ai_features_required",
)

# Canonical analysis project types and the spellings accepted for each.
PROJECT_TYPE_ALIASES: Dict[str, str] = {
    "website": "website",
    "business-website": "website",
    "mobile_app": "mobile_app",
    "mobile-app": "mobile_app",
    "web_and_app": "web_and_app",
    "website-mobile-app": "web_and_app",
    "enterprise": "enterprise",
    "enterprise-software": "enterprise",
    "ai_product": "ai_product",
    "ai-powered-product": "ai_product",
    "startup_product": "startup_product",
    "startup-product": "startup_product",
}

# project type -> (idea type, product format)
PROJECT_TYPE_MAP: Dict[str, Tuple[str, str]] = {
    "website": ("business-website", "website"),
    "mobile_app": ("mobile-app", "mobile-app"),
    "web_and_app": ("website-mobile-app", "website-and-app"),
    "enterprise": ("enterprise-software", "full-ecosystem"),
    "ai_product": ("ai-powered-product", "full-ecosystem"),
    "startup_product": ("startup-product", "website-and-app"),
}
FALLBACK_PROJECT = ("startup-product", "website")

# Simple projects can be rushed; complex ones cannot.
COMPLEXITY_DELIVERY: Dict[str, str] = {
    "basic": "priority",
    "medium": "faster",
    "advanced": "standard",
}

FEATURE_ALIASES: Dict[str, str] = {
    "user_authentication": "user-accounts",
    "online_payments": "payments",
    "booking_system": "booking-system",
    "admin_dashboard": "admin-control",
    "real_time_chat": "chat",
    "ai_recommendations": AI_FEATURE_ID,
    "push_notifications": "notifications",
    "email_notifications": "notifications",
    "social_login": "social-login",
    "analytics_dashboard": "analytics",
    "file_upload": "file-uploads",
    "search_functionality": "search",
    "geolocation": "geolocation",
    "video_streaming": "video-calls",
    "multi_language": "multi-language",
    "data_security": "data-security",
    "backups": "backups",
    "compliance": "compliance",
}

STANDARD_FEATURES: Tuple[str, ...] = ("user-accounts", "admin-control", "notifications", "file-uploads")
ADVANCED_FEATURES: Tuple[str, ...] = STANDARD_FEATURES + ("analytics", "search")
ENTERPRISE_FEATURES: Tuple[str, ...] = ADVANCED_FEATURES + ("data-security", "backups")
STATIC_SITE_STRIP: Tuple[str, ...] = ("user-accounts", "admin-control", "notifications", "analytics")
APP_PROJECT_TYPES = frozenset({"mobile_app", "web_and_app", "startup_product", "ai_product"})

_TRUE_STRINGS = {"1", "true", "yes", "on"}


def _as_bool(value: object) -> bool:
    # Model JSON sometimes quotes booleans ("false").
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


@dataclass
class AIAnalysis:
    """Structured reading of a client's free-text product idea."""

    project_type: str
    platforms: List[str] = field(default_factory=list)
    idea_domain: str = ""
    required_features: List[str] = field(default_factory=list)
    complexity_level: str = "basic"
    third_party_integrations: List[str] = field(default_factory=list)
    risk_level: str = "low"
    admin_panel_required: bool = False
    ai_features_required: bool = False
    confidence: Optional[float] = None
    classification_source: Optional[str] = None
    reasoning: Optional[str] = None

    @property
    def canonical_project_type(self) -> Optional[str]:
        return PROJECT_TYPE_ALIASES.get(str(self.project_type or "").strip())

    @classmethod
    def from_dict(cls, raw: Mapping[str, object]) -> "AIAnalysis":
        def _list(value: object) -> List[str]:
            if value is None:
                return []
            if isinstance(value, str):
                return [value]
            return [str(item) for item in value]  # type: ignore[union-attr]

        confidence = raw.get("confidence")
        return cls(
            project_type=str(raw.get("project_type") or ""),
            platforms=[item.strip().lower() for item in _list(raw.get("platforms"))],
            idea_domain=str(raw.get("idea_domain") or ""),
            required_features=_list(raw.get("required_features")),
            complexity_level=str(raw.get("complexity_level") or "basic").strip().lower(),
            third_party_integrations=_list(raw.get("third_party_integrations")),
            risk_level=str(raw.get("risk_level") or "low"),
            admin_panel_required=_as_bool(raw.get("admin_panel_required", False)),
            ai_features_required=_as_bool(raw.get("ai_features_required", False)),
            confidence=float(confidence) if confidence is not None else None,  # type: ignore[arg-type]
            classification_source=raw.get("classification_source") or raw.get("classificationSource"),  # type: ignore[arg-type]
            reasoning=raw.get("reasoning"),  # type: ignore[arg-type]
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "project_type": self.project_type,
            "platforms": list(self.platforms),
            "idea_domain": self.idea_domain,
            "required_features": list(self.required_features),
            "complexity_level": self.complexity_level,
            "third_party_integrations": list(self.third_party_integrations),
            "risk_level": self.risk_level,
            "admin_panel_required": self.admin_panel_required,
            "ai_features_required": self.ai_features_required,
            "confidence": self.confidence,
            "classification_source": self.classification_source,
            "reasoning": self.reasoning,
        }


AnalysisLike = Union[AIAnalysis, Mapping[str, object]]


def _coerce(analysis: AnalysisLike) -> AIAnalysis:
    if isinstance(analysis, AIAnalysis):
        return analysis
    return AIAnalysis.from_dict(analysis)


def validate_ai_analysis(data: object) -> Optional[AIAnalysis]:
    """Return an :class:`AIAnalysis` when ``data`` carries every required field."""

    if not isinstance(data, Mapping) or not data:
        logger.error("AI analysis payload is not an object")
        return None
    for name in REQUIRED_FIELDS:
        if name not in data:
            logger.error("AI analysis missing required field: %s", name)
            return None
    return AIAnalysis.from_dict(data)


def _compact(value: str) -> str:
    return re.sub(r"[^a-z0-9]", "", value.lower())


def normalize_ai_features(names: Iterable[str]) -> List[str]:
    """Map analyzer feature names onto catalog ids where a match exists."""

    normalized = []
    for name in names:
        if name in FEATURE_ALIASES:
            normalized.append(FEATURE_ALIASES[name])
            continue
        compact = _compact(name)
        match = next((value for key, value in FEATURE_ALIASES.items() if key.replace("_", "") == compact), None)
        if match is None:
            match = next((fid for fid in FEATURE_IDS if fid.replace("-", "") == compact), None)
        normalized.append(match or name)
    return normalized


@dataclass(frozen=True)
class FeatureRule:
    """Add/remove catalog features when ``applies`` holds for an analysis."""

    name: str
    applies: Callable[[str, str, List[str]], bool]
    add: Tuple[str, ...] = ()
    remove: Tuple[str, ...] = ()


# Evaluated top to bottom; arguments are (project type, complexity, normalized suggestions).
IMPLICIT_FEATURE_RULES: Tuple[FeatureRule, ...] = (
    FeatureRule("standard-tier", lambda p, c, s: c in ("medium", "advanced"), add=STANDARD_FEATURES),
    FeatureRule("advanced-tier", lambda p, c, s: c == "advanced", add=ADVANCED_FEATURES),
    FeatureRule("enterprise", lambda p, c, s: p == "enterprise", add=ENTERPRISE_FEATURES),
    FeatureRule("static-site", lambda p, c, s: p == "website" and c == "basic", remove=STATIC_SITE_STRIP),
    FeatureRule("app-baseline", lambda p, c, s: p in APP_PROJECT_TYPES, add=STANDARD_FEATURES),
    FeatureRule(
        "marketplace-payments",
        lambda p, c, s: p == "startup_product" and "payments" in s,
        add=("payments",),
    ),
    FeatureRule("ai-product", lambda p, c, s: p == "ai_product", add=(AI_FEATURE_ID,)),
)


def apply_implicit_features(
    analysis: AnalysisLike,
    rules: Tuple[FeatureRule, ...] = IMPLICIT_FEATURE_RULES,
) -> List[str]:
    """Return the analysis features plus rule-derived baseline features, in insertion order."""

    data = _coerce(analysis)
    suggestions = normalize_ai_features(data.required_features)
    project_type = data.canonical_project_type or ""
    complexity = data.complexity_level

    features: Dict[str, None] = dict.fromkeys(suggestions)
    for rule in rules:
        if not rule.applies(project_type, complexity, suggestions):
            continue
        for feature_id in rule.add:
            features.setdefault(feature_id, None)
        for feature_id in rule.remove:
            features.pop(feature_id, None)
        logger.debug("implicit feature rule %s applied", rule.name)
    return list(features)


def _tech_stack(platforms: Iterable[str]) -> Optional[str]:
    present = set(platforms)
    if "web" in present:
        return "react-nextjs"
    if "android" in present and "ios" in present:
        return "react-native"
    if "android" in present:
        return "native-android"
    if "ios" in present:
        return "native-ios"
    return None


def _support_duration(project_type: Optional[str], complexity: str) -> str:
    if project_type == "enterprise" or complexity == "advanced":
        return "12-months"
    if complexity == "medium":
        return "6-months"
    return "3-months"


def map_ai_output_to_pricing_inputs(analysis: AnalysisLike) -> Dict[str, object]:
    """Return the pricing input fields derived from ``analysis`` (snake_case keys)."""

    data = _coerce(analysis)
    project_type = data.canonical_project_type
    if project_type is None:
        logger.debug("Unknown project type %r; falling back to %s", data.project_type, FALLBACK_PROJECT)
    idea_type, product_format = PROJECT_TYPE_MAP.get(project_type or "", FALLBACK_PROJECT)

    inputs: Dict[str, object] = {
        "idea_type": idea_type,
        "product_format": product_format,
    }
    tech_stack = _tech_stack(data.platforms)
    if tech_stack:
        inputs["tech_stack"] = tech_stack
    inputs["selected_features"] = apply_implicit_features(data)
    if data.complexity_level in COMPLEXITY_DELIVERY:
        inputs["delivery_speed"] = COMPLEXITY_DELIVERY[data.complexity_level]
    inputs["support_duration"] = _support_duration(project_type, data.complexity_level)
    if data.complexity_level in COMPLEXITY_LEVELS:
        inputs["complexity_level"] = data.complexity_level
    return inputs


def pricing_inputs_from_analysis(analysis: AnalysisLike) -> PricingInputs:
    return PricingInputs.from_dict(map_ai_output_to_pricing_inputs(analysis))


def summarize_analysis(analysis: AnalysisLike) -> str:
    data = _coerce(analysis)
    platforms = " + ".join(data.platforms) or "unspecified platforms"
    project = str(data.project_type).replace("_", " ")
    return (
        f"{project} for {platforms} with {len(data.required_features)} features "
        f"({data.complexity_level} complexity)"
    )


__all__ = [
    "AIAnalysis",
    "FEATURE_ALIASES",
    "FeatureRule",
    "IMPLICIT_FEATURE_RULES",
    "apply_implicit_features",
    "map_ai_output_to_pricing_inputs",
    "normalize_ai_features",
    "pricing_inputs_from_analysis",
    "summarize_analysis",
    "validate_ai_analysis",
]
