from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

IDEA_TYPES: Tuple[str, ...] = (
    "business-website",
    "mobile-app",
    "website-mobile-app",
    "startup-product",
    "enterprise-software",
    "ai-powered-product",
)
AI_IDEA_TYPE = "ai-powered-product"

# Older records and model output spell idea types loosely ("enterprise software").
IDEA_TYPE_ALIASES: Dict[str, str] = {
    "enterprise": "enterprise-software",
    "website-and-mobile-app": "website-mobile-app",
    "website-and-app": "website-mobile-app",
    "ai-product": "ai-powered-product",
}

PRODUCT_FORMATS: Tuple[str, ...] = (
    "website",
    "mobile-app",
    "website-and-app",
    "full-ecosystem",
)

TECH_STACKS: Tuple[str, ...] = (
    "react-nextjs",
    "react-native",
    "flutter",
    "vue-nuxt",
    "angular",
    "nodejs",
    "python-django",
    "native-ios",
    "native-android",
    "expert-choice",
)

DELIVERY_SPEEDS: Tuple[str, ...] = ("standard", "faster", "priority")
SUPPORT_DURATIONS: Tuple[str, ...] = ("none", "3-months", "6-months", "12-months")
COMPLEXITY_LEVELS: Tuple[str, ...] = ("basic", "medium", "advanced")
ROLES: Tuple[str, ...] = ("frontend", "backend", "designer", "qa", "pm")

HEALTH_STATUSES: Tuple[str, ...] = ("healthy", "warning", "critical")
WARNING_TYPES: Tuple[str, ...] = ("margin", "timeline", "complexity", "stakeholder")
SEVERITIES: Tuple[str, ...] = ("low", "medium", "high")


def _pick(raw: Mapping[str, object], snake: str, camel: str, default: object = None) -> object:
    if snake in raw:
        return raw[snake]
    if camel in raw:
        return raw[camel]
    return default


def _optional_text(value: object) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def canonical_idea_type(value: Optional[str]) -> Optional[str]:
    """
    Resolve an idea type to one of :data:`IDEA_TYPES`.

    Case, spaces and underscores are ignored.  Unset stays unset; anything
    else that does not resolve raises ``ValueError`` so it is never priced
    without a base cost.
    """

    if value is None or not str(value).strip():
        return None
    key = re.sub(r"[\s_]+", "-", str(value).strip().lower())
    key = IDEA_TYPE_ALIASES.get(key, key)
    if key not in IDEA_TYPES:
        raise ValueError(f"Unknown idea type {value!r}; expected one of {', '.join(IDEA_TYPES)}")
    return key


@dataclass(frozen=True)
class PricingInputs:
    """Structured project selections fed into every calculation."""

    idea_type: Optional[str] = None
    product_format: Optional[str] = None
    tech_stack: Optional[str] = None
    selected_features: FrozenSet[str] = frozenset()
    delivery_speed: str = "standard"
    support_duration: str = "none"
    complexity_level: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "idea_type", canonical_idea_type(self.idea_type))
        # Accept any iterable of ids; the stored value is always a frozenset.
        if not isinstance(self.selected_features, frozenset):
            object.__setattr__(self, "selected_features", frozenset(self.selected_features))

    @property
    def feature_count(self) -> int:
        return len(self.selected_features)

    @classmethod
    def from_dict(cls, raw: Mapping[str, object]) -> "PricingInputs":
        """Build inputs from a persisted (camelCase) or snake_case mapping."""

        features = _pick(raw, "selected_features", "selectedFeatures") or ()
        if isinstance(features, str):
            features = [features]
        delivery = _optional_text(_pick(raw, "delivery_speed", "deliverySpeed"))
        support = _optional_text(_pick(raw, "support_duration", "supportDuration"))
        complexity = _optional_text(_pick(raw, "complexity_level", "complexityLevel"))
        return cls(
            idea_type=_optional_text(_pick(raw, "idea_type", "ideaType")),
            product_format=_optional_text(_pick(raw, "product_format", "productFormat")),
            tech_stack=_optional_text(_pick(raw, "tech_stack", "techStack")),
            selected_features=frozenset(str(item).strip() for item in features if str(item).strip()),
            delivery_speed=delivery if delivery in DELIVERY_SPEEDS else "standard",
            support_duration=support if support in SUPPORT_DURATIONS else "none",
            complexity_level=complexity if complexity in COMPLEXITY_LEVELS else None,
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "ideaType": self.idea_type,
            "productFormat": self.product_format,
            "techStack": self.tech_stack,
            "selectedFeatures": sorted(self.selected_features),
            "deliverySpeed": self.delivery_speed,
            "supportDuration": self.support_duration,
            "complexityLevel": self.complexity_level,
        }


@dataclass(frozen=True)
class RoleHours:
    """Effort hours (or hourly rates) keyed by delivery role."""

    frontend: float = 0.0
    backend: float = 0.0
    designer: float = 0.0
    qa: float = 0.0
    pm: float = 0.0

    def get(self, role: str) -> float:
        return float(getattr(self, role))

    def __add__(self, other: "RoleHours") -> "RoleHours":
        return RoleHours(**{role: self.get(role) + other.get(role) for role in ROLES})

    @property
    def total(self) -> float:
        return sum(self.get(role) for role in ROLES)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, object]) -> "RoleHours":
        return cls(**{role: float(raw.get(role, 0.0) or 0.0) for role in ROLES})

    def to_dict(self) -> Dict[str, float]:
        return {role: self.get(role) for role in ROLES}


@dataclass(frozen=True)
class RoleCost:
    role: str
    hours: int
    hourly_rate: float
    total_cost: float

    def to_dict(self) -> Dict[str, object]:
        return {
            "role": self.role,
            "hours": self.hours,
            "hourlyRate": self.hourly_rate,
            "totalCost": self.total_cost,
        }


@dataclass(frozen=True)
class InternalCost:
    """What the agency actually spends to deliver the project."""

    labor_costs: Tuple[RoleCost, ...] = ()
    total_labor_cost: float = 0.0
    infrastructure_cost: float = 0.0
    overhead_cost: float = 0.0
    risk_buffer: float = 0.0
    risk_buffer_percentage: float = 0.0
    total_internal_cost: float = 0.0

    def role(self, name: str) -> Optional[RoleCost]:
        return next((item for item in self.labor_costs if item.role == name), None)

    def role_cost(self, name: str) -> float:
        item = self.role(name)
        return item.total_cost if item else 0.0

    @property
    def total_hours(self) -> int:
        return sum(item.hours for item in self.labor_costs)

    def to_dict(self) -> Dict[str, object]:
        return {
            "laborCosts": [item.to_dict() for item in self.labor_costs],
            "totalLaborCost": self.total_labor_cost,
            "infrastructureCost": self.infrastructure_cost,
            "overheadCost": self.overhead_cost,
            "riskBuffer": self.risk_buffer,
            "riskBufferPercentage": self.risk_buffer_percentage,
            "totalInternalCost": self.total_internal_cost,
        }


@dataclass(frozen=True)
class PriceRange:
    min: int = 0
    max: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"min": self.min, "max": self.max}


@dataclass(frozen=True)
class ClientPrice:
    """Client-facing quote derived from configured base and feature costs."""

    base_price: float = 0.0
    features_cost: float = 0.0
    tech_multiplier: float = 1.0
    complexity_multiplier: float = 1.0
    timeline_multiplier: float = 1.0
    support_cost: float = 0.0
    total_price: float = 0
    price_range: PriceRange = field(default_factory=PriceRange)

    def to_dict(self) -> Dict[str, object]:
        return {
            "basePrice": self.base_price,
            "featuresCost": self.features_cost,
            "techMultiplier": self.tech_multiplier,
            "complexityMultiplier": self.complexity_multiplier,
            "timelineMultiplier": self.timeline_multiplier,
            "supportCost": self.support_cost,
            "totalPrice": self.total_price,
            "priceRange": self.price_range.to_dict(),
        }


@dataclass(frozen=True)
class ProfitAnalysis:
    client_price: float
    internal_cost: float
    profit: float
    profit_margin: float
    health_status: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "clientPrice": self.client_price,
            "internalCost": self.internal_cost,
            "profit": self.profit,
            "profitMargin": self.profit_margin,
            "healthStatus": self.health_status,
        }


@dataclass(frozen=True)
class Phase:
    name: str
    duration: int

    def to_dict(self) -> Dict[str, object]:
        return {"name": self.name, "duration": self.duration}


@dataclass(frozen=True)
class TeamSize:
    min: int = 0
    max: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"min": self.min, "max": self.max}


@dataclass(frozen=True)
class Timeline:
    phases: Tuple[Phase, ...] = ()
    total_weeks: int = 0
    team_size: TeamSize = field(default_factory=TeamSize)

    def to_dict(self) -> Dict[str, object]:
        return {
            "phases": [phase.to_dict() for phase in self.phases],
            "totalWeeks": self.total_weeks,
            "teamSize": self.team_size.to_dict(),
        }


@dataclass(frozen=True)
class CostBreakdown:
    label: str
    percentage: int
    amount: int
    color: str
    description: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "label": self.label,
            "percentage": self.percentage,
            "amount": self.amount,
            "color": self.color,
            "description": self.description,
        }


@dataclass(frozen=True)
class RiskWarning:
    type: str
    severity: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type, "severity": self.severity, "message": self.message}


def dicts(items: List[object] | Tuple[object, ...]) -> List[Dict[str, object]]:
    """Serialise a sequence of output records."""

    return [item.to_dict() for item in items]  # type: ignore[attr-defined]


__all__ = [
    "AI_IDEA_TYPE",
    "IDEA_TYPE_ALIASES",
    "COMPLEXITY_LEVELS",
    "DELIVERY_SPEEDS",
    "HEALTH_STATUSES",
    "IDEA_TYPES",
    "PRODUCT_FORMATS",
    "ROLES",
    "SEVERITIES",
    "SUPPORT_DURATIONS",
    "TECH_STACKS",
    "WARNING_TYPES",
    "ClientPrice",
    "CostBreakdown",
    "InternalCost",
    "Phase",
    "PriceRange",
    "PricingInputs",
    "ProfitAnalysis",
    "RiskWarning",
    "RoleCost",
    "RoleHours",
    "TeamSize",
    "Timeline",
    "canonical_idea_type",
    "dicts",
]
