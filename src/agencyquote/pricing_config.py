"""Versioned pricing tables consumed by the estimation engine.

A :class:`PricingConfiguration` is assembled once from an optional partial
payload (admin edits, a JSON/YAML file, a stored version) merged over the
built-in defaults.  After loading, every lookup the engine performs resolves
either to a configured value or to a documented neutral fallback, so no
calculation ever has to guard against a missing table.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import yaml
from jsonschema import Draft7Validator

from .models import IDEA_TYPES, ROLES, RoleHours

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema" / "pricing_config.schema.json"
ISO_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


class ConfigurationError(ValueError):
    """Raised when a pricing configuration payload has an invalid shape."""


DEFAULT_BASE_IDEA_COSTS: Dict[str, float] = {
    "business-website": 15000,
    "mobile-app": 25000,
    "website-mobile-app": 40000,
    "startup-product": 50000,
    "enterprise-software": 100000,
    "ai-powered-product": 80000,
}

DEFAULT_BASE_IDEA_HOURS: Dict[str, RoleHours] = {
    "business-website": RoleHours(frontend=80, backend=40, designer=60, qa=30, pm=20),
    "mobile-app": RoleHours(frontend=120, backend=80, designer=80, qa=50, pm=30),
    "website-mobile-app": RoleHours(frontend=200, backend=120, designer=120, qa=80, pm=50),
    "startup-product": RoleHours(frontend=180, backend=150, designer=100, qa=80, pm=60),
    "enterprise-software": RoleHours(frontend=300, backend=350, designer=150, qa=200, pm=120),
    "ai-powered-product": RoleHours(frontend=200, backend=250, designer=120, qa=120, pm=80),
}

DEFAULT_TECH_MULTIPLIERS: Dict[str, float] = {
    "react-nextjs": 1.0,
    "react-native": 1.15,
    "flutter": 1.1,
    "vue-nuxt": 1.0,
    "angular": 1.05,
    "nodejs": 1.0,
    "python-django": 1.05,
    "native-ios": 1.2,
    "native-android": 1.2,
    "expert-choice": 1.0,
}

DEFAULT_FORMAT_MULTIPLIERS: Dict[str, float] = {
    "website": 1.0,
    "mobile-app": 1.2,
    "website-and-app": 1.8,
    "full-ecosystem": 2.2,
}

DEFAULT_TIMELINE_MULTIPLIERS: Dict[str, float] = {
    "standard": 1.0,
    "faster": 1.3,
    "priority": 1.6,
}

DEFAULT_COMPLEXITY_MULTIPLIERS: Dict[str, float] = {
    "basic": 1.0,
    "medium": 1.25,
    "advanced": 1.6,
}

DEFAULT_HOURLY_RATES = RoleHours(frontend=35, backend=35, designer=35, qa=25, pm=45)

# Monthly hosting/tooling spend per idea type
DEFAULT_INFRASTRUCTURE_COSTS: Dict[str, float] = {
    "business-website": 100,
    "mobile-app": 200,
    "website-mobile-app": 300,
    "startup-product": 500,
    "enterprise-software": 2000,
    "ai-powered-product": 1500,
}

DEFAULT_SUPPORT_PACKAGES: Dict[str, float] = {
    "none": 0,
    "3-months": 6000,
    "6-months": 10800,
    "12-months": 18000,
}

DEFAULT_SUPPORT_HOURS: Dict[str, float] = {
    "none": 0,
    "3-months": 15,
    "6-months": 20,
    "12-months": 25,
}

DEFAULT_FEATURE_BASE_COST = 5000.0

# Persisted configs (and the admin editor) use camelCase keys.
_KEY_ALIASES: Dict[str, str] = {
    "baseIdeaCosts": "base_idea_costs",
    "baseCosts": "base_idea_costs",
    "baseIdeaHours": "base_idea_hours",
    "featureBaseCost": "feature_base_cost",
    "featureCosts": "feature_costs",
    "techMultipliers": "tech_multipliers",
    "formatMultipliers": "format_multipliers",
    "timelineMultipliers": "timeline_multipliers",
    "deliveryMultipliers": "timeline_multipliers",
    "complexityMultipliers": "complexity_multipliers",
    "hourlyRates": "hourly_rates",
    "infrastructureCosts": "infrastructure_costs",
    "supportPackages": "support_packages",
    "supportHours": "support_hours",
}

_NUMBER_TABLES = (
    "base_idea_costs",
    "feature_costs",
    "tech_multipliers",
    "format_multipliers",
    "timeline_multipliers",
    "complexity_multipliers",
    "infrastructure_costs",
    "support_packages",
    "support_hours",
)


def _float_table(raw: Mapping[str, object]) -> Dict[str, float]:
    return {str(key): float(value) for key, value in raw.items()}  # type: ignore[arg-type]


@dataclass(frozen=True)
class PricingConfiguration:
    """Complete pricing tables; treat instances as immutable."""

    version: int = 0
    base_idea_costs: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_BASE_IDEA_COSTS))
    base_idea_hours: Dict[str, RoleHours] = field(default_factory=lambda: dict(DEFAULT_BASE_IDEA_HOURS))
    feature_base_cost: float = DEFAULT_FEATURE_BASE_COST
    feature_costs: Dict[str, float] = field(default_factory=dict)
    tech_multipliers: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_TECH_MULTIPLIERS))
    format_multipliers: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_FORMAT_MULTIPLIERS))
    timeline_multipliers: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_TIMELINE_MULTIPLIERS))
    complexity_multipliers: Dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_COMPLEXITY_MULTIPLIERS)
    )
    hourly_rates: RoleHours = DEFAULT_HOURLY_RATES
    infrastructure_costs: Dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_INFRASTRUCTURE_COSTS)
    )
    support_packages: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_SUPPORT_PACKAGES))
    support_hours: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_SUPPORT_HOURS))

    def __post_init__(self) -> None:
        # Every idea type must carry a base cost and base hours.
        _require_idea_types(self.base_idea_costs, "base_idea_costs")
        _require_idea_types(self.base_idea_hours, "base_idea_hours")

    # Lookups.  Unset or unknown keys resolve to neutral values.

    def base_cost(self, idea_type: Optional[str]) -> float:
        return float(self.base_idea_costs.get(idea_type or "", 0.0))

    def base_hours(self, idea_type: Optional[str]) -> RoleHours:
        return self.base_idea_hours.get(idea_type or "", RoleHours())

    def feature_cost(self, feature_id: str) -> float:
        return float(self.feature_costs.get(feature_id, self.feature_base_cost))

    def tech_multiplier(self, tech_stack: Optional[str]) -> float:
        return _multiplier(self.tech_multipliers, tech_stack, "tech stack")

    def format_multiplier(self, product_format: Optional[str]) -> float:
        return _multiplier(self.format_multipliers, product_format, "product format")

    def delivery_multiplier(self, delivery_speed: Optional[str]) -> float:
        return _multiplier(self.timeline_multipliers, delivery_speed, "delivery speed")

    def complexity_multiplier(self, complexity_level: Optional[str]) -> float:
        return _multiplier(self.complexity_multipliers, complexity_level, "complexity level")

    def hourly_rate(self, role: str) -> float:
        return self.hourly_rates.get(role)

    def infrastructure_monthly(self, idea_type: Optional[str]) -> float:
        return float(self.infrastructure_costs.get(idea_type or "", 0.0))

    def support_package_cost(self, support_duration: Optional[str]) -> float:
        return float(self.support_packages.get(support_duration or "", 0.0))

    @classmethod
    def defaults(cls) -> "PricingConfiguration":
        return cls()

    @classmethod
    def from_dict(cls, raw: Optional[Mapping[str, object]]) -> "PricingConfiguration":
        """Merge a (possibly partial) payload over the built-in defaults.

        Sections that are absent fall back to the defaults wholesale; supplied
        multiplier/rate tables are merged entry by entry.  Base costs and base
        hours are the exception: when supplied they must cover every idea type.
        """

        data = normalize_keys(raw or {})
        validate_payload(data)

        base = cls()
        merged: Dict[str, object] = {}
        for table in _NUMBER_TABLES:
            supplied = data.get(table)
            default = getattr(base, table)
            if supplied is None:
                merged[table] = dict(default)
            else:
                merged[table] = {**default, **_float_table(supplied)}  # type: ignore[arg-type]

        if data.get("base_idea_costs") is not None:
            _require_idea_types(data["base_idea_costs"], "base_idea_costs")  # type: ignore[arg-type]

        base_hours = dict(base.base_idea_hours)
        if data.get("base_idea_hours") is not None:
            supplied_hours: Mapping[str, Mapping[str, object]] = data["base_idea_hours"]  # type: ignore[assignment]
            _require_idea_types(supplied_hours, "base_idea_hours")
            base_hours.update({key: RoleHours.from_mapping(value) for key, value in supplied_hours.items()})

        rates = base.hourly_rates.to_dict()
        if data.get("hourly_rates") is not None:
            supplied_rates: Mapping[str, object] = data["hourly_rates"]  # type: ignore[assignment]
            rates.update({role: float(supplied_rates[role]) for role in ROLES if role in supplied_rates})  # type: ignore[arg-type]

        feature_base_cost = data.get("feature_base_cost")
        return cls(
            version=int(data.get("version", 0) or 0),  # type: ignore[arg-type]
            base_idea_costs=merged["base_idea_costs"],  # type: ignore[arg-type]
            base_idea_hours=base_hours,
            feature_base_cost=(
                float(feature_base_cost) if feature_base_cost is not None else base.feature_base_cost  # type: ignore[arg-type]
            ),
            feature_costs=merged["feature_costs"],  # type: ignore[arg-type]
            tech_multipliers=merged["tech_multipliers"],  # type: ignore[arg-type]
            format_multipliers=merged["format_multipliers"],  # type: ignore[arg-type]
            timeline_multipliers=merged["timeline_multipliers"],  # type: ignore[arg-type]
            complexity_multipliers=merged["complexity_multipliers"],  # type: ignore[arg-type]
            hourly_rates=RoleHours.from_mapping(rates),
            infrastructure_costs=merged["infrastructure_costs"],  # type: ignore[arg-type]
            support_packages=merged["support_packages"],  # type: ignore[arg-type]
            support_hours=merged["support_hours"],  # type: ignore[arg-type]
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "version": self.version,
            "baseIdeaCosts": dict(self.base_idea_costs),
            "baseIdeaHours": {key: hours.to_dict() for key, hours in self.base_idea_hours.items()},
            "featureBaseCost": self.feature_base_cost,
            "featureCosts": dict(self.feature_costs),
            "techMultipliers": dict(self.tech_multipliers),
            "formatMultipliers": dict(self.format_multipliers),
            "timelineMultipliers": dict(self.timeline_multipliers),
            "complexityMultipliers": dict(self.complexity_multipliers),
            "hourlyRates": self.hourly_rates.to_dict(),
            "infrastructureCosts": dict(self.infrastructure_costs),
            "supportPackages": dict(self.support_packages),
            "supportHours": dict(self.support_hours),
        }


def _multiplier(table: Mapping[str, float], key: Optional[str], label: str) -> float:
    if not key:
        return 1.0
    value = table.get(key)
    if value is None:
        logger.debug("No %s multiplier configured for %s; using 1.0", label, key)
        return 1.0
    return float(value)


def _require_idea_types(table: Mapping[str, object], section: str) -> None:
    missing = [idea for idea in IDEA_TYPES if idea not in table]
    if missing:
        raise ConfigurationError(f"{section} is missing entries for: {', '.join(missing)}")


def normalize_keys(raw: Mapping[str, object]) -> Dict[str, object]:
    """Map camelCase section names onto their snake_case equivalents."""

    if not isinstance(raw, Mapping):
        raise ConfigurationError("Pricing configuration must be a mapping")
    data: Dict[str, object] = {}
    for key, value in raw.items():
        data[_KEY_ALIASES.get(str(key), str(key))] = value
    return data


@lru_cache(maxsize=1)
def _validator() -> Draft7Validator:
    with SCHEMA_PATH.open("r", encoding="utf-8") as f:
        schema = json.load(f)
    return Draft7Validator(schema)


def validate_payload(data: Mapping[str, object]) -> None:
    """Raise :class:`ConfigurationError` listing every schema violation in ``data``."""

    errors = sorted(_validator().iter_errors(dict(data)), key=lambda err: list(err.path))
    if not errors:
        return
    messages = []
    for error in errors:
        location = "/".join(str(part) for part in error.path) or "<root>"
        messages.append(f"{location}: {error.message}")
    raise ConfigurationError("Invalid pricing configuration: " + "; ".join(messages))


def load_pricing_config(path: Path) -> PricingConfiguration:
    """Load a configuration from a JSON or YAML file."""

    if not path.exists():
        raise FileNotFoundError(f"Pricing configuration file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        if path.suffix.lower() in {".yaml", ".yml"}:
            raw = yaml.safe_load(f)
        else:
            raw = json.load(f)

    config = PricingConfiguration.from_dict(raw or {})
    logger.debug("Loaded pricing configuration v%s from %s", config.version, path)
    return config


@dataclass
class ConfigVersion:
    version: int
    created_at: str
    config: Dict[str, object]
    created_by: Optional[str] = None
    is_active: bool = True


@dataclass
class PricingConfigStore:
    """JSON-backed history of published pricing configurations."""

    path: Path
    versions: List[ConfigVersion] = field(default_factory=list)

    @classmethod
    def load(cls, path: Path) -> "PricingConfigStore":
        if path.exists():
            with path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        else:
            raw = {"versions": []}
        versions = [ConfigVersion(**entry) for entry in raw.get("versions", [])]
        return cls(path=path, versions=versions)

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "versions": [
                {
                    "version": entry.version,
                    "created_at": entry.created_at,
                    "created_by": entry.created_by,
                    "is_active": entry.is_active,
                    "config": entry.config,
                }
                for entry in sorted(self.versions, key=lambda e: e.version)
            ]
        }
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)

    @property
    def latest_version(self) -> int:
        return max((entry.version for entry in self.versions), default=0)

    def active(self) -> PricingConfiguration:
        """Return the newest active configuration, or the defaults when none exists."""

        candidates = [entry for entry in self.versions if entry.is_active]
        if not candidates:
            return PricingConfiguration.defaults()
        entry = max(candidates, key=lambda e: e.version)
        return PricingConfiguration.from_dict({**entry.config, "version": entry.version})

    def publish(
        self,
        raw: Mapping[str, object],
        created_by: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> PricingConfiguration:
        """Validate ``raw``, store it as the next version and make it the only active one."""

        version = self.latest_version + 1
        config = PricingConfiguration.from_dict({**normalize_keys(raw), "version": version})
        for entry in self.versions:
            entry.is_active = False
        ts = timestamp or datetime.now().astimezone()
        self.versions.append(
            ConfigVersion(
                version=version,
                created_at=ts.strftime(ISO_FORMAT),
                config=config.to_dict(),
                created_by=created_by,
                is_active=True,
            )
        )
        self.save()
        logger.info("Published pricing configuration v%s", version)
        return config


__all__ = [
    "ConfigVersion",
    "ConfigurationError",
    "PricingConfigStore",
    "PricingConfiguration",
    "load_pricing_config",
    "normalize_keys",
    "validate_payload",
]
