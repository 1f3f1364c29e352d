"""
Static registry of quotable features and their per-role effort.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .models import RoleHours

logger = logging.getLogger(__name__)

AI_FEATURE_ID = "ai-recommendations"

# Keep tuple structure to preserve order for display
FEATURE_CATEGORIES: Tuple[Tuple[str, str], ...] = (
    ("core-experience", "Core Experience"),
    ("business-operations", "Business Operations"),
    ("growth-engagement", "Growth & Engagement"),
    ("trust-safety", "Trust & Safety"),
)


@dataclass(frozen=True)
class Feature:
    id: str
    name: str
    category: str
    description: str
    hours: RoleHours


def _feature(
    feature_id: str,
    name: str,
    category: str,
    description: str,
    hours: Tuple[int, int, int, int, int],
) -> Feature:
    frontend, backend, designer, qa, pm = hours
    return Feature(
        id=feature_id,
        name=name,
        category=category,
        description=description,
        hours=RoleHours(frontend=frontend, backend=backend, designer=designer, qa=qa, pm=pm),
    )


# Hours are (frontend, backend, designer, qa, pm)
FEATURES: Tuple[Feature, ...] = (
    _feature("user-accounts", "User Accounts", "core-experience", "Registration, login, profile management", (40, 60, 20, 25, 15)),
    _feature("social-login", "Social Login", "core-experience", "Login with Google, Facebook, Apple", (25, 35, 15, 20, 10)),
    _feature("content-management", "Content Management", "core-experience", "CMS for managing content", (60, 80, 30, 35, 20)),
    _feature("search", "Search", "core-experience", "Full-text search functionality", (30, 50, 15, 20, 10)),
    _feature("file-uploads", "File Uploads", "core-experience", "Upload and manage files/images", (35, 45, 20, 25, 12)),
    _feature("payments", "Payments", "business-operations", "Payment processing integration", (50, 70, 25, 40, 20)),
    _feature("subscriptions", "Subscriptions", "business-operations", "Recurring billing system", (45, 65, 20, 35, 18)),
    _feature("analytics", "Analytics", "business-operations", "User behavior tracking", (35, 55, 25, 20, 12)),
    _feature("booking-system", "Booking System", "business-operations", "Appointments and reservations", (60, 75, 30, 40, 22)),
    _feature("invoicing", "Invoicing", "business-operations", "Generate and manage invoices", (40, 50, 20, 25, 15)),
    _feature("reporting", "Reporting", "business-operations", "Custom reports and dashboards", (50, 60, 30, 30, 18)),
    _feature("notifications", "Notifications", "growth-engagement", "Push and email notifications", (40, 60, 20, 25, 15)),
    _feature("chat", "Chat", "growth-engagement", "Real time messaging", (70, 90, 35, 45, 25)),
    _feature(AI_FEATURE_ID, "AI Recommendations", "growth-engagement", "ML-powered personalization", (50, 120, 30, 40, 30)),
    _feature("email-marketing", "Email Marketing", "growth-engagement", "Email campaigns and automation", (45, 55, 25, 30, 18)),
    _feature("video-calls", "Video Calls", "growth-engagement", "Video conferencing integration", (60, 70, 30, 40, 22)),
    _feature("reviews-ratings", "Reviews & Ratings", "growth-engagement", "User reviews and rating system", (40, 50, 25, 30, 15)),
    _feature("admin-control", "Admin Control", "trust-safety", "Admin dashboard and controls", (80, 70, 40, 35, 20)),
    _feature("data-security", "Data Security", "trust-safety", "Security hardening and compliance", (20, 80, 10, 50, 25)),
    _feature("backups", "Backups", "trust-safety", "Automated backup system", (10, 40, 5, 15, 8)),
    _feature("compliance", "Compliance", "trust-safety", "GDPR, HIPAA, SOC2 compliance", (30, 60, 15, 40, 20)),
)

FEATURE_INDEX: Dict[str, Feature] = {feature.id: feature for feature in FEATURES}
FEATURE_IDS: Tuple[str, ...] = tuple(FEATURE_INDEX)


def get_feature(feature_id: str) -> Optional[Feature]:
    return FEATURE_INDEX.get(feature_id)


def feature_hours(feature_ids: Iterable[str]) -> RoleHours:
    """
    Sum per-role hours for ``feature_ids``.

    Ids missing from the catalog contribute nothing; this lets AI-suggested
    extras (e.g. ``geolocation``) ride along in the inputs without pricing impact.
    """

    totals = RoleHours()
    for feature_id in feature_ids:
        feature = FEATURE_INDEX.get(feature_id)
        if feature is None:
            logger.debug("Feature %s not in catalog; skipping hours", feature_id)
            continue
        totals = totals + feature.hours
    return totals


def features_by_category() -> Dict[str, List[Feature]]:
    """Return catalog features grouped by category in display order."""

    grouped: Dict[str, List[Feature]] = {key: [] for key, _ in FEATURE_CATEGORIES}
    for feature in FEATURES:
        grouped.setdefault(feature.category, []).append(feature)
    return grouped


__all__ = [
    "AI_FEATURE_ID",
    "FEATURES",
    "FEATURE_CATEGORIES",
    "FEATURE_IDS",
    "FEATURE_INDEX",
    "Feature",
    "feature_hours",
    "features_by_category",
    "get_feature",
]
