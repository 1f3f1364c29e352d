from __future__ import annotations

import pytest

from agencyquote.models import PricingInputs
from agencyquote.pricing_config import PricingConfiguration


@pytest.fixture
def default_config() -> PricingConfiguration:
    return PricingConfiguration.defaults()


@pytest.fixture
def website_inputs() -> PricingInputs:
    return PricingInputs(
        idea_type="business-website",
        product_format="website",
        tech_stack="react-nextjs",
        selected_features=frozenset(),
        delivery_speed="standard",
        support_duration="none",
    )


@pytest.fixture
def startup_inputs() -> PricingInputs:
    return PricingInputs(
        idea_type="startup-product",
        product_format="website-and-app",
        tech_stack="react-nextjs",
        selected_features=frozenset(
            {
                "user-accounts",
                "social-login",
                "search",
                "file-uploads",
                "payments",
                "subscriptions",
                "analytics",
                "notifications",
                "chat",
                "admin-control",
            }
        ),
        delivery_speed="standard",
        support_duration="6-months",
    )
