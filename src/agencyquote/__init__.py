"""Project cost estimation for a software agency: client quotes, internal cost and margin health."""

from .api import QuoteResult, estimate, estimate_from_analysis, estimate_from_text
from .models import PricingInputs
from .pricing_config import ConfigurationError, PricingConfigStore, PricingConfiguration
from .projects import ProjectStore

__all__ = [
    "ConfigurationError",
    "PricingConfigStore",
    "PricingConfiguration",
    "PricingInputs",
    "ProjectStore",
    "QuoteResult",
    "estimate",
    "estimate_from_analysis",
    "estimate_from_text",
]
