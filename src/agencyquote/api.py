from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, List, Mapping, Optional, Union

from .ai_mapper import AIAnalysis, AnalysisLike, pricing_inputs_from_analysis
from .analyzer import analyze_idea_locally
from .insights import compute_cost_breakdown, compute_risk_warnings
from .models import (
    ClientPrice,
    CostBreakdown,
    InternalCost,
    PricingInputs,
    ProfitAnalysis,
    RiskWarning,
    Timeline,
    dicts,
)
from .price_logic import compute_client_price, compute_internal_cost, compute_profit
from .pricing_config import PricingConfiguration
from .timeline import compute_timeline


@dataclass(frozen=True)
class QuoteResult:
    """Every derived view of one set of pricing inputs."""

    inputs: PricingInputs
    internal_cost: InternalCost
    client_price: ClientPrice
    profit: ProfitAnalysis
    timeline: Timeline
    cost_breakdown: List[CostBreakdown] = field(default_factory=list)
    risk_warnings: List[RiskWarning] = field(default_factory=list)
    config_version: int = 0
    analysis: Optional[AIAnalysis] = None

    def to_dict(self) -> Dict[str, object]:
        data: Dict[str, object] = {
            "inputs": self.inputs.to_dict(),
            "internalCost": self.internal_cost.to_dict(),
            "clientPrice": self.client_price.to_dict(),
            "profitAnalysis": self.profit.to_dict(),
            "timeline": self.timeline.to_dict(),
            "costBreakdown": dicts(self.cost_breakdown),
            "riskWarnings": dicts(self.risk_warnings),
            "configVersion": self.config_version,
        }
        if self.analysis is not None:
            data["aiAnalysis"] = self.analysis.to_dict()
        return data


def estimate(
    inputs: Union[PricingInputs, Mapping[str, object]],
    config: Optional[PricingConfiguration] = None,
) -> QuoteResult:
    """Run the full pipeline for ``inputs`` against ``config`` (defaults when omitted).

    The same inputs and configuration always produce an equal result.
    """

    if not isinstance(inputs, PricingInputs):
        inputs = PricingInputs.from_dict(inputs)
    cfg = config or PricingConfiguration.defaults()

    internal_cost = compute_internal_cost(inputs, cfg)
    client_price = compute_client_price(inputs, cfg)
    profit = compute_profit(client_price, internal_cost)
    timeline = compute_timeline(inputs, internal_cost, cfg)
    return QuoteResult(
        inputs=inputs,
        internal_cost=internal_cost,
        client_price=client_price,
        profit=profit,
        timeline=timeline,
        cost_breakdown=compute_cost_breakdown(internal_cost),
        risk_warnings=compute_risk_warnings(inputs, profit, timeline),
        config_version=cfg.version,
    )


def estimate_from_analysis(
    analysis: AnalysisLike,
    config: Optional[PricingConfiguration] = None,
) -> QuoteResult:
    data = analysis if isinstance(analysis, AIAnalysis) else AIAnalysis.from_dict(analysis)
    result = estimate(pricing_inputs_from_analysis(data), config)
    return replace(result, analysis=data)


def estimate_from_text(text: str, config: Optional[PricingConfiguration] = None) -> QuoteResult:
    """Quote a free-text idea using the offline keyword analyzer."""

    return estimate_from_analysis(analyze_idea_locally(text), config)


__all__ = ["QuoteResult", "estimate", "estimate_from_analysis", "estimate_from_text"]
