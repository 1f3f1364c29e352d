from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

import pandas as pd

from .api import QuoteResult
from .models import CostBreakdown, InternalCost, Timeline
from .price_logic import compute_client_price, compute_internal_cost, compute_profit
from .pricing_config import PricingConfiguration
from .projects import ProjectRecord

logger = logging.getLogger(__name__)

CRITICAL_MESSAGE = "Critical: Profit margin below 30%"
WARNING_MESSAGE = "Warning: Profit margin below 45%"


def make_summary_text(result: QuoteResult) -> str:
    price = result.client_price
    profit = result.profit
    roles = role_cost_frame(result.internal_cost)
    top = roles.sort_values("TOTAL_COST", ascending=False).head(3)
    text = (
        f"Client quote: ${price.total_price:,.0f} "
        f"(range ${price.price_range.min:,.0f} - ${price.price_range.max:,.0f}).\n"
        f"Internal cost: ${profit.internal_cost:,.2f} | profit ${profit.profit:,.2f} "
        f"({profit.profit_margin:.1f}% margin, {profit.health_status}).\n"
        f"Timeline: {result.timeline.total_weeks} weeks with a team of "
        f"{result.timeline.team_size.min}-{result.timeline.team_size.max}.\n"
    )
    if not top.empty:
        text += f"Top labor costs:\n{top.to_string(index=False)}\n"
    for warning in result.risk_warnings:
        text += f"[{warning.severity}] {warning.message}\n"
    return text


def role_cost_frame(internal_cost: InternalCost) -> pd.DataFrame:
    rows = [
        {
            "ROLE": item.role,
            "HOURS": item.hours,
            "HOURLY_RATE": item.hourly_rate,
            "TOTAL_COST": item.total_cost,
        }
        for item in internal_cost.labor_costs
    ]
    return pd.DataFrame(rows, columns=["ROLE", "HOURS", "HOURLY_RATE", "TOTAL_COST"])


def cost_breakdown_frame(breakdown: Iterable[CostBreakdown]) -> pd.DataFrame:
    rows = [
        {
            "CATEGORY": item.label,
            "PERCENTAGE": item.percentage,
            "AMOUNT": item.amount,
            "DESCRIPTION": item.description,
        }
        for item in breakdown
    ]
    return pd.DataFrame(rows, columns=["CATEGORY", "PERCENTAGE", "AMOUNT", "DESCRIPTION"])


def timeline_frame(timeline: Timeline) -> pd.DataFrame:
    """One row per phase with its start/end week (1-based, inclusive)."""

    frame = pd.DataFrame(
        [{"PHASE": phase.name, "WEEKS": phase.duration} for phase in timeline.phases],
        columns=["PHASE", "WEEKS"],
    )
    ends = frame["WEEKS"].cumsum()
    frame["START_WEEK"] = ends - frame["WEEKS"] + 1
    frame["END_WEEK"] = ends
    return frame


def _summary_frame(result: QuoteResult) -> pd.DataFrame:
    inputs = result.inputs
    price = result.client_price
    cost = result.internal_cost
    profit = result.profit
    rows = [
        ("Idea type", inputs.idea_type or ""),
        ("Product format", inputs.product_format or ""),
        ("Tech stack", inputs.tech_stack or ""),
        ("Features", ", ".join(sorted(inputs.selected_features))),
        ("Delivery speed", inputs.delivery_speed),
        ("Support", inputs.support_duration),
        ("Client price", price.total_price),
        ("Price range min", price.price_range.min),
        ("Price range max", price.price_range.max),
        ("Total labor cost", cost.total_labor_cost),
        ("Infrastructure cost", cost.infrastructure_cost),
        ("Overhead cost", cost.overhead_cost),
        ("Risk buffer", cost.risk_buffer),
        ("Total internal cost", cost.total_internal_cost),
        ("Profit", profit.profit),
        ("Profit margin %", round(profit.profit_margin, 2)),
        ("Health status", profit.health_status),
        ("Total weeks", result.timeline.total_weeks),
        ("Config version", result.config_version),
    ]
    return pd.DataFrame(rows, columns=["FIELD", "VALUE"])


def write_quote_workbook(result: QuoteResult, path: Path) -> Path:
    """Write the admin view of ``result`` to an Excel workbook at ``path``."""

    path.parent.mkdir(parents=True, exist_ok=True)
    risks = pd.DataFrame(
        [{"TYPE": w.type, "SEVERITY": w.severity, "MESSAGE": w.message} for w in result.risk_warnings],
        columns=["TYPE", "SEVERITY", "MESSAGE"],
    )
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        _summary_frame(result).to_excel(writer, sheet_name="Summary", index=False)
        role_cost_frame(result.internal_cost).to_excel(writer, sheet_name="Roles", index=False)
        cost_breakdown_frame(result.cost_breakdown).to_excel(writer, sheet_name="Breakdown", index=False)
        timeline_frame(result.timeline).to_excel(writer, sheet_name="Timeline", index=False)
        risks.to_excel(writer, sheet_name="Risks", index=False)
    logger.info("Wrote quote workbook to %s", path)
    return path


def _current_profit(
    record: ProjectRecord,
    config: PricingConfiguration,
    recalculate: bool,
) -> Mapping[str, object]:
    if not recalculate:
        return record.profit_analysis
    try:
        inputs = record.pricing_inputs()
    except ValueError as exc:
        logger.warning("Project %s keeps its stored figures: %s", record.project_id, exc)
        return record.profit_analysis
    if not inputs.idea_type:
        return record.profit_analysis
    internal = compute_internal_cost(inputs, config)
    price = compute_client_price(inputs, config)
    return compute_profit(price, internal).to_dict()


def project_frame(
    records: Iterable[ProjectRecord],
    config: Optional[PricingConfiguration] = None,
    recalculate: bool = True,
) -> pd.DataFrame:
    """
    Tabulate saved projects with their profit figures.

    With ``recalculate`` the stored inputs are re-priced against ``config`` so
    the figures reflect the current pricing tables; records without a usable
    idea type keep their stored snapshot.  Records with neither report an
    ``unknown`` health status.
    """

    cfg = config or PricingConfiguration.defaults()
    rows = []
    for record in records:
        profit = _current_profit(record, cfg, recalculate)
        rows.append(
            {
                "id": record.project_id,
                "clientName": record.display_name,
                "clientPrice": float(profit.get("clientPrice", 0) or 0),  # type: ignore[arg-type]
                "internalCost": float(profit.get("internalCost", 0) or 0),  # type: ignore[arg-type]
                "profit": float(profit.get("profit", 0) or 0),  # type: ignore[arg-type]
                "profitMargin": float(profit.get("profitMargin", 0) or 0),  # type: ignore[arg-type]
                "healthStatus": str(profit.get("healthStatus") or "unknown"),
                "createdAt": record.created_at,
            }
        )
    columns = [
        "id",
        "clientName",
        "clientPrice",
        "internalCost",
        "profit",
        "profitMargin",
        "healthStatus",
        "createdAt",
    ]
    return pd.DataFrame(rows, columns=columns)


def compute_kpis(
    records: Iterable[ProjectRecord],
    config: Optional[PricingConfiguration] = None,
    recalculate: bool = True,
) -> Dict[str, object]:
    frame = project_frame(records, config, recalculate)
    known = frame[frame["healthStatus"] != "unknown"]

    overview = {
        "totalQuotedValue": float(frame["clientPrice"].sum()),
        "totalInternalCost": float(frame["internalCost"].sum()),
        "totalProfit": float(frame["profit"].sum()),
        "averageProfitMargin": float(known["profitMargin"].mean()) if not known.empty else 0.0,
        "totalProjects": int(len(frame)),
    }
    counts = frame["healthStatus"].value_counts()
    health_distribution = {status: int(counts.get(status, 0)) for status in ("healthy", "warning", "critical")}

    risk_warnings: List[Dict[str, object]] = []
    for row in known[known["healthStatus"] != "healthy"].itertuples(index=False):
        risk_warnings.append(
            {
                "projectId": row.id,
                "clientName": row.clientName,
                "healthStatus": row.healthStatus,
                "profitMargin": float(row.profitMargin),
                "message": CRITICAL_MESSAGE if row.healthStatus == "critical" else WARNING_MESSAGE,
            }
        )

    return {
        "overview": overview,
        "projectMetrics": frame.to_dict(orient="records"),
        "healthDistribution": health_distribution,
        "riskWarnings": risk_warnings,
    }


__all__ = [
    "compute_kpis",
    "cost_breakdown_frame",
    "make_summary_text",
    "project_frame",
    "role_cost_frame",
    "timeline_frame",
    "write_quote_workbook",
]
