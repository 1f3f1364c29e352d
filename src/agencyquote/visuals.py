"""PNG charts for a quote: client cost split, phase schedule and role effort."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List

import matplotlib

matplotlib.use("Agg")  # Headless rendering for CLI/CI runs.
import matplotlib.pyplot as plt
from matplotlib.ticker import StrMethodFormatter

from .api import QuoteResult
from .reporting import role_cost_frame, timeline_frame

logger = logging.getLogger(__name__)


def _write_figure(fig: "plt.Figure", base_name: str, output_dir: Path, dpi: int = 140) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    png_path = output_dir / f"{base_name}.png"
    fig.savefig(png_path, format="png", dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return png_path


def emit_quote_charts(result: QuoteResult, output_dir: str | Path) -> Dict[str, List[str]]:
    """Render the charts that have data; returns written paths and skip reasons."""

    target_dir = Path(output_dir)
    charts: List[Path] = []
    skipped: List[str] = []

    # Client cost categories ----------------------------------------------------------
    rows = [row for row in result.cost_breakdown if row.amount > 0]
    if not rows:
        skipped.append("cost breakdown skipped (no internal cost)")
    else:
        fig, ax = plt.subplots(figsize=(7, 7), dpi=140)
        ax.pie(
            [row.amount for row in rows],
            labels=[f"{row.label} ({row.percentage}%)" for row in rows],
            colors=[row.color for row in rows],
            startangle=90,
            wedgeprops={"edgecolor": "white"},
        )
        ax.set_title("Where the Budget Goes")
        ax.axis("equal")
        charts.append(_write_figure(fig, "cost_breakdown", target_dir))

    # Phase schedule -----------------------------------------------------------------
    phases = timeline_frame(result.timeline)
    phases = phases[phases["WEEKS"] > 0]
    if phases.empty:
        skipped.append("timeline chart skipped (no phases)")
    else:
        fig, ax = plt.subplots(figsize=(8, 4), dpi=140)
        ax.barh(
            phases["PHASE"][::-1],
            phases["WEEKS"][::-1],
            left=(phases["START_WEEK"] - 1)[::-1],
            color="#0ea5e9",
            edgecolor="white",
        )
        ax.set_xlabel("Week")
        ax.set_title(f"Delivery Plan ({result.timeline.total_weeks} weeks)")
        ax.grid(True, axis="x", linestyle="--", alpha=0.3)
        fig.tight_layout()
        charts.append(_write_figure(fig, "timeline", target_dir))

    # Labor cost per role ------------------------------------------------------------
    roles = role_cost_frame(result.internal_cost)
    if roles.empty or roles["TOTAL_COST"].sum() == 0:
        skipped.append("role cost chart skipped (no labor)")
    else:
        fig, ax = plt.subplots(figsize=(8, 5), dpi=140)
        ax.bar(roles["ROLE"], roles["TOTAL_COST"], color="#8172B3")
        ax.set_ylabel("Labor cost")
        ax.yaxis.set_major_formatter(StrMethodFormatter("$ {x:,.0f}"))
        ax.set_title("Internal Labor Cost by Role")
        ax.grid(True, axis="y", linestyle="--", alpha=0.3)
        fig.tight_layout()
        charts.append(_write_figure(fig, "role_costs", target_dir))

    for reason in skipped:
        logger.debug("%s", reason)
    return {"charts": [str(path) for path in charts], "skipped": skipped}


__all__ = ["emit_quote_charts"]
