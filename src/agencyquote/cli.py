import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Dict, Optional, Sequence

import yaml
from dotenv import load_dotenv

from .ai_mapper import validate_ai_analysis
from .api import QuoteResult, estimate, estimate_from_analysis, estimate_from_text
from .config import Config
from .config import load_config as load_runtime_config
from .pricing_config import ConfigurationError, PricingConfigStore
from .projects import ContactDetails, ProjectStore
from .reporting import compute_kpis, make_summary_text, write_quote_workbook
from .visuals import emit_quote_charts

logger = logging.getLogger(__name__)


def _read_mapping(path: Path) -> Dict[str, object]:
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        if path.suffix.lower() in {".yaml", ".yml"}:
            raw = yaml.safe_load(f)
        else:
            raw = json.load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain an object")
    return raw


def _build_quote(args: argparse.Namespace, cfg: Config) -> QuoteResult:
    pricing = cfg.pricing_configuration()
    if args.idea:
        return estimate_from_text(args.idea, pricing)
    if args.analysis:
        analysis = validate_ai_analysis(_read_mapping(Path(args.analysis)))
        if analysis is None:
            raise ValueError(f"{args.analysis} is not a complete idea analysis")
        return estimate_from_analysis(analysis, pricing)
    if args.inputs:
        return estimate(_read_mapping(Path(args.inputs)), pricing)
    raise ValueError("Provide an inputs file, --analysis or --idea")


def run_quote(args: argparse.Namespace, cfg: Config) -> int:
    result = _build_quote(args, cfg)
    if not result.inputs.idea_type:
        logger.warning("No idea type selected; all figures are zero.")

    if args.json:
        sys.stdout.write(json.dumps(result.to_dict(), indent=2) + "\n")
    else:
        logger.info("%s", make_summary_text(result))

    if args.xlsx is not None:
        xlsx_path = Path(args.xlsx) if args.xlsx else cfg.output_dir / "Quote.xlsx"
        write_quote_workbook(result, xlsx_path)

    if args.charts:
        charts = emit_quote_charts(result, cfg.output_dir)
        for path in charts["charts"]:
            logger.info("Chart: %s", path)
        for reason in charts["skipped"]:
            logger.info("Chart note: %s", reason)

    if args.save:
        store = ProjectStore.load(cfg.projects_path)
        contact = ContactDetails(
            client_name=args.client_name,
            company_name=args.company,
            client_email=args.email,
            client_phone=args.phone,
        )
        description = args.idea or args.description
        record = store.add(result, contact=contact, description=description)
        store.save()
        logger.info("Saved project %s to %s", record.project_id, cfg.projects_path)
    return 0


def run_kpis(args: argparse.Namespace, cfg: Config) -> int:
    store = ProjectStore.load(cfg.projects_path)
    pricing = cfg.pricing_configuration()
    kpis = compute_kpis(store.records, pricing, recalculate=not args.stored)
    if args.json:
        sys.stdout.write(json.dumps(kpis, indent=2) + "\n")
        return 0
    overview = kpis["overview"]
    logger.info("Projects: %s", overview["totalProjects"])  # type: ignore[index]
    logger.info("Total quoted value: $%s", f"{overview['totalQuotedValue']:,.0f}")  # type: ignore[index]
    logger.info("Total internal cost: $%s", f"{overview['totalInternalCost']:,.2f}")  # type: ignore[index]
    logger.info("Total profit: $%s", f"{overview['totalProfit']:,.2f}")  # type: ignore[index]
    logger.info("Average margin: %.1f%%", overview["averageProfitMargin"])  # type: ignore[index]
    logger.info("Health: %s", kpis["healthDistribution"])
    for warning in kpis["riskWarnings"]:  # type: ignore[union-attr]
        logger.info(" - %s (%s): %s", warning["clientName"], warning["projectId"], warning["message"])
    return 0


def run_publish(args: argparse.Namespace, cfg: Config) -> int:
    store = PricingConfigStore.load(cfg.config_store_path)
    config = store.publish(_read_mapping(Path(args.config_file)), created_by=args.by)
    logger.info("Active pricing configuration is now v%s (%s)", config.version, cfg.config_store_path)
    return 0


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Quote software projects and track agency margins")
    parser.add_argument("--pricing-config", help="Pricing configuration JSON/YAML (overrides the version store)")
    parser.add_argument("--config-store", help="Published pricing configuration history file")
    parser.add_argument("--projects-file", help="Saved projects JSON file")
    parser.add_argument("--output-dir", help="Directory for generated workbooks and charts")
    parser.add_argument("-v", "--verbose", action="store_true", help="Increase logging verbosity")
    sub = parser.add_subparsers(dest="command", required=True)

    quote = sub.add_parser("quote", help="Price a project")
    quote.add_argument("inputs", nargs="?", help="Pricing inputs JSON/YAML file")
    quote.add_argument("--idea", help="Free-text product idea to analyse offline")
    quote.add_argument("--analysis", help="Idea analysis JSON file (e.g. from a language model)")
    quote.add_argument(
        "--xlsx",
        nargs="?",
        const="",
        default=None,
        help="Write an Excel workbook (defaults to <output-dir>/Quote.xlsx)",
    )
    quote.add_argument("--charts", action="store_true", help="Write PNG charts to the output directory")
    quote.add_argument("--json", action="store_true", help="Print the full result as JSON")
    quote.add_argument("--save", action="store_true", help="Store the quote in the projects file")
    quote.add_argument("--client-name")
    quote.add_argument("--company")
    quote.add_argument("--email")
    quote.add_argument("--phone")
    quote.add_argument("--description", help="Project description stored with --save")

    kpis = sub.add_parser("kpis", help="Aggregate margins across saved projects")
    kpis.add_argument("--json", action="store_true", help="Print KPIs as JSON")
    kpis.add_argument("--stored", action="store_true", help="Use stored figures instead of re-pricing")

    publish = sub.add_parser("publish-config", help="Publish a new pricing configuration version")
    publish.add_argument("config_file", help="Pricing configuration JSON/YAML file")
    publish.add_argument("--by", help="Name recorded as the publisher")
    return parser.parse_args(argv)


COMMANDS = {
    "quote": run_quote,
    "kpis": run_kpis,
    "publish-config": run_publish,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv(Path.cwd() / ".env")
    args = parse_args(argv)
    runtime_cfg = load_runtime_config(os.environ, args)
    log_level = logging.DEBUG if runtime_cfg.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(message)s")
    try:
        return COMMANDS[args.command](args, runtime_cfg)
    except (FileNotFoundError, ConfigurationError, ValueError) as exc:
        logger.error("Error: %s", exc)
        return 2
    except Exception:  # pragma: no cover
        logger.exception("Fatal error while running %s", args.command)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
