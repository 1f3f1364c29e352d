from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from types import SimpleNamespace
from typing import Mapping, Optional

from .pricing_config import PricingConfigStore, PricingConfiguration, load_pricing_config

_BOOLEAN_TRUE = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Config:
    """Runtime configuration assembled from environment variables and CLI options."""

    base_dir: Path
    pricing_config_path: Optional[Path]
    config_store_path: Path
    projects_path: Path
    output_dir: Path
    verbose: bool = False

    def pricing_configuration(self) -> PricingConfiguration:
        """Explicit config file first, then the active published version, then defaults."""

        if self.pricing_config_path is not None:
            return load_pricing_config(self.pricing_config_path)
        return PricingConfigStore.load(self.config_store_path).active()


def _to_path(value: object | None) -> Optional[Path]:
    if value is None:
        return None
    if isinstance(value, Path):
        return value.expanduser().resolve()
    text = str(value).strip()
    if not text:
        return None
    return Path(text).expanduser().resolve()


def _flag(value: object | None) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _BOOLEAN_TRUE


def _namespace(cli_args: object | None) -> SimpleNamespace:
    if cli_args is None:
        return SimpleNamespace()
    if isinstance(cli_args, SimpleNamespace):
        return cli_args
    if hasattr(cli_args, "__dict__"):
        return SimpleNamespace(**{k: v for k, v in vars(cli_args).items()})
    return SimpleNamespace()


def load_config(env: Mapping[str, str], cli_args: object | None = None) -> Config:
    """Build a runtime :class:`Config` from environment variables and CLI options."""

    base_dir = Path.cwd().resolve()
    data_dir = base_dir / "data"

    pricing_config_path = _to_path(env.get("AGENCYQUOTE_PRICING_CONFIG"))
    config_store_path = _to_path(env.get("AGENCYQUOTE_CONFIG_STORE")) or (data_dir / "pricing_versions.json")
    projects_path = _to_path(env.get("AGENCYQUOTE_PROJECTS_FILE")) or (data_dir / "projects.json")
    output_dir = _to_path(env.get("AGENCYQUOTE_OUTPUT_DIR")) or (base_dir / "outputs")
    verbose = _flag(env.get("AGENCYQUOTE_VERBOSE"))

    cli_ns = _namespace(cli_args)
    if getattr(cli_ns, "pricing_config", None):
        pricing_config_path = _to_path(cli_ns.pricing_config)
    if getattr(cli_ns, "config_store", None):
        config_store_path = _to_path(cli_ns.config_store) or config_store_path
    if getattr(cli_ns, "projects_file", None):
        projects_path = _to_path(cli_ns.projects_file) or projects_path
    if getattr(cli_ns, "output_dir", None):
        output_dir = _to_path(cli_ns.output_dir) or output_dir
    if getattr(cli_ns, "verbose", False):
        verbose = True

    return Config(
        base_dir=base_dir,
        pricing_config_path=pricing_config_path,
        config_store_path=config_store_path,
        projects_path=projects_path,
        output_dir=output_dir,
        verbose=verbose,
    )


__all__ = ["Config", "load_config"]
