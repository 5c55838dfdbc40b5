"""Application configuration — loaded from config.json at project root.

Only user-level settings live here (Hebesatz of the municipality, reserve
rate, Kleinunternehmer election). Statutory per-year constants are data in
core/tax/params.py and are never configured through this file.
"""

import json
import logging
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Optional

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


@dataclass
class AppConfig:
    hebesatz: int = 410
    trade_tax_allowance: Decimal = Decimal("24500")
    steuermesszahl: Decimal = Decimal("0.035")
    kleinunternehmer: bool = False
    tax_reserve_rate: Decimal = Decimal("30")
    kleinunternehmer_prior_year_limit: Decimal = Decimal("22000")
    kleinunternehmer_current_year_limit: Decimal = Decimal("50000")
    low_value_asset_threshold: Decimal = Decimal("800")
    currency: str = "EUR"
    user_name: str = ""


_DEFAULTS = AppConfig()
_cached: Optional[AppConfig] = None


def _config_path() -> Path:
    from ..data.database import _find_project_root
    return _find_project_root() / "config.json"


def _decimal(data: dict, key: str, default: Decimal) -> Decimal:
    return Decimal(str(data.get(key, default)))


def load_config(path: Path) -> AppConfig:
    """Parse a config.json file. Raises ConfigurationError if it is malformed."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return AppConfig(
            hebesatz=int(data.get("hebesatz", _DEFAULTS.hebesatz)),
            trade_tax_allowance=_decimal(data, "trade_tax_allowance", _DEFAULTS.trade_tax_allowance),
            steuermesszahl=_decimal(data, "steuermesszahl", _DEFAULTS.steuermesszahl),
            kleinunternehmer=bool(data.get("kleinunternehmer", False)),
            tax_reserve_rate=_decimal(data, "tax_reserve_rate", _DEFAULTS.tax_reserve_rate),
            kleinunternehmer_prior_year_limit=_decimal(
                data, "kleinunternehmer_prior_year_limit",
                _DEFAULTS.kleinunternehmer_prior_year_limit),
            kleinunternehmer_current_year_limit=_decimal(
                data, "kleinunternehmer_current_year_limit",
                _DEFAULTS.kleinunternehmer_current_year_limit),
            low_value_asset_threshold=_decimal(
                data, "low_value_asset_threshold", _DEFAULTS.low_value_asset_threshold),
            currency=data.get("currency", _DEFAULTS.currency),
            user_name=data.get("user_name", ""),
        )
    except (ValueError, TypeError, ArithmeticError, AttributeError) as exc:
        raise ConfigurationError(f"Invalid configuration file {path}: {exc}") from exc


def get_config() -> AppConfig:
    global _cached
    if _cached is not None:
        return _cached
    path = _config_path()
    if not path.exists():
        logger.debug("No config.json at %s, using defaults", path)
        _cached = AppConfig()
        return _cached
    _cached = load_config(path)
    return _cached


def reset_config() -> None:
    global _cached
    _cached = None


def save_config(cfg: AppConfig, path: Optional[Path] = None) -> None:
    global _cached
    _cached = cfg
    data = {
        "hebesatz": cfg.hebesatz,
        "trade_tax_allowance": str(cfg.trade_tax_allowance),
        "steuermesszahl": str(cfg.steuermesszahl),
        "kleinunternehmer": cfg.kleinunternehmer,
        "tax_reserve_rate": str(cfg.tax_reserve_rate),
        "kleinunternehmer_prior_year_limit": str(cfg.kleinunternehmer_prior_year_limit),
        "kleinunternehmer_current_year_limit": str(cfg.kleinunternehmer_current_year_limit),
        "low_value_asset_threshold": str(cfg.low_value_asset_threshold),
        "currency": cfg.currency,
        "user_name": cfg.user_name,
    }
    target = path or _config_path()
    target.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
