"""
Configuration loading for the sniper engine.

``config.yaml`` at the project root holds a ``trading`` section with the
operator parameters and a ``runtime`` section with process settings.
Environment variables (typically from ``.env``) override individual values.
A missing file quietly yields the defaults.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml  # type: ignore

from models.trading_params import TradingParams
from utils.exceptions import ConfigError

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# env var -> (TradingParams field, parser)
_TRADING_ENV = {
    "BUY_AMOUNT": ("buy_amount", float),
    "MAX_TRADES": ("max_trades", int),
    "BUY_MARKET_CAP": ("buy_market_cap", float),
    "SELL_MARKET_CAP_INCREASE": ("sell_market_cap_increase", float),
    "STOP_LOSS": ("stop_loss", float),
    "SLIPPAGE": ("slippage", float),
    "HISTORY_PAGE_SIZE": ("history_page_size", int),
    "RECENT_TOKENS_LIMIT": ("recent_tokens_limit", int),
}
_SOCIAL_ENV = {
    "CHECK_TWITTER": "twitter",
    "CHECK_TELEGRAM": "telegram",
    "CHECK_WEBSITE": "website",
}
_RUNTIME_DEFAULTS: Dict[str, Any] = {
    "poll_interval_sec": 5.0,
    "feed": "simulated",
    "db_path": None,
    "seed": None,
}


def config_path() -> Path:
    return Path(os.getenv("SNIPER_CONFIG", str(PROJECT_ROOT / "config.yaml")))


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load ``config.yaml``.

    :returns: The parsed mapping; a missing file yields an empty dictionary.
    """
    path = Path(path) if path else config_path()
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigError([f"{path}: top level must be a mapping"])
        return data
    return {}


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_trading_params(config: Optional[Dict[str, Any]] = None) -> TradingParams:
    """Build validated ``TradingParams`` from the ``trading`` section plus env overrides."""
    config = load_config() if config is None else config
    trading: Dict[str, Any] = dict(config.get("trading") or {})
    social: Dict[str, Any] = dict(trading.pop("social_checks", None) or {})

    for env_key, (field, parse) in _TRADING_ENV.items():
        value = os.getenv(env_key)
        if value is not None:
            try:
                trading[field] = parse(value.strip())
            except ValueError:
                raise ConfigError([f"{env_key}: expected {parse.__name__}, got {value!r}"]) from None
    for env_key, check in _SOCIAL_ENV.items():
        value = os.getenv(env_key)
        if value is not None:
            social[check] = _as_bool(value)

    trading["social_checks"] = social
    return TradingParams.parse(trading)


def load_runtime(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Process settings: polling interval, feed kind, snapshot path, RNG seed."""
    config = load_config() if config is None else config
    runtime = {**_RUNTIME_DEFAULTS, **(config.get("runtime") or {})}

    if os.getenv("POLL_INTERVAL_SEC"):
        runtime["poll_interval_sec"] = os.getenv("POLL_INTERVAL_SEC")
    if os.getenv("FEED"):
        runtime["feed"] = os.getenv("FEED")
    if os.getenv("DB_PATH"):
        runtime["db_path"] = os.getenv("DB_PATH")
    if os.getenv("SEED"):
        runtime["seed"] = os.getenv("SEED")

    try:
        runtime["poll_interval_sec"] = float(runtime["poll_interval_sec"])
        runtime["seed"] = int(runtime["seed"]) if runtime["seed"] is not None else None
    except (TypeError, ValueError) as e:
        raise ConfigError([f"runtime: {e}"]) from e
    if runtime["poll_interval_sec"] <= 0:
        raise ConfigError(["runtime.poll_interval_sec: must be > 0"])
    runtime["feed"] = str(runtime["feed"]).lower()
    if runtime["feed"] not in ("simulated", "dexscreener"):
        raise ConfigError([f"runtime.feed: unknown feed {runtime['feed']!r}"])
    return runtime
