# services/market_service.py
from __future__ import annotations
import os
import random
from typing import Optional, Protocol

import requests

from utils.log_config import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)


class PriceFeed(Protocol):
    def update(self, address: str, current_market_cap: float) -> Optional[float]:
        """Refreshed market cap (SOL) for an open position, or None if unavailable."""
        ...


class SimulatedPriceService:
    """
    Random walk of the market cap: each update moves it by a uniform amount in
    [-max_step, +max_step] SOL, rounded to 2 decimals.
    """

    def __init__(self, max_step: float = 2.0, seed: int | None = None) -> None:
        self.max_step = max_step
        self._rng = random.Random(seed)

    def update(self, address: str, current_market_cap: float) -> Optional[float]:
        step = round(self._rng.uniform(-self.max_step, self.max_step), 2)
        return round(current_market_cap + step, 2)


class MarketService:
    """
    Market data for Solana tokens from Dexscreener.

    Market caps are published in USD; they are converted to SOL with the
    pair's ``priceNative / priceUsd`` ratio. The most liquid pair wins.
    """
    BASE = os.getenv("DEXSCREENER_BASE_URL", "https://api.dexscreener.com").rstrip("/")
    CHAIN = "solana"

    def __init__(self, session: requests.Session | None = None, timeout: float = 8) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    @log_function
    def get_best_pair(self, token_address: str) -> Optional[dict]:
        url = f"{self.BASE}/latest/dex/tokens/{token_address}"
        r = self.session.get(url, timeout=self.timeout)
        r.raise_for_status()
        pairs = [p for p in (r.json() or {}).get("pairs") or [] if p.get("chainId") == self.CHAIN]
        if not pairs:
            return None
        return max(pairs, key=lambda p: float((p.get("liquidity") or {}).get("usd") or 0))

    @staticmethod
    def market_cap_native(pair: dict) -> Optional[float]:
        try:
            mc_usd = float(pair.get("marketCap") or pair.get("fdv") or 0)
            price_native = float(pair.get("priceNative") or 0)
            price_usd = float(pair.get("priceUsd") or 0)
        except (TypeError, ValueError):
            return None
        if mc_usd <= 0 or price_native <= 0 or price_usd <= 0:
            return None
        return round(mc_usd * price_native / price_usd, 2)

    def get_market_cap(self, token_address: str) -> Optional[float]:
        try:
            pair = self.get_best_pair(token_address)
        except requests.RequestException as e:
            logger.error(f"[market] Dexscreener error for {token_address}: {e}")
            return None
        return self.market_cap_native(pair) if pair else None

    def update(self, address: str, current_market_cap: float) -> Optional[float]:
        return self.get_market_cap(address)
