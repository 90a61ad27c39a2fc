# services/discovery_service.py
from __future__ import annotations
import os
import random
import string
from collections import deque
from typing import Optional, Protocol

import requests

from models.token import Token
from services.market_service import MarketService
from utils.log_config import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)


class DiscoveryFeed(Protocol):
    def next(self) -> Optional[Token]:
        """Next newly listed token, or None when nothing new is available."""
        ...


class SimulatedDiscoveryService:
    """
    Random token generator for paper trading.

    Market caps are uniform in [40, 1040) SOL; a token has Twitter with 70 %
    probability, Telegram with 60 % and a website with 80 %.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def _address(self) -> str:
        return "".join(self._rng.choices(string.ascii_lowercase + string.digits, k=13))

    def next(self) -> Optional[Token]:
        return Token(
            address=self._address(),
            name=f"Token{self._rng.randrange(1000)}",
            symbol="NEW",
            market_cap=round(self._rng.random() * 1000 + 40, 2),
            has_twitter=self._rng.random() < 0.7,
            has_telegram=self._rng.random() < 0.6,
            has_website=self._rng.random() < 0.8,
        )


class DexscreenerDiscoveryService:
    """
    Newly published Solana token profiles from Dexscreener.

    Config via .env:
      - DEXSCREENER_BASE_URL (default: https://api.dexscreener.com)
    Each address is emitted once; name, symbol and market cap come from the
    token's most liquid pair (``MarketService``).
    """

    def __init__(
        self,
        market: MarketService | None = None,
        session: requests.Session | None = None,
        base_url: Optional[str] = None,
        timeout: float = 12
    ) -> None:
        self.base_url = (base_url or os.getenv("DEXSCREENER_BASE_URL")
                         or "https://api.dexscreener.com").rstrip("/")
        self.session = session or requests.Session()
        self.market = market or MarketService(session=self.session)
        self.timeout = timeout
        self._pending: deque[dict] = deque()
        self._seen: set[str] = set()

    @property
    def url(self) -> str:
        return f"{self.base_url}/token-profiles/latest/v1"

    @log_function
    def fetch_profiles(self) -> list[dict]:
        r = self.session.get(self.url, timeout=self.timeout)
        r.raise_for_status()
        data = r.json() or []
        return [p for p in data if p.get("chainId") == MarketService.CHAIN and p.get("tokenAddress")]

    @staticmethod
    def social_flags(profile: dict) -> dict[str, bool]:
        flags = {"has_twitter": False, "has_telegram": False, "has_website": False}
        for link in profile.get("links") or []:
            kind = str(link.get("type") or link.get("label") or "").lower()
            if kind in ("twitter", "x"):
                flags["has_twitter"] = True
            elif kind == "telegram":
                flags["has_telegram"] = True
            elif kind == "website" or (not link.get("type") and link.get("url")):
                flags["has_website"] = True
        return flags

    def _refill(self) -> None:
        try:
            profiles = self.fetch_profiles()
        except requests.RequestException as e:
            logger.error(f"[discovery] error fetching Dexscreener profiles: {e}")
            return
        for p in profiles:
            address = p["tokenAddress"]
            if address not in self._seen:
                self._seen.add(address)
                self._pending.append(p)
        logger.debug(f"[discovery] pending={len(self._pending)} seen={len(self._seen)}")

    def next(self) -> Optional[Token]:
        if not self._pending:
            self._refill()
        while self._pending:
            profile = self._pending.popleft()
            address = profile["tokenAddress"]
            try:
                pair = self.market.get_best_pair(address)
            except requests.RequestException as e:
                logger.error(f"[discovery] pair lookup failed for {address}: {e}")
                continue
            if not pair:
                logger.debug(f"[discovery] no {MarketService.CHAIN} pair yet for {address}")
                continue
            market_cap = MarketService.market_cap_native(pair)
            if market_cap is None:
                continue
            base = pair.get("baseToken") or {}
            return Token(
                address=address,
                name=base.get("name") or "-",
                symbol=base.get("symbol") or "-",
                market_cap=market_cap,
                **self.social_flags(profile),
            )
        return None
