"""
Shared fixtures: deterministic feeds and receipts for scenario tests.
"""

from __future__ import annotations

from collections import deque
from typing import Iterable, Optional

import pytest

from models.engine_state import EngineState
from models.token import Token
from models.trading_params import TradingParams
from orchestrators.engine_orchestrator import EngineOrchestrator

_ENV_KEYS = (
    "BUY_AMOUNT", "MAX_TRADES", "BUY_MARKET_CAP", "SELL_MARKET_CAP_INCREASE", "STOP_LOSS",
    "SLIPPAGE", "HISTORY_PAGE_SIZE", "RECENT_TOKENS_LIMIT", "CHECK_TWITTER", "CHECK_TELEGRAM",
    "CHECK_WEBSITE", "POLL_INTERVAL_SEC", "FEED", "DB_PATH", "SEED", "SNIPER_CONFIG",
    "TELEGRAM_TOKEN", "TELEGRAM_CHAT_ID",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class ScriptedDiscovery:
    def __init__(self, tokens: Iterable[Token] = ()) -> None:
        self.queue: deque[Token] = deque(tokens)

    def next(self) -> Optional[Token]:
        return self.queue.popleft() if self.queue else None


class ScriptedPrices:
    """Returns scripted market caps per address; None when the script is exhausted."""

    def __init__(self, script: dict[str, list[float]] | None = None) -> None:
        self.script = {k: deque(v) for k, v in (script or {}).items()}
        self.calls: list[str] = []

    def update(self, address: str, current_market_cap: float) -> Optional[float]:
        self.calls.append(address)
        values = self.script.get(address)
        return values.popleft() if values else None


class CountingReceipts:
    def __init__(self) -> None:
        self.count = 0

    def settle(self, position, sell_market_cap: float) -> str:
        self.count += 1
        return f"receipt-{self.count}"


def make_token(address: str = "X", market_cap: float = 60.0, **kwargs) -> Token:
    return Token(address=address, name=kwargs.pop("name", f"Token{address}"),
                 symbol=kwargs.pop("symbol", "NEW"), market_cap=market_cap, **kwargs)


@pytest.fixture
def scenario_params() -> TradingParams:
    return TradingParams(buy_amount=1, max_trades=1, buy_market_cap=50,
                         sell_market_cap_increase=10, stop_loss=2)


@pytest.fixture
def state(scenario_params) -> EngineState:
    return EngineState(params=scenario_params)


@pytest.fixture
def receipts() -> CountingReceipts:
    return CountingReceipts()


@pytest.fixture
def engine(scenario_params, receipts) -> EngineOrchestrator:
    eng = EngineOrchestrator(params=scenario_params, discovery=ScriptedDiscovery(),
                             prices=ScriptedPrices(), receipts=receipts)
    eng.start()
    return eng
