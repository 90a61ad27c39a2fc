# repositories/history_repository.py
from __future__ import annotations
import math
import threading
import time
from typing import Iterable, Optional

from enums.trade_outcome import TradeOutcome
from models.position import Position
from models.trade import Trade
from models.trade_stats import TradeStats
from utils.exceptions import InvariantViolation
from utils.log_config import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)


class HistoryRepository:
    """
    Append-only trade history plus running statistics (one record per closed
    position).
    - proceeds = buy_amount / entry_market_cap * sell_market_cap  (SOL)
    - profit   = proceeds - buy_amount                             (SOL)
    The append and the stats update happen under the same lock, so no reader
    can see a trade without its effect on the totals or the other way round.
    """

    def __init__(self) -> None:
        self._trades: list[Trade] = []
        self._stats = TradeStats()
        self._lock = threading.RLock()

    # -------------------- RECORD --------------------

    @log_function
    def record(
        self,
        position: Position,
        sell_market_cap: float,
        outcome: TradeOutcome,
        tx_link: str = "",
        closed_at: Optional[float] = None
    ) -> Trade:
        if not position.entry_market_cap > 0:
            raise InvariantViolation(
                position.address,
                f"entry market cap must be > 0 to compute proceeds (got {position.entry_market_cap})"
            )

        proceeds = (position.buy_amount / position.entry_market_cap) * sell_market_cap
        profit = proceeds - position.buy_amount
        trade = Trade(
            address=position.address,
            name=position.name,
            buy_market_cap=position.entry_market_cap,
            sell_market_cap=sell_market_cap,
            buy_amount=position.buy_amount,
            proceeds=proceeds,
            profit=profit,
            result=TradeOutcome(outcome),
            tx_link=str(tx_link or ""),
            closed_at=closed_at if closed_at is not None else time.time(),
        )

        with self._lock:
            self._trades.append(trade)
            self._stats = self._stats.add(trade)

        logger.info(f"[history] {trade.result.value} {trade.name}: {trade.buy_market_cap:.2f} → "
                    f"{trade.sell_market_cap:.2f} SOL mc | profit {trade.profit:+.4f} SOL")
        return trade

    def load(self, trades: Iterable[Trade]) -> None:
        """Replace the history (snapshot restore); totals are rebuilt from it."""
        with self._lock:
            self._trades = list(trades)
            self._stats = TradeStats.from_history(self._trades)

    # -------------------- QUERIES --------------------

    def history(self) -> list[Trade]:
        """All trades in the order they were recorded."""
        with self._lock:
            return list(self._trades)

    def recent_first(self, limit: Optional[int] = None) -> list[Trade]:
        with self._lock:
            rows = self._trades[::-1]
        return rows[:limit] if limit is not None else rows

    def page(self, page: int, page_size: int) -> list[Trade]:
        """1-indexed page over the recorded order. Out-of-range pages are empty."""
        if page < 1 or page_size < 1:
            return []
        start = (page - 1) * page_size
        with self._lock:
            return self._trades[start:start + page_size]

    def total_pages(self, page_size: int) -> int:
        with self._lock:
            return math.ceil(len(self._trades) / page_size) if page_size > 0 else 0

    def count(self) -> int:
        with self._lock:
            return len(self._trades)

    def stats(self) -> TradeStats:
        with self._lock:
            return self._stats.model_copy()

    def recompute_stats(self) -> TradeStats:
        """Totals folded from scratch over the history; must equal ``stats()``."""
        with self._lock:
            return TradeStats.from_history(self._trades)
