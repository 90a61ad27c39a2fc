from __future__ import annotations

from typing import Iterable

from pydantic import BaseModel

from enums.trade_outcome import TradeOutcome
from models.trade import Trade


class TradeStats(BaseModel):
    """Running totals over the trade history."""

    wins: int = 0
    losses: int = 0
    total_profit: float = 0.0

    def add(self, trade: Trade) -> "TradeStats":
        return TradeStats(
            wins=self.wins + (1 if trade.result == TradeOutcome.WIN else 0),
            losses=self.losses + (0 if trade.result == TradeOutcome.WIN else 1),
            total_profit=self.total_profit + trade.profit,
        )

    @classmethod
    def from_history(cls, trades: Iterable[Trade]) -> "TradeStats":
        stats = cls()
        for trade in trades:
            stats = stats.add(trade)
        return stats
