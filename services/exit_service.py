"""
Exit rule evaluated on every price tick.

Take profit is checked before stop loss, so a configuration where both
levels are reachable at once (zero offsets) resolves to a win.
"""

from __future__ import annotations

from typing import Optional

from enums.trade_outcome import TradeOutcome
from models.position import Position
from models.trading_params import TradingParams


def take_profit_level(position: Position, params: TradingParams) -> float:
    return position.entry_market_cap + params.sell_market_cap_increase


def stop_loss_level(position: Position, params: TradingParams) -> float:
    return position.entry_market_cap - params.stop_loss


def evaluate_exit(position: Position, params: TradingParams) -> Optional[TradeOutcome]:
    """Return the outcome to close with, or ``None`` to keep holding."""
    if position.current_market_cap >= take_profit_level(position, params):
        return TradeOutcome.WIN
    if position.current_market_cap <= stop_loss_level(position, params):
        return TradeOutcome.STOP_LOSS
    return None
