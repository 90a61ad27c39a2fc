"""
Immutable record of a closed position.

``proceeds`` is what the position returned when sold at ``sell_market_cap``
and ``profit`` is ``proceeds - buy_amount``, both in SOL.
"""

from __future__ import annotations

import time

from pydantic import BaseModel, ConfigDict, Field

from enums.trade_outcome import TradeOutcome


class Trade(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    name: str
    buy_market_cap: float
    sell_market_cap: float
    buy_amount: float
    proceeds: float
    profit: float
    result: TradeOutcome
    tx_link: str = ""
    closed_at: float = Field(default_factory=time.time)
