"""
An open position: a token bought by the engine and held until it exits.

``entry_market_cap`` is captured at buy time and never changes; only
``current_market_cap`` moves with price ticks.
"""

from __future__ import annotations

import time

from pydantic import BaseModel, Field


class Position(BaseModel):
    address: str
    name: str
    symbol: str = ""
    entry_market_cap: float = Field(gt=0)
    current_market_cap: float
    buy_amount: float = Field(ge=0)
    buy_time: float = Field(default_factory=time.time)

    @property
    def change(self) -> float:
        return self.current_market_cap - self.entry_market_cap

    def held_seconds(self, now: float | None = None) -> int:
        return int((now if now is not None else time.time()) - self.buy_time)
