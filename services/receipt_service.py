"""
Settlement receipts for closed trades.

The engine treats a receipt as an opaque string. The simulated provider
produces a Solscan-style transaction link with a random id.
"""

from __future__ import annotations

import random
import string
from typing import Protocol

from models.position import Position


class ReceiptProvider(Protocol):
    def settle(self, position: Position, sell_market_cap: float) -> str:
        ...


class SimulatedReceiptService:
    EXPLORER = "https://solscan.io/tx"

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def settle(self, position: Position, sell_market_cap: float) -> str:
        tx_id = "".join(self._rng.choices(string.ascii_lowercase + string.digits, k=13))
        return f"{self.EXPLORER}/{tx_id}"
