"""
Outcome of a closed position.
"""

from __future__ import annotations

from enum import Enum


class TradeOutcome(str, Enum):
    """How a position was closed: profit target reached or stop loss hit."""

    WIN = "WIN"
    STOP_LOSS = "SL"
