"""
PositionRepository: exclusive owner of the open positions (in memory).

Positions are keyed by token address and kept in insertion order. Every
mutation happens under one re-entrant lock and readers always get copies, so
a display refresh never observes a half-updated or half-removed position.
"""

from __future__ import annotations

import threading
import time
from typing import Iterable, Optional

from models.position import Position
from models.token import Token
from models.trading_params import TradingParams
from utils.exceptions import CapacityExceeded, DuplicatePosition, InvariantViolation, PositionNotFound
from utils.log_config import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)


class PositionRepository:
    def __init__(self) -> None:
        self._positions: dict[str, Position] = {}
        self._lock = threading.RLock()

    # -------- commands --------
    @log_function
    def open(self, token: Token, params: TradingParams, now: Optional[float] = None) -> Position:
        with self._lock:
            if len(self._positions) >= params.max_trades:
                raise CapacityExceeded(len(self._positions), params.max_trades)
            if token.address in self._positions:
                raise DuplicatePosition(token.address)
            if token.market_cap <= 0:
                raise InvariantViolation(token.address, f"entry market cap must be > 0 (got {token.market_cap})")

            position = Position(
                address=token.address,
                name=token.name,
                symbol=token.symbol,
                entry_market_cap=token.market_cap,
                current_market_cap=token.market_cap,
                buy_amount=params.buy_amount,
                buy_time=now if now is not None else time.time(),
            )
            self._positions[position.address] = position
            logger.info(f"[ledger] opened {position.symbol or position.name} ({position.address}) "
                        f"@ {position.entry_market_cap:.2f} SOL for {position.buy_amount} SOL "
                        f"[{len(self._positions)}/{params.max_trades}]")
            return position.model_copy()

    def update_market_cap(self, address: str, market_cap: float) -> Position:
        with self._lock:
            position = self._positions.get(address)
            if position is None:
                raise PositionNotFound(address)
            updated = position.model_copy(update={"current_market_cap": float(market_cap)})
            self._positions[address] = updated
            return updated.model_copy()

    @log_function
    def close(self, address: str) -> Position:
        with self._lock:
            position = self._positions.pop(address, None)
            if position is None:
                raise PositionNotFound(address)
            logger.info(f"[ledger] closed {position.symbol or position.name} ({address})")
            return position

    def load(self, positions: Iterable[Position]) -> None:
        """Replace the open set (snapshot restore). Does not enforce capacity."""
        with self._lock:
            self._positions = {p.address: p.model_copy() for p in positions}

    # -------- queries --------
    def get(self, address: str) -> Position:
        with self._lock:
            position = self._positions.get(address)
            if position is None:
                raise PositionNotFound(address)
            return position.model_copy()

    def contains(self, address: str) -> bool:
        with self._lock:
            return address in self._positions

    def count(self) -> int:
        with self._lock:
            return len(self._positions)

    def list_open(self) -> list[Position]:
        with self._lock:
            return [p.model_copy() for p in self._positions.values()]
