"""
State owned by the engine orchestrator.

Holds the trading parameters, the position ledger, the trade recorder and the
bounded list of recently discarded discoveries. Handlers receive it by
reference; nothing else keeps a global copy.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

from models.discovery import Discovery
from models.position import Position
from models.trading_params import TradingParams
from repositories.history_repository import HistoryRepository
from repositories.position_repository import PositionRepository


@dataclass
class EngineState:
    params: TradingParams = field(default_factory=TradingParams)
    positions: PositionRepository = field(default_factory=PositionRepository)
    history: HistoryRepository = field(default_factory=HistoryRepository)
    recent: deque[Discovery] = field(default_factory=deque)
    errored: dict[str, tuple[Position, str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.resize_recent(self.params.recent_tokens_limit)

    def resize_recent(self, limit: int) -> None:
        """Rebuild the recent view with a new cap, keeping the newest entries."""
        self.recent = deque(list(self.recent)[-limit:], maxlen=limit)
