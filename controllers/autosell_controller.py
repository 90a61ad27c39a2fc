# controllers/autosell_controller.py
from __future__ import annotations
from typing import Optional

from enums.trade_outcome import TradeOutcome
from models.engine_state import EngineState
from models.trade import Trade
from services.receipt_service import ReceiptProvider, SimulatedReceiptService
from services.telegram_service import TelegramService
from utils.exceptions import InvariantViolation
from utils.log_config import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)


class AutoSellController:
    """
    Closes a position and books the trade:
      - gets a settlement receipt for the sale
      - removes the position from the ledger (exactly once)
      - records the trade, which updates the running totals
    Callers hold the engine lock, so the three steps are one unit.
    """
    def __init__(self, receipts: ReceiptProvider | None = None,
                 notifier: TelegramService | None = None) -> None:
        self.receipts = receipts or SimulatedReceiptService()
        self.notifier = notifier

    @log_function
    def close(
        self,
        state: EngineState,
        address: str,
        outcome: TradeOutcome,
        sell_market_cap: Optional[float] = None
    ) -> Optional[Trade]:
        """
        Returns the recorded trade, or None when the position hit an invariant
        violation (it is then parked in ``state.errored``).
        Raises ``PositionNotFound`` if the address is not open.
        """
        # 1) receipt first: if settlement fails the position stays open
        position = state.positions.get(address)
        exit_mc = position.current_market_cap if sell_market_cap is None else float(sell_market_cap)
        tx_link = self.receipts.settle(position, exit_mc)

        # 2) remove from ledger; a second close for the same address fails here
        position = state.positions.close(address)

        # 3) book it
        try:
            trade = state.history.record(position, exit_mc, outcome, tx_link)
        except InvariantViolation as e:
            logger.exception(f"[autosell] invariant violation closing {address}: {e}")
            state.errored[address] = (position, str(e))
            if self.notifier:
                self.notifier.notify_error(str(e))
            return None

        if self.notifier:
            self.notifier.notify_sell(trade)
        return trade
