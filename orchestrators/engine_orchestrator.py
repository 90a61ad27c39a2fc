# orchestrators/engine_orchestrator.py
from __future__ import annotations
import threading
from typing import Any, Optional

from controllers.autobuy_controller import AutoBuyController
from controllers.autosell_controller import AutoSellController
from enums.engine_status import EngineStatus
from enums.trade_outcome import TradeOutcome
from models.discovery import Discovery
from models.engine_state import EngineState
from models.position import Position
from models.token import Token
from models.trade import Trade
from models.trade_stats import TradeStats
from models.trading_params import TradingParams
from repositories.snapshot_repository import SnapshotRepository
from services.discovery_service import DiscoveryFeed, SimulatedDiscoveryService
from services.exit_service import evaluate_exit
from services.market_service import PriceFeed, SimulatedPriceService
from services.receipt_service import ReceiptProvider
from services.telegram_service import TelegramService
from utils.exceptions import ConfigError, InvalidOutcome, PositionNotFound
from utils.log_config import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)


class EngineOrchestrator:
    """
    Trading loop and operator command surface.

    Events (discovery, price tick, manual close, config update) are processed
    one at a time under a single engine lock:
      discovery  -> eligibility filter -> open position
      price tick -> update market cap -> exit rule -> close -> record trade
    ``stop()`` waits for the event in progress and only prevents later ones.
    """

    def __init__(
        self,
        params: TradingParams | None = None,
        discovery: DiscoveryFeed | None = None,
        prices: PriceFeed | None = None,
        receipts: ReceiptProvider | None = None,
        notifier: TelegramService | None = None,
        snapshots: SnapshotRepository | None = None,
        state: EngineState | None = None,
    ) -> None:
        self.state = state or EngineState(params=params or TradingParams())
        self.discovery = discovery or SimulatedDiscoveryService()
        self.prices = prices or SimulatedPriceService()
        self.snapshots = snapshots
        self.autobuy = AutoBuyController(notifier=notifier)
        self.autosell = AutoSellController(receipts=receipts, notifier=notifier)

        self._status = EngineStatus.IDLE
        self._lock = threading.RLock()
        self._stop_evt = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # --------- lifecycle ----------
    @property
    def status(self) -> EngineStatus:
        return self._status

    @property
    def is_running(self) -> bool:
        return self._status == EngineStatus.RUNNING

    def start(self) -> None:
        with self._lock:
            if self.is_running:
                return
            self._status = EngineStatus.RUNNING
        logger.info("EngineOrchestrator started.")

    def stop(self) -> None:
        with self._lock:
            self._status = EngineStatus.IDLE
        self.stop_polling()
        logger.info("EngineOrchestrator stopped.")

    def reset(self) -> None:
        """Drop positions, history and discoveries; parameters are kept."""
        with self._lock:
            self.state = EngineState(params=self.state.params)
        logger.info("Engine state reset.")

    # --------- events ----------
    @log_function
    def on_discovery(self, token: Token) -> Optional[Position]:
        with self._lock:
            if not self.is_running:
                return None
            return self.autobuy.process_token(self.state, token)

    @log_function
    def on_price_tick(self, address: str, market_cap: float) -> Optional[Trade]:
        with self._lock:
            if not self.is_running:
                return None
            try:
                position = self.state.positions.update_market_cap(address, market_cap)
            except PositionNotFound:
                logger.debug(f"[tick] {address} no longer open, tick ignored")
                return None

            outcome = evaluate_exit(position, self.state.params)
            if outcome is None:
                return None

            logger.info(f"[tick] {position.name} {outcome.value} at {position.current_market_cap:.2f} SOL "
                        f"(entry {position.entry_market_cap:.2f})")
            try:
                return self.autosell.close(self.state, address, outcome)
            except PositionNotFound:
                logger.debug(f"[tick] {address} closed concurrently")
                return None

    @log_function
    def manual_close(self, address: str, outcome: TradeOutcome | str | None = None) -> Optional[Trade]:
        """
        Operator sell, bypassing the exit rule. Without an explicit outcome a
        positive change counts as WIN and anything else as SL.
        Raises ``InvalidOutcome`` for an unknown outcome and ``PositionNotFound``
        for an unknown address.
        """
        if outcome is not None:
            try:
                outcome = TradeOutcome(outcome)
            except ValueError:
                raise InvalidOutcome(outcome) from None
        with self._lock:
            position = self.state.positions.get(address)
            if outcome is None:
                outcome = TradeOutcome.WIN if position.change > 0 else TradeOutcome.STOP_LOSS
            logger.info(f"[manual] selling {position.name} as {outcome.value}")
            return self.autosell.close(self.state, address, outcome)

    @log_function
    def update_config(self, **partial: Any) -> TradingParams:
        """Apply a partial parameter update; invalid input leaves the old one in place."""
        with self._lock:
            try:
                params = self.state.params.merged(partial)
            except ConfigError as e:
                logger.warning(f"Config update rejected: {e}")
                raise
            if params.recent_tokens_limit != self.state.params.recent_tokens_limit:
                self.state.resize_recent(params.recent_tokens_limit)
            self.state.params = params
        logger.info(f"Config updated: {partial}")
        return params

    # --------- read surface ----------
    @property
    def params(self) -> TradingParams:
        return self.state.params

    def list_open(self) -> list[Position]:
        return self.state.positions.list_open()

    def list_recent_discoveries(self) -> list[Discovery]:
        """Discarded discoveries, newest first."""
        with self._lock:
            return list(reversed(self.state.recent))

    def history(self, page: int = 1, page_size: int | None = None) -> list[Trade]:
        return self.state.history.page(page, page_size or self.state.params.history_page_size)

    def total_pages(self, page_size: int | None = None) -> int:
        return self.state.history.total_pages(page_size or self.state.params.history_page_size)

    def trade_history(self) -> list[Trade]:
        return self.state.history.history()

    def recent_trades(self, limit: int | None = None) -> list[Trade]:
        """Closed trades, newest first."""
        return self.state.history.recent_first(limit)

    def stats(self) -> TradeStats:
        return self.state.history.stats()

    def list_errors(self) -> dict[str, str]:
        with self._lock:
            return {address: reason for address, (_, reason) in self.state.errored.items()}

    # --------- polling ----------
    def run_cycle(self) -> None:
        """
        One polling pass: refresh every open position through the price feed
        (each refresh is a tick), then offer one new token from the discovery feed.
        """
        if not self.is_running:
            return

        for position in self.list_open():
            try:
                market_cap = self.prices.update(position.address, position.current_market_cap)
            except Exception as e:
                logger.exception(f"[cycle] price feed failed for {position.address}: {e}")
                continue
            if market_cap is not None:
                self.on_price_tick(position.address, market_cap)

        token = self.discovery.next()
        if token is not None:
            self.on_discovery(token)

    def start_polling(self, interval_sec: float = 5.0) -> None:
        if self._thread and self._thread.is_alive():
            return
        self.start()
        self._stop_evt.clear()
        self._thread = threading.Thread(target=self._run_loop, args=(interval_sec,), name="Engine", daemon=True)
        self._thread.start()
        logger.info(f"Polling every {interval_sec}s.")

    def stop_polling(self, timeout: float | None = None) -> None:
        self._stop_evt.set()
        thread = self._thread
        if thread and thread is not threading.current_thread():
            thread.join(timeout)

    def _run_loop(self, interval_sec: float) -> None:
        while not self._stop_evt.is_set():
            try:
                self.run_cycle()
            except Exception as e:
                logger.exception(f"Error in engine cycle: {e}")
            self._stop_evt.wait(interval_sec)

    # --------- persistence ----------
    def save_snapshot(self) -> None:
        if not self.snapshots:
            return
        with self._lock:
            self.snapshots.save(self.state.positions.list_open(), self.state.history.history())

    def restore_snapshot(self) -> None:
        if not self.snapshots:
            return
        positions, trades = self.snapshots.load()
        with self._lock:
            self.state.positions.load(positions)
            self.state.history.load(trades)
        logger.info(f"Restored {len(positions)} open positions and {len(trades)} trades.")
