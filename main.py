# main.py
from __future__ import annotations
import signal
import threading

from dotenv import load_dotenv, find_dotenv

# .env before anything reads os.environ
load_dotenv(find_dotenv(usecwd=True), override=False)

from orchestrators.engine_orchestrator import EngineOrchestrator
from repositories.snapshot_repository import SnapshotRepository
from services.discovery_service import DexscreenerDiscoveryService, SimulatedDiscoveryService
from services.market_service import MarketService, SimulatedPriceService
from services.receipt_service import SimulatedReceiptService
from services.telegram_service import TelegramService
from utils.config import load_config, load_runtime, load_trading_params
from utils.log_config import logger_manager

logger = logger_manager.setup_logger(__name__)

STATS_EVERY_CYCLES = 12


def build_engine(config: dict, runtime: dict) -> EngineOrchestrator:
    params = load_trading_params(config)
    seed = runtime["seed"]
    if runtime["feed"] == "dexscreener":
        market = MarketService()
        discovery, prices = DexscreenerDiscoveryService(market=market), market
    else:
        discovery, prices = SimulatedDiscoveryService(seed=seed), SimulatedPriceService(seed=seed)

    snapshots = SnapshotRepository(runtime["db_path"]) if runtime["db_path"] else None
    engine = EngineOrchestrator(
        params=params,
        discovery=discovery,
        prices=prices,
        receipts=SimulatedReceiptService(seed=seed),
        notifier=TelegramService(),
        snapshots=snapshots,
    )
    engine.restore_snapshot()
    return engine


def log_stats(engine: EngineOrchestrator) -> None:
    s = engine.stats()
    open_ = engine.list_open()
    logger.info(f"📊 wins={s.wins} losses={s.losses} profit={s.total_profit:.4f} SOL | "
                f"open {len(open_)}/{engine.params.max_trades} | history pages {engine.total_pages()}")
    for p in open_:
        logger.info(f"   {p.name:<12} entry={p.entry_market_cap:>9.2f} now={p.current_market_cap:>9.2f} "
                    f"change={p.change:+.2f} held={p.held_seconds()}s")
    for t in engine.recent_trades(limit=3):
        logger.info(f"   last {t.result.value:<3} {t.name:<12} profit={t.profit:+.4f} SOL")


def main() -> None:
    config = load_config()
    runtime = load_runtime(config)
    engine = build_engine(config, runtime)

    stop_evt = threading.Event()

    def shutdown(*_):
        logger.info("🛑 Shutdown signal received...")
        stop_evt.set()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    logger.info(f"🚀 Starting engine (feed={runtime['feed']}, interval={runtime['poll_interval_sec']}s)")
    engine.start_polling(runtime["poll_interval_sec"])
    cycles = 0
    try:
        while not stop_evt.wait(runtime["poll_interval_sec"]):
            cycles += 1
            if cycles % STATS_EVERY_CYCLES == 0:
                log_stats(engine)
    finally:
        engine.stop()
        engine.save_snapshot()
        log_stats(engine)
        logger.info("✅ Shutdown complete.")


if __name__ == "__main__":
    main()
