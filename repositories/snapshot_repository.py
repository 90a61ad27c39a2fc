# repositories/snapshot_repository.py
from __future__ import annotations
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path

from enums.trade_outcome import TradeOutcome
from models.position import Position
from models.trade import Trade
from utils.log_config import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)


def _resolve_db_path() -> str:
    env_path = os.getenv("DB_PATH")
    if env_path:
        return str(Path(env_path).expanduser().resolve())
    root = Path(__file__).resolve().parents[1]
    return str(root / "data" / "sniper.db")


class SnapshotRepository:
    """
    SQLite snapshot of the engine: open positions and the full trade history.
    Totals are never stored; they are rebuilt from ``trades`` on restore so
    they cannot drift from the history.
    """
    def __init__(self, db_path: str | None = None) -> None:
        self.db_path = str(Path(db_path).expanduser().resolve()) if db_path else _resolve_db_path()
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._ensure_tables()

    @contextmanager
    def _conn(self):
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _ensure_tables(self) -> None:
        with self._conn() as c:
            c.execute("""
            CREATE TABLE IF NOT EXISTS positions (
                address            TEXT PRIMARY KEY,
                name               TEXT,
                symbol             TEXT,
                entry_market_cap   REAL NOT NULL,
                current_market_cap REAL NOT NULL,
                buy_amount         REAL NOT NULL,
                buy_time           REAL NOT NULL
            )
            """)
            c.execute("""
            CREATE TABLE IF NOT EXISTS trades (
                id              INTEGER PRIMARY KEY AUTOINCREMENT,
                address         TEXT NOT NULL,
                name            TEXT,
                buy_market_cap  REAL NOT NULL,
                sell_market_cap REAL NOT NULL,
                buy_amount      REAL NOT NULL,
                proceeds        REAL NOT NULL,
                profit          REAL NOT NULL,
                result          TEXT NOT NULL,
                tx_link         TEXT,
                closed_at       REAL
            )
            """)
            c.commit()

    # -------------------- WRITE --------------------

    @log_function
    def save(self, positions: list[Position], trades: list[Trade]) -> None:
        """Rewrite the whole snapshot in a single transaction."""
        with self._conn() as c:
            with c:
                c.execute("DELETE FROM positions")
                c.execute("DELETE FROM trades")
                c.executemany("""
                    INSERT INTO positions (
                        address, name, symbol, entry_market_cap,
                        current_market_cap, buy_amount, buy_time
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """, [
                    (p.address, p.name, p.symbol, p.entry_market_cap,
                     p.current_market_cap, p.buy_amount, p.buy_time)
                    for p in positions
                ])
                c.executemany("""
                    INSERT INTO trades (
                        address, name, buy_market_cap, sell_market_cap, buy_amount,
                        proceeds, profit, result, tx_link, closed_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, [
                    (t.address, t.name, t.buy_market_cap, t.sell_market_cap, t.buy_amount,
                     t.proceeds, t.profit, t.result.value, t.tx_link, t.closed_at)
                    for t in trades
                ])
        logger.info(f"[snapshot] saved {len(positions)} positions, {len(trades)} trades → {self.db_path}")

    # -------------------- READ --------------------

    @log_function
    def load(self) -> tuple[list[Position], list[Trade]]:
        with self._conn() as c:
            pos_rows = c.execute("SELECT * FROM positions ORDER BY rowid ASC").fetchall()
            trade_rows = c.execute("SELECT * FROM trades ORDER BY id ASC").fetchall()

        positions = [Position(**dict(r)) for r in pos_rows]
        trades = []
        for r in trade_rows:
            row = dict(r)
            row.pop("id", None)
            row["result"] = TradeOutcome(row["result"])
            row["tx_link"] = row.get("tx_link") or ""
            trades.append(Trade(**row))
        return positions, trades
