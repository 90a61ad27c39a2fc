from __future__ import annotations
import os, requests
from models.position import Position
from models.trade import Trade
from enums.trade_outcome import TradeOutcome
from utils.log_config import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)


def _esc(s: str) -> str:
    # minimal Markdown escaping
    return (s or "").replace("\\", "\\\\").replace("_", "\\_").replace("*", "\\*").replace("`", "\\`").replace("[","\\[").replace("]","\\]")


class TelegramService:
    """
    Optional trade notifications through the Telegram Bot API.
    Without TELEGRAM_TOKEN / TELEGRAM_CHAT_ID every call is a no-op.
    """
    def __init__(self, token: str | None = None, chat_id: str | None = None,
                 session: requests.Session | None = None) -> None:
        self.token = token or os.getenv("TELEGRAM_TOKEN")
        # numeric ids and @channel usernames are both accepted by the Bot API
        self.chat_id = str(chat_id or os.getenv("TELEGRAM_CHAT_ID") or "").strip() or None
        self.session = session or requests.Session()
        if not self.enabled:
            logger.info("TelegramService without TOKEN or CHAT_ID; notifications disabled.")

    @property
    def enabled(self) -> bool:
        return bool(self.token and self.chat_id)

    def _send(self, text: str) -> bool:
        if not self.enabled:
            return False
        payload = {"chat_id": self.chat_id, "text": text, "parse_mode": "Markdown"}
        try:
            self.session.post(f"https://api.telegram.org/bot{self.token}/sendMessage",
                              json=payload, timeout=10).raise_for_status()
            return True
        except requests.RequestException as e:
            logger.error(f"❌ Telegram send failed: {e}")
            return False

    @log_function
    def notify_buy(self, position: Position) -> bool:
        msg = (
            f"🛒 *BUY* {_esc(position.name)} (`{_esc(position.symbol)}`)\n"
            f"*Market cap:* {position.entry_market_cap:.2f} SOL\n"
            f"*Amount:* {position.buy_amount:.2f} SOL"
        )
        return self._send(msg)

    @log_function
    def notify_sell(self, trade: Trade) -> bool:
        icon = "✅" if trade.result == TradeOutcome.WIN else "🛑"
        msg = (
            f"{icon} *{trade.result.value}* {_esc(trade.name)}\n"
            f"*Market cap:* {trade.buy_market_cap:.2f} → {trade.sell_market_cap:.2f} SOL\n"
            f"*Profit:* {trade.profit:+.4f} SOL\n"
            f"[Transaction]({trade.tx_link})"
        )
        return self._send(msg)

    @log_function
    def notify_error(self, message: str) -> bool:
        return self._send(f"🚨 *ERROR*: {_esc(message)}")
