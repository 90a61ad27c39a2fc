# controllers/autobuy_controller.py
from __future__ import annotations
from typing import Optional

from enums.token_status import TokenStatus
from models.discovery import Discovery
from models.engine_state import EngineState
from models.position import Position
from models.token import Token
from services.eligibility_service import rejection_reasons
from services.telegram_service import TelegramService
from utils.exceptions import CapacityExceeded, DuplicatePosition, InvariantViolation
from utils.log_config import logger_manager, log_function

logger = logger_manager.setup_logger(__name__)


class AutoBuyController:
    """
    Flow for a discovered token:
      eligibility filter -> PositionRepository.open
    Tokens that are not bought (filtered out or no free slot) go to the
    recent-discoveries view with the reason.
    """

    def __init__(self, notifier: TelegramService | None = None) -> None:
        self.notifier = notifier

    @log_function
    def process_token(self, state: EngineState, token: Token) -> Optional[Position]:
        reasons = rejection_reasons(token, state.positions.list_open(), state.params)
        if reasons:
            logger.debug(f"[autobuy] {token.symbol} {token.address} excluded: {'; '.join(reasons)}")
            self._remember(state, token, TokenStatus.EXCLUDED, "; ".join(reasons))
            return None

        try:
            position = state.positions.open(token, state.params)
        except CapacityExceeded as e:
            logger.debug(f"[autobuy] {token.address} not taken: {e}")
            self._remember(state, token, TokenStatus.NO_CAPACITY, str(e))
            return None
        except DuplicatePosition as e:
            logger.debug(f"[autobuy] {e}")
            self._remember(state, token, TokenStatus.EXCLUDED, "already holding")
            return None
        except InvariantViolation as e:
            logger.error(f"[autobuy] refused {token.address}: {e}")
            self._remember(state, token, TokenStatus.EXCLUDED, e.detail)
            return None

        self._forget(state, token.address)
        if self.notifier:
            self.notifier.notify_buy(position)
        return position

    # -------- recent discoveries --------
    @staticmethod
    def _forget(state: EngineState, address: str) -> None:
        for d in [d for d in state.recent if d.token.address == address]:
            state.recent.remove(d)

    def _remember(self, state: EngineState, token: Token, status: TokenStatus, reason: str) -> None:
        # a re-discovered token replaces its older entry (fresh valuation)
        self._forget(state, token.address)
        state.recent.append(Discovery(token=token, status=status, reason=reason))
