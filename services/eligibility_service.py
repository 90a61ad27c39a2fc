"""
Eligibility filter for discovered tokens.

A token may be bought when its market cap reaches the configured minimum, it
is not already held, and it satisfies every social check the operator has
enabled. Disabled checks impose nothing.
"""

from __future__ import annotations

from typing import Iterable

from models.position import Position
from models.token import Token
from models.trading_params import TradingParams

# social check name -> token flag
_SOCIAL_FLAGS = {
    "twitter": "has_twitter",
    "telegram": "has_telegram",
    "website": "has_website",
}


def rejection_reasons(token: Token, open_positions: Iterable[Position], params: TradingParams) -> list[str]:
    """Every reason the token fails the filter; an empty list means eligible."""
    reasons: list[str] = []

    if token.market_cap <= 0:
        reasons.append(f"market cap {token.market_cap:.2f} SOL is not positive")
    elif token.market_cap < params.buy_market_cap:
        reasons.append(f"market cap {token.market_cap:.2f} < {params.buy_market_cap:.2f} SOL")

    if any(p.address == token.address for p in open_positions):
        reasons.append("already holding")

    checks = params.social_checks
    for check, flag in _SOCIAL_FLAGS.items():
        if getattr(checks, check) and not getattr(token, flag):
            reasons.append(f"no {check}")

    return reasons


def is_eligible(token: Token, open_positions: Iterable[Position], params: TradingParams) -> bool:
    return not rejection_reasons(token, open_positions, params)
