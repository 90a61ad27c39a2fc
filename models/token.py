"""
Domain model representing a freshly listed token (a buy candidate).

Valuations are market caps expressed in the native unit (SOL). Social flags
tell whether the project publishes a Twitter account, a Telegram group and a
website; the eligibility filter can require any of them.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class Token(BaseModel):

    address: str = Field(min_length=1)
    name: str
    symbol: str
    market_cap: float = Field(ge=0)
    has_twitter: bool = False
    has_telegram: bool = False
    has_website: bool = False
