"""
A discovered token as shown in the recent-discoveries view.
"""

from __future__ import annotations

import time

from pydantic import BaseModel, Field

from enums.token_status import TokenStatus
from models.token import Token


class Discovery(BaseModel):
    token: Token
    status: TokenStatus = TokenStatus.CANDIDATE
    reason: str = ""
    seen_at: float = Field(default_factory=time.time)
