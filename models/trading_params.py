"""
Operator-editable trading parameters.

All valuations are market caps in SOL. The take-profit and stop-loss levels
are absolute offsets around the entry market cap: a position bought at 60
with ``sell_market_cap_increase=10`` and ``stop_loss=2`` exits at >= 70 or
<= 58. ``slippage`` is collected for the operator but does not change any
computed outcome.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from utils.exceptions import ConfigError


class SocialChecks(BaseModel):
    model_config = ConfigDict(extra="forbid")

    twitter: bool = False
    telegram: bool = False
    website: bool = False


class TradingParams(BaseModel):
    model_config = ConfigDict(extra="forbid", validate_assignment=True, allow_inf_nan=False)

    buy_amount: float = Field(default=1.0, ge=0)
    max_trades: int = Field(default=2, ge=0)
    buy_market_cap: float = Field(default=50.0, ge=0)
    sell_market_cap_increase: float = Field(default=10.0, ge=0)
    stop_loss: float = Field(default=2.0, ge=0)
    slippage: float = Field(default=0.0, ge=0)
    social_checks: SocialChecks = Field(default_factory=SocialChecks)
    history_page_size: int = Field(default=10, ge=1)
    recent_tokens_limit: int = Field(default=10, ge=1)

    @classmethod
    def parse(cls, data: dict[str, Any]) -> "TradingParams":
        """
        Validate a raw mapping, converting pydantic errors into ``ConfigError``.

        Validation is strict: numbers must be numbers and flags must be bools,
        so ``"3"`` or ``True`` for an amount is rejected instead of coerced.
        """
        try:
            return cls.model_validate(data, strict=True)
        except ValidationError as e:
            raise ConfigError(_error_messages(e)) from e

    def merged(self, partial: dict[str, Any]) -> "TradingParams":
        """
        Return a new, validated copy with ``partial`` applied on top.

        ``social_checks`` may be given partially, e.g. ``{"twitter": True}``.
        The current instance is never modified.
        """
        data = self.model_dump()
        for key, value in partial.items():
            if key == "social_checks" and isinstance(value, dict):
                data["social_checks"] = {**data["social_checks"], **value}
            else:
                data[key] = value
        return TradingParams.parse(data)


def _error_messages(e: ValidationError) -> list[str]:
    return [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
