"""
Error taxonomy for the sniper engine.

``CapacityExceeded`` and ``PositionNotFound`` are expected during normal
operation and are handled by the controllers. ``InvariantViolation`` means a
position reached an impossible state and must be surfaced for that position
only. ``ConfigError`` is raised when the operator submits invalid parameters.
"""

from __future__ import annotations

from enums.trade_outcome import TradeOutcome


class SniperError(Exception):
    """Base class for every engine error."""


class CapacityExceeded(SniperError):
    def __init__(self, open_count: int, max_trades: int) -> None:
        super().__init__(f"max concurrent positions reached ({open_count}/{max_trades})")
        self.open_count = open_count
        self.max_trades = max_trades


class PositionNotFound(SniperError, KeyError):
    def __init__(self, address: str) -> None:
        super().__init__(address)
        self.address = address

    def __str__(self) -> str:
        return f"no open position for {self.address}"


class DuplicatePosition(SniperError):
    def __init__(self, address: str) -> None:
        super().__init__(f"position already open for {address}")
        self.address = address


class InvariantViolation(SniperError):
    def __init__(self, address: str, detail: str) -> None:
        super().__init__(f"{address}: {detail}")
        self.address = address
        self.detail = detail


class ConfigError(SniperError, ValueError):
    def __init__(self, errors: list[str]) -> None:
        super().__init__("invalid trading parameters: " + "; ".join(errors))
        self.errors = errors


class InvalidOutcome(SniperError, ValueError):
    def __init__(self, outcome: object) -> None:
        valid = ", ".join(o.value for o in TradeOutcome)
        super().__init__(f"unknown trade outcome {outcome!r} (expected one of: {valid})")
        self.outcome = outcome
