"""Typed exception hierarchy for the valuation engine.

The HTTP layer maps each class to a status code; the ingestion runner
treats ``DuplicatePricePointError`` as a per-asset no-op.
"""

from datetime import date


class ChainfolioError(Exception):
    """Base exception for all engine errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(ChainfolioError):
    """Asset class / field combination (or query) rejected. Carries the rule name."""

    status_code = 400

    def __init__(self, message: str, rule: str):
        self.rule = rule
        super().__init__(message)


class NotFoundError(ChainfolioError):
    """Holding or asset absent for the given user."""

    status_code = 404


class DuplicatePricePointError(ChainfolioError):
    """A price point already exists for (asset_id, day)."""

    status_code = 409

    def __init__(self, asset_id: str, day: date):
        self.asset_id = asset_id
        self.day = day
        super().__init__(f"Price for asset {asset_id} on {day.isoformat()} already recorded")


class DegenerateSeriesError(ChainfolioError):
    """Price series cannot be evaluated (zero or negative first price)."""


class PortfolioAggregationError(ChainfolioError):
    """Store failure while aggregating a user's portfolio; no partial result."""

    def __init__(self, user_id: str, message: str = "Failed to compute portfolio value and PnL"):
        self.user_id = user_id
        super().__init__(message)
