"""Exception types raised by the tracker."""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for all tracker errors."""


class PortfolioError(TrackerError):
    """The portfolio definition is missing or malformed."""


class QuoteFetchError(TrackerError):
    """The pricing API could not be reached or returned an error."""


class ReferencePriceError(TrackerError):
    """The reference asset price is unusable for denominating totals."""
