"""Terminal front-ends for the portfolio tracker."""

__version__ = "0.4.0"
