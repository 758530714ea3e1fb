"""Entry point for running the portfolio tracker from a checkout.

Equivalent to the ``portfolio-tracker`` console script; see
``python main.py --help`` for the available views.
"""

import sys

from dashboard.cli import main

if __name__ == "__main__":
    sys.exit(main())
