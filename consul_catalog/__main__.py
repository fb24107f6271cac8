"""
This file makes the 'consul_catalog' package executable.

You can query the catalog from the command line using:
python -m consul_catalog datacenters
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
