"""
Module execution entry point.

Allows running with: python -m mptproof_cli
"""

import sys
from mptproof_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
