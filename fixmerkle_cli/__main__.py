"""
Module execution entry point.

Allows running with: python -m fixmerkle_cli
"""

import sys
from fixmerkle_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
