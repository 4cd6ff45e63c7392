"""Entry point for ``python -m branchbank``."""
import sys

from branchbank.cli import main

if __name__ == "__main__":
    sys.exit(main())
