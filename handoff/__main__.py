"""Entry point for running handoff as a module.

This file allows handoff to be run with: python -m handoff
"""

import sys

from handoff.app import main

if __name__ == "__main__":
    sys.exit(main())
