"""Allow ``python -m phpsniffs``."""

import sys

from phpsniffs.checkers import main

if __name__ == "__main__":
    sys.exit(main())
