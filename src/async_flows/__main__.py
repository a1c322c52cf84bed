"""Allow ``python -m async_flows``."""

import sys

from async_flows.scenarios.runner import main

if __name__ == "__main__":
    sys.exit(main())
