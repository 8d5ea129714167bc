"""Allow ``python -m chorus``."""

from __future__ import annotations

import sys

from chorus.cli import main

if __name__ == "__main__":
    sys.exit(main())
