"""Manage VIP accounts from the command line.

See `vip_access.cli` for usage.
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from vip_access.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
