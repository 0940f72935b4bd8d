"""Prepare a local discovery database: create tables, then load the demo corpus."""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SCRIPTS_DIR = ROOT / "scripts"
for path in (ROOT, SCRIPTS_DIR):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from init_db import main as init_db
from seed_businesses import main as seed_businesses
from wait_for_db import main as wait_for_db


def main(wait: bool = False, init_only: bool = False) -> None:
    if wait:
        wait_for_db()
    init_db()
    if not init_only:
        seed_businesses()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--wait", action="store_true", help="Wait for the database before creating tables.")
    parser.add_argument("--init-only", action="store_true", help="Create tables without loading demo businesses.")
    args = parser.parse_args()
    main(wait=args.wait, init_only=args.init_only)
