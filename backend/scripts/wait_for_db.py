from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from sqlalchemy import inspect, text
from sqlalchemy.exc import OperationalError

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from localmart.database import engine
from localmart.models import Business


def database_ready(require_schema: bool) -> bool:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
        if require_schema:
            return inspect(conn).has_table(Business.__tablename__)
    return True


def main(attempts: int = 60, delay_seconds: float = 2.0, require_schema: bool = False) -> None:
    target = engine.url.render_as_string(hide_password=True)
    for attempt in range(1, attempts + 1):
        try:
            if database_ready(require_schema):
                print(f"Database is ready: {target}")
                return
            print(f"Waiting for {Business.__tablename__} table ({attempt}/{attempts})...")
        except OperationalError:
            print(f"Waiting for {target} ({attempt}/{attempts})...")
        time.sleep(delay_seconds)

    raise SystemExit("Database did not become ready in time.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Block until the discovery database accepts connections.")
    parser.add_argument("--attempts", type=int, default=60)
    parser.add_argument("--delay", type=float, default=2.0)
    parser.add_argument(
        "--require-schema",
        action="store_true",
        help="Also wait until the businesses table exists (e.g. created by the business-management service).",
    )
    args = parser.parse_args()
    main(attempts=args.attempts, delay_seconds=args.delay, require_schema=args.require_schema)
