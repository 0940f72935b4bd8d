import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from localmart.database import Base, engine
from localmart import models  # noqa: F401  registers tables on Base.metadata


def main() -> None:
    Base.metadata.create_all(bind=engine)
    tables = ", ".join(sorted(Base.metadata.tables))
    print(f"Database initialized with LocalMart discovery schema ({tables}).")


if __name__ == "__main__":
    main()
