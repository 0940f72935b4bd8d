import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from zoneinfo import ZoneInfo

_TEST_DB_DIR = Path(tempfile.mkdtemp(prefix="localmart-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+pysqlite:///{_TEST_DB_DIR / 'discovery.db'}"
os.environ["TELEMETRY_ENABLED"] = "false"
os.environ["GOOGLE_MAPS_API_KEY"] = ""

import pytest

from localmart.database import Base, SessionLocal, engine
from localmart.models import Business
from localmart.records import BusinessRecord
from localmart.services.filter_service import BusinessFilter

IST = ZoneInfo("Asia/Kolkata")
BASE_CREATED_AT = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)
# 2026-02-14 is a Saturday.
SATURDAY_NOON = datetime(2026, 2, 14, 12, 0, tzinfo=IST)


def fixed_clock(moment: datetime):
    return lambda: moment


class InMemoryBusinessRepository:
    """Repository without a spatial index; records every filter it receives."""

    supports_spatial_index = False

    def __init__(self, records: list[BusinessRecord]) -> None:
        self.records = records
        self.filters: list[BusinessFilter] = []

    def find_by_filter(self, business_filter: BusinessFilter) -> list[BusinessRecord]:
        self.filters.append(business_filter)
        return [record for record in self.records if business_filter.matches(record)]


def make_record(index: int = 0, **overrides) -> BusinessRecord:
    values = {
        "id": f"biz-{index}",
        "name": f"Business {index}",
        "description": None,
        "category_tags": (),
        "lat": 12.97,
        "lng": 77.59,
        "operating_hours": None,
        "realtime_status": "online",
        "avg_rating": 4.0,
        "total_reviews": 10,
        "created_at": BASE_CREATED_AT + timedelta(days=index),
    }
    values.update(overrides)
    return BusinessRecord(**values)


def make_business(index: int = 0, **overrides) -> Business:
    values = {
        "id": f"biz-{index}",
        "name": f"Business {index}",
        "description": None,
        "category_type": [],
        "lat": 12.97,
        "lng": 77.59,
        "operating_hours": None,
        "realtime_status": "online",
        "avg_rating": 4.0,
        "total_reviews": 10,
        "accepts_cod": False,
        "has_offers": False,
        "is_verified": False,
        "commission_rate": 2.0,
        "min_order_amount": 50.0,
        "is_approved": True,
        "is_active": True,
        "created_at": BASE_CREATED_AT + timedelta(days=index),
    }
    values.update(overrides)
    return Business(**values)


@pytest.fixture()
def db_session():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def seed(db_session):
    def _seed(*businesses: Business) -> None:
        db_session.add_all(businesses)
        db_session.commit()

    return _seed
