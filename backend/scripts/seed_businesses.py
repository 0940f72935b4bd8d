from __future__ import annotations

import sys
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from localmart.database import SessionLocal
from localmart.models import Business

NAMESPACE = uuid.UUID("5b1c7f1e-2a44-4c59-9a5e-3f0d8c6b7a21")
SEEDED_AT = datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc)

WEEKDAY_HOURS = {"open": "09:00", "close": "21:00", "closed": False}
SUNDAY_CLOSED = {"open": "00:00", "close": "00:00", "closed": True}
LATE_NIGHT_HOURS = {"open": "18:00", "close": "02:00", "closed": False}

BUSINESSES = [
    {
        "name": "Sharma Plumbing Works",
        "description": "Leak repairs, bathroom fittings and emergency plumbing across Indiranagar.",
        "categories": ["plumbing", "home-services"],
        "lat": 12.9784,
        "lng": 77.6408,
        "rating": 4.6,
        "reviews": 212,
        "accepts_cod": True,
        "has_offers": False,
        "commission_rate": 2.5,
        "min_order_amount": 0,
        "hours": "weekday",
    },
    {
        "name": "Glow Beauty Studio",
        "description": "Bridal makeup, facials and hair styling by appointment.",
        "categories": ["beauty", "salon"],
        "lat": 12.9719,
        "lng": 77.6412,
        "rating": 4.8,
        "reviews": 530,
        "accepts_cod": False,
        "has_offers": True,
        "commission_rate": 4.0,
        "min_order_amount": 300,
        "hours": "weekday",
    },
    {
        "name": "Koramangala Electricals",
        "description": "Wiring, inverter installation and appliance repair.",
        "categories": ["electrical", "home-services"],
        "lat": 12.9352,
        "lng": 77.6245,
        "rating": 4.1,
        "reviews": 87,
        "accepts_cod": True,
        "has_offers": True,
        "commission_rate": 3.5,
        "min_order_amount": 150,
        "hours": "weekday",
    },
    {
        "name": "Midnight Biryani House",
        "description": "Late-night biryani and kebabs with home delivery.",
        "categories": ["food", "delivery"],
        "lat": 12.9698,
        "lng": 77.7500,
        "rating": 4.3,
        "reviews": 1204,
        "accepts_cod": True,
        "has_offers": True,
        "commission_rate": 6.0,
        "min_order_amount": 250,
        "hours": "late",
    },
    {
        "name": "Green Leaf Laundry",
        "description": "Wash and fold, dry cleaning and ironing with doorstep pickup.",
        "categories": ["laundry", "home-services"],
        "lat": 12.9141,
        "lng": 77.6101,
        "rating": 3.9,
        "reviews": 45,
        "accepts_cod": True,
        "has_offers": False,
        "commission_rate": 2.0,
        "min_order_amount": 50,
        "hours": "weekday",
    },
    {
        "name": "Jayanagar Tailors",
        "description": "Alterations, blouse stitching and custom suits.",
        "categories": ["tailoring"],
        "lat": 12.9299,
        "lng": 77.5826,
        "rating": 0.0,
        "reviews": 0,
        "accepts_cod": True,
        "has_offers": False,
        "commission_rate": 1.5,
        "min_order_amount": 0,
        "hours": "weekday",
    },
    {
        "name": "Hebbal Pet Grooming",
        "description": "Bathing, trimming and nail care for dogs and cats.",
        "categories": ["pets", "beauty"],
        "lat": 13.0358,
        "lng": 77.5970,
        "rating": 4.5,
        "reviews": 98,
        "accepts_cod": False,
        "has_offers": True,
        "commission_rate": 5.0,
        "min_order_amount": 600,
        "hours": "weekday",
    },
    {
        "name": "Whitefield Home Cleaning",
        "description": "Deep cleaning, sofa shampooing and pest control.",
        "categories": ["cleaning", "home-services"],
        "lat": 12.9698,
        "lng": 77.7499,
        "rating": 4.2,
        "reviews": 310,
        "accepts_cod": False,
        "has_offers": False,
        "commission_rate": 4.5,
        "min_order_amount": 499,
        "hours": "weekday",
    },
]


def business_id_from_name(name: str) -> str:
    return str(uuid.uuid5(NAMESPACE, name))


def weekly_hours(kind: str) -> dict[str, dict]:
    if kind == "late":
        return {str(day): dict(LATE_NIGHT_HOURS) for day in range(7)}
    hours = {str(day): dict(WEEKDAY_HOURS) for day in range(1, 7)}
    hours["0"] = dict(SUNDAY_CLOSED)
    return hours


def main() -> None:
    session = SessionLocal()
    try:
        for index, item in enumerate(BUSINESSES):
            business_id = business_id_from_name(item["name"])
            values = {
                "name": item["name"],
                "description": item["description"],
                "category_type": item["categories"],
                "lat": item["lat"],
                "lng": item["lng"],
                "operating_hours": weekly_hours(item["hours"]),
                "realtime_status": "online",
                "avg_rating": item["rating"],
                "total_reviews": item["reviews"],
                "accepts_cod": item["accepts_cod"],
                "has_offers": item["has_offers"],
                "is_verified": item["reviews"] >= 100,
                "commission_rate": item["commission_rate"],
                "min_order_amount": item["min_order_amount"],
                "is_approved": True,
                "is_active": True,
                "created_at": SEEDED_AT + timedelta(days=index),
            }

            business = session.get(Business, business_id)
            if business is None:
                session.add(Business(id=business_id, **values))
            else:
                for key, value in values.items():
                    setattr(business, key, value)

        session.commit()
        print(f"Seeded businesses: {len(BUSINESSES)}")
    finally:
        session.close()


if __name__ == "__main__":
    main()
