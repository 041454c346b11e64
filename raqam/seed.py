# raqam/seed.py
"""Sample data written on first run, before any listing or user exists."""
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from .schemas import Listing, User

DEFAULT_USER = User(
    id="current_user",
    name="محمد أحمد",
    phone="0555 999 888",
    location="الرياض",
    bio="مهتم بالأرقام المميزة",
)

# id, category, number, price, description, location, seller id, seller name, age in days
_SAMPLES = [
    ("1", "car_plate", "A 1234", 25000, "رقم مميز للبيع - لوحة سيارة فاخرة", "الرياض", "seller1", "أحمد محمد", 2),
    ("2", "mobile_number", "0555 123 456", 5000, "رقم جوال مميز سهل الحفظ", "جدة", "seller2", "خالد العمري", 5),
    ("3", "car_plate", "B 5555", 75000, "لوحة مميزة - أرقام متكررة", "الدمام", "seller3", "محمد السعيد", 1),
    ("4", "mobile_number", "0500 000 111", 15000, "رقم VIP - سهل التذكر", "مكة", "seller1", "أحمد محمد", 3),
    ("5", "car_plate", "K 7777", 120000, "لوحة نادرة - رقم مميز جداً", "الرياض", "seller4", "عبدالله الفهد", 0),
]


def sample_listings(now: Optional[datetime] = None) -> List[Listing]:
    """Seed listings in insertion order, timestamped relative to `now`."""
    now = now or datetime.now(timezone.utc)
    return [
        Listing(
            id=id_,
            category=category,
            number=number,
            price=price,
            description=description,
            location=location,
            seller_id=seller_id,
            seller_name=seller_name,
            created_at=now - timedelta(days=days),
        )
        for id_, category, number, price, description, location, seller_id, seller_name, days in _SAMPLES
    ]


def default_user() -> User:
    return DEFAULT_USER.model_copy()
