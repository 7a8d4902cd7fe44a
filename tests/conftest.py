"""Pytest configuration and fixtures for front-of-house dashboard tests."""
import pytest
from datetime import datetime, time
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from db.base import Base
from db.models_sqlalchemy import Restaurant
from domain.enums import RefundPolicy
from domain.models import PartySizeTier, PricingPolicy, Table, TimeSlot
from services.front_of_house_store import FrontOfHouseStore


@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a database session for testing."""
    SessionLocal = sessionmaker(bind=db_engine, autoflush=False)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="function")
def restaurant(db_session):
    """Seed one restaurant with no saved settings."""
    record = Restaurant(name="Test Bistro", slug="test-bistro", settings={})
    db_session.add(record)
    db_session.commit()
    return record


@pytest.fixture(scope="function")
def store(db_session, restaurant):
    """Store scoped to the seeded restaurant."""
    return FrontOfHouseStore(db_session, restaurant.id)


@pytest.fixture(scope="function")
def base_policy():
    """Pricing policy with no tiers and no premiums."""
    return PricingPolicy(require_payment=True, base_amount=10.0)


@pytest.fixture(scope="function")
def tiered_policy():
    return PricingPolicy(
        require_payment=True,
        base_amount=10.0,
        party_size_tiers=[
            PartySizeTier(min_party=2, max_party=4, amount=20.0),
            PartySizeTier(min_party=5, max_party=8, amount=35.0),
        ],
    )


@pytest.fixture(scope="function")
def conditional_policy():
    return PricingPolicy(
        require_payment=True,
        base_amount=25.0,
        refund_policy=RefundPolicy.CONDITIONAL,
        refund_hours_before=24,
    )


@pytest.fixture(scope="function")
def saturday_evening():
    """Saturday, March 16, 2024 at 8:00 PM."""
    return datetime(2024, 3, 16, 20, 0)


@pytest.fixture(scope="function")
def tuesday_lunch():
    """Tuesday, March 12, 2024 at 12:30 PM."""
    return datetime(2024, 3, 12, 12, 30)


@pytest.fixture(scope="function")
def make_slot():
    """Factory fixture for time slots."""
    def _make(weekday=2, start="18:00", end="18:30", **kwargs):
        return TimeSlot(weekday=weekday, start_time=start, end_time=end, **kwargs)
    return _make


@pytest.fixture(scope="function")
def floor_tables():
    """A small floor in display order."""
    return [
        Table(id="t1", name="T1", seats=2),
        Table(id="t2", name="T2", seats=4, status="occupied"),
        Table(id="t3", name="T3", seats=6),
        Table(id="t4", name="T4", seats=4),
        Table(id="t5", name="T5", seats=8, status="cleaning"),
    ]


@pytest.fixture(scope="function")
def evening_slot_times():
    return time(18, 0), time(18, 30)
