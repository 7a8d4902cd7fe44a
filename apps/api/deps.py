"""Shared FastAPI dependencies."""

from typing import Generator

from fastapi import Depends, Path
from sqlalchemy.orm import Session

from db.session import SessionLocal
from integrations.openai.insights_client import InsightsClient
from services.front_of_house_store import FrontOfHouseStore


def get_db() -> Generator[Session, None, None]:
    """
    Get database session.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store(
    restaurant_id: str = Path(..., description="Restaurant id"),
    db: Session = Depends(get_db),
) -> FrontOfHouseStore:
    """Store scoped to the restaurant in the URL."""
    return FrontOfHouseStore(db, restaurant_id)


def get_insights_client() -> InsightsClient:
    return InsightsClient()
