"""
Shared fixtures: a sqlite-backed guest directory and a private event bus
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.db import Base
from app.services.events import GuestEventBus
from app.services.repositories import SqlGuestDirectory

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_guests.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture
def db_session():
    """Create test database session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)

@pytest.fixture
def directory(db_session):
    return SqlGuestDirectory(db_session)

@pytest.fixture
def event_bus():
    return GuestEventBus()

@pytest.fixture
def published(event_bus):
    """Events published on the test bus, in order"""
    events = []
    event_bus.subscribe(events.append)
    return events
