"""Shared fixtures: in-memory SQLite database and an API client bound to it."""

import os

from cryptography.fernet import Fernet

# Settings are read at import time, so the environment must be in place first
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DATA_ENCRYPTION_KEY", Fernet.generate_key().decode())
os.environ.setdefault("PII_HASH_KEY", "test-pii-hash-key")
os.environ.setdefault("ACQUISITION_ENABLED", "false")
os.environ.setdefault("MIGRATE_ON_STARTUP", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_DIR", "")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.db import get_db
from app.core.rate_limit import limiter
from app.models import Base, DataSource, Defendant, Lawsuit, empty_success_history
from app.services.user_service import UserService


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    """Session against a fresh in-memory database"""
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    """Test client whose requests share the test session"""
    from app.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def user(db):
    return UserService(db).create(
        "jane@example.com",
        name="Jane Doe",
        address="1 Main St, Springfield",
        phone="555-123-4567",
    )


@pytest.fixture
def make_lawsuit(db):
    def _make(name, case_number, court="N.D. Cal.", defendants=(), **fields):
        lawsuit = Lawsuit(name=name, case_number=case_number, court=court, **fields)
        for company in defendants:
            lawsuit.defendants.append(Defendant(company_name=company))
        db.add(lawsuit)
        db.commit()
        db.refresh(lawsuit)
        return lawsuit

    return _make


@pytest.fixture
def make_source(db):
    def _make(name, accuracy=0.5, completeness=0.5, timeliness=0.5, history=None, url=None):
        source = DataSource(
            name=name,
            url=url or f"https://feeds.example.com/{name}.json",
            reliability_metrics={"accuracy": accuracy, "completeness": completeness, "timeliness": timeliness},
            success_history=history or empty_success_history(),
        )
        db.add(source)
        db.commit()
        db.refresh(source)
        return source

    return _make
