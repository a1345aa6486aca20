"""
Shared pytest fixtures.

The app is pointed at SQLite before anything under app/ is imported, so the
module-level engine never tries to reach PostgreSQL. Every test gets a fresh
in-memory schema.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database.database import Base, get_db
from app.main import app
from app.modules.masters.models import Customer, Supplier, Vehicle


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_session):
    """TestClient whose requests share the test's session"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_customer(db_session):
    customer = Customer(
        name="Navakar Enterprises Private Limited",
        trade_name="Navakar Enterprises",
        address="Tirupattur - 635901",
        state="Tamil Nadu",
        gstin="33ITWPS2062F1Z7",
        contact_phone="9876543210"
    )
    db_session.add(customer)
    db_session.commit()
    db_session.refresh(customer)
    return customer


@pytest.fixture
def sample_consignee(db_session):
    customer = Customer(
        name="Shubhkarat India Limited",
        address="Bhiwandi",
        state="Maharashtra",
        gstin="27AAAAA0000A1Z5"
    )
    db_session.add(customer)
    db_session.commit()
    db_session.refresh(customer)
    return customer


@pytest.fixture
def sample_vehicle(db_session):
    vehicle = Vehicle(number="TN 20 AX 1234")
    db_session.add(vehicle)
    db_session.commit()
    db_session.refresh(vehicle)
    return vehicle


@pytest.fixture
def sample_supplier(db_session):
    supplier = Supplier(
        name="Sri Balaji Lorry Service",
        contact_person="Balaji",
        contact_phone="9443012345",
        payment_terms="Balance on delivery"
    )
    db_session.add(supplier)
    db_session.commit()
    db_session.refresh(supplier)
    return supplier
