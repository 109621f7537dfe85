"""
Shared fixtures.

The database is a file-backed SQLite whose transactions start with
BEGIN IMMEDIATE, so two sessions writing at once really serialize the way
two Postgres transactions contending for the same row lock do.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("EVENTS_ENABLED", "true")

from datetime import datetime, timezone
from types import SimpleNamespace

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event, insert
from sqlalchemy.orm import sessionmaker

from salon_booking.api.dependencies import get_redis_client
from salon_booking.config.database import get_db
from salon_booking.main import create_app
from salon_booking.models import Base, Service, Tenant, User, UserRole, stylist_services
from salon_booking.services.events.event_publisher import EventPublisher

WEEKDAY_HOURS = {
    "lunes_a_viernes": {"open": "09:00", "close": "18:00"},
    "sabado": {"open": "09:00", "close": "13:00"},
    "domingo": None,
}


def build_test_engine(path):
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False, "timeout": 15},
    )

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


@pytest.fixture
def engine(tmp_path):
    engine = build_test_engine(tmp_path / "salon.db")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def publisher(redis_client):
    return EventPublisher(redis_client)


def add_stylist(db, tenant, first_name, last_service_at=None, working_hours=None, services=()):
    stylist = User(
        tenant_id=tenant.id,
        first_name=first_name,
        last_name="Test",
        role=UserRole.STYLIST,
        working_hours=working_hours,
        last_service_at=last_service_at,
    )
    db.add(stylist)
    db.flush()
    for service in services:
        db.execute(insert(stylist_services).values(user_id=stylist.id, service_id=service.id, total_completed=0))
    return stylist


@pytest.fixture
def salon(db):
    """
    One Bogota tenant open Mon-Fri 09:00-18:00 and Saturday morning.

    ana has never served, beto served in 2024, carla served most recently.
    Only beto does color.
    """
    tenant = Tenant(name="Salon Centro", timezone="America/Bogota", working_hours=WEEKDAY_HOURS)
    db.add(tenant)
    db.flush()

    haircut = Service(tenant_id=tenant.id, name="Haircut", duration_minutes=60)
    color = Service(tenant_id=tenant.id, name="Color", duration_minutes=90)
    db.add_all([haircut, color])
    db.flush()

    ana = add_stylist(db, tenant, "Ana", services=[haircut])
    beto = add_stylist(
        db, tenant, "Beto",
        last_service_at=datetime(2024, 12, 1, 15, 0, tzinfo=timezone.utc),
        services=[haircut, color],
    )
    carla = add_stylist(
        db, tenant, "Carla",
        last_service_at=datetime(2025, 1, 3, 15, 0, tzinfo=timezone.utc),
        services=[haircut],
    )

    client = User(tenant_id=tenant.id, first_name="Diana", last_name="Cliente", role=UserRole.CLIENT)
    db.add(client)
    db.commit()

    return SimpleNamespace(
        tenant=tenant, haircut=haircut, color=color,
        ana=ana, beto=beto, carla=carla, client=client,
    )


@pytest.fixture
def client(db, redis_client):
    app = create_app()

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis_client] = lambda: redis_client
    return TestClient(app)
